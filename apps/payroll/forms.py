"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Input forms for rate settings, period rates and salary
             calculation requests.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from typing import Any, Dict

from django import forms
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from apps.core.forms import PublicIdModelForm
from apps.payroll.models import CalculationMethod, PeriodRate, PeriodType, RateSetting


class RateSettingForm(PublicIdModelForm):
    """
    Lifecycle fields (status, approval block, supersede links, version)
    are excluded; they change only through the workflow endpoints.
    """

    class Meta:
        model = RateSetting
        fields = [
            'code', 'name', 'description', 'academic_year', 'semester', 'rate_type',
            'applicable_scope', 'target_model', 'target_id', 'target_code',
            'base_amount', 'minimum_rate', 'maximum_rate', 'coefficient', 'step_increment',
            'minimum_experience', 'minimum_hours', 'maximum_hours', 'minimum_rating',
            'additional_criteria', 'effective_start', 'effective_end', 'priority',
            'formula_type', 'formula_expression', 'formula_variables',
            'category', 'tags', 'notes', 'is_active',
        ]

    def clean_code(self) -> str:
        return (self.cleaned_data.get('code') or '').strip().upper()

    # Empty JSON values come back as None from the form field
    def clean_additional_criteria(self) -> list:
        return self.cleaned_data.get('additional_criteria') or []

    def clean_formula_variables(self) -> dict:
        return self.cleaned_data.get('formula_variables') or {}

    def clean_tags(self) -> list:
        return self.cleaned_data.get('tags') or []


class PeriodRateForm(PublicIdModelForm):

    class Meta:
        model = PeriodRate
        fields = [
            'name', 'rate_per_period', 'academic_year', 'effective_date', 'end_date',
            'description', 'is_active',
        ]


class RatePreviewForm(forms.Form):
    hours = forms.DecimalField(required=False, min_value=Decimal('0'), max_digits=8, decimal_places=2)
    experience_years = forms.IntegerField(required=False, min_value=0)


class SalaryCalculationCreateForm(forms.Form):
    """Period block of a new calculation; related records are looked up by id."""

    period_type = forms.ChoiceField(choices=PeriodType.choices, initial=PeriodType.SEMESTER)
    period_start = forms.DateField()
    period_end = forms.DateField()
    month = forms.IntegerField(required=False, min_value=1, max_value=12)
    year = forms.IntegerField(required=False, min_value=2020)
    calculation_method = forms.ChoiceField(choices=CalculationMethod.choices, required=False)
    notes = forms.CharField(required=False)

    def clean(self) -> Dict[str, Any]:
        cleaned_data = super().clean()
        start, end = cleaned_data.get('period_start'), cleaned_data.get('period_end')
        if start and end and end <= start:
            raise ValidationError({'period_end': _('Ngày kết thúc phải sau ngày bắt đầu.')})
        if cleaned_data.get('period_type') == PeriodType.MONTHLY and not cleaned_data.get('month'):
            raise ValidationError({'month': _('Kỳ tính lương theo tháng cần có tháng.')})
        if not cleaned_data.get('calculation_method'):
            cleaned_data['calculation_method'] = CalculationMethod.AUTOMATIC
        return cleaned_data


class SalaryCalculationUpdateForm(forms.Form):
    """Fields a user may edit on an existing calculation."""

    total_deduction_amount = forms.DecimalField(
        required=False, min_value=Decimal('0'), max_digits=18, decimal_places=2
    )
    status_notes = forms.CharField(required=False)
    warnings = forms.JSONField(required=False)
    calculation_method = forms.ChoiceField(choices=CalculationMethod.choices, required=False)
    month = forms.IntegerField(required=False, min_value=1, max_value=12)
    version = forms.IntegerField(required=False, min_value=1)

    def clean_warnings(self) -> list:
        warnings = self.cleaned_data.get('warnings') or []
        if not isinstance(warnings, list):
            raise ValidationError(_('Cảnh báo phải là một danh sách.'))
        return warnings

    def changed_values(self, payload: dict) -> Dict[str, Any]:
        """Cleaned values for the fields the client actually sent."""
        values = {
            name: self.cleaned_data[name]
            for name in self.fields
            if name in payload and name != 'version'
        }
        if values.get('total_deduction_amount') is None and 'total_deduction_amount' in values:
            values['total_deduction_amount'] = Decimal('0.00')
        if 'calculation_method' in values and not values['calculation_method']:
            del values['calculation_method']
        return values
