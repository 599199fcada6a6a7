"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Database models for the payroll module: RateSetting,
             PeriodRate, SalaryCalculation with its assignment lines,
             applied rates and the append-only audit log.
-------------------------------------------------------------------------
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.exceptions import ImmutableRecordException
from apps.core.mixins import AuditLogMixin, StatusMixin

ZERO = Decimal('0.00')


def money_field(verbose_name, **kwargs) -> models.DecimalField:
    """Standard money column."""
    kwargs.setdefault('default', ZERO)
    return models.DecimalField(max_digits=18, decimal_places=2, verbose_name=verbose_name, **kwargs)


def hours_field(verbose_name, **kwargs) -> models.DecimalField:
    kwargs.setdefault('default', ZERO)
    return models.DecimalField(max_digits=8, decimal_places=2, verbose_name=verbose_name, **kwargs)


# =====================================================================
# RATE SETTINGS
# =====================================================================

class RateType(models.TextChoices):
    BASE_HOURLY = 'base_hourly', _('Base (Hourly)')
    BASE_MONTHLY = 'base_monthly', _('Base (Monthly)')
    OVERTIME = 'overtime', _('Overtime')
    BONUS = 'bonus', _('Bonus')
    ALLOWANCE = 'allowance', _('Allowance')
    COEFFICIENT = 'coefficient', _('Coefficient')


class ApplicableScope(models.TextChoices):
    UNIVERSITY = 'university', _('University-wide')
    DEPARTMENT = 'department', _('Department')
    POSITION = 'position', _('Position')
    DEGREE = 'degree', _('Degree')
    SUBJECT_TYPE = 'subject_type', _('Subject Type')
    CLASS_TYPE = 'class_type', _('Class Type')


class TargetModel(models.TextChoices):
    DEPARTMENT = 'Department', _('Department')
    DEGREE = 'Degree', _('Degree')
    SUBJECT = 'Subject', _('Subject')


class RateSettingStatus(models.TextChoices):
    """
    Lifecycle of a rate setting. Only ACTIVE settings feed calculations.
    """
    DRAFT = 'draft', _('Draft')
    PENDING_APPROVAL = 'pending_approval', _('Pending Approval')
    APPROVED = 'approved', _('Approved')
    ACTIVE = 'active', _('Active')
    INACTIVE = 'inactive', _('Inactive')
    SUPERSEDED = 'superseded', _('Superseded')


class FormulaType(models.TextChoices):
    FIXED = 'fixed', _('Fixed')
    PERCENTAGE = 'percentage', _('Percentage')
    TIERED = 'tiered', _('Tiered')
    CUSTOM = 'custom', _('Custom')


class RateCategory(models.TextChoices):
    SALARY = 'salary', _('Salary')
    BONUS = 'bonus', _('Bonus')
    ALLOWANCE = 'allowance', _('Allowance')
    OVERTIME = 'overtime', _('Overtime')
    PENALTY = 'penalty', _('Penalty')


class CriteriaType(models.TextChoices):
    POSITION = 'position', _('Position')
    DEGREE = 'degree', _('Degree')
    DEPARTMENT = 'department', _('Department')
    SUBJECT_TYPE = 'subject_type', _('Subject Type')
    CLASS_SIZE = 'class_size', _('Class Size')
    TEACHING_METHOD = 'teaching_method', _('Teaching Method')


class CriteriaOperator(models.TextChoices):
    EQUALS = 'equals', _('Equals')
    GREATER_THAN = 'greater_than', _('Greater Than')
    LESS_THAN = 'less_than', _('Less Than')
    CONTAINS = 'contains', _('Contains')


def generate_rate_code() -> str:
    return f"RATE{timezone.now():%y%m%d%H%M%S%f}"


class RateSetting(AuditLogMixin, StatusMixin):
    """
    A scoped, time-bounded, conditional pay rule.

    The amount a rule contributes is computed by calculate_rate(); which
    rules apply to an assignment is decided by the rate engine in
    apps.payroll.services_rates.

    Attributes:
        rate_type: Pay bucket the amount lands in.
        applicable_scope: Who the rule targets. target_id (public id of a
            Department/Degree/Subject) or target_code (position, subject
            type or class type value) narrow it to one entity.
        base_amount, coefficient, step_increment: Inputs of calculate_rate.
        minimum_rate / maximum_rate: Bounds for the computed amount.
        effective_start / effective_end: Window in which the rule applies.
        priority: Ordering only. All matching rules are applied.
    """

    code = models.CharField(
        max_length=30,
        unique=True,
        blank=True,
        verbose_name=_('Code'),
        help_text=_('Generated as RATE<timestamp> when blank.')
    )
    name = models.CharField(max_length=200, verbose_name=_('Name'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='rate_settings',
        verbose_name=_('Academic Year'),
        help_text=_('When set, the rule only applies within this academic year.')
    )
    semester = models.ForeignKey(
        'academics.Semester',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='rate_settings',
        verbose_name=_('Semester'),
        help_text=_('When set, the rule only applies within this semester.')
    )

    rate_type = models.CharField(max_length=15, choices=RateType.choices, verbose_name=_('Rate Type'))
    applicable_scope = models.CharField(
        max_length=15,
        choices=ApplicableScope.choices,
        default=ApplicableScope.UNIVERSITY,
        verbose_name=_('Applicable Scope')
    )
    target_model = models.CharField(
        max_length=15,
        choices=TargetModel.choices,
        blank=True,
        verbose_name=_('Target Model')
    )
    target_id = models.UUIDField(null=True, blank=True, verbose_name=_('Target ID'))
    target_code = models.CharField(
        max_length=30,
        blank=True,
        verbose_name=_('Target Value'),
        help_text=_('Position, subject type or class type the rule is limited to.')
    )

    # Rate values
    base_amount = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        validators=[MinValueValidator(ZERO)],
        verbose_name=_('Base Amount')
    )
    minimum_rate = models.DecimalField(
        max_digits=18,
        decimal_places=0,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name=_('Minimum Amount')
    )
    maximum_rate = models.DecimalField(
        max_digits=18,
        decimal_places=0,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0'))],
        verbose_name=_('Maximum Amount')
    )
    coefficient = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        default=Decimal('1.00'),
        validators=[MinValueValidator(Decimal('0.1')), MaxValueValidator(Decimal('5.0'))],
        verbose_name=_('Coefficient')
    )
    step_increment = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        default=ZERO,
        validators=[MinValueValidator(ZERO)],
        verbose_name=_('Step Increment'),
        help_text=_('Added once per completed step of years of service.')
    )

    # Conditions
    minimum_experience = models.PositiveSmallIntegerField(default=0, verbose_name=_('Minimum Experience (years)'))
    minimum_hours = hours_field(_('Minimum Hours'), validators=[MinValueValidator(ZERO)])
    maximum_hours = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(ZERO)],
        verbose_name=_('Maximum Hours')
    )
    minimum_rating = models.DecimalField(
        max_digits=3,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('5'))],
        verbose_name=_('Minimum Rating')
    )
    additional_criteria = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_('Additional Criteria'),
        help_text=_('List of {"criteria_type", "operator", "value"} rules, all of which must hold.')
    )

    # Effective period
    effective_start = models.DateField(verbose_name=_('Effective From'))
    effective_end = models.DateField(null=True, blank=True, verbose_name=_('Effective Until'))

    priority = models.PositiveIntegerField(default=0, verbose_name=_('Priority'))

    # Calculation formula (informational)
    formula_type = models.CharField(
        max_length=15,
        choices=FormulaType.choices,
        default=FormulaType.FIXED,
        verbose_name=_('Formula Type')
    )
    formula_expression = models.CharField(max_length=500, blank=True, verbose_name=_('Formula Expression'))
    formula_variables = models.JSONField(default=dict, blank=True, verbose_name=_('Formula Variables'))

    # Approval
    is_approved = models.BooleanField(default=False, verbose_name=_('Approved'))
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_rate_settings',
        verbose_name=_('Approved By')
    )
    approved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Approved At'))
    approval_notes = models.TextField(blank=True, verbose_name=_('Approval Notes'))

    status = models.CharField(
        max_length=20,
        choices=RateSettingStatus.choices,
        default=RateSettingStatus.DRAFT,
        verbose_name=_('Status')
    )

    # Versioning
    version = models.PositiveIntegerField(default=1, verbose_name=_('Version'))
    supersedes = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Supersedes')
    )
    superseded_by = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Superseded By')
    )
    category = models.CharField(
        max_length=15,
        choices=RateCategory.choices,
        default=RateCategory.SALARY,
        verbose_name=_('Category')
    )
    tags = models.JSONField(default=list, blank=True, verbose_name=_('Tags'))
    notes = models.TextField(blank=True, verbose_name=_('Notes'))

    class Meta:
        verbose_name = _('Rate Setting')
        verbose_name_plural = _('Rate Settings')
        ordering = ['-priority', '-effective_start', 'id']
        indexes = [
            models.Index(fields=['status', 'is_active', 'rate_type']),
            models.Index(fields=['applicable_scope', 'target_id']),
        ]

    def __str__(self) -> str:
        return f"{self.code} - {self.name}"

    def clean(self) -> None:
        """Reject inverted bounds, inverted windows and mismatched calendars."""
        errors = {}
        if self.maximum_rate is not None and self.minimum_rate is not None:
            if self.minimum_rate > self.maximum_rate:
                errors['minimum_rate'] = _('Mức tối thiểu không được lớn hơn mức tối đa.')
        if self.effective_start and self.effective_end and self.effective_end <= self.effective_start:
            errors['effective_end'] = _('Ngày kết thúc phải sau ngày bắt đầu.')
        if self.maximum_hours is not None and self.minimum_hours and self.minimum_hours > self.maximum_hours:
            errors['minimum_hours'] = _('Số giờ tối thiểu không được lớn hơn số giờ tối đa.')
        if self.semester_id and self.academic_year_id:
            if self.semester.academic_year_id != self.academic_year_id:
                errors['semester'] = _('Học kì không thuộc năm học đã chọn.')
        if self.target_id and not self.target_model:
            errors['target_model'] = _('Cần chọn loại đối tượng áp dụng.')

        criteria_error = self._validate_criteria()
        if criteria_error:
            errors['additional_criteria'] = criteria_error
        if errors:
            raise ValidationError(errors)

    def _validate_criteria(self) -> Optional[str]:
        if not isinstance(self.additional_criteria, list):
            return _('Tiêu chí bổ sung phải là một danh sách.')
        for item in self.additional_criteria:
            if not isinstance(item, dict):
                return _('Mỗi tiêu chí phải là một đối tượng.')
            if item.get('criteria_type') not in CriteriaType.values:
                return _('Loại tiêu chí không hợp lệ.')
            if item.get('operator', CriteriaOperator.EQUALS) not in CriteriaOperator.values:
                return _('Toán tử tiêu chí không hợp lệ.')
            if 'value' not in item:
                return _('Tiêu chí thiếu giá trị.')
        return None

    def save(self, *args, **kwargs) -> None:
        self.code = (self.code or generate_rate_code()).strip().upper()
        if self.semester_id and not self.academic_year_id:
            self.academic_year_id = self.semester.academic_year_id
        super().save(*args, **kwargs)

    def calculate_rate(self, base_hours=None, experience_years: Optional[int] = None) -> Decimal:
        """
        Compute the amount this rule contributes.

        amount = base_amount x coefficient, times hours for hourly rules,
        plus one step_increment per PAYROLL_STEP_YEARS of service, then
        clamped to [minimum_rate, maximum_rate] and rounded half-up to a
        whole currency unit.

        Args:
            base_hours: Hours worked. Missing or zero hours count as one
                        hour for hourly rules.
            experience_years: Teacher's years of service.
        """
        amount = self.base_amount * self.coefficient

        if self.rate_type == RateType.BASE_HOURLY:
            amount *= Decimal(str(base_hours or 1))

        if experience_years and self.step_increment > 0:
            steps = int(experience_years) // settings.PAYROLL_STEP_YEARS
            amount += steps * self.step_increment

        if self.minimum_rate:
            amount = max(amount, self.minimum_rate)
        if self.maximum_rate is not None:
            amount = min(amount, self.maximum_rate)

        return amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP)

    @property
    def is_currently_effective(self) -> bool:
        today = timezone.localdate()
        if self.status != RateSettingStatus.ACTIVE or not self.is_active:
            return False
        if self.effective_start > today:
            return False
        return self.effective_end is None or self.effective_end >= today

    @property
    def effective_rate(self) -> Decimal:
        return self.base_amount * self.coefficient

    @property
    def is_read_only(self) -> bool:
        return self.status == RateSettingStatus.SUPERSEDED


# =====================================================================
# PERIOD RATES
# =====================================================================

class PeriodRateApproval(models.TextChoices):
    DRAFT = 'draft', _('Draft')
    PENDING = 'pending', _('Pending')
    APPROVED = 'approved', _('Approved')
    REJECTED = 'rejected', _('Rejected')


class PeriodRate(AuditLogMixin, StatusMixin):
    """
    Flat pay per teaching period for an academic year.

    Only one period rate per academic year is active at a time; the
    payroll services deactivate the others when one is activated.
    """

    name = models.CharField(max_length=200, verbose_name=_('Name'))
    rate_per_period = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(ZERO), MaxValueValidator(Decimal('10000000'))],
        verbose_name=_('Rate per Period')
    )
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        on_delete=models.PROTECT,
        related_name='period_rates',
        verbose_name=_('Academic Year')
    )
    effective_date = models.DateField(verbose_name=_('Effective Date'))
    end_date = models.DateField(null=True, blank=True, verbose_name=_('End Date'))
    description = models.TextField(blank=True, verbose_name=_('Description'))
    approval_status = models.CharField(
        max_length=10,
        choices=PeriodRateApproval.choices,
        default=PeriodRateApproval.DRAFT,
        verbose_name=_('Approval Status')
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_period_rates',
        verbose_name=_('Approved By')
    )
    approved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Approved At'))

    class Meta:
        verbose_name = _('Period Rate')
        verbose_name_plural = _('Period Rates')
        ordering = ['-effective_date']

    def __str__(self) -> str:
        return f"{self.name} ({self.rate_per_period})"

    def clean(self) -> None:
        if self.effective_date and self.end_date and self.end_date <= self.effective_date:
            raise ValidationError({'end_date': _('Ngày kết thúc phải sau ngày hiệu lực.')})

    @property
    def is_currently_active(self) -> bool:
        today = timezone.localdate()
        return (
            self.is_active
            and self.effective_date <= today
            and (self.end_date is None or self.end_date >= today)
        )


# =====================================================================
# SALARY CALCULATIONS
# =====================================================================

class PeriodType(models.TextChoices):
    MONTHLY = 'monthly', _('Monthly')
    SEMESTER = 'semester', _('Semester')
    ACADEMIC_YEAR = 'academic_year', _('Academic Year')
    CUSTOM = 'custom', _('Custom')


class CalculationStatus(models.TextChoices):
    """
    Workflow for salary calculations.

    draft -> calculating -> calculated -> reviewing -> approved -> paid,
    with archived as the soft-delete state for anything not yet paid.
    """
    DRAFT = 'draft', _('Draft')
    CALCULATING = 'calculating', _('Calculating')
    CALCULATED = 'calculated', _('Calculated')
    REVIEWING = 'reviewing', _('Under Review')
    APPROVED = 'approved', _('Approved')
    PAID = 'paid', _('Paid')
    ARCHIVED = 'archived', _('Archived')


class CalculationMethod(models.TextChoices):
    AUTOMATIC = 'automatic', _('Automatic')
    MANUAL = 'manual', _('Manual')
    BATCH = 'batch', _('Batch')


class DataSource(models.TextChoices):
    TEACHING_ASSIGNMENTS = 'teaching_assignments', _('Teaching Assignments')
    MANUAL_ENTRY = 'manual_entry', _('Manual Entry')
    IMPORTED = 'imported', _('Imported')


class AuditAction(models.TextChoices):
    CREATED = 'created', _('Created')
    CALCULATED = 'calculated', _('Calculated')
    RECALCULATED = 'recalculated', _('Recalculated')
    APPROVED = 'approved', _('Approved')
    MODIFIED = 'modified', _('Modified')
    PAID = 'paid', _('Paid')
    ARCHIVED = 'archived', _('Archived')


class SalaryCalculation(AuditLogMixin, StatusMixin):
    """
    One teacher's computed pay for one period.

    Owns a snapshot of the teacher's teaching assignments (lines) taken
    at creation time. Results and coefficient blocks are rewritten by
    every calculation run; the audit log only ever grows.
    """

    calculation_code = models.CharField(
        max_length=30,
        unique=True,
        blank=True,
        verbose_name=_('Calculation Code')
    )
    teacher = models.ForeignKey(
        'teaching.Teacher',
        on_delete=models.PROTECT,
        related_name='salary_calculations',
        verbose_name=_('Teacher')
    )
    academic_year = models.ForeignKey(
        'academics.AcademicYear',
        on_delete=models.PROTECT,
        related_name='salary_calculations',
        verbose_name=_('Academic Year')
    )
    semester = models.ForeignKey(
        'academics.Semester',
        on_delete=models.PROTECT,
        related_name='salary_calculations',
        verbose_name=_('Semester')
    )

    # Calculation period
    period_type = models.CharField(
        max_length=15,
        choices=PeriodType.choices,
        default=PeriodType.SEMESTER,
        verbose_name=_('Period Type')
    )
    period_start = models.DateField(verbose_name=_('Period Start'))
    period_end = models.DateField(verbose_name=_('Period End'))
    month = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(12)],
        verbose_name=_('Month')
    )
    year = models.PositiveIntegerField(validators=[MinValueValidator(2020)], verbose_name=_('Year'))

    # Results
    total_base_hours = hours_field(_('Total Base Hours'))
    average_hourly_rate = money_field(_('Average Hourly Rate'))
    total_base_amount = money_field(_('Total Base Amount'))
    total_overtime_hours = hours_field(_('Total Overtime Hours'))
    overtime_rate = money_field(_('Overtime Rate'))
    total_overtime_amount = money_field(_('Total Overtime Amount'))
    total_bonus_amount = money_field(_('Total Bonus Amount'))
    total_allowance_amount = money_field(_('Total Allowance Amount'))
    total_deduction_amount = money_field(_('Total Deductions'), validators=[MinValueValidator(ZERO)])
    total_gross_salary = money_field(_('Gross Salary'))
    total_net_salary = money_field(_('Net Salary'))

    # Coefficients
    degree = models.ForeignKey(
        'academics.Degree',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+',
        verbose_name=_('Degree Applied')
    )
    degree_coefficient = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('1.00'),
                                             verbose_name=_('Degree Coefficient'))
    degree_applied_amount = money_field(_('Degree Adjustment'))
    position = models.CharField(max_length=20, blank=True, verbose_name=_('Position Applied'))
    position_coefficient = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('1.00'),
                                               verbose_name=_('Position Coefficient'))
    position_applied_amount = money_field(_('Position Adjustment'))
    years_of_service = models.PositiveSmallIntegerField(default=0, verbose_name=_('Years of Service'))
    experience_coefficient = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('1.00'),
                                                 verbose_name=_('Experience Coefficient'))
    experience_applied_amount = money_field(_('Experience Adjustment'))

    # Status
    status = models.CharField(
        max_length=15,
        choices=CalculationStatus.choices,
        default=CalculationStatus.DRAFT,
        verbose_name=_('Status')
    )
    calculated_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Calculated At'))
    calculated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='calculated_salaries',
        verbose_name=_('Calculated By')
    )
    approved_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Approved At'))
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approved_salaries',
        verbose_name=_('Approved By')
    )
    paid_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Paid At'))
    paid_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='paid_salaries',
        verbose_name=_('Paid By')
    )
    status_notes = models.TextField(blank=True, verbose_name=_('Notes'))

    # Metadata
    version = models.PositiveIntegerField(default=1, verbose_name=_('Version'))
    recalculation_count = models.PositiveIntegerField(default=0, verbose_name=_('Recalculations'))
    last_recalculated_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Last Recalculated'))
    calculation_method = models.CharField(
        max_length=10,
        choices=CalculationMethod.choices,
        default=CalculationMethod.AUTOMATIC,
        verbose_name=_('Calculation Method')
    )
    data_source = models.CharField(
        max_length=25,
        choices=DataSource.choices,
        default=DataSource.TEACHING_ASSIGNMENTS,
        verbose_name=_('Data Source')
    )
    validation_errors = models.JSONField(default=list, blank=True, verbose_name=_('Validation Errors'))
    warnings = models.JSONField(default=list, blank=True, verbose_name=_('Warnings'))

    class Meta:
        verbose_name = _('Salary Calculation')
        verbose_name_plural = _('Salary Calculations')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['teacher', 'academic_year', 'semester', 'period_type']),
            models.Index(fields=['status', 'is_active']),
        ]

    def __str__(self) -> str:
        return f"{self.calculation_code} - {self.teacher}"

    def clean(self) -> None:
        errors = {}
        if self.period_start and self.period_end and self.period_end <= self.period_start:
            errors['period_end'] = _('Ngày kết thúc phải sau ngày bắt đầu.')
        if self.period_type == PeriodType.MONTHLY and not self.month:
            errors['month'] = _('Kỳ tính lương theo tháng cần có tháng.')
        if self.semester_id and self.academic_year_id:
            if self.semester.academic_year_id != self.academic_year_id:
                errors['semester'] = _('Học kì không thuộc năm học đã chọn.')
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs) -> None:
        if not self.calculation_code:
            self.calculation_code = self._next_code()
        super().save(*args, **kwargs)

    def _next_code(self) -> str:
        month = f"{self.month:02d}" if self.month else 'XX'
        prefix = f"SAL{self.year}{month}"
        sequence = SalaryCalculation.objects.filter(calculation_code__startswith=prefix).count() + 1
        code = f"{prefix}{sequence:04d}"
        while SalaryCalculation.objects.filter(calculation_code=code).exists():
            sequence += 1
            code = f"{prefix}{sequence:04d}"
        return code

    @property
    def is_paid(self) -> bool:
        return self.status == CalculationStatus.PAID

    @property
    def total_coefficient_amount(self) -> Decimal:
        return self.degree_applied_amount + self.position_applied_amount + self.experience_applied_amount

    @property
    def summary(self) -> dict:
        """Headline figures for list views."""
        return {
            'teacher': self.teacher.full_name,
            'period': f"{self.period_start:%d/%m/%Y} - {self.period_end:%d/%m/%Y}",
            'total_hours': self.total_base_hours + self.total_overtime_hours,
            'gross_salary': self.total_gross_salary,
            'net_salary': self.total_net_salary,
            'status': self.status,
        }


class SalaryAssignmentLine(models.Model):
    """
    Snapshot of one teaching assignment inside a salary calculation.

    Hours are copied at creation and never re-read from the live
    assignment; the amounts are rewritten by each calculation run.
    """

    calculation = models.ForeignKey(
        SalaryCalculation,
        on_delete=models.CASCADE,
        related_name='lines',
        verbose_name=_('Salary Calculation')
    )
    sequence = models.PositiveIntegerField(default=0, verbose_name=_('Order'))
    teaching_assignment = models.ForeignKey(
        'teaching.TeachingAssignment',
        on_delete=models.PROTECT,
        related_name='salary_lines',
        verbose_name=_('Teaching Assignment')
    )
    course_class = models.ForeignKey(
        'academics.CourseClass',
        on_delete=models.PROTECT,
        related_name='+',
        verbose_name=_('Class')
    )
    subject = models.ForeignKey(
        'academics.Subject',
        on_delete=models.PROTECT,
        related_name='+',
        verbose_name=_('Subject')
    )
    assignment_type = models.CharField(max_length=15, verbose_name=_('Assignment Type'))
    total_hours = hours_field(_('Total Hours'))
    base_hours = hours_field(_('Base Hours'))
    overtime_hours = hours_field(_('Overtime Hours'))

    base_amount = money_field(_('Base Amount'))
    overtime_amount = money_field(_('Overtime Amount'))
    bonus_amount = money_field(_('Bonus Amount'))
    allowance_amount = money_field(_('Allowance Amount'))
    total_amount = money_field(_('Total Amount'))

    class Meta:
        verbose_name = _('Salary Assignment Line')
        verbose_name_plural = _('Salary Assignment Lines')
        ordering = ['sequence', 'id']

    def __str__(self) -> str:
        return f"{self.calculation_id} #{self.sequence}"

    def reset_totals(self) -> None:
        self.base_amount = ZERO
        self.overtime_amount = ZERO
        self.bonus_amount = ZERO
        self.allowance_amount = ZERO
        self.total_amount = ZERO


class AppliedRate(models.Model):
    """A rate setting that fired for one line and the amount it produced."""

    line = models.ForeignKey(
        SalaryAssignmentLine,
        on_delete=models.CASCADE,
        related_name='applied_rates',
        verbose_name=_('Assignment Line')
    )
    rate_setting = models.ForeignKey(
        RateSetting,
        on_delete=models.PROTECT,
        related_name='applications',
        verbose_name=_('Rate Setting')
    )
    rate_type = models.CharField(max_length=15, choices=RateType.choices, verbose_name=_('Rate Type'))
    rate_amount = money_field(_('Base Amount'))
    coefficient = models.DecimalField(max_digits=4, decimal_places=2, verbose_name=_('Coefficient'))
    hours_applied = hours_field(_('Hours Applied'))
    calculated_amount = money_field(_('Calculated Amount'))

    class Meta:
        verbose_name = _('Applied Rate')
        verbose_name_plural = _('Applied Rates')
        ordering = ['id']


class SalaryAuditEntry(models.Model):
    """
    Append-only event log of a salary calculation.

    Entries are written in the same transaction as the status change
    they record and can never be edited or deleted.
    """

    calculation = models.ForeignKey(
        SalaryCalculation,
        on_delete=models.PROTECT,
        related_name='audit_entries',
        verbose_name=_('Salary Calculation')
    )
    action = models.CharField(max_length=15, choices=AuditAction.choices, verbose_name=_('Action'))
    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='salary_audit_entries',
        verbose_name=_('Performed By')
    )
    performed_at = models.DateTimeField(default=timezone.now, verbose_name=_('Performed At'))
    changes = models.JSONField(default=dict, blank=True, verbose_name=_('Changes'))
    notes = models.TextField(blank=True, verbose_name=_('Notes'))

    class Meta:
        verbose_name = _('Salary Audit Entry')
        verbose_name_plural = _('Salary Audit Entries')
        ordering = ['performed_at', 'id']

    def __str__(self) -> str:
        return f"{self.calculation_id} {self.action} @ {self.performed_at:%Y-%m-%d %H:%M}"

    def save(self, *args, **kwargs) -> None:
        if self.pk is not None:
            raise ImmutableRecordException("Không thể sửa nhật ký kiểm toán.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordException("Không thể xóa nhật ký kiểm toán.")
