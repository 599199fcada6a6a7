"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Django admin configuration for the payroll module.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.academics.admin import AUDIT_FIELDSET, AUDIT_READONLY
from apps.payroll.models import (
    PeriodRate, RateSetting, SalaryAssignmentLine, SalaryAuditEntry, SalaryCalculation,
)


@admin.register(RateSetting)
class RateSettingAdmin(admin.ModelAdmin):
    list_display = [
        'code', 'name', 'rate_type', 'applicable_scope', 'base_amount', 'coefficient',
        'priority', 'effective_start', 'effective_end', 'status', 'version', 'is_active'
    ]
    list_filter = ['status', 'rate_type', 'applicable_scope', 'category', 'is_active']
    search_fields = ['code', 'name', 'description']
    readonly_fields = AUDIT_READONLY + ['version', 'supersedes', 'superseded_by', 'approved_by', 'approved_at']

    fieldsets = (
        (None, {
            'fields': ('code', 'name', 'description', 'academic_year', 'semester', 'category', 'tags')
        }),
        (_('Scope'), {
            'fields': ('rate_type', 'applicable_scope', 'target_model', 'target_id', 'target_code', 'priority')
        }),
        (_('Rate Values'), {
            'fields': ('base_amount', 'minimum_rate', 'maximum_rate', 'coefficient', 'step_increment')
        }),
        (_('Conditions'), {
            'fields': ('minimum_experience', 'minimum_hours', 'maximum_hours', 'minimum_rating',
                       'additional_criteria')
        }),
        (_('Effective Period'), {
            'fields': ('effective_start', 'effective_end')
        }),
        (_('Formula'), {
            'fields': ('formula_type', 'formula_expression', 'formula_variables'),
            'classes': ('collapse',)
        }),
        (_('Approval & Versioning'), {
            'fields': ('status', 'is_approved', 'approved_by', 'approved_at', 'approval_notes',
                       'version', 'supersedes', 'superseded_by', 'is_active', 'notes')
        }),
        AUDIT_FIELDSET,
    )


@admin.register(PeriodRate)
class PeriodRateAdmin(admin.ModelAdmin):
    list_display = ['name', 'academic_year', 'rate_per_period', 'effective_date', 'end_date',
                    'approval_status', 'is_active']
    list_filter = ['approval_status', 'is_active', 'academic_year']
    search_fields = ['name']
    readonly_fields = AUDIT_READONLY + ['approved_by', 'approved_at']


class SalaryAssignmentLineInline(admin.TabularInline):
    model = SalaryAssignmentLine
    extra = 0
    can_delete = False
    fields = ['sequence', 'teaching_assignment', 'total_hours', 'overtime_hours',
              'base_amount', 'overtime_amount', 'bonus_amount', 'allowance_amount', 'total_amount']
    readonly_fields = fields


class SalaryAuditEntryInline(admin.TabularInline):
    model = SalaryAuditEntry
    extra = 0
    can_delete = False
    fields = ['performed_at', 'action', 'performed_by', 'notes', 'changes']
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(SalaryCalculation)
class SalaryCalculationAdmin(admin.ModelAdmin):
    list_display = [
        'calculation_code', 'teacher', 'academic_year', 'semester', 'period_type',
        'total_gross_salary', 'total_net_salary', 'status', 'is_active'
    ]
    list_filter = ['status', 'period_type', 'academic_year', 'semester', 'is_active']
    search_fields = ['calculation_code', 'teacher__code', 'teacher__full_name']
    readonly_fields = AUDIT_READONLY + [
        'calculation_code', 'total_base_hours', 'average_hourly_rate', 'total_base_amount',
        'total_overtime_hours', 'overtime_rate', 'total_overtime_amount', 'total_bonus_amount',
        'total_allowance_amount', 'total_gross_salary', 'total_net_salary',
        'degree', 'degree_coefficient', 'degree_applied_amount',
        'position', 'position_coefficient', 'position_applied_amount',
        'years_of_service', 'experience_coefficient', 'experience_applied_amount',
        'status', 'calculated_at', 'calculated_by', 'approved_at', 'approved_by', 'paid_at', 'paid_by',
        'version', 'recalculation_count', 'last_recalculated_at', 'validation_errors',
    ]
    inlines = [SalaryAssignmentLineInline, SalaryAuditEntryInline]

    fieldsets = (
        (None, {
            'fields': ('calculation_code', 'teacher', 'academic_year', 'semester')
        }),
        (_('Period'), {
            'fields': ('period_type', 'period_start', 'period_end', 'month', 'year')
        }),
        (_('Results'), {
            'fields': ('total_base_hours', 'average_hourly_rate', 'total_base_amount',
                       'total_overtime_hours', 'overtime_rate', 'total_overtime_amount',
                       'total_bonus_amount', 'total_allowance_amount', 'total_deduction_amount',
                       'total_gross_salary', 'total_net_salary')
        }),
        (_('Coefficients'), {
            'fields': ('degree', 'degree_coefficient', 'degree_applied_amount',
                       'position', 'position_coefficient', 'position_applied_amount',
                       'years_of_service', 'experience_coefficient', 'experience_applied_amount')
        }),
        (_('Status'), {
            'fields': ('status', 'calculated_at', 'calculated_by', 'approved_at', 'approved_by',
                       'paid_at', 'paid_by', 'status_notes', 'is_active')
        }),
        (_('Metadata'), {
            'fields': ('version', 'recalculation_count', 'last_recalculated_at', 'calculation_method',
                       'data_source', 'validation_errors', 'warnings'),
            'classes': ('collapse',)
        }),
        AUDIT_FIELDSET,
    )


@admin.register(SalaryAuditEntry)
class SalaryAuditEntryAdmin(admin.ModelAdmin):
    """The event log is read-only."""

    list_display = ['calculation', 'action', 'performed_by', 'performed_at']
    list_filter = ['action']
    search_fields = ['calculation__calculation_code', 'notes']
    readonly_fields = ['calculation', 'action', 'performed_by', 'performed_at', 'changes', 'notes']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
