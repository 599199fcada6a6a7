"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Django admin configuration for the teaching module.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.teaching.models import Teacher, TeachingAssignment


class TeachingAssignmentInline(admin.TabularInline):
    """Read-only list of a teacher's assignments."""
    model = TeachingAssignment
    fk_name = 'teacher'
    extra = 0
    fields = ['code', 'course_class', 'semester', 'teaching_hours', 'status']
    readonly_fields = fields
    show_change_link = True

    def has_add_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Teacher)
class TeacherAdmin(admin.ModelAdmin):
    list_display = ['code', 'full_name', 'department', 'degree', 'position', 'hire_date', 'years_of_service', 'is_active']
    list_filter = ['position', 'department', 'degree', 'is_active']
    search_fields = ['code', 'full_name', 'email', 'identity_number']
    readonly_fields = ['created_at', 'updated_at', 'created_by', 'updated_by']
    inlines = [TeachingAssignmentInline]

    fieldsets = (
        (None, {
            'fields': ('code', 'full_name', 'email', 'phone')
        }),
        (_('Employment'), {
            'fields': ('department', 'degree', 'position', 'hire_date', 'performance_rating')
        }),
        (_('Personal'), {
            'fields': ('birth_date', 'gender', 'address', 'identity_number'),
            'classes': ('collapse',)
        }),
        (_('Status'), {
            'fields': ('is_active', 'notes')
        }),
        (_('Audit Trail'), {
            'fields': ('created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )

    @admin.display(description=_('Years of Service'))
    def years_of_service(self, obj: Teacher) -> int:
        return obj.years_of_service


@admin.register(TeachingAssignment)
class TeachingAssignmentAdmin(admin.ModelAdmin):
    list_display = ['code', 'teacher', 'course_class', 'semester', 'assignment_type', 'teaching_hours', 'status', 'is_approved']
    list_filter = ['status', 'assignment_type', 'is_approved', 'semester']
    search_fields = ['code', 'teacher__full_name', 'course_class__code']
    raw_id_fields = ['teacher', 'course_class']
    readonly_fields = [
        'semester', 'academic_year', 'approved_by', 'approved_at', 'version',
        'created_at', 'updated_at', 'created_by', 'updated_by'
    ]

    fieldsets = (
        (None, {
            'fields': ('code', 'teacher', 'course_class', 'semester', 'academic_year', 'assignment_type', 'status')
        }),
        (_('Workload'), {
            'fields': ('teaching_hours', 'teaching_coefficient', 'lecture_hours', 'practice_hours',
                       'lab_hours', 'other_hours', 'additional_hours')
        }),
        (_('Compensation'), {
            'fields': ('base_rate', 'additional_rate', 'overtime_rate')
        }),
        (_('Schedule'), {
            'fields': ('schedule_start_date', 'schedule_end_date', 'actual_start_date', 'actual_end_date'),
            'classes': ('collapse',)
        }),
        (_('Approval'), {
            'fields': ('is_approved', 'approved_by', 'approved_at', 'approval_notes')
        }),
        (_('Performance'), {
            'fields': ('attendance_rate', 'student_feedback', 'completion_rate'),
            'classes': ('collapse',)
        }),
        (_('Audit Trail'), {
            'fields': ('version', 'notes', 'is_active', 'created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )
