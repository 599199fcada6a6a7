"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Django admin configuration for the academics module.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.academics.models import (
    AcademicYear, CourseClass, Degree, Department, Semester, Subject,
)

AUDIT_FIELDSET = (_('Audit Trail'), {
    'fields': ('created_at', 'updated_at', 'created_by', 'updated_by'),
    'classes': ('collapse',)
})
AUDIT_READONLY = ['created_at', 'updated_at', 'created_by', 'updated_by']


class SemesterInline(admin.TabularInline):
    model = Semester
    extra = 0
    fields = ['semester_number', 'code', 'start_date', 'end_date', 'status']
    show_change_link = True


@admin.register(AcademicYear)
class AcademicYearAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'start_date', 'end_date', 'status', 'is_active']
    list_filter = ['status', 'is_active']
    search_fields = ['code', 'name']
    readonly_fields = AUDIT_READONLY
    inlines = [SemesterInline]

    fieldsets = (
        (None, {
            'fields': ('code', 'name', 'start_year', 'end_year', 'start_date', 'end_date')
        }),
        (_('Status'), {
            'fields': ('status', 'is_active', 'description')
        }),
        AUDIT_FIELDSET,
    )


@admin.register(Semester)
class SemesterAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'academic_year', 'semester_type', 'start_date', 'end_date', 'status']
    list_filter = ['status', 'semester_type', 'academic_year']
    search_fields = ['code', 'name']
    readonly_fields = AUDIT_READONLY

    fieldsets = (
        (None, {
            'fields': ('academic_year', 'semester_number', 'semester_type', 'code', 'name')
        }),
        (_('Dates'), {
            'fields': ('start_date', 'end_date', 'registration_start_date', 'registration_end_date')
        }),
        (_('Status'), {
            'fields': ('status', 'max_credits', 'is_active', 'description')
        }),
        AUDIT_FIELDSET,
    )


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'head_teacher', 'phone', 'is_active']
    list_filter = ['is_active']
    search_fields = ['code', 'name']
    readonly_fields = AUDIT_READONLY
    raw_id_fields = ['head_teacher']


@admin.register(Degree)
class DegreeAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'coefficient', 'is_active']
    list_filter = ['is_active']
    search_fields = ['code', 'name']
    readonly_fields = AUDIT_READONLY


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'credits', 'coefficient', 'periods', 'department', 'subject_type', 'is_active']
    list_filter = ['subject_type', 'level', 'department', 'is_active']
    search_fields = ['code', 'name']
    filter_horizontal = ['prerequisites']
    readonly_fields = AUDIT_READONLY


@admin.register(CourseClass)
class CourseClassAdmin(admin.ModelAdmin):
    list_display = [
        'code', 'name', 'semester', 'subject', 'student_count', 'max_students',
        'day_of_week', 'start_period', 'room', 'status'
    ]
    list_filter = ['status', 'class_type', 'teaching_method', 'semester']
    search_fields = ['code', 'name', 'room']
    readonly_fields = AUDIT_READONLY

    fieldsets = (
        (None, {
            'fields': ('code', 'name', 'semester', 'subject')
        }),
        (_('Enrolment'), {
            'fields': ('student_count', 'max_students', 'status')
        }),
        (_('Schedule'), {
            'fields': ('day_of_week', 'start_period', 'periods_count', 'room')
        }),
        (_('Delivery'), {
            'fields': ('class_type', 'teaching_method', 'description', 'notes', 'is_active')
        }),
        AUDIT_FIELDSET,
    )
