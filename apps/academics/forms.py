"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Input forms for academic reference data.
-------------------------------------------------------------------------
"""
from typing import Any, Dict

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from apps.academics.models import (
    AcademicYear, CourseClass, Degree, Department, Semester, Subject,
)
from apps.academics.services import creates_prerequisite_cycle
from apps.core.forms import PublicIdModelForm


class AcademicYearForm(PublicIdModelForm):

    class Meta:
        model = AcademicYear
        fields = [
            'code', 'name', 'start_year', 'end_year', 'start_date', 'end_date',
            'status', 'description', 'is_active',
        ]


class SemesterForm(PublicIdModelForm):

    class Meta:
        model = Semester
        fields = [
            'academic_year', 'semester_number', 'semester_type', 'code', 'name',
            'start_date', 'end_date', 'registration_start_date',
            'registration_end_date', 'status', 'max_credits', 'description',
            'is_active',
        ]


class DepartmentForm(PublicIdModelForm):

    class Meta:
        model = Department
        fields = [
            'code', 'name', 'description', 'head_teacher', 'established_date',
            'phone', 'email', 'address', 'is_active',
        ]

    def clean_code(self) -> str:
        return self.cleaned_data['code'].strip().upper()


class DegreeForm(PublicIdModelForm):

    class Meta:
        model = Degree
        fields = ['code', 'name', 'coefficient', 'description', 'is_active']

    def clean_code(self) -> str:
        return self.cleaned_data['code'].strip().upper()


class SubjectForm(PublicIdModelForm):

    class Meta:
        model = Subject
        fields = [
            'code', 'name', 'credits', 'coefficient', 'periods', 'department',
            'description', 'prerequisites', 'subject_type', 'level', 'is_active',
        ]

    def clean_code(self) -> str:
        return self.cleaned_data['code'].strip().upper()

    def clean_prerequisites(self):
        """Reject self references and prerequisite cycles."""
        prerequisites = self.cleaned_data.get('prerequisites')
        if prerequisites and creates_prerequisite_cycle(self.instance, prerequisites):
            raise ValidationError(_('Môn tiên quyết tạo thành vòng lặp.'))
        return prerequisites


class CourseClassForm(PublicIdModelForm):

    class Meta:
        model = CourseClass
        fields = [
            'code', 'name', 'semester', 'subject', 'student_count', 'max_students',
            'day_of_week', 'start_period', 'periods_count', 'room', 'status',
            'class_type', 'teaching_method', 'description', 'notes', 'is_active',
        ]

    def clean_code(self) -> str:
        return self.cleaned_data['code'].strip().upper()

    def clean(self) -> Dict[str, Any]:
        cleaned_data = super().clean()
        day = cleaned_data.get('day_of_week')
        start = cleaned_data.get('start_period')
        if bool(day) != bool(start):
            raise ValidationError(_('Lịch học cần có cả thứ và tiết bắt đầu.'))
        return cleaned_data
