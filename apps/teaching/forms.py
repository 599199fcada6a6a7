"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Input forms for teachers and teaching assignments.
-------------------------------------------------------------------------
"""
from typing import Any, Dict

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from apps.core.forms import PublicIdModelForm
from apps.teaching.models import Teacher, TeachingAssignment


class TeacherForm(PublicIdModelForm):

    class Meta:
        model = Teacher
        fields = [
            'code', 'full_name', 'email', 'phone', 'department', 'degree', 'position',
            'hire_date', 'birth_date', 'gender', 'address', 'identity_number',
            'performance_rating', 'notes', 'is_active',
        ]

    def clean_code(self) -> str:
        return self.cleaned_data['code'].strip().upper()

    def clean_email(self) -> str:
        return self.cleaned_data['email'].strip().lower()


class TeachingAssignmentForm(PublicIdModelForm):
    """
    Workflow fields (status, approval) are excluded; they change only
    through the approve/transition/cancel endpoints.
    """

    class Meta:
        model = TeachingAssignment
        fields = [
            'code', 'teacher', 'course_class', 'assignment_type', 'teaching_hours',
            'teaching_coefficient', 'lecture_hours', 'practice_hours', 'lab_hours',
            'other_hours', 'additional_hours', 'schedule_start_date', 'schedule_end_date',
            'actual_start_date', 'actual_end_date', 'base_rate', 'additional_rate',
            'overtime_rate', 'attendance_rate', 'student_feedback', 'completion_rate',
            'notes', 'is_active',
        ]

    def clean(self) -> Dict[str, Any]:
        cleaned_data = super().clean()
        teacher = cleaned_data.get('teacher')
        if teacher is not None and not teacher.is_active:
            raise ValidationError({'teacher': _('Giảng viên không còn hoạt động.')})

        distributed = sum(
            cleaned_data.get(name) or 0
            for name in ('lecture_hours', 'practice_hours', 'lab_hours', 'other_hours')
        )
        hours = cleaned_data.get('teaching_hours')
        if hours is not None and distributed > hours:
            raise ValidationError({
                'teaching_hours': _('Tổng số giờ phân bổ vượt quá số giờ giảng dạy.')
            })
        return cleaned_data
