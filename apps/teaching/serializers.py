"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: JSON representations of teachers and teaching assignments.
-------------------------------------------------------------------------
"""
from typing import Any, Dict, Optional

from apps.academics.serializers import reference


def _decimal(value) -> Optional[float]:
    return float(value) if value is not None else None


def serialize_teacher(teacher) -> Dict[str, Any]:
    return {
        'id': str(teacher.public_id),
        'code': teacher.code,
        'full_name': teacher.full_name,
        'email': teacher.email,
        'phone': teacher.phone,
        'department': reference(teacher.department),
        'degree': {
            **reference(teacher.degree),
            'coefficient': float(teacher.degree.coefficient),
        },
        'position': teacher.position,
        'position_display': teacher.get_position_display(),
        'hire_date': teacher.hire_date,
        'years_of_service': teacher.years_of_service,
        'birth_date': teacher.birth_date,
        'age': teacher.age,
        'gender': teacher.gender,
        'address': teacher.address,
        'identity_number': teacher.identity_number,
        'performance_rating': _decimal(teacher.performance_rating),
        'notes': teacher.notes,
        'is_active': teacher.is_active,
    }


def serialize_assignment(assignment) -> Dict[str, Any]:
    return {
        'id': str(assignment.public_id),
        'code': assignment.code,
        'teacher': reference(assignment.teacher, 'full_name'),
        'class': reference(assignment.course_class),
        'semester': reference(assignment.semester),
        'academic_year': reference(assignment.academic_year),
        'assignment_type': assignment.assignment_type,
        'teaching_hours': float(assignment.teaching_hours),
        'teaching_coefficient': float(assignment.teaching_coefficient),
        'workload_distribution': {
            'lecture_hours': float(assignment.lecture_hours),
            'practice_hours': float(assignment.practice_hours),
            'lab_hours': float(assignment.lab_hours),
            'other_hours': float(assignment.other_hours),
            'additional_hours': float(assignment.additional_hours),
        },
        'status': assignment.status,
        'approval': {
            'is_approved': assignment.is_approved,
            'approved_by': assignment.approved_by.get_username() if assignment.approved_by else None,
            'approved_at': assignment.approved_at,
            'approval_notes': assignment.approval_notes,
        },
        'schedule': {
            'start_date': assignment.schedule_start_date,
            'end_date': assignment.schedule_end_date,
            'actual_start_date': assignment.actual_start_date,
            'actual_end_date': assignment.actual_end_date,
        },
        'compensation': {
            'base_rate': float(assignment.base_rate),
            'additional_rate': float(assignment.additional_rate),
            'overtime_rate': float(assignment.overtime_rate),
        },
        'performance': {
            'attendance_rate': _decimal(assignment.attendance_rate),
            'student_feedback': _decimal(assignment.student_feedback),
            'completion_rate': _decimal(assignment.completion_rate),
        },
        'total_workload_hours': float(assignment.total_workload_hours),
        'estimated_compensation': float(assignment.estimated_compensation),
        'assignment_duration': assignment.assignment_duration,
        'version': assignment.version,
        'notes': assignment.notes,
        'is_active': assignment.is_active,
    }
