"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: JSON representations of academic reference data.
-------------------------------------------------------------------------
"""
from typing import Any, Dict, Optional


def reference(obj, label: str = 'name') -> Optional[Dict[str, Any]]:
    """Compact {id, code, name} block for a related record."""
    if obj is None:
        return None
    return {
        'id': str(obj.public_id),
        'code': getattr(obj, 'code', None),
        'name': getattr(obj, label, None),
    }


def serialize_academic_year(year) -> Dict[str, Any]:
    return {
        'id': str(year.public_id),
        'code': year.code,
        'name': year.name,
        'start_year': year.start_year,
        'end_year': year.end_year,
        'start_date': year.start_date,
        'end_date': year.end_date,
        'status': year.status,
        'description': year.description,
        'is_active': year.is_active,
        'is_current': year.is_current,
        'duration_days': year.duration_days,
        'created_at': year.created_at,
        'updated_at': year.updated_at,
    }


def serialize_semester(semester) -> Dict[str, Any]:
    return {
        'id': str(semester.public_id),
        'code': semester.code,
        'name': semester.name,
        'academic_year': reference(semester.academic_year),
        'semester_number': semester.semester_number,
        'semester_type': semester.semester_type,
        'start_date': semester.start_date,
        'end_date': semester.end_date,
        'registration_start_date': semester.registration_start_date,
        'registration_end_date': semester.registration_end_date,
        'status': semester.status,
        'max_credits': semester.max_credits,
        'description': semester.description,
        'is_active': semester.is_active,
        'is_current': semester.is_current,
        'is_registration_open': semester.is_registration_open,
    }


def serialize_department(department) -> Dict[str, Any]:
    return {
        'id': str(department.public_id),
        'code': department.code,
        'name': department.name,
        'description': department.description,
        'head_teacher': reference(department.head_teacher, 'full_name'),
        'established_date': department.established_date,
        'phone': department.phone,
        'email': department.email,
        'address': department.address,
        'is_active': department.is_active,
    }


def serialize_degree(degree) -> Dict[str, Any]:
    return {
        'id': str(degree.public_id),
        'code': degree.code,
        'name': degree.name,
        'coefficient': float(degree.coefficient),
        'description': degree.description,
        'is_active': degree.is_active,
    }


def serialize_subject(subject) -> Dict[str, Any]:
    return {
        'id': str(subject.public_id),
        'code': subject.code,
        'name': subject.name,
        'credits': float(subject.credits),
        'coefficient': float(subject.coefficient),
        'periods': subject.periods,
        'department': reference(subject.department),
        'description': subject.description,
        'prerequisites': [reference(item) for item in subject.prerequisites.all()],
        'subject_type': subject.subject_type,
        'level': subject.level,
        'total_teaching_hours': float(subject.total_teaching_hours),
        'salary_coefficient': float(subject.salary_coefficient),
        'is_active': subject.is_active,
    }


def serialize_course_class(course_class) -> Dict[str, Any]:
    return {
        'id': str(course_class.public_id),
        'code': course_class.code,
        'name': course_class.name,
        'semester': reference(course_class.semester),
        'subject': reference(course_class.subject),
        'student_count': course_class.student_count,
        'max_students': course_class.max_students,
        'schedule': {
            'day_of_week': course_class.day_of_week,
            'start_period': course_class.start_period,
            'periods_count': course_class.periods_count,
            'end_period': course_class.end_period,
            'room': course_class.room,
        },
        'status': course_class.status,
        'class_type': course_class.class_type,
        'teaching_method': course_class.teaching_method,
        'enrollment_percentage': course_class.enrollment_percentage,
        'remaining_slots': course_class.remaining_slots,
        'can_edit': course_class.can_edit,
        'can_delete': course_class.can_delete,
        'can_add_students': course_class.can_add_students,
        'description': course_class.description,
        'notes': course_class.notes,
        'is_active': course_class.is_active,
    }
