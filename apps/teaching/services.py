"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Teaching schedule services: teacher availability and
             conflict detection, workload statistics and delete guards.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db.models import Count, Sum

from apps.academics.models import CourseClass
from apps.academics.services import schedules_overlap
from apps.core.exceptions import ScheduleConflictException
from apps.core.services import ensure_no_dependents
from apps.teaching.models import AssignmentStatus, Teacher, TeachingAssignment


# =====================================================================
# CONFLICT DETECTION
# =====================================================================

def find_teacher_conflicts(
    teacher: Teacher,
    course_class: CourseClass,
    exclude_assignment: Optional[TeachingAssignment] = None
) -> List[TeachingAssignment]:
    """
    Find the teacher's other assignments that clash with a class slot.

    Only assignments in the same academic year are considered, and
    cancelled or inactive assignments never clash.

    Args:
        teacher: Teacher whose timetable is checked.
        course_class: Class the teacher would teach.
        exclude_assignment: Assignment being edited, skipped in the scan.

    Returns:
        Clashing assignments, empty when the teacher is free.
    """
    if not course_class.has_schedule:
        return []

    candidates = TeachingAssignment.objects.filter(
        teacher=teacher,
        academic_year_id=course_class.semester.academic_year_id,
        is_active=True,
        course_class__day_of_week=course_class.day_of_week,
    ).exclude(
        status=AssignmentStatus.CANCELLED
    ).exclude(
        course_class_id=course_class.pk
    ).select_related('course_class')

    if exclude_assignment is not None and exclude_assignment.pk:
        candidates = candidates.exclude(pk=exclude_assignment.pk)

    return [
        assignment for assignment in candidates
        if schedules_overlap(course_class, assignment.course_class)
    ]


def conflict_details(conflicts: List[TeachingAssignment]) -> List[Dict[str, Any]]:
    return [
        {
            'assignment_id': str(assignment.public_id),
            'assignment_code': assignment.code,
            'class_code': assignment.course_class.code,
            'day_of_week': assignment.course_class.day_of_week,
            'start_period': assignment.course_class.start_period,
            'end_period': assignment.course_class.end_period,
        }
        for assignment in conflicts
    ]


def check_teacher_available(
    teacher: Teacher,
    course_class: CourseClass,
    exclude_assignment: Optional[TeachingAssignment] = None
) -> None:
    """
    Raises:
        ScheduleConflictException: When the teacher already teaches in that slot.
    """
    conflicts = find_teacher_conflicts(teacher, course_class, exclude_assignment)
    if conflicts:
        raise ScheduleConflictException(
            "Giảng viên đã có lịch dạy trùng thời gian.",
            details={'conflicts': conflict_details(conflicts)}
        )


def check_class_teacher_conflicts(course_class: CourseClass) -> None:
    """
    Re-check every teacher of a class after its schedule changes.

    Raises:
        ScheduleConflictException: When the new slot clashes for any teacher.
    """
    assignments = course_class.teaching_assignments.filter(
        is_active=True
    ).exclude(
        status=AssignmentStatus.CANCELLED
    ).select_related('teacher')

    for assignment in assignments:
        conflicts = find_teacher_conflicts(assignment.teacher, course_class, assignment)
        if conflicts:
            raise ScheduleConflictException(
                f"Lịch mới của lớp trùng với lịch dạy của giảng viên {assignment.teacher.full_name}.",
                details={'teacher_id': str(assignment.teacher.public_id),
                         'conflicts': conflict_details(conflicts)}
            )


# =====================================================================
# STATISTICS
# =====================================================================

def teacher_assignment_stats(teacher: Teacher, semester=None, academic_year=None) -> Dict[str, Any]:
    """
    Summarize a teacher's workload.

    Returns:
        Dict with total/active counts, hours and a per-status breakdown.
    """
    queryset = TeachingAssignment.objects.filter(teacher=teacher, is_active=True)
    if semester is not None:
        queryset = queryset.filter(semester=semester)
    if academic_year is not None:
        queryset = queryset.filter(academic_year=academic_year)

    totals = queryset.exclude(status=AssignmentStatus.CANCELLED).aggregate(
        teaching_hours=Sum('teaching_hours'),
        additional_hours=Sum('additional_hours'),
    )
    by_status = {
        row['status']: row['count']
        for row in queryset.values('status').annotate(count=Count('id')).order_by('status')
    }

    teaching_hours = totals['teaching_hours'] or Decimal('0')
    additional_hours = totals['additional_hours'] or Decimal('0')
    return {
        'total_assignments': sum(by_status.values()),
        'by_status': by_status,
        'total_teaching_hours': float(teaching_hours),
        'total_additional_hours': float(additional_hours),
        'total_workload_hours': float(teaching_hours + additional_hours),
    }


# =====================================================================
# DELETE GUARDS
# =====================================================================

def ensure_teacher_deletable(teacher: Teacher) -> None:
    ensure_no_dependents([
        (teacher.teaching_assignments.count(),
         "Không thể xóa giảng viên vì còn {count} phân công giảng dạy."),
        (teacher.salary_calculations.count(),
         "Không thể xóa giảng viên vì còn {count} bản tính lương."),
    ])


def ensure_assignment_deletable(assignment: TeachingAssignment) -> None:
    ensure_no_dependents([
        (assignment.salary_lines.values('calculation').distinct().count(),
         "Không thể xóa phân công vì đang được sử dụng trong {count} bản tính lương."),
    ])
