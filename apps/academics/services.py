"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Business rules for reference data: delete guards,
             room scheduling conflicts and prerequisite cycles.
-------------------------------------------------------------------------
"""
from typing import Iterable, List

from apps.academics.models import (
    AcademicYear, ClassStatus, CourseClass, Degree, Department, Semester, Subject,
)
from apps.core.exceptions import ScheduleConflictException
from apps.core.services import ensure_no_dependents


def periods_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Inclusive-inclusive interval overlap test."""
    return start_a <= end_b and end_a >= start_b


def schedules_overlap(first: CourseClass, second: CourseClass) -> bool:
    """Two classes clash when they meet on the same day in overlapping periods."""
    if not (first.has_schedule and second.has_schedule):
        return False
    if first.day_of_week != second.day_of_week:
        return False
    return periods_overlap(first.start_period, first.end_period, second.start_period, second.end_period)


# =====================================================================
# ROOM CONFLICTS
# =====================================================================

def find_room_conflicts(course_class: CourseClass) -> List[CourseClass]:
    """
    Find classes of the same semester booked into the same room slot.

    Args:
        course_class: Class being created or rescheduled (may be unsaved).

    Returns:
        Conflicting classes, empty when the slot is free.
    """
    if not (course_class.room and course_class.has_schedule):
        return []

    candidates = CourseClass.objects.filter(
        semester_id=course_class.semester_id,
        room__iexact=course_class.room,
        day_of_week=course_class.day_of_week,
        is_active=True,
    ).exclude(status=ClassStatus.CANCELLED)
    if course_class.pk:
        candidates = candidates.exclude(pk=course_class.pk)

    return [other for other in candidates if schedules_overlap(course_class, other)]


def check_room_available(course_class: CourseClass) -> None:
    """
    Raises:
        ScheduleConflictException: When the room is already booked.
    """
    conflicts = find_room_conflicts(course_class)
    if conflicts:
        raise ScheduleConflictException(
            f"Phòng {course_class.room} đã được sử dụng vào thời gian này.",
            details={'conflicts': [str(other.public_id) for other in conflicts]}
        )


# =====================================================================
# PREREQUISITES
# =====================================================================

def creates_prerequisite_cycle(subject: Subject, prerequisites: Iterable[Subject]) -> bool:
    """
    Check whether giving `subject` these prerequisites would form a cycle.

    Walks the prerequisite graph from each proposed prerequisite and
    reports a cycle if the walk reaches `subject` itself.
    """
    if subject.pk is None:
        return False

    stack = list(prerequisites)
    seen = set()
    while stack:
        current = stack.pop()
        if current.pk == subject.pk:
            return True
        if current.pk in seen:
            continue
        seen.add(current.pk)
        stack.extend(current.prerequisites.all())
    return False


# =====================================================================
# DELETE GUARDS
# =====================================================================

def ensure_academic_year_deletable(academic_year: AcademicYear) -> None:
    ensure_no_dependents([
        (academic_year.semesters.count(),
         "Không thể xóa năm học vì còn {count} học kỳ thuộc năm học này."),
        (academic_year.rate_settings.count(),
         "Không thể xóa năm học vì còn {count} cấu hình mức lương gắn với năm học này."),
        (academic_year.period_rates.count(),
         "Không thể xóa năm học vì còn {count} mức lương theo tiết."),
    ])


def ensure_semester_deletable(semester: Semester) -> None:
    ensure_no_dependents([
        (semester.classes.count(),
         "Không thể xóa học kỳ vì còn {count} lớp học thuộc học kỳ này."),
        (semester.salary_calculations.count(),
         "Không thể xóa học kỳ vì còn {count} bản tính lương liên quan."),
        (semester.rate_settings.count(),
         "Không thể xóa học kỳ vì còn {count} cấu hình mức lương gắn với học kỳ này."),
    ])


def ensure_department_deletable(department: Department) -> None:
    ensure_no_dependents([
        (department.teachers.count(),
         "Không thể xóa khoa vì còn {count} giảng viên thuộc khoa."),
        (department.subjects.count(),
         "Không thể xóa khoa vì còn {count} môn học thuộc khoa."),
    ])


def ensure_degree_deletable(degree: Degree) -> None:
    ensure_no_dependents([
        (degree.teachers.count(),
         "Không thể xóa học vị vì còn {count} giảng viên có học vị này."),
    ])


def ensure_subject_deletable(subject: Subject) -> None:
    ensure_no_dependents([
        (subject.classes.count(),
         "Không thể xóa môn học vì còn {count} lớp học sử dụng môn này."),
        (subject.required_by.count(),
         "Không thể xóa môn học vì là môn tiên quyết của {count} môn học khác."),
    ])


def ensure_class_deletable(course_class: CourseClass) -> None:
    ensure_no_dependents([
        (course_class.teaching_assignments.count(),
         "Không thể xóa lớp học vì còn {count} phân công giảng dạy."),
    ])
