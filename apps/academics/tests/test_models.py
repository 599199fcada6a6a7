"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Tests for the academic calendar and catalogue models and
             their scheduling services.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from apps.academics.models import AcademicYear, ClassStatus, Semester, SemesterType
from apps.academics.services import (
    check_room_available, creates_prerequisite_cycle, ensure_academic_year_deletable,
    ensure_department_deletable, find_room_conflicts, schedules_overlap,
)
from apps.core.exceptions import DependencyExistsException, ScheduleConflictException
from apps.core.testing import (
    create_calendar, create_class, create_department, create_rate, create_subject,
)


class AcademicYearModelTest(TestCase):
    """Test AcademicYear and Semester."""

    def setUp(self) -> None:
        """Set up test data."""
        self.year, self.semester = create_calendar(2024)

    def test_generated_fields(self) -> None:
        """Test that code, end year and name are derived from the start year."""
        self.assertEqual(self.year.end_year, 2025)
        self.assertEqual(self.year.code, '2024-2025')
        self.assertEqual(self.year.name, 'Năm học 2024-2025')
        self.assertEqual(self.semester.code, '2024-2025.1')

    def test_overlapping_active_year_rejected(self) -> None:
        """Test that an active year overlapping another is invalid."""
        other = AcademicYear(start_year=2025, start_date=date(2025, 6, 1), end_date=date(2026, 5, 31))
        with self.assertRaises(ValidationError):
            other.clean()

    def test_wrong_code_rejected(self) -> None:
        """Test that a code not matching the years is invalid."""
        other = AcademicYear(start_year=2030, code='2030-2032',
                             start_date=date(2030, 9, 1), end_date=date(2031, 8, 31))
        with self.assertRaises(ValidationError):
            other.clean()

    def test_semester_must_fit_year(self) -> None:
        """Test that a semester outside its academic year is invalid."""
        semester = Semester(academic_year=self.year, semester_number=2,
                            start_date=date(2025, 7, 1), end_date=date(2025, 10, 1))
        with self.assertRaises(ValidationError):
            semester.clean()

    def test_summer_semester_type(self) -> None:
        """Test that semester three is stored as a summer semester."""
        summer = Semester.objects.create(academic_year=self.year, semester_number=3,
                                         start_date=date(2025, 6, 1), end_date=date(2025, 8, 15))
        self.assertEqual(summer.semester_type, SemesterType.SUMMER)

    def test_year_delete_guard(self) -> None:
        """Test that a year with semesters or rate settings cannot be deleted."""
        with self.assertRaises(DependencyExistsException):
            ensure_academic_year_deletable(self.year)


class CatalogueModelTest(TestCase):
    """Test subjects, classes and their services."""

    def setUp(self) -> None:
        """Set up test data."""
        self.year, self.semester = create_calendar()
        self.department = create_department()
        self.subject = create_subject(self.department, credits=3)

    def test_subject_periods_default(self) -> None:
        """Test that periods default to credits x 15."""
        self.assertEqual(self.subject.periods, 45)
        self.assertEqual(self.subject.total_teaching_hours, Decimal('45'))

    def test_half_credit_steps(self) -> None:
        """Test that credits must be multiples of 0.5."""
        self.subject.credits = Decimal('2.3')
        with self.assertRaises(ValidationError):
            self.subject.clean()

    def test_class_computed_fields(self) -> None:
        """Test enrolment percentage, end period and remaining slots."""
        course_class = create_class(self.semester, self.subject, start_period=2, periods_count=3,
                                    student_count=33, max_students=40)
        self.assertEqual(course_class.end_period, 4)
        self.assertEqual(course_class.enrollment_percentage, 83)
        self.assertEqual(course_class.remaining_slots, 7)
        self.assertTrue(course_class.can_delete)

    def test_full_class_status(self) -> None:
        """Test that an open class becomes full at capacity and reopens below it."""
        course_class = create_class(self.semester, self.subject, status=ClassStatus.OPEN,
                                    student_count=40, max_students=40)
        self.assertEqual(course_class.update_status(), ClassStatus.FULL)
        course_class.student_count = 39
        self.assertEqual(course_class.update_status(), ClassStatus.OPEN)

    def test_room_conflict(self) -> None:
        """Test that two classes cannot share a room slot."""
        first = create_class(self.semester, self.subject, code='A.01', room='B201', start_period=1)
        second = create_class(self.semester, self.subject, code='A.02', room='b201', start_period=3)
        later = create_class(self.semester, self.subject, code='A.03', room='B201', start_period=4)

        self.assertTrue(schedules_overlap(first, second))
        self.assertEqual(find_room_conflicts(later), [second])
        with self.assertRaises(ScheduleConflictException):
            check_room_available(first)

    def test_unscheduled_classes_never_clash(self) -> None:
        """Test that a class without a schedule has no conflicts."""
        course_class = create_class(self.semester, self.subject, day_of_week=None, start_period=None, room='B201')
        self.assertEqual(find_room_conflicts(course_class), [])

    def test_prerequisite_cycle(self) -> None:
        """Test that a prerequisite chain looping back is detected."""
        second = create_subject(self.department, code='INT2002')
        third = create_subject(self.department, code='INT3003')
        second.prerequisites.add(self.subject)
        third.prerequisites.add(second)

        self.assertTrue(creates_prerequisite_cycle(self.subject, [third]))
        self.assertFalse(creates_prerequisite_cycle(third, [self.subject]))

    def test_department_delete_guard(self) -> None:
        """Test that a department with subjects or teachers cannot be deleted."""
        with self.assertRaises(DependencyExistsException):
            ensure_department_deletable(self.department)
        empty = create_department(code='NN', name='Ngoại ngữ')
        ensure_department_deletable(empty)

    def test_rate_setting_blocks_year_delete(self) -> None:
        """Test that rate settings bound to a year count as dependents."""
        year, semester = create_calendar(2030)
        semester.delete()
        create_rate(academic_year=year)
        with self.assertRaises(DependencyExistsException):
            ensure_academic_year_deletable(year)
