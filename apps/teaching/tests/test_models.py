"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Tests for teachers, teaching assignments, their workflow
             and timetable conflict detection.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from apps.core.exceptions import (
    DependencyExistsException, ScheduleConflictException, WorkflowTransitionException,
)
from apps.core.testing import (
    create_assignment, create_calendar, create_class, create_degree, create_department,
    create_subject, create_teacher, days_ago,
)
from apps.teaching.models import AssignmentStatus, full_years_between
from apps.teaching.services import (
    check_teacher_available, ensure_teacher_deletable, find_teacher_conflicts,
    teacher_assignment_stats,
)
from apps.teaching.workflows import (
    approve_assignment, cancel_assignment, get_valid_transitions, perform_transition,
    validate_transition,
)


class TeacherModelTest(TestCase):
    """Test Teacher."""

    def setUp(self) -> None:
        """Set up test data."""
        self.department = create_department()
        self.degree = create_degree()

    def test_years_of_service(self) -> None:
        """Test that years of service count whole 365.25-day years."""
        teacher = create_teacher(self.department, self.degree, service_days=2265)
        self.assertEqual(teacher.years_of_service, 6)
        self.assertEqual(full_years_between(date(2020, 1, 1), date(2020, 12, 31)), 0)
        self.assertEqual(full_years_between(None, date(2020, 1, 1)), 0)

    def test_code_and_email_normalised(self) -> None:
        """Test that code is uppercased and email lowercased on save."""
        teacher = create_teacher(self.department, self.degree, code='gv077')
        teacher.email = ' Mixed@University.EDU.vn '
        teacher.save()
        self.assertEqual(teacher.code, 'GV077')
        self.assertEqual(teacher.email, 'mixed@university.edu.vn')

    def test_future_hire_date_rejected(self) -> None:
        """Test that a hire date in the future is invalid."""
        teacher = create_teacher(self.department, self.degree)
        teacher.hire_date = days_ago(-3)
        with self.assertRaises(ValidationError):
            teacher.clean()


class TeachingAssignmentTest(TestCase):
    """Test assignments, conflicts and workflow."""

    def setUp(self) -> None:
        """Set up test data."""
        self.year, self.semester = create_calendar()
        self.department = create_department()
        self.subject = create_subject(self.department)
        self.teacher = create_teacher(self.department, create_degree())
        self.monday = create_class(self.semester, self.subject, code='C.01', day_of_week=2, start_period=1)
        self.overlap = create_class(self.semester, self.subject, code='C.02', day_of_week=2, start_period=3)
        self.tuesday = create_class(self.semester, self.subject, code='C.03', day_of_week=3, start_period=1)
        self.assignment = create_assignment(self.teacher, self.monday, status=AssignmentStatus.ASSIGNED,
                                            additional_hours=Decimal('5'))

    def test_calendar_follows_class(self) -> None:
        """Test that semester, year and code are derived from the class."""
        self.assertEqual(self.assignment.semester, self.semester)
        self.assertEqual(self.assignment.academic_year, self.year)
        self.assertEqual(self.assignment.code, 'GV001_C.01_1')
        self.assertEqual(self.assignment.total_workload_hours, Decimal('45'))

    def test_teacher_conflicts(self) -> None:
        """Test that overlapping slots clash and other days do not."""
        self.assertEqual(find_teacher_conflicts(self.teacher, self.overlap), [self.assignment])
        self.assertEqual(find_teacher_conflicts(self.teacher, self.tuesday), [])
        with self.assertRaises(ScheduleConflictException):
            check_teacher_available(self.teacher, self.overlap)

    def test_cancelled_assignments_never_clash(self) -> None:
        """Test that a cancelled assignment frees the slot."""
        cancel_assignment(self.assignment, 'Đổi lịch')
        self.assertEqual(find_teacher_conflicts(self.teacher, self.overlap), [])

    def test_approve(self) -> None:
        """Test that approval confirms the assignment and stamps the block."""
        approve_assignment(self.assignment, notes='OK')
        self.assertEqual(self.assignment.status, AssignmentStatus.CONFIRMED)
        self.assertTrue(self.assignment.is_approved)
        self.assertIsNotNone(self.assignment.approved_at)
        with self.assertRaises(WorkflowTransitionException):
            approve_assignment(self.assignment)

    def test_transitions(self) -> None:
        """Test that work starts and completes with dates stamped."""
        approve_assignment(self.assignment)
        perform_transition(self.assignment, AssignmentStatus.IN_PROGRESS)
        self.assertIsNotNone(self.assignment.actual_start_date)
        perform_transition(self.assignment, AssignmentStatus.COMPLETED)
        self.assertIsNotNone(self.assignment.actual_end_date)
        self.assertEqual(get_valid_transitions(AssignmentStatus.COMPLETED), [])

    def test_invalid_transitions(self) -> None:
        """Test that skipping steps or confirming via transition is refused."""
        is_valid, error = validate_transition(AssignmentStatus.ASSIGNED, AssignmentStatus.COMPLETED)
        self.assertFalse(is_valid)
        self.assertIn('assigned', str(error))
        self.assertIn('completed', str(error))
        is_valid, _error = validate_transition(AssignmentStatus.DRAFT, AssignmentStatus.CONFIRMED)
        self.assertFalse(is_valid)
        with self.assertRaises(WorkflowTransitionException):
            perform_transition(self.assignment, AssignmentStatus.COMPLETED)

    def test_cancel_completed_assignment(self) -> None:
        """Test that even completed assignments can be cancelled."""
        approve_assignment(self.assignment)
        perform_transition(self.assignment, AssignmentStatus.IN_PROGRESS)
        perform_transition(self.assignment, AssignmentStatus.COMPLETED)
        cancel_assignment(self.assignment, 'Sai lớp')
        self.assertEqual(self.assignment.status, AssignmentStatus.CANCELLED)
        self.assertIn('Sai lớp', self.assignment.notes)

    def test_statistics(self) -> None:
        """Test that workload statistics sum hours by status."""
        create_assignment(self.teacher, self.tuesday, hours='30')
        stats = teacher_assignment_stats(self.teacher, semester=self.semester)
        self.assertEqual(stats['total_assignments'], 2)
        self.assertEqual(stats['total_teaching_hours'], 70.0)
        self.assertEqual(stats['total_workload_hours'], 75.0)
        self.assertEqual(stats['by_status'][AssignmentStatus.CONFIRMED], 1)

    def test_teacher_delete_guard(self) -> None:
        """Test that a teacher with assignments cannot be deleted."""
        with self.assertRaises(DependencyExistsException):
            ensure_teacher_deletable(self.teacher)
