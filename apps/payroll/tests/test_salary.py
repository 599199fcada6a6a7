"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Tests for the salary calculation engine and its workflow.
-------------------------------------------------------------------------
"""
from decimal import Decimal
from unittest import mock
from uuid import uuid4

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from apps.core.exceptions import (
    CalculationFailedException, DuplicateRecordException, ImmutableRecordException,
    NoAssignmentsException, ValidationFailedException, VersionConflictException,
    WorkflowTransitionException,
)
from apps.core.testing import (
    create_assignment, create_calendar, create_class, create_degree, create_department,
    create_rate, create_subject, create_teacher,
)
from apps.payroll.models import (
    AppliedRate, AuditAction, CalculationStatus, PeriodType, RateType, SalaryAuditEntry,
    SalaryCalculation,
)
from apps.payroll.services_salary import (
    approve_salary, archive_salary_calculation, batch_calculate, calculate_salary,
    coefficient_delta, create_salary_calculation, experience_coefficient, mark_salary_paid,
    salary_statistics, update_salary_calculation,
)
from apps.teaching.models import AssignmentStatus, Position


@override_settings(PAYROLL_EXPERIENCE_STEP_YEARS=5, PAYROLL_EXPERIENCE_STEP_RATE=Decimal('0.05'))
class SalaryTestCase(TestCase):
    """Shared fixture: one lecturer with a doctorate teaching 40 hours."""

    def setUp(self) -> None:
        """Set up test data."""
        self.year, self.semester = create_calendar()
        self.department = create_department()
        self.degree = create_degree(coefficient='1.50')
        self.subject = create_subject(self.department)
        self.course_class = create_class(self.semester, self.subject)
        self.teacher = create_teacher(self.department, self.degree, position=Position.LECTURER)
        self.assignment = create_assignment(self.teacher, self.course_class, hours='40')
        self.rate = create_rate(base_amount='100000')

    def create_calculation(self, teacher=None, **extra):
        values = {
            'teacher': teacher or self.teacher,
            'academic_year': self.year,
            'semester': self.semester,
            'period_type': PeriodType.SEMESTER,
            'period_start': self.semester.start_date,
            'period_end': self.semester.end_date,
        }
        values.update(extra)
        return create_salary_calculation(**values)


class SalaryCalculationTests(SalaryTestCase):
    """Test the calculation results."""

    def test_calculation_example(self) -> None:
        """Test that 40h at 100,000 with degree 1.5 and six years gives 6,200,000."""
        calculation = calculate_salary(self.create_calculation())

        self.assertEqual(calculation.status, CalculationStatus.CALCULATED)
        self.assertEqual(calculation.total_base_hours, Decimal('40'))
        self.assertEqual(calculation.total_base_amount, Decimal('4000000'))
        self.assertEqual(calculation.degree_applied_amount, Decimal('2000000'))
        self.assertEqual(calculation.position_applied_amount, Decimal('0'))
        self.assertEqual(calculation.years_of_service, 6)
        self.assertEqual(calculation.experience_coefficient, Decimal('1.05'))
        self.assertEqual(calculation.experience_applied_amount, Decimal('200000'))
        self.assertEqual(calculation.total_gross_salary, Decimal('6200000'))
        self.assertEqual(calculation.total_net_salary, Decimal('6200000'))
        self.assertEqual(calculation.average_hourly_rate, Decimal('100000'))
        self.assertEqual(calculation.degree, self.degree)

    def test_coefficients_add_only_the_delta(self) -> None:
        """Test that a coefficient contributes base x (coefficient - 1)."""
        self.assertEqual(coefficient_delta(Decimal('4000000'), Decimal('1.5')), Decimal('2000000'))
        self.assertEqual(coefficient_delta(Decimal('4000000'), Decimal('1.0')), Decimal('0'))
        self.assertEqual(coefficient_delta(Decimal('4000000'), Decimal('0.8')), Decimal('-800000'))
        self.assertEqual(experience_coefficient(4), Decimal('1.00'))
        self.assertEqual(experience_coefficient(10), Decimal('1.10'))

    def test_position_coefficient(self) -> None:
        """Test that a department head gets the 1.5 position coefficient."""
        head = create_teacher(self.department, self.degree, code='GV002',
                              position=Position.DEPARTMENT_HEAD, service_days=30)
        other_class = create_class(self.semester, self.subject, code='INT1001.02', day_of_week=3)
        create_assignment(head, other_class, hours='10')

        calculation = calculate_salary(self.create_calculation(teacher=head))

        self.assertEqual(calculation.total_base_amount, Decimal('1000000'))
        self.assertEqual(calculation.position_coefficient, Decimal('1.5'))
        self.assertEqual(calculation.position_applied_amount, Decimal('500000'))
        self.assertEqual(calculation.experience_applied_amount, Decimal('0'))
        self.assertEqual(calculation.total_gross_salary, Decimal('2000000'))

    def test_matching_rates_of_one_type_are_summed(self) -> None:
        """Test that every matching rate adds into its bucket."""
        create_rate(base_amount='20000', priority=3)
        calculation = calculate_salary(self.create_calculation())
        self.assertEqual(calculation.total_base_amount, Decimal('4800000'))
        self.assertEqual(AppliedRate.objects.filter(line__calculation=calculation).count(), 2)

    def test_buckets_by_rate_type(self) -> None:
        """Test that allowances and bonuses add to gross but coefficient rates do not."""
        create_rate(base_amount='300000', rate_type=RateType.ALLOWANCE)
        create_rate(base_amount='200000', rate_type=RateType.BONUS)
        create_rate(base_amount='999999', rate_type=RateType.COEFFICIENT)

        calculation = calculate_salary(self.create_calculation())

        self.assertEqual(calculation.total_allowance_amount, Decimal('300000'))
        self.assertEqual(calculation.total_bonus_amount, Decimal('200000'))
        self.assertEqual(calculation.total_gross_salary, Decimal('6700000'))
        line = calculation.lines.get()
        self.assertEqual(line.applied_rates.count(), 4)
        self.assertEqual(line.total_amount, Decimal('4500000'))

    def test_recalculation_is_idempotent(self) -> None:
        """Test that running twice gives the same figures without duplicating rates."""
        calculation = calculate_salary(self.create_calculation())
        first_gross = calculation.total_gross_salary

        calculation = calculate_salary(calculation)
        calculation.refresh_from_db()

        self.assertEqual(calculation.total_gross_salary, first_gross)
        self.assertEqual(calculation.recalculation_count, 1)
        self.assertIsNotNone(calculation.last_recalculated_at)
        self.assertEqual(AppliedRate.objects.filter(line__calculation=calculation).count(), 1)
        actions = list(calculation.audit_entries.values_list('action', flat=True))
        self.assertEqual(actions, [AuditAction.CREATED, AuditAction.CALCULATED, AuditAction.RECALCULATED])

    def test_no_rates_gives_zero_salary(self) -> None:
        """Test that a calculation with no effective rates computes to zero."""
        self.rate.is_active = False
        self.rate.save()
        calculation = calculate_salary(self.create_calculation())
        self.assertEqual(calculation.total_gross_salary, Decimal('0'))
        self.assertEqual(calculation.average_hourly_rate, Decimal('0'))

    def test_deductions_survive_recalculation(self) -> None:
        """Test that user-entered deductions are kept and netted on recalculation."""
        calculation = calculate_salary(self.create_calculation())
        update_salary_calculation(calculation, {'total_deduction_amount': Decimal('500000')})

        calculation = calculate_salary(calculation)

        self.assertEqual(calculation.total_deduction_amount, Decimal('500000'))
        self.assertEqual(calculation.total_net_salary, Decimal('5700000'))

    def test_lines_snapshot_hours(self) -> None:
        """Test that lines keep the hours captured at creation."""
        calculation = self.create_calculation()
        self.assignment.teaching_hours = Decimal('80')
        self.assignment.save()

        calculation = calculate_salary(calculation)

        self.assertEqual(calculation.total_base_amount, Decimal('4000000'))

    def test_failed_run_reverts_to_draft(self) -> None:
        """Test that a failing run rolls back and records the error."""
        calculation = self.create_calculation()
        with mock.patch(
            'apps.payroll.services_salary.SalaryCalculator.apply_coefficients',
            side_effect=RuntimeError('boom'),
        ):
            with self.assertRaises(CalculationFailedException):
                calculate_salary(calculation)

        calculation.refresh_from_db()
        self.assertEqual(calculation.status, CalculationStatus.DRAFT)
        self.assertEqual(len(calculation.validation_errors), 1)
        self.assertIn('boom', calculation.validation_errors[0]['message'])
        self.assertFalse(AppliedRate.objects.filter(line__calculation=calculation).exists())
        self.assertIsNone(calculation.calculated_at)


class SalaryCreationTests(SalaryTestCase):
    """Test creating calculations."""

    def test_code_and_snapshot(self) -> None:
        """Test that a new calculation gets a sequential code and one line per assignment."""
        calculation = self.create_calculation()
        self.assertEqual(calculation.calculation_code, 'SAL2024XX0001')
        self.assertEqual(calculation.status, CalculationStatus.DRAFT)
        line = calculation.lines.get()
        self.assertEqual(line.teaching_assignment, self.assignment)
        self.assertEqual(line.total_hours, Decimal('40'))
        self.assertEqual(line.sequence, 1)
        self.assertEqual(calculation.audit_entries.get().action, AuditAction.CREATED)

    def test_duplicate_active_calculation_rejected(self) -> None:
        """Test that a second active calculation for the same period conflicts."""
        first = self.create_calculation()
        with self.assertRaises(DuplicateRecordException) as ctx:
            self.create_calculation()
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.details['existing_id'], str(first.public_id))

    def test_archived_calculation_can_be_replaced(self) -> None:
        """Test that archiving frees the period for a new calculation."""
        first = self.create_calculation()
        archive_salary_calculation(first)
        second = self.create_calculation()
        self.assertNotEqual(first.pk, second.pk)
        self.assertEqual(second.calculation_code, 'SAL2024XX0002')

    def test_no_payable_assignments(self) -> None:
        """Test that unconfirmed assignments alone cannot be paid."""
        other = create_teacher(self.department, self.degree, code='GV009')
        other_class = create_class(self.semester, self.subject, code='INT1001.09', day_of_week=5)
        create_assignment(other, other_class, status=AssignmentStatus.ASSIGNED)
        with self.assertRaises(NoAssignmentsException):
            self.create_calculation(teacher=other)

    def test_explicit_assignment_ids_must_belong_to_teacher(self) -> None:
        """Test that foreign or unknown assignment ids are rejected."""
        other = create_teacher(self.department, self.degree, code='GV010')
        with self.assertRaises(ValidationFailedException):
            self.create_calculation(teacher=other, assignment_ids=[str(self.assignment.public_id)])
        with self.assertRaises(ValidationFailedException):
            self.create_calculation(assignment_ids=[str(uuid4())])

    def test_explicit_assignment_ids_bypass_status(self) -> None:
        """Test that explicitly listed assignments are used whatever their status."""
        self.assignment.status = AssignmentStatus.ASSIGNED
        self.assignment.save()
        calculation = self.create_calculation(assignment_ids=[str(self.assignment.public_id)])
        self.assertEqual(calculation.lines.count(), 1)

    def test_monthly_period_needs_month(self) -> None:
        """Test that a monthly calculation without a month is invalid."""
        with self.assertRaises(ValidationError):
            self.create_calculation(period_type=PeriodType.MONTHLY)

    def test_monthly_period_keeps_month_on_update(self) -> None:
        """Test that an edit cannot clear the month of a monthly calculation."""
        calculation = self.create_calculation(period_type=PeriodType.MONTHLY, month=9)
        version = calculation.version

        with self.assertRaises(ValidationError):
            update_salary_calculation(calculation, {'month': None})

        calculation.refresh_from_db()
        self.assertEqual(calculation.month, 9)
        self.assertEqual(calculation.version, version)


class SalaryWorkflowTests(SalaryTestCase):
    """Test approve / pay / archive and edits."""

    def setUp(self) -> None:
        """Set up test data."""
        super().setUp()
        self.calculation = self.create_calculation()

    def test_approve_requires_calculated(self) -> None:
        """Test that a draft calculation cannot be approved."""
        with self.assertRaises(WorkflowTransitionException):
            approve_salary(self.calculation)

    def test_pay_requires_approved(self) -> None:
        """Test that only approved calculations can be paid."""
        calculate_salary(self.calculation)
        with self.assertRaises(WorkflowTransitionException):
            mark_salary_paid(self.calculation)

        approve_salary(self.calculation, notes='OK')
        mark_salary_paid(self.calculation)

        self.calculation.refresh_from_db()
        self.assertEqual(self.calculation.status, CalculationStatus.PAID)
        self.assertIsNotNone(self.calculation.approved_at)
        self.assertIsNotNone(self.calculation.paid_at)

    def test_paid_calculation_is_frozen(self) -> None:
        """Test that a paid calculation cannot be recalculated, edited or archived."""
        calculate_salary(self.calculation)
        approve_salary(self.calculation)
        mark_salary_paid(self.calculation)

        with self.assertRaises(WorkflowTransitionException):
            calculate_salary(self.calculation)
        with self.assertRaises(ImmutableRecordException):
            update_salary_calculation(self.calculation, {'status_notes': 'x'})
        with self.assertRaises(WorkflowTransitionException):
            archive_salary_calculation(self.calculation)

    def test_calculation_rereads_status_before_running(self) -> None:
        """Test that a stale copy of an approved calculation cannot be recalculated."""
        stale = SalaryCalculation.objects.get(pk=self.calculation.pk)
        calculate_salary(self.calculation)
        approve_salary(self.calculation)
        applied_count = AppliedRate.objects.filter(line__calculation=self.calculation).count()

        with self.assertRaises(WorkflowTransitionException):
            calculate_salary(stale)

        self.calculation.refresh_from_db()
        self.assertEqual(self.calculation.status, CalculationStatus.APPROVED)
        self.assertEqual(AppliedRate.objects.filter(line__calculation=self.calculation).count(), applied_count)

    def test_approved_calculation_cannot_be_recalculated(self) -> None:
        """Test that approval locks the figures."""
        calculate_salary(self.calculation)
        approve_salary(self.calculation)
        with self.assertRaises(WorkflowTransitionException):
            calculate_salary(self.calculation)

    def test_archive_is_soft_delete(self) -> None:
        """Test that archiving keeps the record and blocks recalculation."""
        archive_salary_calculation(self.calculation)
        self.calculation.refresh_from_db()
        self.assertFalse(self.calculation.is_active)
        self.assertEqual(self.calculation.status, CalculationStatus.ARCHIVED)
        with self.assertRaisesMessage(WorkflowTransitionException, CalculationStatus.ARCHIVED.value):
            calculate_salary(self.calculation)

    def test_update_records_changes(self) -> None:
        """Test that edits bump the version and write a modified entry."""
        version = self.calculation.version
        update_salary_calculation(self.calculation, {'status_notes': 'Kiểm tra lại'}, expected_version=version)
        self.assertEqual(self.calculation.version, version + 1)
        entry = self.calculation.audit_entries.last()
        self.assertEqual(entry.action, AuditAction.MODIFIED)
        self.assertEqual(entry.changes['status_notes'], ['', 'Kiểm tra lại'])

    def test_stale_version_rejected(self) -> None:
        """Test that an edit against an old version conflicts."""
        with self.assertRaises(VersionConflictException):
            update_salary_calculation(self.calculation, {'status_notes': 'x'},
                                      expected_version=self.calculation.version + 5)

    def test_audit_log_is_append_only(self) -> None:
        """Test that audit entries cannot be changed or removed."""
        entry = SalaryAuditEntry.objects.filter(calculation=self.calculation).first()
        entry.notes = 'changed'
        with self.assertRaises(ImmutableRecordException):
            entry.save()
        with self.assertRaises(ImmutableRecordException):
            entry.delete()


class SalaryBatchAndStatisticsTests(SalaryTestCase):
    """Test batch calculation and aggregates."""

    def test_batch_reports_partial_failure(self) -> None:
        """Test that one failing id does not stop the batch."""
        good = self.create_calculation()
        missing = str(uuid4())

        result = batch_calculate([str(good.public_id), missing])

        self.assertEqual(result['total'], 2)
        self.assertEqual(len(result['succeeded']), 1)
        self.assertEqual(result['succeeded'][0]['total_net_salary'], Decimal('6200000'))
        self.assertEqual(result['failed'][0]['id'], missing)
        self.assertEqual(result['failed'][0]['error_code'], 'ERR_NOT_FOUND')

    def test_batch_skips_approved_and_paid(self) -> None:
        """Test that approved and paid records fail while the rest are recalculated."""
        approved = calculate_salary(self.create_calculation())
        approve_salary(approved)

        paid_teacher = create_teacher(self.department, self.degree, code='GV002')
        create_assignment(paid_teacher, self.course_class)
        paid = calculate_salary(self.create_calculation(teacher=paid_teacher))
        approve_salary(paid)
        mark_salary_paid(paid)

        draft_teacher = create_teacher(self.department, self.degree, code='GV003')
        create_assignment(draft_teacher, self.course_class)
        draft = self.create_calculation(teacher=draft_teacher)

        ids = [str(approved.public_id), str(paid.public_id), str(draft.public_id)]
        result = batch_calculate(ids)

        self.assertEqual(result['total'], 3)
        self.assertEqual([item['id'] for item in result['succeeded']], [str(draft.public_id)])
        self.assertEqual(sorted(item['id'] for item in result['failed']), sorted(ids[:2]))
        self.assertTrue(all(item['error_code'] == 'ERR_INVALID_TRANSITION' for item in result['failed']))
        approved.refresh_from_db()
        paid.refresh_from_db()
        self.assertEqual(approved.status, CalculationStatus.APPROVED)
        self.assertEqual(paid.status, CalculationStatus.PAID)

    def test_statistics_without_calculations(self) -> None:
        """Test that statistics on an empty payroll return zero totals."""
        stats = salary_statistics(include_departments=True)

        self.assertEqual(stats['totals']['count'], 0)
        self.assertEqual(stats['totals']['total_gross_salary'], Decimal('0.00'))
        self.assertEqual(stats['totals']['average_net_salary'], Decimal('0.00'))
        self.assertEqual(stats['by_status'], {})
        self.assertEqual(stats['by_department'], [])

    def test_statistics(self) -> None:
        """Test that statistics total active calculations by status."""
        calculate_salary(self.create_calculation())

        stats = salary_statistics(self.year, include_departments=True)

        self.assertEqual(stats['totals']['count'], 1)
        self.assertEqual(stats['totals']['total_gross_salary'], Decimal('6200000.00'))
        self.assertEqual(stats['by_status'][CalculationStatus.CALCULATED]['count'], 1)
        self.assertEqual(stats['by_department'][0]['department_code'], 'CNTT')
