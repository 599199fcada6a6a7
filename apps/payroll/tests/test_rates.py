"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Tests for rate settings: evaluation, matching and lifecycle.
-------------------------------------------------------------------------
"""
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from apps.academics.models import ClassType
from apps.core.exceptions import (
    ImmutableRecordException, RecordNotFoundException, WorkflowTransitionException,
)
from apps.core.testing import (
    create_calendar, create_class, create_degree, create_department, create_rate,
    create_subject, create_teacher, days_ago,
)
from apps.payroll.models import (
    ApplicableScope, CriteriaOperator, CriteriaType, PeriodRate, PeriodRateApproval,
    RateSetting, RateSettingStatus, RateType, TargetModel,
)
from apps.payroll.services_rates import (
    activate_period_rate, activate_rate_setting, approve_period_rate, approve_rate_setting,
    build_teacher_data, deactivate_period_rate, deactivate_rate_setting,
    ensure_rate_setting_editable, find_applicable_rates, get_active_rate,
    get_current_period_rate, period_rate_statistics, submit_rate_setting,
    supersede_rate_setting,
)
from apps.teaching.models import Position


class RateEvaluationTests(TestCase):
    """Test RateSetting.calculate_rate()."""

    def test_hourly_rate_multiplies_hours(self) -> None:
        """Test that an hourly rate scales with the hours worked."""
        rate = RateSetting(rate_type=RateType.BASE_HOURLY, base_amount=Decimal('100000'),
                           coefficient=Decimal('1.00'))
        self.assertEqual(rate.calculate_rate(Decimal('40')), Decimal('4000000'))

    def test_missing_hours_count_as_one(self) -> None:
        """Test that an hourly rate with no hours evaluates one hour."""
        rate = RateSetting(rate_type=RateType.BASE_HOURLY, base_amount=Decimal('100000'),
                           coefficient=Decimal('1.20'))
        self.assertEqual(rate.calculate_rate(None), Decimal('120000'))
        self.assertEqual(rate.calculate_rate(0), Decimal('120000'))

    def test_non_hourly_rate_ignores_hours(self) -> None:
        """Test that non-hourly rates do not depend on hours."""
        rate = RateSetting(rate_type=RateType.ALLOWANCE, base_amount=Decimal('500000'),
                           coefficient=Decimal('1.00'))
        self.assertEqual(rate.calculate_rate(Decimal('10')), rate.calculate_rate(Decimal('90')))

    @override_settings(PAYROLL_STEP_YEARS=2)
    def test_step_increment_per_completed_step(self) -> None:
        """Test that one increment is added per two years of experience."""
        rate = RateSetting(rate_type=RateType.BONUS, base_amount=Decimal('100000'),
                           coefficient=Decimal('1.00'), step_increment=Decimal('10000'))
        self.assertEqual(rate.calculate_rate(None, 5), Decimal('120000'))
        self.assertEqual(rate.calculate_rate(None, 1), Decimal('100000'))

    def test_result_is_clamped(self) -> None:
        """Test that results are clamped to the minimum and maximum rate."""
        rate = RateSetting(rate_type=RateType.BASE_HOURLY, base_amount=Decimal('100000'),
                           coefficient=Decimal('1.00'), minimum_rate=Decimal('500000'),
                           maximum_rate=Decimal('2000000'))
        self.assertEqual(rate.calculate_rate(Decimal('2')), Decimal('500000'))
        self.assertEqual(rate.calculate_rate(Decimal('40')), Decimal('2000000'))
        self.assertEqual(rate.calculate_rate(Decimal('10')), Decimal('1000000'))

    def test_result_rounds_half_up(self) -> None:
        """Test that fractional amounts round half up to a whole unit."""
        rate = RateSetting(rate_type=RateType.BASE_HOURLY, base_amount=Decimal('101'),
                           coefficient=Decimal('1.50'))
        self.assertEqual(rate.calculate_rate(Decimal('1')), Decimal('152'))

    def test_inverted_bounds_rejected(self) -> None:
        """Test that clean() rejects minimum above maximum."""
        rate = RateSetting(name='X', rate_type=RateType.BONUS, base_amount=Decimal('1'),
                           minimum_rate=Decimal('10'), maximum_rate=Decimal('5'),
                           effective_start=days_ago(1))
        with self.assertRaises(ValidationError):
            rate.clean()

    def test_malformed_criteria_rejected(self) -> None:
        """Test that clean() rejects criteria with an unknown type."""
        rate = RateSetting(name='X', rate_type=RateType.BONUS, base_amount=Decimal('1'),
                           effective_start=days_ago(1),
                           additional_criteria=[{'criteria_type': 'height', 'value': 2}])
        with self.assertRaises(ValidationError):
            rate.clean()

    def test_code_generated_on_save(self) -> None:
        """Test that a blank code is generated and stored uppercase."""
        rate = create_rate(code='')
        self.assertTrue(rate.code.startswith('RATE'))


class RateMatchingTests(TestCase):
    """Test find_applicable_rates()."""

    def setUp(self) -> None:
        """Set up test data."""
        self.year, self.semester = create_calendar()
        self.department = create_department()
        self.degree = create_degree()
        self.subject = create_subject(self.department)
        self.course_class = create_class(self.semester, self.subject, student_count=45)
        self.teacher = create_teacher(self.department, self.degree, performance_rating=Decimal('4.00'))
        self.teacher_data = build_teacher_data(self.teacher)
        self.assignment_data = {
            'teaching_hours': Decimal('40'),
            'assignment_type': 'primary',
            'course_class': self.course_class,
            'subject': self.subject,
        }

    def matches(self):
        return find_applicable_rates(self.teacher_data, self.assignment_data,
                                     academic_year=self.year, semester=self.semester)

    def test_only_active_effective_rates_match(self) -> None:
        """Test that draft, inactive-flag and out-of-window rates are skipped."""
        active = create_rate()
        create_rate(status=RateSettingStatus.DRAFT)
        create_rate(is_active=False)
        create_rate(effective_start=days_ago(-5))
        create_rate(effective_start=days_ago(60), effective_end=days_ago(10))
        self.assertEqual(self.matches(), [active])

    def test_all_matches_returned_by_priority(self) -> None:
        """Test that several matching rates are all returned, highest priority first."""
        low = create_rate(priority=1)
        high = create_rate(priority=5)
        self.assertEqual(self.matches(), [high, low])

    def test_department_scope(self) -> None:
        """Test that department rates match only the teacher's department."""
        other = create_department(code='KT', name='Kinh tế')
        mine = create_rate(applicable_scope=ApplicableScope.DEPARTMENT,
                           target_model=TargetModel.DEPARTMENT, target_id=self.department.public_id)
        create_rate(applicable_scope=ApplicableScope.DEPARTMENT,
                    target_model=TargetModel.DEPARTMENT, target_id=other.public_id)
        self.assertEqual(self.matches(), [mine])

    def test_position_and_class_type_scope(self) -> None:
        """Test that position and class type scopes compare target codes."""
        by_position = create_rate(applicable_scope=ApplicableScope.POSITION, target_code=Position.LECTURER)
        create_rate(applicable_scope=ApplicableScope.POSITION, target_code=Position.DEPARTMENT_HEAD)
        create_rate(applicable_scope=ApplicableScope.CLASS_TYPE, target_code=ClassType.LAB)
        self.assertEqual(self.matches(), [by_position])

    def test_scope_without_target_matches(self) -> None:
        """Test that a non-university scope with no target matches everything."""
        rate = create_rate(applicable_scope=ApplicableScope.DEGREE)
        self.assertEqual(self.matches(), [rate])

    def test_experience_hours_and_rating_conditions(self) -> None:
        """Test that experience, hour window and rating are enforced."""
        ok = create_rate(minimum_experience=5, minimum_hours=Decimal('30'), maximum_hours=Decimal('60'),
                         minimum_rating=Decimal('3.50'))
        create_rate(minimum_experience=10)
        create_rate(maximum_hours=Decimal('20'))
        create_rate(minimum_rating=Decimal('4.50'))
        self.assertEqual(self.matches(), [ok])

    def test_rating_skipped_when_teacher_unrated(self) -> None:
        """Test that the rating condition passes for a teacher without a rating."""
        self.teacher_data['performance_rating'] = None
        rate = create_rate(minimum_rating=Decimal('4.50'))
        self.assertEqual(self.matches(), [rate])

    def test_additional_criteria_must_all_hold(self) -> None:
        """Test that every additional criterion must be satisfied."""
        ok = create_rate(additional_criteria=[
            {'criteria_type': CriteriaType.CLASS_SIZE, 'operator': CriteriaOperator.GREATER_THAN, 'value': 40},
            {'criteria_type': CriteriaType.DEGREE, 'operator': CriteriaOperator.CONTAINS, 'value': ['TS', 'PGS']},
        ])
        create_rate(additional_criteria=[
            {'criteria_type': CriteriaType.CLASS_SIZE, 'operator': CriteriaOperator.GREATER_THAN, 'value': 40},
            {'criteria_type': CriteriaType.POSITION, 'operator': CriteriaOperator.EQUALS,
             'value': Position.DEPARTMENT_HEAD},
        ])
        self.assertEqual(self.matches(), [ok])

    def test_rates_bound_to_other_year_skipped(self) -> None:
        """Test that a rate bound to another academic year is not applied."""
        other_year, other_semester = create_calendar(2022)
        create_rate(academic_year=other_year)
        create_rate(semester=other_semester)
        own = create_rate(semester=self.semester)
        self.assertEqual(self.matches(), [own])

    def test_get_active_rate(self) -> None:
        """Test that the highest-priority active rate of a type is returned."""
        create_rate(priority=1)
        top = create_rate(priority=9)
        self.assertEqual(get_active_rate(RateType.BASE_HOURLY), top)
        with self.assertRaises(RecordNotFoundException):
            get_active_rate(RateType.OVERTIME)


class RateLifecycleTests(TestCase):
    """Test rate setting workflow and versioning."""

    def setUp(self) -> None:
        """Set up test data."""
        self.rate = create_rate(status=RateSettingStatus.DRAFT)

    def test_activate_requires_approval(self) -> None:
        """Test that a draft cannot be activated directly."""
        with self.assertRaises(WorkflowTransitionException):
            activate_rate_setting(self.rate)

    def test_full_lifecycle(self) -> None:
        """Test that submit, approve, activate and deactivate move the status."""
        submit_rate_setting(self.rate)
        self.assertEqual(self.rate.status, RateSettingStatus.PENDING_APPROVAL)
        approve_rate_setting(self.rate, notes='OK')
        self.assertTrue(self.rate.is_approved)
        activate_rate_setting(self.rate)
        self.assertEqual(self.rate.status, RateSettingStatus.ACTIVE)
        self.assertTrue(self.rate.is_currently_effective)
        deactivate_rate_setting(self.rate)
        self.rate.refresh_from_db()
        self.assertEqual(self.rate.status, RateSettingStatus.INACTIVE)
        self.assertEqual(self.rate.version, 5)

    def test_supersede_creates_linked_draft(self) -> None:
        """Test that superseding keeps the old version and links the new draft."""
        approve_rate_setting(self.rate)
        activate_rate_setting(self.rate)

        replacement = supersede_rate_setting(self.rate, changes={'base_amount': Decimal('120000')})

        self.rate.refresh_from_db()
        self.assertEqual(self.rate.status, RateSettingStatus.SUPERSEDED)
        self.assertEqual(self.rate.superseded_by, replacement)
        self.assertEqual(replacement.supersedes, self.rate)
        self.assertEqual(replacement.status, RateSettingStatus.DRAFT)
        self.assertEqual(replacement.base_amount, Decimal('120000'))
        self.assertGreater(replacement.version, 1)
        self.assertNotEqual(replacement.code, self.rate.code)

    def test_superseded_rate_is_read_only(self) -> None:
        """Test that a superseded rate refuses edits and further transitions."""
        approve_rate_setting(self.rate)
        supersede_rate_setting(self.rate)
        with self.assertRaises(ImmutableRecordException):
            ensure_rate_setting_editable(self.rate)
        with self.assertRaises(WorkflowTransitionException):
            activate_rate_setting(self.rate)


class PeriodRateTests(TestCase):
    """Test period rates."""

    def setUp(self) -> None:
        """Set up test data."""
        self.year, _semester = create_calendar()

    def make(self, name: str, amount: str = '150000',
             approval_status: str = PeriodRateApproval.APPROVED) -> PeriodRate:
        return PeriodRate.objects.create(
            name=name, rate_per_period=Decimal(amount), academic_year=self.year,
            effective_date=days_ago(10), approval_status=approval_status,
        )

    def test_activation_deactivates_siblings(self) -> None:
        """Test that at most one period rate per year stays active."""
        first = self.make('A')
        second = self.make('B', '160000')
        activate_period_rate(first)
        activate_period_rate(second)
        first.refresh_from_db()
        self.assertFalse(first.is_active)
        self.assertEqual(get_current_period_rate(self.year), second)

    def test_approve_once(self) -> None:
        """Test that a period rate can be approved only once."""
        period_rate = self.make('A', approval_status=PeriodRateApproval.DRAFT)
        approve_period_rate(period_rate)
        self.assertEqual(period_rate.approval_status, PeriodRateApproval.APPROVED)
        with self.assertRaises(WorkflowTransitionException):
            approve_period_rate(period_rate)

    def test_no_current_rate(self) -> None:
        """Test that a year without an effective rate raises not found."""
        period_rate = self.make('A')
        PeriodRate.objects.filter(pk=period_rate.pk).update(is_active=False)
        with self.assertRaises(RecordNotFoundException):
            get_current_period_rate(self.year)

    def test_deactivate_closes_window(self) -> None:
        """Test that deactivation stops the rate and ends it today."""
        period_rate = self.make('A')
        deactivate_period_rate(period_rate)
        period_rate.refresh_from_db()
        self.assertFalse(period_rate.is_active)
        self.assertEqual(period_rate.end_date, days_ago(0))
        with self.assertRaises(RecordNotFoundException):
            get_current_period_rate(self.year)

    def test_deactivate_keeps_earlier_end_date(self) -> None:
        """Test that a window that already ended is not extended."""
        period_rate = self.make('A')
        period_rate.end_date = days_ago(2)
        period_rate.save()
        deactivate_period_rate(period_rate)
        self.assertEqual(period_rate.end_date, days_ago(2))

    def test_statistics(self) -> None:
        """Test that statistics count rates and report current and highest amounts."""
        self.assertEqual(period_rate_statistics(self.year), {
            'total_rates': 0, 'active_rates': 0,
            'current_rate': Decimal('0'), 'highest_rate': Decimal('0'),
        })

        first = self.make('A', '180000')
        second = self.make('B', '150000')
        activate_period_rate(second)

        stats = period_rate_statistics(self.year)
        self.assertEqual(stats['total_rates'], 2)
        self.assertEqual(stats['active_rates'], 1)
        self.assertEqual(stats['current_rate'], Decimal('150000'))
        self.assertEqual(stats['highest_rate'], Decimal('180000'))
        first.refresh_from_db()
        self.assertFalse(first.is_active)
