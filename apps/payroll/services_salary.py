"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Salary calculation service. Builds calculation shells from
             teaching assignments, runs the rate and coefficient engine,
             drives the approval workflow and answers payroll queries.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone

from apps.core.exceptions import (
    CalculationFailedException, DuplicateRecordException, ImmutableRecordException,
    NoAssignmentsException, PayrollException, ValidationFailedException,
    VersionConflictException, WorkflowTransitionException,
)
from apps.core.services import get_by_public_id
from apps.payroll.logging import PayrollLogger
from apps.payroll.models import (
    AppliedRate, AuditAction, CalculationMethod, CalculationStatus, RateType,
    SalaryAssignmentLine, SalaryAuditEntry, SalaryCalculation, ZERO,
)
from apps.payroll.services_rates import build_assignment_data, build_teacher_data, find_applicable_rates
from apps.payroll.workflows import can_calculate, validate_calculation_transition
from apps.teaching.models import PAYABLE_ASSIGNMENT_STATUSES, Position, Teacher, TeachingAssignment

CENTS = Decimal('0.01')
ONE = Decimal('1.00')

# Position multipliers applied on top of the base amount
POSITION_COEFFICIENTS = {
    Position.DEPARTMENT_HEAD: Decimal('1.5'),
    Position.DEPUTY_HEAD: Decimal('1.3'),
    Position.SECTION_HEAD: Decimal('1.2'),
    Position.SENIOR_LECTURER: Decimal('1.2'),
    Position.LECTURER: Decimal('1.0'),
    Position.ASSISTANT: Decimal('0.8'),
}

# Which line bucket each rate type adds into; coefficient rates are
# recorded on the line but do not add money.
RATE_BUCKETS = {
    RateType.BASE_HOURLY: 'base_amount',
    RateType.BASE_MONTHLY: 'base_amount',
    RateType.OVERTIME: 'overtime_amount',
    RateType.BONUS: 'bonus_amount',
    RateType.ALLOWANCE: 'allowance_amount',
}

EDITABLE_FIELDS = ['total_deduction_amount', 'status_notes', 'warnings', 'calculation_method', 'month']


def position_coefficient(position: str) -> Decimal:
    return POSITION_COEFFICIENTS.get(position, ONE)


def experience_coefficient(years_of_service: int) -> Decimal:
    """1.0 plus one experience step rate per completed step of service years."""
    steps = int(years_of_service or 0) // settings.PAYROLL_EXPERIENCE_STEP_YEARS
    return ONE + steps * Decimal(str(settings.PAYROLL_EXPERIENCE_STEP_RATE))


def coefficient_delta(base_amount: Decimal, coefficient: Decimal) -> Decimal:
    """Amount a coefficient adds on top of the base, not the multiplied total."""
    return (base_amount * coefficient - base_amount).quantize(CENTS)


def safe_rate(amount: Decimal, hours: Decimal) -> Decimal:
    if not hours:
        return ZERO
    return (amount / hours).quantize(CENTS)


def _acting(user):
    return user if user is not None and getattr(user, 'is_authenticated', False) else None


def record_audit(calculation: SalaryCalculation, action: str, user=None, notes: str = '',
                 changes: Optional[Dict[str, Any]] = None) -> SalaryAuditEntry:
    """Append one entry to the calculation's event log."""
    return SalaryAuditEntry.objects.create(
        calculation=calculation,
        action=action,
        performed_by=_acting(user),
        notes=notes or '',
        changes=changes or {},
    )


# =====================================================================
# CALCULATOR
# =====================================================================

class SalaryCalculator:
    """Runs the rate and coefficient engine over one calculation's lines"""

    def __init__(self, calculation: SalaryCalculation, user=None, as_of: Optional[date] = None):
        """
        Initialize the calculator.

        Args:
            calculation: SalaryCalculation with its assignment lines
            user: User running the calculation
            as_of: Date used for rate effectiveness and years of service
        """
        self.calculation = calculation
        self.user = user
        self.as_of = as_of or timezone.localdate()
        self.teacher = None
        self.teacher_data = None

    def load_teacher(self) -> Teacher:
        if self.teacher is None:
            self.teacher = Teacher.objects.select_related('degree', 'department').get(
                pk=self.calculation.teacher_id
            )
            self.teacher_data = build_teacher_data(self.teacher, self.as_of)
        return self.teacher

    def reset_results(self) -> None:
        """Zero every computed figure. Deductions are entered by users and kept."""
        calc = self.calculation
        for field in (
            'total_base_hours', 'average_hourly_rate', 'total_base_amount',
            'total_overtime_hours', 'overtime_rate', 'total_overtime_amount',
            'total_bonus_amount', 'total_allowance_amount', 'total_gross_salary',
            'total_net_salary', 'degree_applied_amount', 'position_applied_amount',
            'experience_applied_amount',
        ):
            setattr(calc, field, ZERO)

    def calculate_line(self, line: SalaryAssignmentLine) -> List[AppliedRate]:
        """
        Apply every matching rate to one line and fill its totals.

        Returns:
            Unsaved AppliedRate records for the line.
        """
        line.reset_totals()
        rates = find_applicable_rates(
            self.teacher_data,
            build_assignment_data(line),
            as_of=self.as_of,
            academic_year=self.calculation.academic_year,
            semester=self.calculation.semester,
        )

        applied = []
        for rate in rates:
            amount = rate.calculate_rate(line.total_hours, self.teacher_data['years_of_service'])
            applied.append(AppliedRate(
                line=line,
                rate_setting=rate,
                rate_type=rate.rate_type,
                rate_amount=rate.base_amount,
                coefficient=rate.coefficient,
                hours_applied=line.total_hours,
                calculated_amount=amount,
            ))
            bucket = RATE_BUCKETS.get(rate.rate_type)
            if bucket:
                setattr(line, bucket, getattr(line, bucket) + amount)

        line.total_amount = line.base_amount + line.overtime_amount + line.bonus_amount + line.allowance_amount
        return applied

    def aggregate(self, lines: Iterable[SalaryAssignmentLine]) -> None:
        calc = self.calculation
        for line in lines:
            calc.total_base_hours += line.base_hours
            calc.total_base_amount += line.base_amount
            calc.total_overtime_hours += line.overtime_hours
            calc.total_overtime_amount += line.overtime_amount
            calc.total_bonus_amount += line.bonus_amount
            calc.total_allowance_amount += line.allowance_amount

        calc.average_hourly_rate = safe_rate(calc.total_base_amount, calc.total_base_hours)
        calc.overtime_rate = safe_rate(calc.total_overtime_amount, calc.total_overtime_hours)

    def apply_coefficients(self) -> None:
        """Record degree, position and experience deltas on the base amount."""
        calc = self.calculation
        teacher = self.load_teacher()
        base = calc.total_base_amount

        calc.degree = teacher.degree
        calc.degree_coefficient = teacher.degree.coefficient if teacher.degree else ONE
        calc.degree_applied_amount = coefficient_delta(base, calc.degree_coefficient)

        calc.position = teacher.position
        calc.position_coefficient = position_coefficient(teacher.position)
        calc.position_applied_amount = coefficient_delta(base, calc.position_coefficient)

        calc.years_of_service = self.teacher_data['years_of_service']
        calc.experience_coefficient = experience_coefficient(calc.years_of_service)
        calc.experience_applied_amount = coefficient_delta(base, calc.experience_coefficient)

    def run(self) -> SalaryCalculation:
        """
        Compute the calculation end to end and persist it.

        Returns:
            The saved calculation in status calculated.
        """
        calc = self.calculation
        recalculated = calc.calculated_at is not None
        calc.status = CalculationStatus.CALCULATING

        self.load_teacher()
        self.reset_results()

        lines = list(calc.lines.select_related('course_class', 'subject'))
        AppliedRate.objects.filter(line__calculation=calc).delete()

        applied = []
        for line in lines:
            applied.extend(self.calculate_line(line))
            line.save()
        AppliedRate.objects.bulk_create(applied)

        self.aggregate(lines)
        self.apply_coefficients()

        calc.total_gross_salary = (
            calc.total_base_amount + calc.total_overtime_amount
            + calc.total_bonus_amount + calc.total_allowance_amount
            + calc.total_coefficient_amount
        )
        calc.total_net_salary = calc.total_gross_salary - calc.total_deduction_amount

        now = timezone.now()
        calc.status = CalculationStatus.CALCULATED
        calc.calculated_at = now
        calc.calculated_by = _acting(self.user)
        if recalculated:
            calc.recalculation_count += 1
            calc.last_recalculated_at = now
        calc.version += 1
        calc.save_with_user(self.user)

        record_audit(
            calc,
            AuditAction.RECALCULATED if recalculated else AuditAction.CALCULATED,
            self.user,
            notes="Tính lương tự động từ phân công giảng dạy",
            changes={
                'total_gross_salary': str(calc.total_gross_salary),
                'total_net_salary': str(calc.total_net_salary),
                'applied_rates': len(applied),
            },
        )
        PayrollLogger.log_calculation_completed(calc, self.user, recalculated)
        return calc


def calculate_salary(calculation: SalaryCalculation, user=None, as_of: Optional[date] = None) -> SalaryCalculation:
    """
    Run the calculator with failure bookkeeping.

    The row is locked and re-read first, so concurrent runs on one
    calculation happen one after the other and the status guard sees
    the committed state. On failure the work of the run is rolled back,
    the status is set back to draft and the error is appended to
    validation_errors before re-raising.

    Raises:
        WorkflowTransitionException: If the calculation is approved, paid or archived
        CalculationFailedException: If the run itself failed
    """
    failure = None
    with transaction.atomic():
        calculation.refresh_from_db(from_queryset=SalaryCalculation.objects.select_for_update())
        is_valid, error = can_calculate(calculation.status)
        if not is_valid:
            raise WorkflowTransitionException(error)

        try:
            with transaction.atomic():
                return SalaryCalculator(calculation, user, as_of).run()
        except Exception as exc:
            failure = exc
            calculation.status = CalculationStatus.DRAFT
            calculation.validation_errors = list(calculation.validation_errors or []) + [
                {'message': str(exc), 'at': timezone.now().isoformat()}
            ]
            SalaryCalculation.objects.filter(pk=calculation.pk).update(
                status=calculation.status,
                validation_errors=calculation.validation_errors,
                updated_at=timezone.now(),
            )

    PayrollLogger.log_calculation_failed(calculation, failure)
    if isinstance(failure, PayrollException):
        raise failure
    raise CalculationFailedException(
        f"Lỗi khi tính lương: {failure}",
        details={'calculation_id': str(calculation.public_id)}
    ) from failure


def batch_calculate(public_ids: Iterable[str], user=None) -> Dict[str, Any]:
    """
    Calculate several records independently.

    A failing item is reported and never stops the rest of the batch.

    Returns:
        Dict with total, succeeded (list of results) and failed (list of errors).
    """
    public_ids = list(public_ids)
    succeeded, failed = [], []
    for public_id in public_ids:
        try:
            calculation = get_by_public_id(
                SalaryCalculation, public_id, "Không tìm thấy bản tính lương."
            )
            calculation = calculate_salary(calculation, user)
        except PayrollException as exc:
            failed.append({'id': str(public_id), 'error': exc.message, 'error_code': exc.error_code})
            continue
        succeeded.append({
            'id': str(calculation.public_id),
            'calculation_code': calculation.calculation_code,
            'total_net_salary': calculation.total_net_salary,
        })

    PayrollLogger.log_batch_summary(len(public_ids), len(succeeded), len(failed), user)
    return {'total': len(public_ids), 'succeeded': succeeded, 'failed': failed}


# =====================================================================
# CREATION
# =====================================================================

def resolve_assignments(teacher: Teacher, semester, assignment_ids: Optional[List[str]] = None) -> List[TeachingAssignment]:
    """
    Pick the assignments a new calculation snapshots.

    Explicit ids must all be active assignments of the teacher; without
    ids every payable assignment of the teacher in the semester is used.

    Raises:
        ValidationFailedException: If an explicit id is unknown or foreign
        NoAssignmentsException: If nothing is left to pay
    """
    queryset = TeachingAssignment.objects.select_related('course_class__subject')
    if assignment_ids:
        ids = [str(item) for item in assignment_ids]
        try:
            found = {str(a.public_id): a for a in queryset.filter(public_id__in=ids, teacher=teacher, is_active=True)}
        except ValueError:
            found = {}
        missing = [item for item in ids if item not in found]
        if missing:
            raise ValidationFailedException(
                "Một số phân công không tồn tại hoặc không thuộc giảng viên này.",
                details={'assignment_ids': missing}
            )
        assignments = [found[item] for item in ids]
    else:
        assignments = list(queryset.filter(
            teacher=teacher,
            semester=semester,
            is_active=True,
            status__in=PAYABLE_ASSIGNMENT_STATUSES,
        ).order_by('created_at', 'id'))

    if not assignments:
        raise NoAssignmentsException("Không tìm thấy phân công giảng dạy để tính lương.")
    return assignments


@transaction.atomic
def create_salary_calculation(
    teacher: Teacher,
    academic_year,
    semester,
    period_type: str,
    period_start: date,
    period_end: date,
    year: Optional[int] = None,
    month: Optional[int] = None,
    assignment_ids: Optional[List[str]] = None,
    calculation_method: str = CalculationMethod.AUTOMATIC,
    notes: str = '',
    user=None
) -> SalaryCalculation:
    """
    Create a draft calculation with a snapshot of the teacher's assignments.

    Raises:
        DuplicateRecordException: An active calculation already covers the period
        NoAssignmentsException: The teacher has nothing to pay
    """
    existing = SalaryCalculation.objects.filter(
        teacher=teacher,
        academic_year=academic_year,
        semester=semester,
        period_type=period_type,
        is_active=True,
    ).first()
    if existing is not None:
        raise DuplicateRecordException(
            "Đã tồn tại bản tính lương cho giảng viên trong kỳ này.",
            details={'existing_id': str(existing.public_id), 'calculation_code': existing.calculation_code}
        )

    assignments = resolve_assignments(teacher, semester, assignment_ids)

    calculation = SalaryCalculation(
        teacher=teacher,
        academic_year=academic_year,
        semester=semester,
        period_type=period_type,
        period_start=period_start,
        period_end=period_end,
        month=month,
        year=year or period_start.year,
        calculation_method=calculation_method,
        status_notes=notes or '',
    )
    calculation.full_clean(exclude=['calculation_code', 'degree'])
    calculation.save_with_user(user)

    SalaryAssignmentLine.objects.bulk_create([
        SalaryAssignmentLine(
            calculation=calculation,
            sequence=index,
            teaching_assignment=assignment,
            course_class=assignment.course_class,
            subject=assignment.course_class.subject,
            assignment_type=assignment.assignment_type,
            total_hours=assignment.teaching_hours,
            base_hours=assignment.teaching_hours,
            overtime_hours=assignment.additional_hours,
        )
        for index, assignment in enumerate(assignments, start=1)
    ])

    record_audit(calculation, AuditAction.CREATED, user, notes=f"{len(assignments)} phân công giảng dạy")
    PayrollLogger.log_calculation_created(calculation, user)
    return calculation


# =====================================================================
# WORKFLOW
# =====================================================================

def _check_transition(calculation: SalaryCalculation, target_status: str) -> None:
    is_valid, error = validate_calculation_transition(calculation.status, target_status)
    if not is_valid:
        raise WorkflowTransitionException(error)


@transaction.atomic
def approve_salary(calculation: SalaryCalculation, user=None, notes: str = '') -> SalaryCalculation:
    """
    Raises:
        WorkflowTransitionException: Unless the calculation is calculated
    """
    _check_transition(calculation, CalculationStatus.APPROVED)
    calculation.status = CalculationStatus.APPROVED
    calculation.approved_at = timezone.now()
    calculation.approved_by = _acting(user)
    if notes:
        calculation.status_notes = notes
    calculation.save_with_user(user)
    record_audit(calculation, AuditAction.APPROVED, user, notes=notes)
    PayrollLogger.log_calculation_approved(calculation, user)
    return calculation


@transaction.atomic
def mark_salary_paid(calculation: SalaryCalculation, user=None, notes: str = '') -> SalaryCalculation:
    """
    Raises:
        WorkflowTransitionException: Unless the calculation is approved
    """
    _check_transition(calculation, CalculationStatus.PAID)
    calculation.status = CalculationStatus.PAID
    calculation.paid_at = timezone.now()
    calculation.paid_by = _acting(user)
    if notes:
        calculation.status_notes = notes
    calculation.save_with_user(user)
    record_audit(calculation, AuditAction.PAID, user, notes=notes)
    PayrollLogger.log_calculation_paid(calculation, user)
    return calculation


@transaction.atomic
def archive_salary_calculation(calculation: SalaryCalculation, user=None) -> SalaryCalculation:
    """
    Soft delete: the record stays with status archived and is_active off.

    Raises:
        WorkflowTransitionException: If the calculation is paid or already archived
    """
    _check_transition(calculation, CalculationStatus.ARCHIVED)
    previous = calculation.status
    PayrollLogger.log_calculation_archived(calculation, user)
    calculation.status = CalculationStatus.ARCHIVED
    calculation.is_active = False
    calculation.save_with_user(user)
    record_audit(calculation, AuditAction.ARCHIVED, user, changes={'status': [previous, calculation.status]})
    return calculation


def _jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    return value


@transaction.atomic
def update_salary_calculation(calculation: SalaryCalculation, values: Dict[str, Any], user=None,
                              expected_version: Optional[int] = None) -> SalaryCalculation:
    """
    Apply user edits to the editable fields and recompute net salary.

    Args:
        values: Subset of EDITABLE_FIELDS with new values.
        expected_version: Version the client edited; checked when given.

    Raises:
        ImmutableRecordException: If the calculation is paid
        VersionConflictException: If expected_version is stale
        ValidationError: If the edited record breaks a field or period rule
    """
    if calculation.is_paid:
        raise ImmutableRecordException("Không thể chỉnh sửa lương đã thanh toán.")
    if expected_version is not None and int(expected_version) != calculation.version:
        raise VersionConflictException(
            "Bản tính lương đã được cập nhật bởi người khác, vui lòng tải lại.",
            details={'current_version': calculation.version, 'sent_version': expected_version}
        )

    changes = {}
    for field in EDITABLE_FIELDS:
        if field not in values:
            continue
        old, new = getattr(calculation, field), values[field]
        if old != new:
            changes[field] = [_jsonable(old), _jsonable(new)]
            setattr(calculation, field, new)

    if not changes:
        return calculation

    calculation.clean_fields(exclude=[
        field.name for field in calculation._meta.fields if field.name not in changes
    ])
    calculation.clean()

    calculation.total_net_salary = calculation.total_gross_salary - calculation.total_deduction_amount
    calculation.version += 1
    calculation.save_with_user(user)
    record_audit(calculation, AuditAction.MODIFIED, user, changes=changes)
    return calculation


# =====================================================================
# QUERIES
# =====================================================================

def active_calculations():
    return SalaryCalculation.objects.filter(is_active=True).select_related(
        'teacher', 'teacher__department', 'academic_year', 'semester'
    )


def calculations_for_teacher(teacher: Teacher, academic_year=None):
    queryset = active_calculations().filter(teacher=teacher)
    if academic_year is not None:
        queryset = queryset.filter(academic_year=academic_year)
    return queryset.order_by('-period_start')


def calculations_for_period(period_type: str, start: date, end: date):
    """Active calculations of a period type lying inside [start, end]."""
    return active_calculations().filter(
        period_type=period_type,
        period_start__gte=start,
        period_end__lte=end,
    ).order_by('period_start', 'teacher__code')


STATISTICS_TOTALS = (
    ('total_base_amount', 'base_sum'),
    ('total_overtime_amount', 'overtime_sum'),
    ('total_bonus_amount', 'bonus_sum'),
    ('total_allowance_amount', 'allowance_sum'),
    ('total_gross_salary', 'gross_sum'),
    ('total_net_salary', 'net_sum'),
    ('average_gross_salary', 'gross_avg'),
    ('average_net_salary', 'net_avg'),
)


def _money(value) -> Decimal:
    return value if value is not None else ZERO


def salary_statistics(academic_year=None, semester=None, department=None,
                      include_departments: bool = False) -> Dict[str, Any]:
    """
    Aggregate gross and net totals with a per-status breakdown.

    Returns:
        dict: {
            'totals': {count, teacher_count, total_gross_salary, ...},
            'by_status': {status: {count, total_net_salary}},
            'by_department': [...]   (only when include_departments)
        }
    """
    queryset = SalaryCalculation.objects.filter(is_active=True)
    if academic_year is not None:
        queryset = queryset.filter(academic_year=academic_year)
    if semester is not None:
        queryset = queryset.filter(semester=semester)
    if department is not None:
        queryset = queryset.filter(teacher__department=department)

    sums = queryset.aggregate(
        count=Count('id'),
        teacher_count=Count('teacher', distinct=True),
        base_sum=Sum('total_base_amount'),
        overtime_sum=Sum('total_overtime_amount'),
        bonus_sum=Sum('total_bonus_amount'),
        allowance_sum=Sum('total_allowance_amount'),
        gross_sum=Sum('total_gross_salary'),
        net_sum=Sum('total_net_salary'),
        gross_avg=Avg('total_gross_salary'),
        net_avg=Avg('total_net_salary'),
    )
    totals = {'count': sums['count'], 'teacher_count': sums['teacher_count']}
    for key, alias in STATISTICS_TOTALS:
        totals[key] = _money(sums[alias]).quantize(CENTS)

    by_status = {
        row['status']: {'count': row['count'], 'total_net_salary': _money(row['net'])}
        for row in queryset.values('status').annotate(count=Count('id'), net=Sum('total_net_salary')).order_by('status')
    }

    result = {'totals': totals, 'by_status': by_status}
    if include_departments:
        result['by_department'] = department_summary(academic_year, semester)
    return result


def department_summary(academic_year=None, semester=None) -> List[Dict[str, Any]]:
    """Per-department totals of active calculations, largest payroll first."""
    filters = Q(is_active=True)
    if academic_year is not None:
        filters &= Q(academic_year=academic_year)
    if semester is not None:
        filters &= Q(semester=semester)

    rows = SalaryCalculation.objects.filter(filters).values(
        'teacher__department__public_id', 'teacher__department__code', 'teacher__department__name'
    ).annotate(
        calculation_count=Count('id'),
        teacher_count=Count('teacher', distinct=True),
        gross_sum=Sum('total_gross_salary'),
        net_sum=Sum('total_net_salary'),
        net_avg=Avg('total_net_salary'),
    ).order_by('-net_sum')

    return [
        {
            'department_id': str(row['teacher__department__public_id']),
            'department_code': row['teacher__department__code'],
            'department_name': row['teacher__department__name'],
            'calculation_count': row['calculation_count'],
            'teacher_count': row['teacher_count'],
            'total_gross_salary': _money(row['gross_sum']),
            'total_net_salary': _money(row['net_sum']),
            'average_net_salary': _money(row['net_avg']).quantize(CENTS),
        }
        for row in rows
    ]
