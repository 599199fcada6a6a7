"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Rate engine. Selects the rate settings that apply to a
             teacher/assignment pair, runs the rate setting lifecycle
             and manages period rates.
-------------------------------------------------------------------------
"""
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import Count, Max, Q
from django.utils import timezone

from apps.core.exceptions import (
    ImmutableRecordException, RecordNotFoundException, WorkflowTransitionException,
)
from apps.core.services import ensure_no_dependents
from apps.payroll.logging import PayrollLogger
from apps.payroll.models import (
    ApplicableScope, CriteriaOperator, CriteriaType, PeriodRate, PeriodRateApproval,
    RateSetting, RateSettingStatus,
)
from apps.payroll.workflows import validate_rate_setting_transition


# =====================================================================
# CONTEXT SNAPSHOTS
# =====================================================================

def build_teacher_data(teacher, as_of: Optional[date] = None) -> Dict[str, Any]:
    """Snapshot of the teacher fields the rate engine looks at."""
    return {
        'id': teacher.pk,
        'degree': teacher.degree,
        'department': teacher.department,
        'position': teacher.position,
        'years_of_service': teacher.years_of_service_on(as_of),
        'performance_rating': teacher.performance_rating,
    }


def build_assignment_data(line) -> Dict[str, Any]:
    """Snapshot of one salary line for the rate engine."""
    return {
        'teaching_hours': line.total_hours,
        'assignment_type': line.assignment_type,
        'course_class': line.course_class,
        'subject': line.subject,
    }


# =====================================================================
# MATCHING
# =====================================================================

def _public_id(obj) -> Optional[str]:
    return str(obj.public_id) if obj is not None else None


def matches_scope(rate: RateSetting, teacher_data: Dict[str, Any], assignment_data: Dict[str, Any]) -> bool:
    """
    Check the rate's scope against the context.

    University rates always match, and so does any scope without a
    target. Department/degree/subject targets compare public ids;
    position, subject type and class type compare target_code.
    """
    scope = rate.applicable_scope
    if scope == ApplicableScope.UNIVERSITY:
        return True
    if rate.target_id is None and not rate.target_code:
        return True

    target_id = str(rate.target_id) if rate.target_id else None
    subject = assignment_data.get('subject')
    course_class = assignment_data.get('course_class')

    if scope == ApplicableScope.DEPARTMENT:
        return target_id == _public_id(teacher_data.get('department'))
    if scope == ApplicableScope.DEGREE:
        return target_id == _public_id(teacher_data.get('degree'))
    if scope == ApplicableScope.POSITION:
        return rate.target_code == teacher_data.get('position')
    if scope == ApplicableScope.SUBJECT_TYPE:
        if target_id:
            return target_id == _public_id(subject)
        return subject is not None and rate.target_code == subject.subject_type
    if scope == ApplicableScope.CLASS_TYPE:
        return course_class is not None and rate.target_code == course_class.class_type
    return False


def _criteria_value(criteria_type: str, teacher_data: Dict[str, Any], assignment_data: Dict[str, Any]):
    subject = assignment_data.get('subject')
    course_class = assignment_data.get('course_class')
    degree = teacher_data.get('degree')
    department = teacher_data.get('department')

    lookups = {
        CriteriaType.POSITION: lambda: teacher_data.get('position'),
        CriteriaType.DEGREE: lambda: degree.code if degree else None,
        CriteriaType.DEPARTMENT: lambda: department.code if department else None,
        CriteriaType.SUBJECT_TYPE: lambda: subject.subject_type if subject else None,
        CriteriaType.CLASS_SIZE: lambda: course_class.student_count if course_class else None,
        CriteriaType.TEACHING_METHOD: lambda: course_class.teaching_method if course_class else None,
    }
    lookup = lookups.get(criteria_type)
    return lookup() if lookup else None


def _as_decimal(value) -> Optional[Decimal]:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None


def evaluate_criterion(criterion: Dict[str, Any], teacher_data: Dict[str, Any],
                       assignment_data: Dict[str, Any]) -> bool:
    actual = _criteria_value(criterion.get('criteria_type'), teacher_data, assignment_data)
    if actual is None:
        return False

    expected = criterion.get('value')
    operator = criterion.get('operator', CriteriaOperator.EQUALS)

    if operator == CriteriaOperator.CONTAINS:
        if isinstance(expected, (list, tuple)):
            return str(actual) in [str(item) for item in expected]
        return str(expected).lower() in str(actual).lower()

    if operator in (CriteriaOperator.GREATER_THAN, CriteriaOperator.LESS_THAN):
        left, right = _as_decimal(actual), _as_decimal(expected)
        if left is None or right is None:
            return False
        return left > right if operator == CriteriaOperator.GREATER_THAN else left < right

    left, right = _as_decimal(actual), _as_decimal(expected)
    if left is not None and right is not None:
        return left == right
    return str(actual) == str(expected)


def check_conditions(rate: RateSetting, teacher_data: Dict[str, Any], assignment_data: Dict[str, Any]) -> bool:
    """
    Check experience, hour window, rating and additional criteria.

    Zero or empty bounds are not checked. The rating condition is only
    checked when the teacher has a rating on file.
    """
    years = teacher_data.get('years_of_service') or 0
    hours = Decimal(str(assignment_data.get('teaching_hours') or 0))

    if rate.minimum_experience and years < rate.minimum_experience:
        return False
    if rate.minimum_hours and hours < rate.minimum_hours:
        return False
    if rate.maximum_hours and hours > rate.maximum_hours:
        return False

    rating = teacher_data.get('performance_rating')
    if rate.minimum_rating is not None and rating is not None and rating < rate.minimum_rating:
        return False

    return all(
        evaluate_criterion(criterion, teacher_data, assignment_data)
        for criterion in (rate.additional_criteria or [])
    )


def effective_rates(as_of: Optional[date] = None, academic_year=None, semester=None):
    """
    Active rate settings whose effective window contains as_of.

    Rates bound to an academic year or semester are only returned when
    the same year or semester is given.
    """
    as_of = as_of or timezone.localdate()
    queryset = RateSetting.objects.filter(
        status=RateSettingStatus.ACTIVE,
        is_active=True,
        effective_start__lte=as_of,
    ).filter(
        Q(effective_end__isnull=True) | Q(effective_end__gte=as_of)
    )

    year_filter = Q(academic_year__isnull=True)
    if academic_year is not None:
        year_filter |= Q(academic_year=academic_year)
    semester_filter = Q(semester__isnull=True)
    if semester is not None:
        semester_filter |= Q(semester=semester)

    return queryset.filter(year_filter, semester_filter).order_by('-priority', '-effective_start', 'id')


def find_applicable_rates(
    teacher_data: Dict[str, Any],
    assignment_data: Dict[str, Any],
    as_of: Optional[date] = None,
    academic_year=None,
    semester=None
) -> List[RateSetting]:
    """
    Return every rate setting that applies to the context, highest
    priority first.

    All matches are returned. Several active rates of the same type are
    summed by the calculator; priority only orders them.

    Args:
        teacher_data: Output of build_teacher_data().
        assignment_data: Output of build_assignment_data().
        as_of: Date the effective window is checked against (today).
        academic_year, semester: Calendar of the calculation.
    """
    return [
        rate for rate in effective_rates(as_of, academic_year, semester)
        if matches_scope(rate, teacher_data, assignment_data)
        and check_conditions(rate, teacher_data, assignment_data)
    ]


def get_active_rate(rate_type: str, academic_year=None, semester=None) -> RateSetting:
    """
    Highest-priority currently effective active rate of a type.

    Raises:
        RecordNotFoundException: When no such rate exists.
    """
    rate = effective_rates(academic_year=academic_year, semester=semester).filter(rate_type=rate_type).first()
    if rate is None:
        raise RecordNotFoundException("Không tìm thấy mức lương đang áp dụng cho loại này.")
    return rate


def preview_rate(rate: RateSetting, hours=None, experience_years: Optional[int] = None) -> Dict[str, Any]:
    """Evaluate calculate_rate() without saving anything."""
    return {
        'rate_setting_id': str(rate.public_id),
        'rate_type': rate.rate_type,
        'hours': hours,
        'experience_years': experience_years,
        'calculated_amount': rate.calculate_rate(hours, experience_years),
    }


# =====================================================================
# RATE SETTING LIFECYCLE
# =====================================================================

def ensure_rate_setting_editable(rate: RateSetting) -> None:
    if rate.is_read_only:
        raise ImmutableRecordException("Cấu hình mức lương đã được thay thế, không thể chỉnh sửa.")


def _move_rate_setting(rate: RateSetting, target_status: str, user, action: str) -> RateSetting:
    is_valid, error = validate_rate_setting_transition(rate.status, target_status)
    if not is_valid:
        raise WorkflowTransitionException(error)
    rate.status = target_status
    rate.version += 1
    rate.save_with_user(user)
    PayrollLogger.log_rate_setting_transition(rate, action, user)
    return rate


def submit_rate_setting(rate: RateSetting, user=None) -> RateSetting:
    return _move_rate_setting(rate, RateSettingStatus.PENDING_APPROVAL, user, 'submitted')


def approve_rate_setting(rate: RateSetting, user=None, notes: str = '') -> RateSetting:
    """Approve a draft or pending rate setting and stamp the approval block."""
    is_valid, error = validate_rate_setting_transition(rate.status, RateSettingStatus.APPROVED)
    if not is_valid:
        raise WorkflowTransitionException(error)
    rate.is_approved = True
    rate.approved_by = user if user is not None and user.is_authenticated else None
    rate.approved_at = timezone.now()
    rate.approval_notes = notes or ''
    return _move_rate_setting(rate, RateSettingStatus.APPROVED, user, 'approved')


def activate_rate_setting(rate: RateSetting, user=None) -> RateSetting:
    rate.is_active = True
    return _move_rate_setting(rate, RateSettingStatus.ACTIVE, user, 'activated')


def deactivate_rate_setting(rate: RateSetting, user=None) -> RateSetting:
    return _move_rate_setting(rate, RateSettingStatus.INACTIVE, user, 'deactivated')


SUPERSEDE_COPY_FIELDS = [
    'name', 'description', 'academic_year', 'semester', 'rate_type', 'applicable_scope',
    'target_model', 'target_id', 'target_code', 'base_amount', 'minimum_rate', 'maximum_rate',
    'coefficient', 'step_increment', 'minimum_experience', 'minimum_hours', 'maximum_hours',
    'minimum_rating', 'additional_criteria', 'effective_start', 'effective_end', 'priority',
    'formula_type', 'formula_expression', 'formula_variables', 'category', 'tags', 'notes',
]


@transaction.atomic
def supersede_rate_setting(rate: RateSetting, user=None, changes: Optional[Dict[str, Any]] = None) -> RateSetting:
    """
    Replace a rate setting with a new draft version.

    The new record copies the rule (with optional field overrides) and
    links back through supersedes; the old one is marked superseded and
    kept for the audit trail.

    Raises:
        WorkflowTransitionException: If the rate cannot be superseded
    """
    is_valid, error = validate_rate_setting_transition(rate.status, RateSettingStatus.SUPERSEDED)
    if not is_valid:
        raise WorkflowTransitionException(error)

    values = {field: getattr(rate, field) for field in SUPERSEDE_COPY_FIELDS}
    values.update({key: value for key, value in (changes or {}).items() if key in SUPERSEDE_COPY_FIELDS})

    replacement = RateSetting(**values)
    replacement.status = RateSettingStatus.DRAFT
    replacement.version = rate.version + 1
    replacement.supersedes = rate
    replacement.full_clean(exclude=['code'])
    replacement.save_with_user(user)

    rate.superseded_by = replacement
    _move_rate_setting(rate, RateSettingStatus.SUPERSEDED, user, 'superseded')
    PayrollLogger.log_rate_setting_superseded(rate, replacement, user)
    return replacement


def ensure_rate_setting_deletable(rate: RateSetting) -> None:
    ensure_no_dependents([
        (rate.applications.values('line__calculation').distinct().count(),
         "Không thể xóa cấu hình mức lương vì đã được áp dụng trong {count} bản tính lương."),
    ])


# =====================================================================
# PERIOD RATES
# =====================================================================

@transaction.atomic
def activate_period_rate(period_rate: PeriodRate, user=None) -> PeriodRate:
    """Activate a period rate and deactivate the others of its academic year."""
    PeriodRate.objects.filter(
        academic_year_id=period_rate.academic_year_id, is_active=True
    ).exclude(pk=period_rate.pk).update(is_active=False, updated_at=timezone.now())
    period_rate.is_active = True
    period_rate.save_with_user(user)
    return period_rate


def approve_period_rate(period_rate: PeriodRate, user=None) -> PeriodRate:
    if period_rate.approval_status == PeriodRateApproval.APPROVED:
        raise WorkflowTransitionException("Mức lương theo tiết đã được phê duyệt.")
    period_rate.approval_status = PeriodRateApproval.APPROVED
    period_rate.approved_by = user if user is not None and user.is_authenticated else None
    period_rate.approved_at = timezone.now()
    period_rate.save_with_user(user)
    return period_rate


def get_current_period_rate(academic_year) -> PeriodRate:
    """
    Raises:
        RecordNotFoundException: When the year has no current period rate.
    """
    today = timezone.localdate()
    period_rate = PeriodRate.objects.filter(
        academic_year=academic_year,
        is_active=True,
        approval_status=PeriodRateApproval.APPROVED,
        effective_date__lte=today,
    ).filter(
        Q(end_date__isnull=True) | Q(end_date__gte=today)
    ).order_by('-effective_date').first()
    if period_rate is None:
        raise RecordNotFoundException("Chưa có mức lương theo tiết đang áp dụng cho năm học này.")
    return period_rate


def deactivate_period_rate(period_rate: PeriodRate, user=None) -> PeriodRate:
    """Stop a period rate, closing its window today unless it already ended."""
    today = timezone.localdate()
    period_rate.is_active = False
    if period_rate.end_date is None or period_rate.end_date > today:
        period_rate.end_date = today
    period_rate.save_with_user(user)
    return period_rate


def period_rate_statistics(academic_year) -> Dict[str, Any]:
    """
    Summarize the period rates of one academic year.

    Returns:
        Dict with total and active counts, the amount of the current rate
        and the highest rate_per_period (0 when there is none).
    """
    queryset = PeriodRate.objects.filter(academic_year=academic_year)
    totals = queryset.aggregate(
        total_rates=Count('id'),
        active_rates=Count('id', filter=Q(is_active=True)),
        highest=Max('rate_per_period'),
    )
    try:
        current_rate = get_current_period_rate(academic_year).rate_per_period
    except RecordNotFoundException:
        current_rate = Decimal('0')
    return {
        'total_rates': totals['total_rates'],
        'active_rates': totals['active_rates'],
        'current_rate': current_rate,
        'highest_rate': totals['highest'] or Decimal('0'),
    }
