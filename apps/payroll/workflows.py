"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Workflow state machines for rate settings and salary
             calculations. Pure transition checks; the services in
             services_rates.py and services_salary.py perform the writes.
-------------------------------------------------------------------------
"""
from typing import List, Optional, Tuple

from django.utils.translation import gettext_lazy as _

from apps.payroll.models import CalculationStatus, RateSettingStatus


# Define valid state transitions
RATE_SETTING_TRANSITIONS = {
    RateSettingStatus.DRAFT: [RateSettingStatus.PENDING_APPROVAL, RateSettingStatus.APPROVED],
    RateSettingStatus.PENDING_APPROVAL: [RateSettingStatus.APPROVED, RateSettingStatus.DRAFT],
    RateSettingStatus.APPROVED: [RateSettingStatus.ACTIVE, RateSettingStatus.SUPERSEDED],
    RateSettingStatus.ACTIVE: [RateSettingStatus.INACTIVE, RateSettingStatus.SUPERSEDED],
    RateSettingStatus.INACTIVE: [RateSettingStatus.ACTIVE, RateSettingStatus.SUPERSEDED],
    RateSettingStatus.SUPERSEDED: [],
}

CALCULATION_TRANSITIONS = {
    CalculationStatus.DRAFT: [CalculationStatus.CALCULATING, CalculationStatus.ARCHIVED],
    CalculationStatus.CALCULATING: [CalculationStatus.CALCULATED, CalculationStatus.DRAFT],
    CalculationStatus.CALCULATED: [
        CalculationStatus.CALCULATING, CalculationStatus.REVIEWING,
        CalculationStatus.APPROVED, CalculationStatus.ARCHIVED,
    ],
    CalculationStatus.REVIEWING: [CalculationStatus.CALCULATING, CalculationStatus.ARCHIVED],
    CalculationStatus.APPROVED: [CalculationStatus.PAID, CalculationStatus.ARCHIVED],
    CalculationStatus.PAID: [],
    CalculationStatus.ARCHIVED: [],
}


def get_rate_setting_transitions(current_status: str) -> List[str]:
    return RATE_SETTING_TRANSITIONS.get(current_status, [])


def get_calculation_transitions(current_status: str) -> List[str]:
    """
    Get the list of valid next states for a salary calculation.

    Args:
        current_status: Current CalculationStatus

    Returns:
        List of valid next status values.
    """
    return CALCULATION_TRANSITIONS.get(current_status, [])


def validate_rate_setting_transition(current_status: str, target_status: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a rate setting lifecycle change.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if target_status == RateSettingStatus.ACTIVE and current_status not in (
        RateSettingStatus.APPROVED, RateSettingStatus.INACTIVE
    ):
        return False, _("Cấu hình mức lương phải được phê duyệt trước khi kích hoạt.")
    if target_status not in get_rate_setting_transitions(current_status):
        return False, _("Không thể chuyển cấu hình mức lương từ %(current)s sang %(target)s.") % (
            {'current': current_status, 'target': target_status}
        )
    return True, None


def can_calculate(current_status: str) -> Tuple[bool, Optional[str]]:
    """
    A calculation may be (re)run unless it is approved, paid or archived.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if current_status in (CalculationStatus.APPROVED, CalculationStatus.PAID):
        return False, _("Không thể tính lại lương đã được phê duyệt hoặc đã thanh toán.")
    if CalculationStatus.CALCULATING not in get_calculation_transitions(current_status) \
            and current_status != CalculationStatus.CALCULATING:
        return False, _("Không thể tính lương ở trạng thái %(status)s.") % (
            {'status': current_status}
        )
    return True, None


def validate_calculation_transition(current_status: str, target_status: str) -> Tuple[bool, Optional[str]]:
    """
    Validate approve / mark-paid / archive on a salary calculation.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if target_status == CalculationStatus.APPROVED and current_status != CalculationStatus.CALCULATED:
        return False, _("Chỉ có thể phê duyệt lương đã được tính.")
    if target_status == CalculationStatus.PAID and current_status != CalculationStatus.APPROVED:
        return False, _("Chỉ có thể thanh toán lương đã được phê duyệt.")
    if target_status == CalculationStatus.ARCHIVED and current_status == CalculationStatus.PAID:
        return False, _("Không thể xóa lương đã thanh toán.")
    if target_status not in get_calculation_transitions(current_status):
        return False, _("Không thể chuyển bản tính lương từ %(current)s sang %(target)s.") % (
            {'current': current_status, 'target': target_status}
        )
    return True, None
