"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Centralized logging for payroll module operations.
-------------------------------------------------------------------------
"""
import logging
from typing import Optional

logger = logging.getLogger('payroll')


def _username(user) -> str:
    if user is None or not getattr(user, 'is_authenticated', False):
        return 'system'
    return user.get_username()


def _user_id(user) -> Optional[int]:
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    return user.pk


class PayrollLogger:
    """Centralized logging for payroll operations"""

    @staticmethod
    def log_calculation_created(calculation, user):
        """Log creation of a salary calculation shell"""
        logger.info(
            f"Salary calculation created: {calculation.calculation_code} | "
            f"Teacher: {calculation.teacher.code} | "
            f"Period: {calculation.period_type} {calculation.period_start} - {calculation.period_end} | "
            f"Lines: {calculation.lines.count()} | "
            f"Created by: {_username(user)}",
            extra={
                'calculation_id': str(calculation.public_id),
                'teacher_id': calculation.teacher_id,
                'semester_id': calculation.semester_id,
                'user_id': _user_id(user),
            }
        )

    @staticmethod
    def log_calculation_completed(calculation, user, recalculated: bool):
        """Log a successful calculation run with the headline figures"""
        action = 'recalculated' if recalculated else 'calculated'
        logger.info(
            f"Salary {action}: {calculation.calculation_code} | "
            f"Base: {calculation.total_base_amount} | "
            f"Gross: {calculation.total_gross_salary} | "
            f"Net: {calculation.total_net_salary} | "
            f"Version: {calculation.version} | "
            f"By: {_username(user)}",
            extra={
                'calculation_id': str(calculation.public_id),
                'gross': str(calculation.total_gross_salary),
                'net': str(calculation.total_net_salary),
                'recalculation_count': calculation.recalculation_count,
                'user_id': _user_id(user),
            }
        )

    @staticmethod
    def log_calculation_failed(calculation, error: Exception):
        """Log a failed calculation run; the record was reverted to draft"""
        logger.error(
            f"Salary calculation failed: {calculation.calculation_code} | "
            f"Error: {error}",
            extra={
                'calculation_id': str(calculation.public_id),
                'error': str(error),
            },
            exc_info=True
        )

    @staticmethod
    def log_calculation_approved(calculation, user):
        logger.info(
            f"Salary approved: {calculation.calculation_code} | "
            f"Net: {calculation.total_net_salary} | "
            f"Approved by: {_username(user)}",
            extra={
                'calculation_id': str(calculation.public_id),
                'net': str(calculation.total_net_salary),
                'user_id': _user_id(user),
            }
        )

    @staticmethod
    def log_calculation_paid(calculation, user):
        logger.info(
            f"Salary paid: {calculation.calculation_code} | "
            f"Net: {calculation.total_net_salary} | "
            f"Paid by: {_username(user)}",
            extra={
                'calculation_id': str(calculation.public_id),
                'net': str(calculation.total_net_salary),
                'user_id': _user_id(user),
            }
        )

    @staticmethod
    def log_calculation_archived(calculation, user):
        logger.warning(
            f"Salary calculation archived: {calculation.calculation_code} | "
            f"Status before archive: {calculation.status} | "
            f"Archived by: {_username(user)}",
            extra={
                'calculation_id': str(calculation.public_id),
                'user_id': _user_id(user),
            }
        )

    @staticmethod
    def log_batch_summary(total: int, succeeded: int, failed: int, user):
        """Log the outcome of a batch calculation"""
        log = logger.warning if failed else logger.info
        log(
            f"Batch salary calculation: {succeeded}/{total} succeeded | "
            f"Failed: {failed} | "
            f"By: {_username(user)}",
            extra={
                'total': total,
                'succeeded': succeeded,
                'failed': failed,
                'user_id': _user_id(user),
            }
        )

    @staticmethod
    def log_rate_setting_transition(rate_setting, action: str, user):
        """Log a rate setting lifecycle change (approved, activated, ...)"""
        logger.info(
            f"Rate setting {action}: {rate_setting.code} | "
            f"Type: {rate_setting.rate_type} | "
            f"Scope: {rate_setting.applicable_scope} | "
            f"Version: {rate_setting.version} | "
            f"By: {_username(user)}",
            extra={
                'rate_setting_id': str(rate_setting.public_id),
                'action': action,
                'user_id': _user_id(user),
            }
        )

    @staticmethod
    def log_rate_setting_superseded(old, new, user):
        logger.info(
            f"Rate setting superseded: {old.code} -> {new.code} | "
            f"By: {_username(user)}",
            extra={
                'old_rate_setting_id': str(old.public_id),
                'new_rate_setting_id': str(new.public_id),
                'user_id': _user_id(user),
            }
        )
