"""
-------------------------------------------------------------------------
System: UTPS (University Teacher Payroll System)
Client: Faculty Administration, University Payroll Office
Team Lead: Nguyen Thanh Son
Developers: Tran Minh Khoa, Le Thu Ha and Pham Quoc Bao
Description: Workflow state machine for teaching assignments.
-------------------------------------------------------------------------
"""
import logging
from typing import List, Optional, Tuple

from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.exceptions import WorkflowTransitionException
from apps.teaching.models import AssignmentStatus, TeachingAssignment

logger = logging.getLogger(__name__)


# Define valid state transitions
ASSIGNMENT_TRANSITIONS = {
    AssignmentStatus.DRAFT: [AssignmentStatus.ASSIGNED, AssignmentStatus.CONFIRMED, AssignmentStatus.CANCELLED],
    AssignmentStatus.ASSIGNED: [AssignmentStatus.CONFIRMED, AssignmentStatus.CANCELLED],
    AssignmentStatus.CONFIRMED: [AssignmentStatus.IN_PROGRESS, AssignmentStatus.CANCELLED],
    AssignmentStatus.IN_PROGRESS: [AssignmentStatus.COMPLETED, AssignmentStatus.CANCELLED],
    AssignmentStatus.COMPLETED: [],
    AssignmentStatus.CANCELLED: [],
}


def get_valid_transitions(current_status: str) -> List[str]:
    """
    Get the list of valid next states for a teaching assignment.

    Args:
        current_status: Current AssignmentStatus

    Returns:
        List of valid next status values.
    """
    return ASSIGNMENT_TRANSITIONS.get(current_status, [])


def can_transition(current_status: str, target_status: str) -> bool:
    return target_status in get_valid_transitions(current_status)


def validate_transition(current_status: str, target_status: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a workflow transition.

    Confirmation goes through approve_assignment() and cancellation
    through cancel_assignment(), so neither is accepted here.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if target_status == AssignmentStatus.CONFIRMED:
        return False, _("Dùng chức năng phê duyệt để xác nhận phân công.")
    if target_status == AssignmentStatus.CANCELLED:
        return False, _("Dùng chức năng hủy để hủy phân công.")
    if not can_transition(current_status, target_status):
        return False, _("Không thể chuyển phân công từ %(current)s sang %(target)s.") % (
            {'current': current_status, 'target': target_status}
        )
    return True, None


def perform_transition(assignment: TeachingAssignment, target_status: str, user=None) -> TeachingAssignment:
    """
    Move an assignment along the workflow.

    Starting work stamps actual_start_date and completing stamps
    actual_end_date when they are not already set.

    Raises:
        WorkflowTransitionException: If the transition is invalid
    """
    is_valid, error = validate_transition(assignment.status, target_status)
    if not is_valid:
        raise WorkflowTransitionException(error)

    assignment.status = target_status
    today = timezone.localdate()
    if target_status == AssignmentStatus.IN_PROGRESS and not assignment.actual_start_date:
        assignment.actual_start_date = today
    elif target_status == AssignmentStatus.COMPLETED and not assignment.actual_end_date:
        assignment.actual_end_date = today

    assignment.version += 1
    assignment.save_with_user(user)
    logger.info(f"Teaching assignment {assignment.code} moved to {target_status}")
    return assignment


def approve_assignment(assignment: TeachingAssignment, user=None, notes: str = '') -> TeachingAssignment:
    """
    Confirm an assignment and stamp the approval block.

    Raises:
        WorkflowTransitionException: If the assignment is not draft or assigned
    """
    if not can_transition(assignment.status, AssignmentStatus.CONFIRMED):
        raise WorkflowTransitionException(
            _("Không thể phê duyệt phân công ở trạng thái %(status)s.") % {'status': assignment.status}
        )

    assignment.status = AssignmentStatus.CONFIRMED
    assignment.is_approved = True
    assignment.approved_by = user
    assignment.approved_at = timezone.now()
    assignment.approval_notes = notes or ''
    assignment.version += 1
    assignment.save_with_user(user)
    logger.info(f"Teaching assignment {assignment.code} approved")
    return assignment


def cancel_assignment(assignment: TeachingAssignment, reason: str = '', user=None) -> TeachingAssignment:
    """
    Cancel an assignment from any status, completed ones included.

    The reason is appended to the notes.
    """
    if reason:
        assignment.notes = f"{assignment.notes}\nCancelled: {reason}" if assignment.notes else f"Cancelled: {reason}"
    assignment.status = AssignmentStatus.CANCELLED
    assignment.version += 1
    assignment.save_with_user(user)
    logger.warning(f"Teaching assignment {assignment.code} cancelled: {reason}")
    return assignment
