"""
Estimate status workflow.

WHAT: Decides whether a status change is allowed and which metadata
columns it sets or clears.

WHY: Approval and rejection metadata must only be present while the
estimate is in the matching status. Computing the full set of column
changes in one place keeps that true for every write path.

HOW: Pure functions returning dicts of column changes; the service applies
them through the DAO.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from buildtrack.core.exceptions import InvalidStateTransitionError, ValidationError
from buildtrack.models.estimate import EstimateStatus


# Allowed moves when strict transitions are enabled. Approved and rejected
# estimates can only be reopened by revising them.
STRICT_TRANSITIONS: Dict[EstimateStatus, frozenset] = {
    EstimateStatus.DRAFT: frozenset({EstimateStatus.SENT}),
    EstimateStatus.SENT: frozenset({EstimateStatus.APPROVED, EstimateStatus.REJECTED}),
    EstimateStatus.APPROVED: frozenset(),
    EstimateStatus.REJECTED: frozenset(),
}


def is_transition_allowed(
    current: EstimateStatus,
    target: EstimateStatus,
    strict: bool = False,
) -> bool:
    """
    Check a status change against the workflow.

    Args:
        current: Status the estimate is in
        target: Requested status
        strict: Enforce STRICT_TRANSITIONS instead of allowing any change

    Returns:
        True if the change is allowed
    """
    if not strict or current == target:
        return True
    return target in STRICT_TRANSITIONS[current]


def ensure_transition_allowed(
    current: EstimateStatus,
    target: EstimateStatus,
    strict: bool = False,
) -> None:
    """
    Raise if a status change is not allowed.

    Raises:
        InvalidStateTransitionError: If strict mode rejects the change
    """
    if not is_transition_allowed(current, target, strict):
        raise InvalidStateTransitionError(
            message=f"Cannot move an estimate from {current.value} to {target.value}",
            current_state=current.value,
            requested_state=target.value,
        )


def ensure_transition_metadata(
    target: EstimateStatus,
    user_id: Optional[str] = None,
    rejection_reason: Optional[str] = None,
    strict: bool = False,
) -> None:
    """
    Require the metadata a strict-mode approval or rejection records.

    The permissive workflow stores whatever it is given, so an approval
    without an approver keeps approved_by empty there.

    Raises:
        ValidationError: If strict mode approves without an approver or
            rejects without a reason
    """
    if not strict:
        return
    if target == EstimateStatus.APPROVED and not (user_id or "").strip():
        raise ValidationError(message="userId is required to approve", field="userId")
    if target == EstimateStatus.REJECTED and not (rejection_reason or "").strip():
        raise ValidationError(
            message="rejectionReason is required to reject", field="rejectionReason"
        )


def transition_changes(
    target: EstimateStatus,
    user_id: Optional[str] = None,
    rejection_reason: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Column changes for moving an estimate into ``target``.

    - approved: stamps approver and time, clears the rejection reason
    - rejected: records the reason, clears approval fields
    - draft/sent: clears both

    Args:
        target: Requested status
        user_id: Approver identity (used for approved)
        rejection_reason: Reason (used for rejected)
        now: Timestamp to use for approved_at

    Returns:
        Dict of column name to new value
    """
    changes: Dict[str, Any] = {
        "status": target,
        "approved_by": None,
        "approved_at": None,
        "rejection_reason": None,
    }

    if target == EstimateStatus.APPROVED:
        changes["approved_by"] = user_id
        changes["approved_at"] = now or datetime.utcnow()
    elif target == EstimateStatus.REJECTED:
        changes["rejection_reason"] = rejection_reason

    return changes


def reopen_changes() -> Dict[str, Any]:
    """Column changes applied by a revision: back to draft, metadata cleared."""
    return transition_changes(EstimateStatus.DRAFT)
