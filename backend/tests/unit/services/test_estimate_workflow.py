"""
Unit tests for the estimate status workflow.

WHY: Verifies that:
1. The default workflow accepts any status change
2. Strict mode only allows draft -> sent -> approved/rejected
3. Metadata is set for the target status and cleared for the others
"""

import pytest
from datetime import datetime

from buildtrack.core.exceptions import InvalidStateTransitionError, ValidationError
from buildtrack.models.estimate import EstimateStatus
from buildtrack.services.estimate_workflow import (
    ensure_transition_allowed,
    ensure_transition_metadata,
    is_transition_allowed,
    reopen_changes,
    transition_changes,
)


ALL_STATUSES = list(EstimateStatus)


class TestPermissiveWorkflow:
    """Default mode."""

    @pytest.mark.parametrize("current", ALL_STATUSES)
    @pytest.mark.parametrize("target", ALL_STATUSES)
    def test_any_transition_allowed(self, current, target):
        assert is_transition_allowed(current, target) is True


class TestStrictWorkflow:
    """Strict transition table."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (EstimateStatus.DRAFT, EstimateStatus.SENT),
            (EstimateStatus.SENT, EstimateStatus.APPROVED),
            (EstimateStatus.SENT, EstimateStatus.REJECTED),
            (EstimateStatus.APPROVED, EstimateStatus.APPROVED),
            (EstimateStatus.DRAFT, EstimateStatus.DRAFT),
        ],
    )
    def test_allowed(self, current, target):
        assert is_transition_allowed(current, target, strict=True) is True

    @pytest.mark.parametrize(
        "current,target",
        [
            (EstimateStatus.DRAFT, EstimateStatus.APPROVED),
            (EstimateStatus.DRAFT, EstimateStatus.REJECTED),
            (EstimateStatus.SENT, EstimateStatus.DRAFT),
            (EstimateStatus.APPROVED, EstimateStatus.DRAFT),
            (EstimateStatus.APPROVED, EstimateStatus.REJECTED),
            (EstimateStatus.REJECTED, EstimateStatus.SENT),
        ],
    )
    def test_rejected(self, current, target):
        assert is_transition_allowed(current, target, strict=True) is False

    def test_ensure_raises_with_states(self):
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            ensure_transition_allowed(EstimateStatus.DRAFT, EstimateStatus.APPROVED, strict=True)

        assert exc_info.value.status_code == 400
        assert exc_info.value.context == {
            "current_state": "draft",
            "requested_state": "approved",
        }

    def test_ensure_passes_when_permissive(self):
        ensure_transition_allowed(EstimateStatus.DRAFT, EstimateStatus.APPROVED)


class TestTransitionChanges:
    """Metadata side effects."""

    def test_approved_stamps_approver(self):
        now = datetime(2025, 1, 15, 12, 0)
        changes = transition_changes(
            EstimateStatus.APPROVED, user_id="u1", rejection_reason="ignored", now=now
        )

        assert changes == {
            "status": EstimateStatus.APPROVED,
            "approved_by": "u1",
            "approved_at": now,
            "rejection_reason": None,
        }

    def test_approved_defaults_to_current_time(self):
        before = datetime.utcnow()
        changes = transition_changes(EstimateStatus.APPROVED, user_id="u1")
        assert changes["approved_at"] >= before

    def test_rejected_records_reason_only(self):
        changes = transition_changes(
            EstimateStatus.REJECTED, user_id="u1", rejection_reason="Over budget"
        )

        assert changes == {
            "status": EstimateStatus.REJECTED,
            "approved_by": None,
            "approved_at": None,
            "rejection_reason": "Over budget",
        }

    @pytest.mark.parametrize("target", [EstimateStatus.DRAFT, EstimateStatus.SENT])
    def test_draft_and_sent_clear_metadata(self, target):
        changes = transition_changes(target, user_id="u1", rejection_reason="x")

        assert changes["status"] == target
        assert changes["approved_by"] is None
        assert changes["approved_at"] is None
        assert changes["rejection_reason"] is None

    def test_reopen_is_draft_with_cleared_metadata(self):
        assert reopen_changes() == {
            "status": EstimateStatus.DRAFT,
            "approved_by": None,
            "approved_at": None,
            "rejection_reason": None,
        }


class TestTransitionMetadata:
    """Approver and reason requirements."""

    @pytest.mark.parametrize("target", list(EstimateStatus))
    def test_permissive_requires_nothing(self, target):
        ensure_transition_metadata(target)

    def test_strict_approval_needs_approver(self):
        with pytest.raises(ValidationError) as exc_info:
            ensure_transition_metadata(EstimateStatus.APPROVED, user_id=" ", strict=True)
        assert exc_info.value.context["field"] == "userId"

    def test_strict_rejection_needs_reason(self):
        with pytest.raises(ValidationError) as exc_info:
            ensure_transition_metadata(EstimateStatus.REJECTED, strict=True)
        assert exc_info.value.context["field"] == "rejectionReason"

    def test_strict_with_metadata_passes(self):
        ensure_transition_metadata(EstimateStatus.APPROVED, user_id="u1", strict=True)
        ensure_transition_metadata(
            EstimateStatus.REJECTED, rejection_reason="Over budget", strict=True
        )
        ensure_transition_metadata(EstimateStatus.SENT, strict=True)
