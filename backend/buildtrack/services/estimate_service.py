"""
Estimate Service.

WHAT: Business logic for the estimate lifecycle: create, revise,
status transitions and listing.

WHY: The service layer:
1. Keeps the amount derived from line items on every write
2. Records the replaced item set before each revision
3. Applies the status workflow and its metadata side effects
4. Raises validation and not-found errors before anything is written

HOW: Orchestrates ProjectDAO and EstimateDAO inside the request's
session. Nothing here commits; the route commits after the service
returns, so each operation is all-or-nothing.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy.ext.asyncio import AsyncSession

from buildtrack.core.config import settings
from buildtrack.core.exceptions import (
    EstimateNotFoundError,
    ProjectNotFoundError,
    ValidationError,
)
from buildtrack.dao.estimate import EstimateDAO
from buildtrack.dao.project import ProjectDAO
from buildtrack.models.estimate import Estimate, EstimateStatus
from buildtrack.services.estimate_workflow import (
    ensure_transition_allowed,
    ensure_transition_metadata,
    reopen_changes,
    transition_changes,
)
from buildtrack.services.pricing import (
    fallback_line_items,
    price_line_items,
    to_decimal,
)

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(message=f"{field} is required", field=field)
    return value.strip()


class EstimateService:
    """
    Service for estimate operations.

    WHAT: Provides the estimate aggregate's operations.

    HOW: One instance per request, sharing the request's session.
    """

    def __init__(self, session: AsyncSession, strict_transitions: Optional[bool] = None):
        """
        Initialize EstimateService.

        Args:
            session: Async database session
            strict_transitions: Enforce the strict status table
                (defaults to ESTIMATE_STRICT_TRANSITIONS)
        """
        self.session = session
        self.estimate_dao = EstimateDAO(session)
        self.project_dao = ProjectDAO(session)
        self.strict_transitions = (
            settings.ESTIMATE_STRICT_TRANSITIONS
            if strict_transitions is None
            else strict_transitions
        )

    async def _require_project(self, project_id: int) -> None:
        if not await self.project_dao.exists(id=project_id):
            raise ProjectNotFoundError(project_id=project_id)

    async def create_estimate(
        self,
        project_id: int,
        title: str,
        description: str,
        amount: Any,
        items: Optional[Sequence[Dict[str, Any]]] = None,
        notes: Optional[str] = None,
        terms: Optional[str] = None,
        valid_until: Optional[datetime] = None,
        actor_id: Optional[str] = None,
    ) -> Estimate:
        """
        Create a new estimate in draft status.

        WHAT: Prices the supplied items, or builds a single "Project Total"
        line from ``amount`` when there are none.

        WHY: The stored amount is always the sum of the stored items, so a
        client-supplied amount only counts when it is the only price given.

        Args:
            project_id: Owning project
            title: Estimate title
            description: Scope description
            amount: Client amount (used for the fallback line)
            items: Optional line items
            notes: Optional notes
            terms: Optional terms
            valid_until: Expiration (defaults to now + ESTIMATE_VALIDITY_DAYS)
            actor_id: Caller identity, for logging

        Returns:
            Created Estimate with revisions loaded

        Raises:
            ValidationError: If a required field is missing or invalid
            ProjectNotFoundError: If the project doesn't exist
        """
        title = _require_text(title, "title")
        description = _require_text(description, "description")
        if amount is None:
            raise ValidationError(message="amount is required", field="amount")
        if to_decimal(amount, "amount") < 0:
            raise ValidationError(message="amount must not be negative", field="amount")

        priced = price_line_items(items) if items else fallback_line_items(amount)

        await self._require_project(project_id)

        if valid_until is None:
            valid_until = datetime.utcnow() + timedelta(days=settings.ESTIMATE_VALIDITY_DAYS)
        elif valid_until.tzinfo is not None:
            # Stored as naive UTC
            valid_until = valid_until.astimezone(timezone.utc).replace(tzinfo=None)

        estimate = await self.estimate_dao.create(
            project_id=project_id,
            title=title,
            description=description,
            amount=priced.amount,
            items=priced.items,
            status=EstimateStatus.DRAFT,
            valid_until=valid_until,
            notes=notes,
            terms=terms,
        )

        logger.info(
            "Created estimate %s for project %s (amount=%s, items=%d, actor=%s)",
            estimate.id,
            project_id,
            priced.amount,
            len(priced.items),
            actor_id,
        )
        return await self.estimate_dao.get_with_revisions(estimate.id)

    async def revise_estimate(
        self,
        estimate_id: int,
        project_id: int,
        items: Sequence[Dict[str, Any]],
        notes: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Estimate:
        """
        Replace an estimate's line items, keeping the old set as a revision.

        WHAT: Snapshots the current items/amount/notes as revision
        len(revisions) + 1, writes the new items with a recomputed amount,
        and reopens the estimate as a draft.

        WHY: Any approval or rejection applied to the old items no longer
        holds, so the metadata is cleared along with the status reset.

        Args:
            estimate_id: Estimate to revise
            project_id: Project the estimate must belong to
            items: New line items (at least one)
            notes: New notes (replaces the current notes)
            actor_id: Caller identity, for logging

        Returns:
            Updated Estimate with revisions loaded

        Raises:
            ValidationError: If items are empty or invalid
            EstimateNotFoundError: If the estimate isn't in that project
        """
        priced = price_line_items(items)

        estimate = await self.estimate_dao.get_by_id_and_project(
            estimate_id, project_id, for_update=True
        )
        if not estimate:
            raise EstimateNotFoundError(estimate_id=estimate_id, project_id=project_id)

        revision = self.estimate_dao.append_revision(
            estimate,
            items=estimate.items,
            amount=estimate.amount,
            notes=estimate.notes,
        )

        estimate = await self.estimate_dao.save(
            estimate,
            items=priced.items,
            amount=priced.amount,
            notes=notes,
            **reopen_changes(),
        )

        logger.info(
            "Revised estimate %s to version %d (amount %s -> %s, actor=%s)",
            estimate_id,
            revision.version,
            revision.amount,
            priced.amount,
            actor_id,
        )
        return estimate

    async def transition_estimate(
        self,
        estimate_id: int,
        new_status: EstimateStatus,
        rejection_reason: Optional[str] = None,
        user_id: Optional[str] = None,
        project_id: Optional[int] = None,
        actor_id: Optional[str] = None,
    ) -> Estimate:
        """
        Move an estimate to a new status.

        WHAT: Applies the status and its metadata: approver and time on
        approval, the reason on rejection, nothing on draft/sent. Metadata
        belonging to any other status is cleared.

        Args:
            estimate_id: Estimate to update
            new_status: Requested status
            rejection_reason: Reason, used when rejecting
            user_id: Approver, used when approving (falls back to actor_id)
            project_id: If given, the estimate must belong to this project
            actor_id: Caller identity

        Returns:
            Updated Estimate with revisions loaded

        Raises:
            EstimateNotFoundError: If the estimate doesn't exist (in scope)
            InvalidStateTransitionError: If strict transitions reject the change
            ValidationError: If strict mode approves without an approver or
                rejects without a reason
        """
        if project_id is not None:
            estimate = await self.estimate_dao.get_by_id_and_project(estimate_id, project_id)
        else:
            estimate = await self.estimate_dao.get_with_revisions(estimate_id)
        if not estimate:
            raise EstimateNotFoundError(estimate_id=estimate_id)

        previous_status = estimate.status
        ensure_transition_allowed(previous_status, new_status, strict=self.strict_transitions)

        approver = user_id or actor_id
        ensure_transition_metadata(
            new_status,
            user_id=approver,
            rejection_reason=rejection_reason,
            strict=self.strict_transitions,
        )
        changes = transition_changes(
            new_status,
            user_id=approver,
            rejection_reason=rejection_reason,
        )
        estimate = await self.estimate_dao.save(estimate, **changes)

        logger.info(
            "Estimate %s status %s -> %s (actor=%s)",
            estimate_id,
            previous_status.value,
            new_status.value,
            actor_id,
        )
        return estimate

    async def list_estimates(self, project_id: int) -> List[Estimate]:
        """
        List a project's estimates, newest first.

        Raises:
            ProjectNotFoundError: If the project doesn't exist
        """
        await self._require_project(project_id)
        return await self.estimate_dao.get_by_project(project_id)

    async def get_estimate(self, estimate_id: int) -> Estimate:
        """
        Get one estimate with its revision history.

        Raises:
            EstimateNotFoundError: If the estimate doesn't exist
        """
        estimate = await self.estimate_dao.get_with_revisions(estimate_id)
        if not estimate:
            raise EstimateNotFoundError(estimate_id=estimate_id)
        return estimate
