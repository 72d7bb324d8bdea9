"""
Unit tests for EstimateService.

WHAT: Tests for create, revise, transition and list against an
in-memory database.

WHY: Verifies that:
1. The amount always equals the sum of the stored item totals
2. Revisions hold the replaced items and number 1..N without gaps
3. Status metadata is set and cleared with the status
4. Invalid input and missing records fail before anything changes

HOW: Uses pytest-asyncio with in-memory SQLite database for isolation.
"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal

from buildtrack.core.exceptions import (
    EstimateNotFoundError,
    InvalidStateTransitionError,
    ProjectNotFoundError,
    ValidationError,
)
from buildtrack.models.estimate import EstimateStatus
from buildtrack.services.estimate_service import EstimateService
from tests.factories import EstimateFactory, ProjectFactory


class TestCreateEstimate:
    """Tests for estimate creation."""

    @pytest.mark.asyncio
    async def test_create_with_items_recomputes_amount(self, db_session, sample_line_items):
        project = await ProjectFactory.create(db_session)
        service = EstimateService(db_session)

        estimate = await service.create_estimate(
            project_id=project.id,
            title="Kitchen",
            description="Cabinets",
            amount=999,
            items=sample_line_items,
        )

        assert estimate.amount == Decimal("2500.00")
        assert [item["total"] for item in estimate.items] == [1000.0, 1500.0]
        assert estimate.status == EstimateStatus.DRAFT
        assert estimate.revisions == []

    @pytest.mark.asyncio
    async def test_create_without_items_uses_fallback_line(self, db_session):
        project = await ProjectFactory.create(db_session)
        service = EstimateService(db_session)

        estimate = await service.create_estimate(
            project_id=project.id,
            title="Roof",
            description="Replace shingles",
            amount=2500,
            items=[],
        )

        assert estimate.amount == Decimal("2500.00")
        assert estimate.items == [
            {"description": "Project Total", "quantity": 1, "unit_price": 2500.0, "total": 2500.0}
        ]

    @pytest.mark.asyncio
    async def test_valid_until_defaults_to_thirty_days(self, db_session):
        project = await ProjectFactory.create(db_session)
        service = EstimateService(db_session)
        before = datetime.utcnow()

        estimate = await service.create_estimate(
            project_id=project.id, title="T", description="D", amount=1
        )

        assert before + timedelta(days=30) <= estimate.valid_until
        assert estimate.valid_until <= datetime.utcnow() + timedelta(days=30)

    @pytest.mark.asyncio
    async def test_unknown_project(self, db_session):
        service = EstimateService(db_session)

        with pytest.raises(ProjectNotFoundError):
            await service.create_estimate(
                project_id=999, title="T", description="D", amount=1
            )

    @pytest.mark.asyncio
    async def test_blank_title_rejected(self, db_session):
        project = await ProjectFactory.create(db_session)
        service = EstimateService(db_session)

        with pytest.raises(ValidationError):
            await service.create_estimate(
                project_id=project.id, title="   ", description="D", amount=1
            )

    @pytest.mark.asyncio
    async def test_missing_amount_rejected(self, db_session):
        project = await ProjectFactory.create(db_session)
        service = EstimateService(db_session)

        with pytest.raises(ValidationError):
            await service.create_estimate(
                project_id=project.id, title="T", description="D", amount=None
            )


class TestReviseEstimate:
    """Tests for estimate revisions."""

    @pytest.mark.asyncio
    async def test_revise_snapshots_previous_items(self, db_session, sample_line_items):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(
            db_session, project, items=sample_line_items, notes="first"
        )
        service = EstimateService(db_session)

        revised = await service.revise_estimate(
            estimate.id,
            project.id,
            items=[{"description": "Labor", "quantity": 12, "unit_price": 100}],
            notes="second",
        )

        assert revised.amount == Decimal("1200.00")
        assert revised.notes == "second"
        assert len(revised.revisions) == 1
        revision = revised.revisions[0]
        assert revision.version == 1
        assert revision.amount == Decimal("2500.00")
        assert [item["description"] for item in revision.items] == ["Labor", "Materials"]
        assert revision.notes == "first"

    @pytest.mark.asyncio
    async def test_versions_are_sequential(self, db_session):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project)
        service = EstimateService(db_session)

        for quantity in range(1, 5):
            estimate = await service.revise_estimate(
                estimate.id,
                project.id,
                items=[{"description": "Labor", "quantity": quantity, "unit_price": 10}],
            )

        assert [r.version for r in estimate.revisions] == [1, 2, 3, 4]
        assert estimate.amount == Decimal("40.00")

    @pytest.mark.asyncio
    async def test_revise_reopens_and_clears_metadata(self, db_session):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(
            db_session,
            project,
            status=EstimateStatus.APPROVED,
            approved_by="u1",
            approved_at=datetime.utcnow(),
        )
        service = EstimateService(db_session)

        revised = await service.revise_estimate(
            estimate.id,
            project.id,
            items=[{"description": "Labor", "quantity": 1, "unit_price": 10}],
        )

        assert revised.status == EstimateStatus.DRAFT
        assert revised.approved_by is None
        assert revised.approved_at is None
        assert revised.rejection_reason is None

    @pytest.mark.asyncio
    async def test_empty_items_leave_estimate_unchanged(self, db_session):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project, amount=Decimal("500"))
        service = EstimateService(db_session)

        with pytest.raises(ValidationError):
            await service.revise_estimate(estimate.id, project.id, items=[])

        reloaded = await service.get_estimate(estimate.id)
        assert reloaded.amount == Decimal("500.00")
        assert reloaded.revisions == []

    @pytest.mark.asyncio
    async def test_other_project_is_not_found(self, db_session):
        project = await ProjectFactory.create(db_session)
        other = await ProjectFactory.create(db_session, name="Other")
        estimate = await EstimateFactory.create(db_session, project)
        service = EstimateService(db_session)

        with pytest.raises(EstimateNotFoundError):
            await service.revise_estimate(
                estimate.id,
                other.id,
                items=[{"description": "Labor", "quantity": 1, "unit_price": 10}],
            )

        reloaded = await service.get_estimate(estimate.id)
        assert reloaded.revisions == []


class TestTransitionEstimate:
    """Tests for status changes."""

    @pytest.mark.asyncio
    async def test_approve_stamps_user(self, db_session):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project, status=EstimateStatus.SENT)
        service = EstimateService(db_session)

        approved = await service.transition_estimate(
            estimate.id, EstimateStatus.APPROVED, user_id="u1"
        )

        assert approved.status == EstimateStatus.APPROVED
        assert approved.approved_by == "u1"
        assert approved.approved_at is not None

    @pytest.mark.asyncio
    async def test_approver_falls_back_to_actor(self, db_session):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project)
        service = EstimateService(db_session)

        approved = await service.transition_estimate(
            estimate.id, EstimateStatus.APPROVED, actor_id="header-user"
        )

        assert approved.approved_by == "header-user"

    @pytest.mark.asyncio
    async def test_reject_clears_approval(self, db_session):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(
            db_session,
            project,
            status=EstimateStatus.APPROVED,
            approved_by="u1",
            approved_at=datetime.utcnow(),
        )
        service = EstimateService(db_session)

        rejected = await service.transition_estimate(
            estimate.id, EstimateStatus.REJECTED, rejection_reason="Over budget"
        )

        assert rejected.rejection_reason == "Over budget"
        assert rejected.approved_by is None
        assert rejected.approved_at is None

    @pytest.mark.asyncio
    async def test_transition_does_not_touch_items(self, db_session, sample_line_items):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project, items=sample_line_items)
        items_before = list(estimate.items)
        service = EstimateService(db_session)

        sent = await service.transition_estimate(estimate.id, EstimateStatus.SENT)

        assert sent.items == items_before
        assert sent.amount == Decimal("2500.00")

    @pytest.mark.asyncio
    async def test_strict_mode_rejects_skip(self, db_session):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project)
        service = EstimateService(db_session, strict_transitions=True)

        with pytest.raises(InvalidStateTransitionError):
            await service.transition_estimate(estimate.id, EstimateStatus.APPROVED)

        reloaded = await service.get_estimate(estimate.id)
        assert reloaded.status == EstimateStatus.DRAFT

    @pytest.mark.asyncio
    async def test_strict_setting_is_default(self, db_session, strict_transitions):
        assert EstimateService(db_session).strict_transitions is True

    @pytest.mark.asyncio
    async def test_project_scope_checked_when_given(self, db_session):
        project = await ProjectFactory.create(db_session)
        other = await ProjectFactory.create(db_session, name="Other")
        estimate = await EstimateFactory.create(db_session, project)
        service = EstimateService(db_session)

        with pytest.raises(EstimateNotFoundError):
            await service.transition_estimate(
                estimate.id, EstimateStatus.SENT, project_id=other.id
            )

    @pytest.mark.asyncio
    async def test_missing_estimate(self, db_session):
        service = EstimateService(db_session)

        with pytest.raises(EstimateNotFoundError):
            await service.transition_estimate(12345, EstimateStatus.SENT)


class TestListEstimates:
    """Tests for project listing."""

    @pytest.mark.asyncio
    async def test_newest_first(self, db_session):
        project = await ProjectFactory.create(db_session)
        first = await EstimateFactory.create(db_session, project, title="First")
        second = await EstimateFactory.create(db_session, project, title="Second")
        service = EstimateService(db_session)

        estimates = await service.list_estimates(project.id)

        assert [e.id for e in estimates] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_unknown_project(self, db_session):
        service = EstimateService(db_session)

        with pytest.raises(ProjectNotFoundError):
            await service.list_estimates(999)
