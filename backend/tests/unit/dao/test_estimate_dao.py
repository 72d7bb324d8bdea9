"""
Unit tests for Estimate DAO.

WHAT: Tests for EstimateDAO database operations.

WHY: Verifies that:
1. Project-scoped lookups hide other projects' estimates
2. Listing is newest first with a stable tie-break
3. The revision ledger appends gap-free versions
4. Two revisions can never share a version

HOW: Uses pytest-asyncio with in-memory SQLite database for isolation.
"""

import pytest
from datetime import datetime
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from buildtrack.dao.estimate import EstimateDAO
from buildtrack.models.estimate import EstimateRevision, EstimateStatus
from tests.factories import EstimateFactory, ProjectFactory


class TestEstimateDAOQueries:
    """Tests for estimate lookups."""

    @pytest.mark.asyncio
    async def test_get_with_revisions(self, db_session):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project)
        dao = EstimateDAO(db_session)

        found = await dao.get_with_revisions(estimate.id)

        assert found.id == estimate.id
        assert found.revisions == []

    @pytest.mark.asyncio
    async def test_get_with_revisions_missing(self, db_session):
        dao = EstimateDAO(db_session)
        assert await dao.get_with_revisions(999) is None

    @pytest.mark.asyncio
    async def test_get_by_id_and_project_scoped(self, db_session):
        project = await ProjectFactory.create(db_session)
        other = await ProjectFactory.create(db_session, name="Other")
        estimate = await EstimateFactory.create(db_session, project)
        dao = EstimateDAO(db_session)

        assert (await dao.get_by_id_and_project(estimate.id, project.id)).id == estimate.id
        assert await dao.get_by_id_and_project(estimate.id, other.id) is None

    @pytest.mark.asyncio
    async def test_get_by_id_and_project_for_update(self, db_session):
        """Row locking is a no-op on SQLite but the lookup still works."""
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project)
        dao = EstimateDAO(db_session)

        found = await dao.get_by_id_and_project(estimate.id, project.id, for_update=True)

        assert found.id == estimate.id

    @pytest.mark.asyncio
    async def test_get_by_project_newest_first(self, db_session):
        project = await ProjectFactory.create(db_session)
        other = await ProjectFactory.create(db_session, name="Other")
        created = [
            await EstimateFactory.create(db_session, project, title=f"E{i}") for i in range(3)
        ]
        await EstimateFactory.create(db_session, other)
        dao = EstimateDAO(db_session)

        estimates = await dao.get_by_project(project.id)

        assert [e.id for e in estimates] == [e.id for e in reversed(created)]

    @pytest.mark.asyncio
    async def test_get_by_project_ties_broken_by_id(self, db_session):
        """Estimates created in the same instant still list in a fixed order."""
        project = await ProjectFactory.create(db_session)
        stamp = datetime(2025, 1, 1, 9, 0)
        first = await EstimateFactory.create(db_session, project, created_at=stamp)
        second = await EstimateFactory.create(db_session, project, created_at=stamp)
        dao = EstimateDAO(db_session)

        once = [e.id for e in await dao.get_by_project(project.id)]
        twice = [e.id for e in await dao.get_by_project(project.id)]

        assert once == twice == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_get_by_project_pagination(self, db_session):
        project = await ProjectFactory.create(db_session)
        for i in range(4):
            await EstimateFactory.create(db_session, project, title=f"E{i}")
        dao = EstimateDAO(db_session)

        page = await dao.get_by_project(project.id, skip=1, limit=2)

        assert [e.title for e in page] == ["E2", "E1"]


class TestEstimateDAORevisions:
    """Tests for the revision ledger."""

    @pytest.mark.asyncio
    async def test_append_revision_numbers_from_one(self, db_session):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project)
        dao = EstimateDAO(db_session)

        first = dao.append_revision(estimate, estimate.items, estimate.amount, None)
        second = dao.append_revision(estimate, estimate.items, estimate.amount, "n")
        saved = await dao.save(estimate)

        assert (first.version, second.version) == (1, 2)
        assert [r.version for r in saved.revisions] == [1, 2]
        assert saved.revisions[1].notes == "n"

    @pytest.mark.asyncio
    async def test_append_revision_copies_items(self, db_session, sample_line_items):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project, items=sample_line_items)
        dao = EstimateDAO(db_session)

        revision = dao.append_revision(estimate, estimate.items, estimate.amount, None)
        revision.items[0]["description"] = "changed"

        assert estimate.items[0]["description"] == "Labor"

    @pytest.mark.asyncio
    async def test_duplicate_version_rejected(self, db_session):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project)

        for _ in range(2):
            db_session.add(
                EstimateRevision(
                    estimate_id=estimate.id,
                    version=1,
                    amount=Decimal("1"),
                    items=[],
                )
            )

        with pytest.raises(IntegrityError):
            await db_session.flush()

    @pytest.mark.asyncio
    async def test_save_applies_changes(self, db_session):
        project = await ProjectFactory.create(db_session)
        estimate = await EstimateFactory.create(db_session, project)
        dao = EstimateDAO(db_session)

        saved = await dao.save(estimate, status=EstimateStatus.SENT, terms="Net 30")

        assert saved.status == EstimateStatus.SENT
        assert saved.terms == "Net 30"
