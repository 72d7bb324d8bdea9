"""
Estimate Data Access Object (DAO).

WHAT: Database operations for the Estimate model and its revision ledger.

WHY: The DAO pattern:
1. Separates data access from the estimate workflow rules
2. Keeps project scoping in one place
3. Makes the revision append and the item overwrite one flush

HOW: Extends BaseDAO with estimate-specific queries:
- Project-scoped lookups (optionally row-locked)
- Newest-first project listing
- Revision ledger append
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Dict, Any
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from buildtrack.dao.base import BaseDAO
from buildtrack.models.estimate import Estimate, EstimateRevision


class EstimateDAO(BaseDAO[Estimate]):
    """
    Data Access Object for Estimate model.

    WHAT: Provides create, query and ledger operations for estimates.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize EstimateDAO.

        Args:
            session: Async database session
        """
        super().__init__(Estimate, session)

    def _select(self):
        """Base select with revisions eagerly loaded and identity map refreshed."""
        return (
            select(Estimate)
            .options(selectinload(Estimate.revisions))
            .execution_options(populate_existing=True)
        )

    async def get_with_revisions(self, estimate_id: int) -> Optional[Estimate]:
        """
        Get an estimate with its full revision history.

        Args:
            estimate_id: Estimate ID

        Returns:
            Estimate or None if not found
        """
        result = await self.session.execute(
            self._select().where(Estimate.id == estimate_id)
        )
        return result.scalar_one_or_none()

    async def get_by_id_and_project(
        self,
        estimate_id: int,
        project_id: int,
        for_update: bool = False,
    ) -> Optional[Estimate]:
        """
        Get an estimate only if it belongs to the given project.

        WHY: Revisions are addressed through the project. An estimate from
        another project must look exactly like a missing one.

        Args:
            estimate_id: Estimate ID
            project_id: Project that must own the estimate
            for_update: Lock the row until the transaction ends
                (ignored by SQLite)

        Returns:
            Estimate or None if not found in that project
        """
        query = self._select().where(
            Estimate.id == estimate_id,
            Estimate.project_id == project_id,
        )
        if for_update:
            query = query.with_for_update()

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_project(
        self,
        project_id: int,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Estimate]:
        """
        Get all estimates for a project, newest first.

        WHY: id breaks ties between estimates created in the same
        instant so repeated listings come back in the same order.

        Args:
            project_id: Project ID
            skip: Pagination offset
            limit: Pagination limit (None returns everything)

        Returns:
            List of estimates for the project
        """
        query = (
            self._select()
            .where(Estimate.project_id == project_id)
            .order_by(Estimate.created_at.desc(), Estimate.id.desc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    def append_revision(
        self,
        estimate: Estimate,
        items: List[Dict[str, Any]],
        amount: Decimal,
        notes: Optional[str],
    ) -> EstimateRevision:
        """
        Append a snapshot to the estimate's revision ledger.

        WHAT: Adds version len(revisions) + 1. Nothing is flushed here so
        the caller can combine the append with the item overwrite.

        Args:
            estimate: Estimate loaded with its revisions
            items: Item set being replaced
            amount: Amount being replaced
            notes: Notes being replaced

        Returns:
            The pending revision
        """
        revision = EstimateRevision(
            version=len(estimate.revisions) + 1,
            amount=amount,
            items=[dict(item) for item in items],
            notes=notes,
            created_at=datetime.utcnow(),
        )
        estimate.revisions.append(revision)
        return revision

    async def save(self, estimate: Estimate, **changes: Any) -> Estimate:
        """
        Apply field changes, flush, and reload the estimate.

        Args:
            estimate: Estimate to modify
            **changes: Column values to set

        Returns:
            Reloaded estimate with revisions
        """
        for field, value in changes.items():
            setattr(estimate, field, value)

        await self.session.flush()
        return await self.get_with_revisions(estimate.id)
