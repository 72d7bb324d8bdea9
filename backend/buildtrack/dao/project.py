"""
Project Data Access Object (DAO).

WHAT: Database operations for the Project model.
"""

from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from buildtrack.dao.base import BaseDAO
from buildtrack.models.project import Project


class ProjectDAO(BaseDAO[Project]):
    """Data Access Object for Project model."""

    def __init__(self, session: AsyncSession):
        """
        Initialize ProjectDAO.

        Args:
            session: Async database session
        """
        super().__init__(Project, session)

    async def get_recent(self, skip: int = 0, limit: int = 100) -> List[Project]:
        """
        List projects newest first.

        Args:
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            Projects ordered by creation time, descending
        """
        result = await self.session.execute(
            select(Project)
            .order_by(Project.created_at.desc(), Project.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())
