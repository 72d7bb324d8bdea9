"""
Base Data Access Object (DAO) class.

WHAT: Generic persistence helpers shared by the project and estimate DAOs.

WHY: Services work with DAOs instead of building queries, so the
estimate rules can be tested against any session without SQL in them.
"""

from typing import Any, Dict, Generic, Optional, Type, TypeVar
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from buildtrack.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseDAO(Generic[ModelType]):
    """
    Common operations for one model class.

    Type Parameters:
        ModelType: The SQLAlchemy model class this DAO manages
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """
        Args:
            model: The SQLAlchemy model class
            session: Request-scoped async session (shared by every DAO in
                the request, so they all write in one transaction)
        """
        self.model = model
        self.session = session

    def _filtered(self, query: Select, filters: Dict[str, Any]) -> Select:
        """
        Add ``column == value`` clauses.

        Raises:
            AttributeError: If a filter names a column the model doesn't have
        """
        columns = self.model.__table__.columns
        for field, value in filters.items():
            if field not in columns:
                raise AttributeError(f"{self.model.__name__} has no column {field!r}")
            query = query.where(getattr(self.model, field) == value)
        return query

    async def create(self, **values: Any) -> ModelType:
        """
        Insert a row and return it with generated columns loaded.

        Nothing is committed; the route handler commits.

        Raises:
            IntegrityError: If a constraint is violated
        """
        instance = self.model(**values)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        """Fetch one row by primary key, or None."""
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def count(self, **filters: Any) -> int:
        """Count rows matching equality filters."""
        query = self._filtered(select(func.count()).select_from(self.model), filters)
        result = await self.session.execute(query)
        return int(result.scalar_one())

    async def exists(self, **filters: Any) -> bool:
        """True if at least one row matches the filters."""
        query = self._filtered(select(self.model.id), filters).limit(1)
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    async def update(self, id: int, **values: Any) -> Optional[ModelType]:
        """
        Set attributes on one row and flush.

        Goes through the ORM so ``onupdate`` timestamps fire.

        Returns:
            The refreshed instance, or None if no row has that id
        """
        instance = await self.get_by_id(id)
        if instance is None:
            return None
        for field, value in values.items():
            setattr(instance, field, value)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def delete(self, id: int) -> bool:
        """
        Delete one row by primary key.

        WHY: ``session.delete`` applies relationship cascades, which SQLite
        would not do from the foreign keys alone.

        Returns:
            True if a row was deleted, False if not found
        """
        instance = await self.get_by_id(id)
        if instance is None:
            return False
        await self.session.delete(instance)
        await self.session.flush()
        return True
