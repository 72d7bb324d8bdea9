"""
Database session management.

WHY: Async database sessions are required for FastAPI's async/await pattern.
Using a context manager ensures proper connection cleanup and transaction management.
"""

from typing import AsyncGenerator, Any
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from buildtrack.core.config import settings


def _engine_options() -> dict[str, Any]:
    """
    Build engine keyword arguments for the configured backend.

    WHY: pool_size/max_overflow only apply to pooled servers like PostgreSQL;
    SQLite engines reject them.
    """
    options: dict[str, Any] = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if not settings.is_sqlite:
        options.update(pool_size=10, max_overflow=20)
    return options


# Create async engine
engine = create_async_engine(settings.async_database_url, **_engine_options())

# Create session factory
# WHY: expire_on_commit=False prevents lazy-loading issues after commit.
# autoflush=False gives explicit control over when writes hit the database.
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get database session.

    WHY: Each request is one unit of work. Write handlers call
    ``await db.commit()`` before building their response, so a failed commit
    surfaces as a 500 instead of a success that was never stored. Anything
    raised before that point rolls the whole request back.

    Yields:
        AsyncSession: Database session for the request
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
