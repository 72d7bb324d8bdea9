"""
Pytest configuration and fixtures.

WHY: Fixtures provide reusable test setup/teardown logic, reducing
duplication and ensuring consistent test environments.
"""

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from httpx import AsyncClient, ASGITransport

from buildtrack.main import app
from buildtrack.models.base import Base
from buildtrack.db import session as session_module
from buildtrack.db.session import get_db
from buildtrack.core import config


# Test database URL
# WHY: Using SQLite for tests eliminates external database dependencies
# and makes tests faster.
TEST_ASYNC_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """
    Create a test database engine.

    WHY: Function scope ensures each test gets a fresh database state,
    preventing test pollution and ensuring test isolation.
    """
    engine = create_async_engine(
        TEST_ASYNC_DATABASE_URL,
        echo=False,
        pool_pre_ping=True,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """
    Create a test database session.

    WHY: Each test gets its own session that is rolled back after the test.

    Yields:
        AsyncSession: Database session for the test
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test HTTP client.

    WHY: AsyncClient allows testing FastAPI endpoints without running
    a real server. Requests share the test's session so data created by
    factories is visible to the API.

    Yields:
        AsyncClient: HTTP client for making test requests
    """

    async def override_get_db():
        """Override database dependency with test session."""
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def db_sessionmaker(db_engine) -> async_sessionmaker:
    """
    Session factory bound to the test engine, configured like the app's.

    WHY: Lets tests open a fresh session to see only what was committed.
    """
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def committing_client(
    db_sessionmaker, monkeypatch
) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client that runs the real ``get_db`` dependency.

    WHY: The ``client`` fixture hands every request the test's own session.
    Here each request gets a new session that commits or rolls back on its
    own, as in production.
    """
    monkeypatch.setattr(session_module, "AsyncSessionLocal", db_sessionmaker)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture(autouse=True)
def permissive_transitions(monkeypatch):
    """
    Run every test with the default permissive workflow.

    WHY: A developer's .env may enable strict transitions; tests that need
    strict mode turn it on explicitly with the ``strict_transitions`` fixture.
    """
    monkeypatch.setattr(config.settings, "ESTIMATE_STRICT_TRANSITIONS", False)


@pytest.fixture
def strict_transitions(monkeypatch):
    """Enable the strict estimate transition table."""
    monkeypatch.setattr(config.settings, "ESTIMATE_STRICT_TRANSITIONS", True)


@pytest.fixture
def sample_line_items() -> list:
    """
    Sample line items for estimate tests.

    WHY: Labor 10 x 100 plus materials 1 x 1500 totals 2500.
    """
    return [
        {"description": "Labor", "quantity": 10, "unit_price": 100},
        {"description": "Materials", "quantity": 1, "unit_price": 1500},
    ]
