"""
Async test configuration and fixtures for pytest.

Every test gets a fresh in-memory SQLite database (through aiosqlite) with
the full schema, a session bound to it and an HTTP client whose database
dependency is overridden to use that session.
"""

from typing import AsyncGenerator

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import wedding_planner.models  # noqa: F401  registers every model on Base
from wedding_planner.main import app
from wedding_planner.db.async_session import get_async_db, configure_sqlite_engine
from wedding_planner.db.base_class import Base
from tests.async_test_utils import AsyncDatabaseTestUtils, AsyncTestDataFactory


@pytest_asyncio.fixture
async def async_engine():
    """Create an async SQLAlchemy engine on a private in-memory database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite_engine(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def async_db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create an async session configured like the application's sessions."""
    async_session_factory = async_sessionmaker(
        bind=async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with async_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def async_client(async_db_session):
    """Create a FastAPI test client with async database session override."""

    async def override_get_async_db():
        yield async_db_session

    app.dependency_overrides[get_async_db] = override_get_async_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides = {}


@pytest_asyncio.fixture
async def db_utils(async_db_session) -> AsyncDatabaseTestUtils:
    return AsyncDatabaseTestUtils(async_db_session)


@pytest_asyncio.fixture
async def factory(async_db_session) -> AsyncTestDataFactory:
    return AsyncTestDataFactory(async_db_session)
