"""Shared pytest fixtures for all test suites."""

import os
from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from backend.docstore.db.context import RequestContext, unit_of_work
from backend.docstore.db.models import Base
from backend.docstore.search.memory import InMemorySearchIndex

ORG_A = "org-a"
ORG_B = "org-b"
USER_A = "user-a"
USER_B = "user-b"


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """SQLite database file with the full schema, one per test.

    A file (not :memory:) so every unit of work sees the same data.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'docstore.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def uow(engine: AsyncEngine) -> Callable[..., AbstractAsyncContextManager[RequestContext]]:
    """Open a unit of work against the test database.

    Usage:
        async with uow() as ctx:                 # org-a / user-a
        async with uow(ORG_B, USER_B) as ctx:
    """

    def _open(org_id: str = ORG_A, user_id: str = USER_A) -> AbstractAsyncContextManager[RequestContext]:
        return unit_of_work(org_id, user_id, engine)

    return _open


@pytest.fixture
def index() -> InMemorySearchIndex:
    """Search index recording every notification."""
    return InMemorySearchIndex()


@pytest_asyncio.fixture
async def postgres_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create async engine for PostgreSQL integration tests.

    Requires DATABASE_URL to be set to a real PostgreSQL connection string.
    Tests using this fixture should be marked with @pytest.mark.postgres.
    """
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set - skipping postgres test")

    if not database_url.startswith(("postgresql://", "postgresql+asyncpg://")):
        pytest.skip(f"DATABASE_URL is not PostgreSQL: {database_url}")

    if database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    engine = create_async_engine(database_url, poolclass=NullPool, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup: drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()
