"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: isolated pagination/logging settings
    - Database Fixtures: in-memory SQLite engine, session factory and seed data
    - Service Fixtures: a ready-to-use pagination service over ``Person``
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cursor_pagination import CursorPaginationService, FieldRegistry, SQLAlchemyPageExecutor
from cursor_pagination.core.settings import PaginationSettings, clear_all_caches
from tests.utils import SECRET, Base, Person, people, person_filter


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _clear_settings_caches():
    """Drop cached settings so environment changes in a test stay local."""
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def pagination_settings() -> PaginationSettings:
    """Pagination settings independent of the process environment."""
    return PaginationSettings(secret_key=SECRET, default_size=20, max_size=1000)


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory SQLite engine with the test schema.

    StaticPool keeps the single in-memory database alive across sessions.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
async def seeded(session_factory: async_sessionmaker[AsyncSession]) -> list[Person]:
    """Insert the four seed people.

    Returns:
        The inserted rows.
    """
    rows = people()
    async with session_factory() as session:
        session.add_all(rows)
        await session.commit()
    return rows


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def executor(session_factory: async_sessionmaker[AsyncSession]) -> SQLAlchemyPageExecutor[Person]:
    """SQLAlchemy executor over ``Person``."""
    return SQLAlchemyPageExecutor(session_factory, Person)


@pytest.fixture
def service(
    executor: SQLAlchemyPageExecutor[Person],
    pagination_settings: PaginationSettings,
) -> CursorPaginationService:
    """Pagination service over ``Person`` allowing sorts on age and birthday."""
    return CursorPaginationService(
        executor,
        FieldRegistry.from_model(Person),
        sortable_fields=["age", "birthday"],
        filter_builder=person_filter,
        settings=pagination_settings,
    )
