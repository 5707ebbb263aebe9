"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The production models contain nothing
PostgreSQL-specific, so they are created directly on SQLite.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ridebook.domain.pricing import FareCalculator
from ridebook.infrastructure import models  # noqa: F401  (registers tables)
from ridebook.infrastructure.catalog import default_locations
from ridebook.infrastructure.database import Base
from ridebook.infrastructure.location_store import StaticLocationStore
from ridebook.infrastructure.repositories import TripRepository
from ridebook.services.trip_lifecycle import TripLifecycleService


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


def enable_savepoints(engine: AsyncEngine) -> None:
    """SQLite driver quirk: let SQLAlchemy emit BEGIN so SAVEPOINT works."""

    @event.listens_for(engine.sync_engine, "connect")
    def _no_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _explicit_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test; every session shares it."""
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    enable_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ── Domain wiring ─────────────────────────────────────────────────────


@pytest.fixture
def location_store() -> StaticLocationStore:
    return StaticLocationStore(default_locations())


@pytest.fixture
def fares() -> FareCalculator:
    return FareCalculator()


@pytest_asyncio.fixture
async def service(db_session, location_store, fares) -> TripLifecycleService:
    return TripLifecycleService(TripRepository(db_session), location_store, fares)
