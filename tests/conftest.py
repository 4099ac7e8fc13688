"""Shared test fixtures for omikuji."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

from omikuji.config.schema import DatabaseConfig, StoreConfig
from omikuji.storage.database import create_db
from omikuji.storage.store import RecordStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession


class FakeClock:
    """Deterministic clock that moves one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2021, 1, 11, 12, 15, 30)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


@pytest.fixture
async def db() -> AsyncIterator[tuple[async_sessionmaker[AsyncSession], AsyncEngine]]:
    """In-memory SQLite engine with tables created."""
    factory, engine = await create_db(DatabaseConfig(url="sqlite+aiosqlite://"))
    yield factory, engine
    await engine.dispose()


@pytest.fixture
async def db_session(db) -> AsyncIterator[AsyncSession]:  # type: ignore[no-untyped-def]
    factory, _ = db
    async with factory() as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(db, clock: FakeClock) -> RecordStore:  # type: ignore[no-untyped-def]
    """Record store over the in-memory database with a fake clock."""
    factory, _ = db
    return RecordStore(factory, StoreConfig(), clock=clock)


@pytest.fixture
async def file_store(tmp_path) -> AsyncIterator[RecordStore]:  # type: ignore[no-untyped-def]
    """Record store over a file-based SQLite database.

    Each operation gets its own connection, so concurrent calls really
    contend for the database lock.
    """
    url = f"sqlite+aiosqlite:///{tmp_path / 'omikuji.db'}"
    factory, engine = await create_db(DatabaseConfig(url=url))
    yield RecordStore(factory)
    await engine.dispose()
