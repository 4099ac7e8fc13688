"""Engine and session factory creation from configuration."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from omikuji.core.errors import StorageError
from omikuji.storage.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from omikuji.config.schema import DatabaseConfig, OmikujiConfig
    from omikuji.storage.store import RecordStore

logger = logging.getLogger(__name__)


def _expand_url(url: str) -> str:
    """Expand ``~`` in a file-based SQLite URL."""
    if url.startswith("sqlite") and ":///" in url:
        prefix, path = url.split(":///", 1)
        return prefix + ":///" + str(Path(path).expanduser())
    return url


def _is_memory_sqlite(url: str) -> bool:
    if not url.startswith("sqlite"):
        return False
    return ":memory:" in url or url.rstrip("/").endswith(":")


async def create_db(
    config: DatabaseConfig,
) -> tuple[async_sessionmaker[AsyncSession], AsyncEngine]:
    """Create async engine and sessionmaker from config.

    SQLite databases (file or in-memory) get their tables created on the
    spot. Other backends are managed by the alembic revisions.

    Raises:
        StorageError: If the database cannot be reached or initialised.
    """
    url = _expand_url(config.url)
    is_sqlite = url.startswith("sqlite")
    is_memory = _is_memory_sqlite(url)

    if is_sqlite and not is_memory:
        db_path = url.split("///", 1)[-1]
        try:
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot create database directory for {db_path}: {e}"
            raise StorageError(msg) from e

    engine_kwargs: dict[str, object] = {"echo": config.echo}
    if is_memory:
        # In-memory SQLite needs StaticPool so all queries share
        # the same connection (and thus the same in-memory DB).
        from sqlalchemy.pool import StaticPool

        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    elif is_sqlite:
        from sqlalchemy.pool import NullPool

        engine_kwargs["poolclass"] = NullPool
        engine_kwargs["connect_args"] = {"timeout": config.busy_timeout}
    else:
        engine_kwargs["pool_size"] = config.pool_size
        engine_kwargs["max_overflow"] = config.max_overflow
        engine_kwargs["pool_timeout"] = config.pool_timeout
        engine_kwargs["pool_recycle"] = config.pool_recycle
        engine_kwargs["pool_pre_ping"] = True

    engine = create_async_engine(url, **engine_kwargs)

    if is_sqlite:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            await engine.dispose()
            msg = f"Cannot initialise database: {e}"
            raise StorageError(msg) from e
        logger.info("SQLite schema ready at %s", engine.url.render_as_string())

    factory = async_sessionmaker(engine, expire_on_commit=False)
    return factory, engine


async def open_store(config: OmikujiConfig) -> tuple[RecordStore, AsyncEngine]:
    """Build a :class:`RecordStore` from the full config.

    The caller owns the returned engine and must ``dispose()`` it.
    """
    from omikuji.storage.store import RecordStore

    factory, engine = await create_db(config.database)
    return RecordStore(factory, config.store), engine
