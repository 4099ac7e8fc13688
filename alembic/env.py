"""Alembic environment for the omikuji tables.

The database URL comes from ``sqlalchemy.url`` in ``alembic.ini``; when
that is empty, ``$DATABASE_URL`` is used instead.
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlalchemy.ext.asyncio import async_engine_from_config

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

from omikuji.storage.models import Base

target_metadata = Base.metadata

# Async drivers that require async_engine_from_config.
_ASYNC_DRIVERS = {"aiosqlite", "aiomysql", "asyncmy"}


def _is_async_url(url: str) -> bool:
    return any(f"+{d}" in url for d in _ASYNC_DRIVERS)


def _resolve_url(section: dict[str, str]) -> dict[str, str]:
    """Fill in ``$DATABASE_URL`` and expand ``~`` in SQLite paths."""
    url = section.get("sqlalchemy.url", "") or os.environ.get("DATABASE_URL", "")
    if url.startswith("sqlite") and ":///" in url:
        prefix, path = url.split(":///", 1)
        url = prefix + ":///" + os.path.expanduser(path)
    section["sqlalchemy.url"] = url
    return section


def _configure(**kwargs) -> None:  # type: ignore[no-untyped-def]
    url = kwargs.get("url") or str(kwargs["connection"].engine.url)
    context.configure(
        target_metadata=target_metadata,
        # SQLite cannot ALTER COLUMN; batch mode rebuilds the table instead.
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    section = _resolve_url(config.get_section(config.config_ini_section, {}))
    _configure(
        url=section["sqlalchemy.url"],
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:  # type: ignore[no-untyped-def]
    _configure(connection=connection)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations(section: dict[str, str]) -> None:
    connectable = async_engine_from_config(
        section,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations against a live database (sync or async driver)."""
    section = _resolve_url(config.get_section(config.config_ini_section, {}))

    if _is_async_url(section["sqlalchemy.url"]):
        asyncio.run(run_async_migrations(section))
        return

    connectable = engine_from_config(
        section,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        do_run_migrations(connection)
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
