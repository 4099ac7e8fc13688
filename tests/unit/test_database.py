"""Tests for engine/session creation."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import inspect

from omikuji.config.schema import DatabaseConfig, OmikujiConfig, StoreConfig
from omikuji.core.errors import StorageError
from omikuji.storage.database import _expand_url, _is_memory_sqlite, create_db, open_store
from omikuji.storage.store import RecordStore


class TestUrlHelpers:
    def test_expand_home(self):
        url = _expand_url("sqlite+aiosqlite:///~/data/omikuji.db")
        assert "~" not in url
        assert url.endswith(str(Path.home() / "data" / "omikuji.db"))

    def test_non_sqlite_untouched(self):
        url = "mysql+aiomysql://bot:pw@localhost/omikuji"
        assert _expand_url(url) == url

    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("sqlite+aiosqlite://", True),
            ("sqlite+aiosqlite:///:memory:", True),
            ("sqlite+aiosqlite:///tmp/x.db", False),
            ("mysql+aiomysql://bot@localhost/omikuji", False),
        ],
    )
    def test_is_memory(self, url: str, expected: bool):
        assert _is_memory_sqlite(url) is expected


class TestCreateDb:
    async def test_memory_creates_tables(self):
        factory, engine = await create_db(DatabaseConfig(url="sqlite+aiosqlite://"))
        try:
            async with engine.connect() as conn:
                tables = await conn.run_sync(
                    lambda sync_conn: set(inspect(sync_conn).get_table_names())
                )
            assert {"omikujis", "messages"} <= tables
        finally:
            await engine.dispose()

    async def test_connections_left_at_sqlite_defaults(self, tmp_path):  # type: ignore[no-untyped-def]
        factory, engine = await create_db(
            DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'omikuji.db'}")
        )
        try:
            async with engine.connect() as conn:
                result = await conn.exec_driver_sql("PRAGMA foreign_keys")
                assert result.scalar() == 0
        finally:
            await engine.dispose()

    async def test_file_creates_parent_directory(self, tmp_path):  # type: ignore[no-untyped-def]
        db_path = tmp_path / "nested" / "dir" / "omikuji.db"
        factory, engine = await create_db(
            DatabaseConfig(url=f"sqlite+aiosqlite:///{db_path}")
        )
        await engine.dispose()
        assert db_path.exists()

    async def test_file_reopen_keeps_rows(self, tmp_path):  # type: ignore[no-untyped-def]
        url = f"sqlite+aiosqlite:///{tmp_path / 'omikuji.db'}"

        factory, engine = await create_db(DatabaseConfig(url=url))
        await RecordStore(factory).create("omikuji", message="m", tg_id=1, tg_name="x")
        await engine.dispose()

        factory, engine = await create_db(DatabaseConfig(url=url))
        try:
            record = await RecordStore(factory).get("omikuji", 1)
            assert record.message == "m"
        finally:
            await engine.dispose()

    async def test_unopenable_file_raises_storage_error(self, tmp_path):  # type: ignore[no-untyped-def]
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        with pytest.raises(StorageError, match="Cannot create database directory"):
            await create_db(
                DatabaseConfig(url=f"sqlite+aiosqlite:///{blocker / 'x' / 'db'}")
            )


class TestOpenStore:
    async def test_open_store_uses_store_config(self):
        config = OmikujiConfig(
            database=DatabaseConfig(url="sqlite+aiosqlite://"),
            store=StoreConfig(hide_threshold=-1),
        )
        store, engine = await open_store(config)
        try:
            assert isinstance(store, RecordStore)
            assert store.config.hide_threshold == -1
            record = await store.create("omikuji", message="m", tg_id=1, tg_name="x")
            await store.adjust_vote("omikuji", record.id, -1)
            assert await store.count("omikuji", visible=True) == 0
        finally:
            await engine.dispose()
