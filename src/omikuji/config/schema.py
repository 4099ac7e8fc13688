"""Pydantic models for omikuji configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DatabaseConfig(BaseModel):
    """Database connection settings."""

    url: str = "sqlite+aiosqlite:///~/.local/share/omikuji/omikuji.db"
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600
    # Seconds SQLite waits on a locked database before failing.
    busy_timeout: float = 30.0


class StoreConfig(BaseModel):
    """Record validation limits and read policy."""

    message_max_length: int | None = None
    tg_name_max_length: int = Field(default=32, ge=1, le=32)
    photo_max_length: int = Field(default=32, ge=1, le=32)
    hide_threshold: int = -3
    list_batch_size: int = Field(default=100, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str = ""
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class OmikujiConfig(BaseModel):
    """Top-level configuration for omikuji."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
