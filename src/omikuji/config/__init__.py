"""Configuration loading and validation."""

from omikuji.config.loader import configure_logging, load_config
from omikuji.config.schema import (
    DatabaseConfig,
    LoggingConfig,
    OmikujiConfig,
    StoreConfig,
)

__all__ = [
    "DatabaseConfig",
    "LoggingConfig",
    "OmikujiConfig",
    "StoreConfig",
    "configure_logging",
    "load_config",
]
