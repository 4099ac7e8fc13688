"""Core errors shared by every module."""

from omikuji.core.errors import (
    ConfigError,
    NotFoundError,
    OmikujiError,
    StorageError,
    ValidationError,
)

__all__ = [
    "ConfigError",
    "NotFoundError",
    "OmikujiError",
    "StorageError",
    "ValidationError",
]
