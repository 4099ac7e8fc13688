"""Exception hierarchy for omikuji.

Every module imports from here. The hierarchy is:

    OmikujiError
    ├── ValidationError(field)
    ├── NotFoundError(kind, record_id)
    ├── StorageError
    └── ConfigError
"""

from __future__ import annotations


class OmikujiError(Exception):
    """Base exception for all omikuji errors."""


# ─── Input Errors ─────────────────────────────────────────────


class ValidationError(OmikujiError):
    """Malformed, oversized or missing input field.

    Raised before any write is attempted.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class NotFoundError(OmikujiError):
    """Operation referenced a record id that does not exist."""

    def __init__(self, kind: str, record_id: int) -> None:
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


# ─── Configuration Errors ─────────────────────────────────────


class ConfigError(OmikujiError):
    """Invalid configuration."""


# ─── Storage Errors ───────────────────────────────────────────


class StorageError(OmikujiError):
    """Database unavailable or write failed."""
