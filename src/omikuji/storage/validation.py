"""Input validation for store writes.

Runs before any database work, so a failure never leaves a partial row.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from omikuji.core.errors import ValidationError

if TYPE_CHECKING:
    from omikuji.config.schema import StoreConfig

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def _require_int(field: str, value: Any, low: int, high: int) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"expected an integer, got {type(value).__name__}"
        raise ValidationError(field, msg)
    if not low <= value <= high:
        msg = f"{value} is outside [{low}, {high}]"
        raise ValidationError(field, msg)
    return value


def _require_text(field: str, value: Any, max_length: int | None) -> str:
    if value is None:
        raise ValidationError(field, "is required")
    if not isinstance(value, str):
        msg = f"expected a string, got {type(value).__name__}"
        raise ValidationError(field, msg)
    if not value:
        raise ValidationError(field, "must not be empty")
    if max_length is not None and len(value) > max_length:
        msg = f"length {len(value)} exceeds {max_length} characters"
        raise ValidationError(field, msg)
    return value


def validate_message(value: Any, config: StoreConfig) -> str:
    return _require_text("message", value, config.message_max_length)


def validate_tg_id(value: Any) -> int:
    if value is None:
        raise ValidationError("tg_id", "is required")
    return _require_int("tg_id", value, INT64_MIN, INT64_MAX)


def validate_tg_name(value: Any, config: StoreConfig) -> str:
    return _require_text("tg_name", value, config.tg_name_max_length)


def validate_photo(value: Any, config: StoreConfig) -> str | None:
    """Photo is optional; ``None`` means no photo was supplied."""
    if value is None:
        return None
    return _require_text("photo", value, config.photo_max_length)


def validate_delta(value: Any) -> int:
    return _require_int("delta", value, INT32_MIN, INT32_MAX)


def validate_record_id(value: Any) -> int:
    """Type check only; ids outside the unsigned 32-bit range are never found."""
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"expected an integer, got {type(value).__name__}"
        raise ValidationError("record_id", msg)
    return value


def validate_new_record(
    config: StoreConfig,
    *,
    message: Any,
    tg_id: Any,
    tg_name: Any,
    photo: Any = None,
    photo_allowed: bool = True,
) -> dict[str, Any]:
    """Validate every field of a new record and return the column values.

    Raises:
        ValidationError: On the first invalid field.
    """
    values: dict[str, Any] = {
        "message": validate_message(message, config),
        "tg_id": validate_tg_id(tg_id),
        "tg_name": validate_tg_name(tg_name, config),
    }
    if photo is not None and not photo_allowed:
        raise ValidationError("photo", "this record kind does not carry a photo")
    if photo_allowed:
        values["photo"] = validate_photo(photo, config)
    return values
