"""Tests for the core error hierarchy."""

from omikuji.core.errors import (
    ConfigError,
    NotFoundError,
    OmikujiError,
    StorageError,
    ValidationError,
)


class TestHierarchy:
    """All errors inherit from OmikujiError."""

    def test_subclasses(self):
        errors = [
            ValidationError("tg_name", "too long"),
            NotFoundError("omikuji", 1),
            StorageError("db down"),
            ConfigError("bad config"),
        ]
        for err in errors:
            assert isinstance(err, OmikujiError)

    def test_validation_error_is_not_builtin_value_error(self):
        assert not isinstance(ValidationError("f", "m"), ValueError)


class TestAttributes:
    def test_validation_error_field(self):
        err = ValidationError("tg_name", "length 40 exceeds 32 characters")
        assert err.field == "tg_name"
        assert str(err) == "tg_name: length 40 exceeds 32 characters"

    def test_not_found_error(self):
        err = NotFoundError("message", 42)
        assert err.kind == "message"
        assert err.record_id == 42
        assert str(err) == "message not found: 42"
