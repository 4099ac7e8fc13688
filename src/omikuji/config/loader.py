"""Configuration loading: TOML files, env var overrides, merge logic.

Discovery order (later overrides earlier):
    1. Built-in defaults (Pydantic model defaults)
    2. User config: ``~/.config/omikuji/config.toml``
    3. Project-local config: ``./omikuji.toml``
    4. ``$OMIKUJI_CONFIG`` environment variable (explicit path)
    5. Explicit ``path`` argument
    6. ``$DATABASE_URL`` (replaces ``database.url`` only)
    7. Programmatic overrides (passed to ``load_config``)
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from omikuji.core.errors import ConfigError

from .schema import LoggingConfig, OmikujiConfig

DATABASE_URL_ENV = "DATABASE_URL"


def _user_config_path() -> Path:
    """Return XDG-compliant user config path."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "omikuji" / "config.toml"


def _project_config_path() -> Path:
    return Path.cwd() / "omikuji.toml"


def _discover_config_files() -> list[Path]:
    """Return config files in merge order (first = lowest priority)."""
    paths: list[Path] = []

    user = _user_config_path()
    if user.is_file():
        paths.append(user)

    project = _project_config_path()
    if project.is_file():
        paths.append(project)

    env_path = os.environ.get("OMIKUJI_CONFIG")
    if env_path:
        p = Path(env_path)
        if not p.is_file():
            msg = f"OMIKUJI_CONFIG points to non-existent file: {env_path}"
            raise ConfigError(msg)
        paths.append(p)

    return paths


def _read_toml(path: Path) -> dict[str, Any]:
    """Read and parse a TOML file."""
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ConfigError(msg) from e
    except OSError as e:
        msg = f"Cannot read config file {path}: {e}"
        raise ConfigError(msg) from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override wins on conflicts."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> OmikujiConfig:
    """Load and validate configuration.

    Args:
        path: Explicit config file path (highest file priority).
        overrides: Dict of overrides merged last (highest overall priority).

    Returns:
        Validated OmikujiConfig instance.

    Raises:
        ConfigError: On invalid TOML, missing files, or validation failure.
    """
    merged: dict[str, Any] = {}

    files = _discover_config_files()

    if path is not None:
        p = Path(path)
        if not p.is_file():
            msg = f"Config file not found: {path}"
            raise ConfigError(msg)
        files.append(p)

    for config_file in files:
        data = _read_toml(config_file)
        merged = _deep_merge(merged, data)

    database_url = os.environ.get(DATABASE_URL_ENV)
    if database_url:
        merged = _deep_merge(merged, {"database": {"url": database_url}})

    if overrides:
        merged = _deep_merge(merged, overrides)

    try:
        return OmikujiConfig.model_validate(merged)
    except Exception as e:
        msg = f"Configuration validation failed: {e}"
        raise ConfigError(msg) from e


def configure_logging(config: LoggingConfig) -> None:
    """Apply level, format and optional file handler to the package logger."""
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        msg = f"Unknown log level: {config.level}"
        raise ConfigError(msg)

    logger = logging.getLogger("omikuji")
    logger.setLevel(level)

    formatter = logging.Formatter(config.format)
    handler: logging.Handler
    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)
