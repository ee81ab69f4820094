"""Configuration management for the user management service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .database import resolve_database_path
from .passwords import DEFAULT_ROUNDS

STORAGE_BACKENDS = ("sqlite", "memory")

_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() not in _FALSE_VALUES


def _positive_int(name: str, value: object) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Configuration value '{name}' must be an integer") from exc
    if number < 1:
        raise ValueError(f"Configuration value '{name}' must be a positive integer")
    return number


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the web application."""

    database_path: Path
    session_secret: Optional[str] = None
    secure_cookies: bool = False
    session_max_age: int = 60 * 60 * 8
    password_rounds: int = DEFAULT_ROUNDS
    storage: str = "sqlite"
    log_level: str = "INFO"

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw dictionary data."""

        raw_db_path = data.get("database_path")
        if raw_db_path:
            expanded = Path(str(raw_db_path)).expanduser()
            if not expanded.is_absolute() and base_path is not None:
                expanded = base_path / expanded
            database_path = expanded.resolve(strict=False)
        else:
            database_path = resolve_database_path(None)

        storage = str(data.get("storage", "sqlite")).strip().lower()
        if storage not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend '{storage}'; expected one of {', '.join(STORAGE_BACKENDS)}"
            )

        secret = data.get("session_secret")
        return Settings(
            database_path=database_path,
            session_secret=str(secret) if secret else None,
            secure_cookies=_parse_bool(data.get("secure_cookies", False)),
            session_max_age=_positive_int("session_max_age", data.get("session_max_age", 60 * 60 * 8)),
            password_rounds=_positive_int("password_rounds", data.get("password_rounds", DEFAULT_ROUNDS)),
            storage=storage,
            log_level=str(data.get("log_level", "INFO")).upper(),
        )

    def with_env_overrides(self, environ: Mapping[str, str]) -> "Settings":
        """Return a copy with ``USER_MANAGEMENT_*`` environment values applied."""

        overrides: Dict[str, object] = {}
        db_path = environ.get("USER_MANAGEMENT_DB_PATH")
        if db_path:
            overrides["database_path"] = resolve_database_path(db_path)
        secret = environ.get("USER_MANAGEMENT_SESSION_SECRET")
        if secret:
            overrides["session_secret"] = secret
        secure = environ.get("USER_MANAGEMENT_SESSION_SECURE")
        if secure is not None:
            overrides["secure_cookies"] = _parse_bool(secure)
        storage = environ.get("USER_MANAGEMENT_STORAGE")
        if storage:
            storage = storage.strip().lower()
            if storage not in STORAGE_BACKENDS:
                raise ValueError(
                    f"Unknown storage backend '{storage}'; expected one of {', '.join(STORAGE_BACKENDS)}"
                )
            overrides["storage"] = storage
        log_level = environ.get("USER_MANAGEMENT_LOG_LEVEL")
        if log_level:
            overrides["log_level"] = log_level.strip().upper()
        return replace(self, **overrides)


def load_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from an optional YAML file, then apply environment overrides."""

    if environ is None:
        environ = os.environ
    if config_path is None:
        config_path = resolve_config_path(environ.get("USER_MANAGEMENT_CONFIG"))

    if config_path.is_file():
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Configuration file {config_path} must contain a mapping")
        settings = Settings.from_dict(raw, base_path=config_path.parent)
    else:
        settings = Settings.from_dict({})

    return settings.with_env_overrides(environ)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "settings.yaml").resolve(strict=False)
    return candidate


__all__ = ["Settings", "STORAGE_BACKENDS", "load_settings", "resolve_config_path"]
