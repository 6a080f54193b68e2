"""Environment-driven settings for rowbind.

``RowbindSettings`` holds the few knobs the library and its CLI need:
where the database lives, how verbose logging is, and whether writes are
committed after every statement.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at startup, not at first query
    - **Environment-driven:** Reads ``ROWBIND_*`` env vars and ``.env`` files
    - **Sensible defaults:** In-memory SQLite works out of the box

Examples:
    >>> import os
    >>> os.environ["ROWBIND_DATABASE_URL"] = "sqlite:///library.db"
    >>> get_settings(_force_reload=True).database_url
    'sqlite:///library.db'

Tags:
    settings, configuration, pydantic, environment, rowbind

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RowbindSettings(BaseSettings):
    """Settings shared by the library and the ``rowbind`` CLI.

    Fields
    ──────
    database_url : URL, path or ``memory`` (see ``rowbind.core.connection``)
    log_level    : structlog log level
    log_format   : ``auto`` (JSON unless tty), ``json`` or ``console``
    autocommit   : Commit after every INSERT/UPDATE/DELETE
    echo_sql     : Log every executed statement at INFO instead of DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="ROWBIND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(default="memory", description="Database URL or SQLite path")
    autocommit: bool = Field(default=True)
    echo_sql: bool = Field(default=False)

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["auto", "json", "console"] = Field(default="auto")

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level {value!r}")
        return level

    @property
    def json_logs(self) -> bool | None:
        """``configure_logging(json_format=...)`` value for ``log_format``."""
        return {"auto": None, "json": True, "console": False}[self.log_format]


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, RowbindSettings] = {}


def get_settings(*, _force_reload: bool = False) -> RowbindSettings:
    """Load, validate, and cache a :class:`RowbindSettings` instance."""
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = RowbindSettings()
    return _settings_cache["default"]


__all__ = [
    "RowbindSettings",
    "get_settings",
]
