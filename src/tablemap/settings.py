"""Environment-driven settings for tablemap.

Reads ``TABLEMAP_*`` environment variables (and a ``.env`` file) into a
validated :class:`TablemapSettings`. :func:`get_settings` caches the loaded
instance; pass ``_force_reload=True`` after changing the environment.

Examples:
    >>> import os
    >>> os.environ["TABLEMAP_DATABASE_URL"] = "sqlite:///shop.db"
    >>> get_settings(_force_reload=True).database_url
    'sqlite:///shop.db'

Tags:
    settings, configuration, pydantic, environment, tablemap
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TablemapSettings(BaseSettings):
    """Settings consumed by :func:`tablemap.connection.create_connection` and the CLI.

    Fields
    ──────
    database_url : SQLAlchemy URL used when no explicit URL is given
    echo_sql     : Echo every statement through the SQLAlchemy engine logger
    log_level    : structlog log level
    log_json     : Force JSON (True) or console (False) logs; None auto-detects
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLEMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Database ─────────────────────────────────────────────────
    database_url: str = Field(
        default="sqlite://",
        description="SQLAlchemy database URL",
    )
    echo_sql: bool = False

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None


_settings_cache: dict[str, TablemapSettings] = {}


def get_settings(*, _force_reload: bool = False) -> TablemapSettings:
    """Load, validate, and cache a :class:`TablemapSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = TablemapSettings()
    _settings_cache["default"] = settings
    return settings


__all__ = [
    "TablemapSettings",
    "get_settings",
]
