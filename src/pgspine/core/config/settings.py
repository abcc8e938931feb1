"""
Centralized settings for pg-spine.

One validated, cached settings object. Every field can be set through a
``PGSPINE_*`` environment variable or a ``.env`` file; nested policies use
``__`` as delimiter::

    PGSPINE_LOG_LEVEL=DEBUG
    PGSPINE_RETRY__MAX_ATTEMPTS=5
    PGSPINE_PROFILE__OPERATION_TIMEOUT=300
    PGSPINE_CREDENTIALS_PATH=/etc/pgspine/creds.json

Connection strings themselves are not settings: they are read by
:class:`~pgspine.core.config.loader.LayeredConnectionStrings` from the files
named here.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pgspine.resilience.profiles import ProfileDefaults
from pgspine.resilience.retry import RetryPolicy

DEFAULT_CREDENTIALS_FILE = ".postgres-mcp-server-creds.json"


class PgSpineSettings(BaseSettings):
    """pg-spine process configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PGSPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    # ── Connection sources ───────────────────────────────────────
    appsettings_path: Path = Field(default=Path("appsettings.json"))
    credentials_path: Path = Field(
        default_factory=lambda: Path.home() / DEFAULT_CREDENTIALS_FILE,
        description="Per-user credentials file; its ConnectionStrings win over appsettings",
    )

    # ── Resilience ───────────────────────────────────────────────
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    profile: ProfileDefaults = Field(default_factory=ProfileDefaults)
    probe_timeout: float = Field(default=5.0, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] = Field(default="console")


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, PgSpineSettings] = {}


def get_settings(*, env_file: Path | None = None, _force_reload: bool = False) -> PgSpineSettings:
    """Load, validate, and cache a :class:`PgSpineSettings` instance."""
    cache_key = str(env_file or "")

    if not _force_reload and cache_key in _settings_cache:
        return _settings_cache[cache_key]

    if env_file is not None:
        settings = PgSpineSettings(_env_file=env_file)  # type: ignore[call-arg]
    else:
        settings = PgSpineSettings()

    _settings_cache[cache_key] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
