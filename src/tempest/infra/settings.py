"""
Application settings for Tempest.

This module defines all configuration settings for Tempest using Pydantic BaseSettings.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings using Pydantic BaseSettings."""

    # Database settings (content catalog lives in the platform database)
    database_url: str = Field(default="sqlite:///./tempest.db", alias="DATABASE_URL")
    echo_sql: bool = Field(default=False, alias="ECHO_SQL")
    pool_timeout: int = Field(default=30, alias="DB_POOL_TIMEOUT")
    connect_timeout: int = Field(default=30, alias="DB_CONNECT_TIMEOUT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    env: str = Field(default="dev", alias="ENV")  # dev|prod|test

    # Scheduling
    timezone: str = Field(default="UTC", alias="TEMPEST_TIMEZONE")
    schedule_window_days: int = Field(default=7, ge=1, alias="SCHEDULE_WINDOW_DAYS")
    placeholder_window_days: int = Field(default=1, ge=1, alias="PLACEHOLDER_WINDOW_DAYS")
    scheduler_seed: int | None = Field(default=None, alias="SCHEDULER_SEED")

    # Program guide
    guide_hours_to_show: int = Field(default=12, ge=1, alias="GUIDE_HOURS_TO_SHOW")
    guide_minutes_per_slot: int = Field(default=30, ge=1, alias="GUIDE_MINUTES_PER_SLOT")

    # Background refresh
    refresh_interval_seconds: int = Field(default=60, ge=1, alias="REFRESH_INTERVAL_SECONDS")
    regeneration_interval_seconds: int = Field(
        default=3600, ge=60, alias="REGENERATION_INTERVAL_SECONDS"
    )
    catalog_sync_interval_seconds: int = Field(
        default=300, ge=1, alias="CATALOG_SYNC_INTERVAL_SECONDS"
    )

    # Optional file-backed collaborators
    channels_config_path: str | None = Field(default=None, alias="CHANNELS_CONFIG_PATH")
    asset_catalog_path: str | None = Field(default=None, alias="ASSET_CATALOG_PATH")
    snapshot_path: str | None = Field(default=None, alias="SNAPSHOT_PATH")

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields like PYTHONPATH from .env
    )


def _resolve_env_file() -> str | None:
    # 1) Explicit override
    explicit = os.getenv("TEMPEST_ENV_FILE")
    if explicit and Path(explicit).is_file():
        return explicit

    # 2) CWD .env
    cwd_env = Path.cwd() / ".env"
    if cwd_env.is_file():
        return str(cwd_env)

    # 3) Walk up from this file to find nearest .env
    here = Path(__file__).resolve()
    for parent in here.parents:
        candidate = parent / ".env"
        if candidate.is_file():
            return str(candidate)
    return None


# Global settings instance (load from best-effort .env discovery)
_env_file = _resolve_env_file()
settings = Settings(_env_file=_env_file) if _env_file else Settings()  # type: ignore[call-arg]
