"""Centralized settings management for the concert catalog."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings powered by pydantic-settings.

    Loads configuration from environment variables and a .env file in the
    current working directory.
    """

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    # DEBUG forces DEBUG logging unless a level is given on the command line.
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    # -------------------------------------------------------------------------
    # PATHS
    # -------------------------------------------------------------------------
    # CONFIG_DIR points to concert_catalog/configs
    CONFIG_DIR: Path = Path(__file__).resolve().parent

    RESOLUTION_CONFIG_PATH: Path = CONFIG_DIR / "resolution.yaml"

    # -------------------------------------------------------------------------
    # RETENTION
    # -------------------------------------------------------------------------
    # Concerts dated before (today - RETENTION_DAYS) are dropped on persist.
    RETENTION_DAYS: int = Field(default=1, ge=0)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns
    -------
    Settings
        The singleton settings instance.
    """
    return Settings()
