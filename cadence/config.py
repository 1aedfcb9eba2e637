"""
Configuration settings for the cadence study engine.

Uses Pydantic Settings for environment variable management with .env file support.
Per-learner study settings (intervals, interleaving) live in the key-value store,
see cadence.study.models.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process settings loaded from environment variables (prefix CADENCE_)."""

    model_config = SettingsConfigDict(
        env_prefix="CADENCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # Storage
    # ========================================
    storage_dir: Path = Field(
        default=Path.home() / ".cadence" / "store",
        description="Directory used by the JSON file key-value store",
    )

    # ========================================
    # Practice Sessions
    # ========================================
    history_limit: int = Field(
        default=50,
        ge=1,
        description="Maximum number of finished sessions kept in history",
    )
    statistics_window: int = Field(
        default=100,
        ge=1,
        description="Number of recent sessions analysed by get_statistics",
    )
    isolate_listeners: bool = Field(
        default=False,
        description="Keep notifying listeners when one of them raises",
    )

    # ========================================
    # Review Queue
    # ========================================
    undated_first: bool = Field(
        default=True,
        description="Sort items without any due date before dated items",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
