"""Loguru sink configuration for applications embedding cadence."""
from __future__ import annotations

import sys

from loguru import logger

from cadence.config import Settings, get_settings

LOG_FORMAT = "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {name}:{line} | {message}"


def configure_logging(settings: Settings | None = None) -> None:
    """
    Replace loguru's default sink with the configured ones.

    Args:
        settings: Settings instance or None for the cached process settings
    """
    settings = settings or get_settings()

    logger.remove()
    logger.add(sys.stderr, level=settings.log_level, format=LOG_FORMAT)

    if settings.log_file:
        logger.add(
            settings.log_file,
            level=settings.log_level,
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
        )

    logger.debug(f"Logging configured (level={settings.log_level}, file={settings.log_file})")
