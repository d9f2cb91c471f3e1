"""Logging helpers for the occupancy monitor."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from loguru import logger


LOG_LEVEL_ENV = "OCCUPANCY_LOG_LEVEL"
LOG_ROTATION = "10 MB"
LOG_RETENTION = "7 days"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <8}</level> "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> {message}"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} {level: <8} [{thread.name}] "
    "{name}:{line} {message}"
)


def configure_logging(
    log_level: str = "INFO",
    log_dir: str | Path | None = "logs",
    *,
    json_logs: bool = False,
) -> None:
    """Route loguru output to stdout and, optionally, daily rotated files.

    ``OCCUPANCY_LOG_LEVEL`` takes precedence over ``log_level``. With
    ``log_dir=None`` only the console sink is installed.
    """
    level = os.getenv(LOG_LEVEL_ENV, log_level).upper()

    logger.remove()
    logger.add(sys.stdout, level=level, format=CONSOLE_FORMAT)
    if log_dir is None:
        return

    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    file_sinks = {"log": {"format": FILE_FORMAT}}
    if json_logs:
        file_sinks["jsonl"] = {"serialize": True}

    for suffix, options in file_sinks.items():
        logger.add(
            str(directory / f"occupancy_{{time:YYYY-MM-DD}}.{suffix}"),
            level=level,
            rotation=LOG_ROTATION,
            retention=LOG_RETENTION,
            **options,
        )
    logger.debug("Logging to {} at level {}", directory, level)
