"""Logging setup for Volta Lab entrypoints.

Library modules only call ``logging.getLogger(__name__)``; the CLI, the
dashboard and the scripts call :func:`setup_logging` once at start-up.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME: str = "volta_lab"
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: int | str = logging.INFO, log_file: Path | None = None) -> logging.Logger:
    """Attach console (and optionally file) handlers to the package logger.

    Calling it again replaces the handlers instead of stacking duplicates.

    Args:
        level: Logging level for the package logger and its handlers.
        log_file: Optional file to append log records to.  Its parent
            directory is created if missing.

    Returns:
        The ``volta_lab`` package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
