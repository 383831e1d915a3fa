"""
Logging setup for the whole application.
Warnings go to the console, everything at the configured level goes to a rotating file in the data directory.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from .config import Settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER_NAME = "carlot"

_configured = False


def configure_logging(settings: Settings) -> None:
    """Attach console and file handlers to the package logger once per process."""
    global _configured
    if _configured:
        return
    _configured = True

    level = settings.log_level.upper()
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Console stays quiet so it does not interleave with menu prompts
    console = logging.StreamHandler()
    console.setLevel(logging.WARNING)
    console.setFormatter(fmt)

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        filename=settings.log_path,
        maxBytes=1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(fmt)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.addHandler(console)
    root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Get a named logger. Call this at the top of every module."""
    return logging.getLogger(name)
