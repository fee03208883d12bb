"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from backend.utils.config import get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
# Loggers owned by this service; third-party loggers keep the root level.
SERVICE_LOGGERS = ("app", "backend")

_LOGGER_INITIALIZED = False


def _resolve_level(level: Optional[str]) -> int:
    name = (level or get_settings().log_level).strip().upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"unknown log level: {level!r}")
    return resolved


def configure_logging(level: Optional[str] = None) -> None:
    """Install the stdout handler once and apply ``level`` to the service loggers.

    Modules call ``get_logger`` at import time, before the application
    factory knows its settings, so an explicit ``level`` is re-applied on
    every call while the handler is installed only on the first.
    """

    global _LOGGER_INITIALIZED
    resolved_level = _resolve_level(level)

    if not _LOGGER_INITIALIZED:
        logging.basicConfig(level=resolved_level, format=LOG_FORMAT, stream=sys.stdout)
        _LOGGER_INITIALIZED = True

    if level is not None:
        for name in SERVICE_LOGGERS:
            logging.getLogger(name).setLevel(resolved_level)


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    return logging.getLogger(name)
