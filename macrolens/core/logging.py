"""Logging setup for the macrolens package logger."""

from __future__ import annotations

import logging

from macrolens.core.config import AppSettings

LOGGER_NAME = "macrolens"
LOG_FORMAT = "[%(levelname)s] [%(asctime)s] %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def configure_logging(settings: AppSettings) -> logging.Logger:
    """Attach a stream handler to the package logger and apply the level.

    Verbose diagnostics are only emitted in development; other environments
    keep warnings and errors.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not any(getattr(handler, "_macrolens", False) for handler in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        handler._macrolens = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    if settings.logging_enabled:
        logger.setLevel(settings.log_level.upper())
    else:
        logger.setLevel(logging.WARNING)
    return logger
