"""Process-wide logging setup for the wayfinding service."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
ROOT_LOGGER_NAME = "wayfinding"


def _configured_level() -> int:
    raw = os.getenv("WAYFINDING_LOG_LEVEL", "INFO").strip().upper()
    return getattr(logging, raw, logging.INFO)


def setup_logging() -> logging.Logger:
    """Configure the package logger once and return it."""
    level = _configured_level()
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    # Avoid duplicate console handlers on repeated app creation.
    if not any(isinstance(h, logging.StreamHandler) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.setLevel(level)
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger or a named child of it.

    Module names already rooted at the package (`wayfinding.grid`) are used
    as-is so they do not nest twice.
    """
    base = logging.getLogger(ROOT_LOGGER_NAME)
    if not name or name == ROOT_LOGGER_NAME:
        return base
    if name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return base.getChild(name)


logger = setup_logging()
