# skydodge/game/log.py
"""Logging setup shared by the game window, the env and the experiment scripts."""
from __future__ import annotations
import logging
from typing import Optional

from .config import LOG_LEVEL, LOG_FORMAT


def setup_logging(level: Optional[str] = None, name: str = "skydodge") -> logging.Logger:
    """
    Attach a console handler to the package logger.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (defaults to LOG_LEVEL)
        name: logger to configure

    Returns:
        The configured logger. Calling twice does not duplicate handlers.
    """
    if level is None:
        level = LOG_LEVEL
    numeric = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(name)
    logger.setLevel(numeric)

    if not any(getattr(h, "_skydodge", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._skydodge = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    for h in logger.handlers:
        h.setLevel(numeric)

    return logger
