# skydodge/game/errors.py
from __future__ import annotations


class ConfigError(ValueError):
    """Invalid reference playfield configuration."""
