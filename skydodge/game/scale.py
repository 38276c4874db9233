# skydodge/game/scale.py
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import (
    PlayfieldConfig, DEFAULT_PLAYFIELD,
    VIEWPORT_HEIGHT_FRACTION, MAX_CONTAINER_WIDTH
)


@dataclass(frozen=True)
class ScaleState:
    """
    Logical playfield fitted into the current viewport.
    Every size here is the reference value multiplied by `scale`.
    `prev_scale` is the scale this state replaced (used to move the craft on resize).
    """
    scale: float
    width: float
    height: float
    craft_size: float
    obstacle_size: float
    prev_scale: float

    @classmethod
    def identity(cls, config: PlayfieldConfig = DEFAULT_PLAYFIELD) -> "ScaleState":
        return cls(
            scale=1.0,
            width=float(config.width),
            height=float(config.height),
            craft_size=float(config.craft_size),
            obstacle_size=float(config.obstacle_size),
            prev_scale=1.0,
        )

    @property
    def max_craft_y(self) -> float:
        return max(0.0, self.height - self.craft_size)

    def to_display(self, v: float) -> float:
        return v * self.scale


def _valid_dim(v: float) -> bool:
    return isinstance(v, (int, float)) and math.isfinite(v) and v > 0


def recompute(viewport_w: float,
              viewport_h: float,
              config: PlayfieldConfig = DEFAULT_PLAYFIELD,
              previous: Optional[ScaleState] = None) -> Optional[ScaleState]:
    """Fit the reference playfield into the viewport. None if the viewport is unusable."""
    if not (_valid_dim(viewport_w) and _valid_dim(viewport_h)):
        return None

    scale = min(viewport_w / config.width, viewport_h / config.height)
    if scale <= 0.0:
        return None

    return ScaleState(
        scale=scale,
        width=config.width * scale,
        height=config.height * scale,
        craft_size=config.craft_size * scale,
        obstacle_size=config.obstacle_size * scale,
        prev_scale=previous.scale if previous is not None else scale,
    )


def rescale_position(old_scale: float, new_scale: float, pos: float) -> float:
    """Keep a display-space position at the same logical place after a scale change."""
    if old_scale <= 0.0:
        return pos
    return pos / old_scale * new_scale


def fit_viewport(window_w: int, window_h: int) -> Tuple[float, float]:
    """Container the playfield is laid into: capped width, 80% of the window height."""
    return float(min(window_w, MAX_CONTAINER_WIDTH)), window_h * VIEWPORT_HEIGHT_FRACTION
