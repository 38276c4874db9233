# skydodge/game/collision.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import (
    CRAFT_PAD_X, CRAFT_PAD_TOP, CRAFT_PAD_BOTTOM, OBSTACLE_PAD, MIN_OVERLAP
)
from .obstacles import Obstacle
from .scale import ScaleState


@dataclass(frozen=True)
class Box:
    """Axis-aligned box in display px (y grows downward)."""
    left: float
    right: float
    top: float
    bottom: float


def craft_box(x: float, y: float, scale_state: ScaleState) -> Box:
    """Craft sprite square shrunk to its visible pixels (the sprite has transparent margins)."""
    pad_x = scale_state.to_display(CRAFT_PAD_X)
    size = scale_state.craft_size
    return Box(
        left=x + pad_x,
        right=x + size - pad_x,
        top=y + scale_state.to_display(CRAFT_PAD_TOP),
        bottom=y + size - scale_state.to_display(CRAFT_PAD_BOTTOM),
    )


def obstacle_box(x: float, y: float, scale_state: ScaleState) -> Box:
    pad = scale_state.to_display(OBSTACLE_PAD)
    size = scale_state.obstacle_size
    return Box(left=x + pad, right=x + size - pad, top=y + pad, bottom=y + size - pad)


def intersects(a: Box, b: Box, min_overlap: float = 0.0) -> bool:
    """
    Strict overlap test. When the boxes overlap, the overlap depth on
    both axes must also exceed `min_overlap` (filters edge grazes).
    Symmetric in (a, b).
    """
    if not (a.left < b.right and a.right > b.left and a.top < b.bottom and a.bottom > b.top):
        return False
    overlap_x = min(a.right - b.left, b.right - a.left)
    overlap_y = min(a.bottom - b.top, b.bottom - a.top)
    return overlap_x > min_overlap and overlap_y > min_overlap


def is_hit(craft: Box, obstacle: Box, scale: float) -> bool:
    return intersects(craft, obstacle, MIN_OVERLAP * scale)


def first_hit(craft_x: float, craft_y: float, obstacles: Iterable[Obstacle], scale_state: ScaleState) -> Optional[Obstacle]:
    """First obstacle (in iteration order) that confirms a hit on the craft, else None."""
    cb = craft_box(craft_x, craft_y, scale_state)
    for ob in obstacles:
        if is_hit(cb, obstacle_box(ob.x, ob.y, scale_state), scale_state.scale):
            return ob
    return None
