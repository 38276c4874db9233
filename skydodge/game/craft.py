# skydodge/game/craft.py
from __future__ import annotations
import logging
import math
from dataclasses import dataclass

from .config import MOVE_STEP
from .scale import ScaleState

logger = logging.getLogger(__name__)


@dataclass
class Craft:
    """
    Player craft on a fixed horizontal lane. Only y moves.
    Positions are display px in the current scale.
    - moving_up / moving_down are the held-input intents
    """
    x: float
    y: float
    moving_up: bool = False
    moving_down: bool = False

    # --- input intents ---
    def press_up(self):
        self.moving_up = True

    def release_up(self):
        self.moving_up = False

    def press_down(self):
        self.moving_down = True

    def release_down(self):
        self.moving_down = False

    def release_all(self):
        """On-screen buttons release both directions at once."""
        self.moving_up = False
        self.moving_down = False

    # --- movement ---
    def apply_movement(self, scale_state: ScaleState, move_step: float = MOVE_STEP):
        """
        One movement tick. Up is applied first, then down, each clamped
        to [0, height - craft_size]. Holding both keys therefore nets out
        unless a clamp bites.
        """
        step = scale_state.to_display(move_step)
        if self.moving_up:
            self.y = max(0.0, self.y - step)
        if self.moving_down:
            self.y = min(scale_state.max_craft_y, self.y + step)

    def clamp(self, scale_state: ScaleState) -> bool:
        """Force y back into the lane. Returns True if a correction was needed."""
        lo, hi = 0.0, scale_state.max_craft_y
        y = self.y
        if not math.isfinite(y):
            y = scale_state.height / 2
        y = min(hi, max(lo, y))
        if y != self.y:
            logger.warning("craft y=%r out of bounds, clamped to %.2f", self.y, y)
            self.y = y
            return True
        return False
