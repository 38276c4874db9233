# skydodge/env/observations.py
from __future__ import annotations
from typing import List, Tuple
import numpy as np

from ..game.config import INITIAL_SPEED
from ..game.scale import ScaleState
from ..game.session import Snapshot

N_NEAREST = 3                 # obstacles described in the vector
SPEED_RANGE = 20.0            # speed above v0 that maps to 1.0
OBS_DIM = 2 + 2 * N_NEAREST
EMPTY_SLOT: Tuple[float, float] = (1.0, 0.0)   # "nothing ahead": far right, level with craft


def _clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else (hi if x > hi else x)


def observation_bounds() -> Tuple[np.ndarray, np.ndarray]:
    low = np.array([0.0, 0.0] + [0.0, -1.0] * N_NEAREST, dtype=np.float32)
    high = np.array([1.0, 1.0] + [1.0, 1.0] * N_NEAREST, dtype=np.float32)
    return low, high


def build_observation(snap: Snapshot,
                      speed: float,
                      scale_state: ScaleState,
                      initial_speed: float = INITIAL_SPEED) -> np.ndarray:
    """
    Returns a fixed (8,) float32 vector:
      [ craft_y_norm, speed_norm,
        dx0, dy0, dx1, dy1, dx2, dy2 ]
    - craft_y_norm in [0,1] over [0, height - craft_size]
    - speed_norm   in [0,1], (speed - initial_speed) / SPEED_RANGE
    - dx_i in [0,1]: horizontal gap from the craft to the i-th nearest obstacle
      still ahead of it, over the playfield width
    - dy_i in [-1,1]: obstacle centre minus craft centre, over the height
    Missing obstacles use EMPTY_SLOT.
    """
    craft = snap.craft
    y_norm = _clamp(craft.y_px / max(1e-6, scale_state.max_craft_y), 0.0, 1.0)
    speed_norm = _clamp((speed - initial_speed) / SPEED_RANGE, 0.0, 1.0)

    craft_cy = craft.y_px + craft.size_px / 2
    ahead = [ob for ob in snap.obstacles if ob.x_px + ob.size_px > craft.x_px]
    ahead.sort(key=lambda ob: ob.x_px)

    feats: List[float] = [y_norm, speed_norm]
    for i in range(N_NEAREST):
        if i < len(ahead):
            ob = ahead[i]
            dx = _clamp((ob.x_px - craft.x_px) / scale_state.width, 0.0, 1.0)
            dy = _clamp((ob.y_px + ob.size_px / 2 - craft_cy) / scale_state.height, -1.0, 1.0)
            feats.extend([dx, dy])
        else:
            feats.extend(EMPTY_SLOT)

    return np.asarray(feats, dtype=np.float32)
