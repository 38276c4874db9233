# skydodge/game/obstacles.py
from __future__ import annotations
import itertools
import logging
import math
import random
from dataclasses import dataclass, replace
from typing import List, Optional

from .config import SPAWN_RATE
from .scale import ScaleState

logger = logging.getLogger(__name__)


@dataclass
class Obstacle:
    x: float                  # display px, decreases every tick
    y: float                  # display px, fixed at spawn
    rotation: float = 0.0     # degrees, display only
    key: int = 0              # insertion id, stable render key

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


def cull(obstacles: List[Obstacle], obstacle_size: float) -> List[Obstacle]:
    """Drop obstacles that are fully off-screen to the left (x <= -size), and broken ones."""
    kept: List[Obstacle] = []
    for ob in obstacles:
        if not ob.is_finite():
            logger.warning("dropping obstacle with non-finite position x=%r y=%r", ob.x, ob.y)
            continue
        if ob.x > -obstacle_size:
            kept.append(ob)
    return kept


def advance(obstacles: List[Obstacle], speed: float, scale: float) -> List[Obstacle]:
    dx = speed * scale
    return [replace(ob, x=ob.x - dx) for ob in obstacles]


class ObstaclePool:
    """
    Spawns obstacles at the right edge of the playfield.
    The RNG is owned by the pool, so the same seed gives the same spawn sequence.
    """
    def __init__(self, seed: int | None = None, spawn_rate: float = SPAWN_RATE):
        self.spawn_rate = float(spawn_rate)
        self.seed: int = 0
        self.rng = random.Random()
        self._keys = itertools.count(1)
        self.reseed(seed)

    def reseed(self, seed: int | None) -> int:
        if seed is None:
            seed = random.randrange(0, 2**32 - 1)
        self.seed = int(seed)
        self.rng.seed(self.seed)
        self._keys = itertools.count(1)
        return self.seed

    def maybe_spawn(self, scale_state: ScaleState) -> Optional[Obstacle]:
        if self.rng.random() >= self.spawn_rate:
            return None
        span = max(0.0, scale_state.height - scale_state.obstacle_size)
        return Obstacle(
            x=scale_state.width,
            y=self.rng.random() * span,   # [0, height - size)
            rotation=0.0,
            key=next(self._keys),
        )

    def update(self, obstacles: List[Obstacle], speed: float, scale_state: ScaleState) -> List[Obstacle]:
        """
        One tick of the pool: cull -> advance -> spawn.
        A new obstacle is never moved or culled in the tick it appears.
        """
        survivors = cull(obstacles, scale_state.obstacle_size)
        moved = advance(survivors, speed, scale_state.scale)
        spawned = self.maybe_spawn(scale_state)
        if spawned is not None:
            moved.append(spawned)
        return moved
