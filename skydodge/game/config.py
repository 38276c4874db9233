# skydodge/game/config.py
from __future__ import annotations
import math
from dataclasses import dataclass

from .errors import ConfigError

# --- Reference playfield (logical units) ---
BASE_WIDTH = 1400
NARROW_BASE_WIDTH = 1100    # fixed-width variant, no scaling
BASE_HEIGHT = 700
FPS = 60

# --- Craft ---
CRAFT_SIZE = 100
CRAFT_LANE_X = 100          # craft's fixed x (obstacles drift left)
MOVE_STEP = 10              # logical units per movement tick
MOVE_INTERVAL_MS = 16       # movement timer period

# --- Obstacles / difficulty ---
OBSTACLE_SIZE = 40
INITIAL_SPEED = 8.0
SPEED_INCREMENT = 0.005     # per simulation tick
SPAWN_RATE = 0.04           # spawn probability per tick
SEED_DEFAULT = 12345

# --- Hit boxes (logical insets from the sprite square) ---
CRAFT_PAD_X = 30
CRAFT_PAD_TOP = 15
CRAFT_PAD_BOTTOM = 30
OBSTACLE_PAD = 10
MIN_OVERLAP = 10            # grazing contacts below this are ignored

# --- Viewport fitting ---
VIEWPORT_HEIGHT_FRACTION = 0.8
MAX_CONTAINER_WIDTH = 1100
MAX_CATCHUP_TICKS = 5       # ticks a single long frame may run

# --- Colors (RGB) ---
COLOR_SKY_TOP = (147, 197, 253)
COLOR_SKY_BOTTOM = (253, 224, 71)
COLOR_FRAME = (59, 130, 246)
COLOR_CRAFT = (30, 58, 138)
COLOR_OBSTACLE = (24, 24, 27)
COLOR_BADGE = (234, 179, 8)
COLOR_FG = (255, 255, 255)
COLOR_PANEL = (30, 58, 138)
COLOR_BUTTON = (234, 179, 8)
COLOR_TOUCH = (59, 130, 246)

# --- Logging ---
LOG_LEVEL = "INFO"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class PlayfieldConfig:
    """Simulation constants for one game, in reference (unscaled) units."""
    width: float = BASE_WIDTH
    height: float = BASE_HEIGHT
    craft_size: float = CRAFT_SIZE
    obstacle_size: float = OBSTACLE_SIZE
    initial_speed: float = INITIAL_SPEED
    speed_increment: float = SPEED_INCREMENT
    spawn_rate: float = SPAWN_RATE
    fps: int = FPS
    move_step: float = MOVE_STEP
    move_interval_ms: float = MOVE_INTERVAL_MS
    lane_x: float = CRAFT_LANE_X

    def validate(self) -> "PlayfieldConfig":
        """Raise ConfigError if the playfield cannot be simulated. Returns self."""
        positives = {
            "width": self.width,
            "height": self.height,
            "craft_size": self.craft_size,
            "obstacle_size": self.obstacle_size,
            "initial_speed": self.initial_speed,
            "fps": self.fps,
            "move_step": self.move_step,
            "move_interval_ms": self.move_interval_ms,
        }
        for name, value in positives.items():
            if not math.isfinite(value) or value <= 0:
                raise ConfigError(f"{name} must be a positive number, got {value!r}")
        for name, value in (("speed_increment", self.speed_increment), ("lane_x", self.lane_x)):
            if not math.isfinite(value) or value < 0:
                raise ConfigError(f"{name} must be a finite number >= 0, got {value!r}")
        if not 0.0 <= self.spawn_rate <= 1.0:
            raise ConfigError(f"spawn_rate must be in [0, 1], got {self.spawn_rate!r}")
        if self.craft_size > self.height or self.obstacle_size > self.height:
            raise ConfigError("craft and obstacle must fit inside the playfield height")
        return self


DEFAULT_PLAYFIELD = PlayfieldConfig()
# Fixed 1100x700 board with the slower difficulty ramp
NARROW_PLAYFIELD = PlayfieldConfig(width=NARROW_BASE_WIDTH, speed_increment=0.001)
