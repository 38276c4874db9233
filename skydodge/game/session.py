# skydodge/game/session.py
from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Any, List, Optional, Tuple

from .config import PlayfieldConfig, DEFAULT_PLAYFIELD
from .obstacles import ObstaclePool
from .scale import ScaleState, recompute, rescale_position
from .simulation import SessionState, SimulationClock, initial_state, tick, move_tick

logger = logging.getLogger(__name__)


# -------------------- Render snapshot --------------------

@dataclass(frozen=True)
class CraftView:
    x_px: float
    y_px: float
    size_px: float


@dataclass(frozen=True)
class ObstacleView:
    x_px: float
    y_px: float
    size_px: float
    rotation_deg: float
    key: int


@dataclass(frozen=True)
class Snapshot:
    """Everything the presentation layer may read about the game."""
    craft: CraftView
    obstacles: Tuple[ObstacleView, ...]
    score: int
    running: bool
    width_px: float
    height_px: float


# -------------------- Listeners --------------------

class Attachment:
    """Handle returned by GameSession.attach(). Usable as a context manager."""
    def __init__(self, session: "GameSession", listener: Any):
        self._session = session
        self.listener = listener
        self.active = True

    def detach(self):
        if self.active:
            self._session._listeners.remove(self.listener)
            self.active = False

    def __enter__(self) -> "Attachment":
        return self

    def __exit__(self, *exc):
        self.detach()
        return False


class GameSession:
    """
    Composition root: owns the SessionState, the ScaleState, the obstacle pool
    and the clock that ticks them.

    Listeners are plain objects implementing any of:
      on_game_start(), on_game_over(score), on_reset(), on_snapshot(snapshot)
    They are notified fire-and-forget; an exception in one is logged and
    never reaches the simulation.
    """
    def __init__(self,
                 config: PlayfieldConfig = DEFAULT_PLAYFIELD,
                 seed: int | None = None,
                 viewport: Optional[Tuple[float, float]] = None):
        self.config = config.validate()
        self.pool = ObstaclePool(seed, spawn_rate=config.spawn_rate)
        self._scale = ScaleState.identity(config)
        if viewport is not None:
            fitted = recompute(viewport[0], viewport[1], config)
            if fitted is not None:
                self._scale = fitted

        self._listeners: List[Any] = []
        self.clock = SimulationClock(
            on_sim_tick=self._on_sim_tick,
            on_move_tick=self._on_move_tick,
            fps=config.fps,
            move_interval_ms=config.move_interval_ms,
        )
        self._state = initial_state(self._scale, config)
        self.clock.start()
        self._snapshot = self._build_snapshot()

    # -------------------- Read-only views --------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def scale(self) -> ScaleState:
        return self._scale

    @property
    def seed(self) -> int:
        return self.pool.seed

    @property
    def running(self) -> bool:
        return self._state.running

    def snapshot(self) -> Snapshot:
        return self._snapshot

    # -------------------- Lifecycle --------------------

    def reset(self, seed: int | None = None) -> Snapshot:
        """Fresh run from any state. Reseeds the spawn RNG only when a seed is given."""
        if seed is not None:
            self.pool.reseed(seed)
        self._state = initial_state(self._scale, self.config)
        self.clock.start()
        self._snapshot = self._build_snapshot()
        logger.info("session reset (seed=%s)", self.pool.seed)
        self._notify("on_reset")
        self._notify("on_game_start")
        self._notify("on_snapshot", self._snapshot)
        return self._snapshot

    def on_resize(self, viewport_w: float, viewport_h: float) -> bool:
        """Refit the playfield. Returns False (and keeps the old scale) for an unusable viewport."""
        fitted = recompute(viewport_w, viewport_h, self.config, previous=self._scale)
        if fitted is None:
            logger.warning("ignoring resize to %rx%r", viewport_w, viewport_h)
            return False

        self._scale = fitted
        craft = replace(
            self._state.craft,
            x=rescale_position(fitted.prev_scale, fitted.scale, self._state.craft.x),
            y=rescale_position(fitted.prev_scale, fitted.scale, self._state.craft.y),
        )
        craft.clamp(fitted)
        self._state = replace(self._state, craft=craft)
        self._snapshot = self._build_snapshot()
        self._notify("on_snapshot", self._snapshot)
        return True

    # -------------------- Input signals --------------------

    def move_up_pressed(self):
        if self._state.running:
            self._state.craft.press_up()

    def move_up_released(self):
        self._state.craft.release_up()

    def move_down_pressed(self):
        if self._state.running:
            self._state.craft.press_down()

    def move_down_released(self):
        self._state.craft.release_down()

    def buttons_released(self):
        self._state.craft.release_all()

    def request_reset(self) -> Snapshot:
        return self.reset()

    # -------------------- Ticking --------------------

    def advance(self, dt: float) -> int:
        """Feed wall-clock seconds to the clock. Returns simulation ticks run."""
        return self.clock.advance(dt)

    def step(self) -> Snapshot:
        """Exactly one movement tick then one simulation tick (headless driving)."""
        if self.clock.running:
            self._on_move_tick()
            self._on_sim_tick()
        return self._snapshot

    def _on_move_tick(self):
        self._state = move_tick(self._state, self._scale, self.config)

    def _on_sim_tick(self):
        was_running = self._state.running
        self._state = tick(self._state, self._scale, self.pool, self.config)
        self._snapshot = self._build_snapshot()

        if was_running and not self._state.running:
            self.clock.stop()
            self._state.craft.release_all()
            logger.info("game over at score %d (speed %.3f)", self._state.score, self._state.speed)
            self._notify("on_game_over", self._state.score)
        self._notify("on_snapshot", self._snapshot)

    # -------------------- Listeners --------------------

    def attach(self, listener: Any) -> Attachment:
        self._listeners.append(listener)
        return Attachment(self, listener)

    def _notify(self, event: str, *args):
        for listener in list(self._listeners):
            handler = getattr(listener, event, None)
            if handler is None:
                continue
            try:
                handler(*args)
            except Exception:
                logger.exception("listener %r failed on %s", listener, event)

    # -------------------- Snapshot --------------------

    def _build_snapshot(self) -> Snapshot:
        sc = self._scale
        st = self._state
        return Snapshot(
            craft=CraftView(x_px=st.craft.x, y_px=st.craft.y, size_px=sc.craft_size),
            obstacles=tuple(
                ObstacleView(x_px=ob.x, y_px=ob.y, size_px=sc.obstacle_size,
                             rotation_deg=ob.rotation, key=ob.key)
                for ob in st.obstacles
            ),
            score=st.score,
            running=st.running,
            width_px=sc.width,
            height_px=sc.height,
        )
