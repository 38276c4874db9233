# skydodge/game/simulation.py
"""
Fixed-tick simulation.

`tick` and `move_tick` are plain state transitions: they take a SessionState and
return the next one, so they can be driven by the game window, the gym env or a
test without any real timer. `SimulationClock` is the cooperative scheduler the
window uses to turn wall-clock dt into those ticks.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional

from .config import PlayfieldConfig, DEFAULT_PLAYFIELD, FPS, MOVE_INTERVAL_MS, MAX_CATCHUP_TICKS
from .craft import Craft
from .collision import first_hit
from .obstacles import Obstacle, ObstaclePool
from .scale import ScaleState


@dataclass
class SessionState:
    score: int
    speed: float
    running: bool
    craft: Craft
    obstacles: List[Obstacle] = field(default_factory=list)
    ticks: int = 0                 # simulation ticks since reset


def initial_state(scale_state: ScaleState, config: PlayfieldConfig = DEFAULT_PLAYFIELD) -> SessionState:
    return SessionState(
        score=0,
        speed=float(config.initial_speed),
        running=True,
        craft=Craft(x=config.lane_x * scale_state.scale, y=scale_state.height / 2),
        obstacles=[],
        ticks=0,
    )


def tick(state: SessionState,
         scale_state: ScaleState,
         pool: ObstaclePool,
         config: PlayfieldConfig = DEFAULT_PLAYFIELD) -> SessionState:
    """
    One 60 Hz simulation step:
      score += 1, speed += increment, obstacles cull -> advance -> spawn,
      then collision scan against the advanced list.
    A game that is over is returned untouched.
    """
    if not state.running:
        return state

    # Obstacles move with the speed in effect at the start of the tick
    obstacles = pool.update(state.obstacles, state.speed, scale_state)
    hit = first_hit(state.craft.x, state.craft.y, obstacles, scale_state)

    return replace(
        state,
        score=state.score + 1,
        speed=state.speed + config.speed_increment,
        obstacles=obstacles,
        running=hit is None,
        ticks=state.ticks + 1,
    )


def move_tick(state: SessionState,
              scale_state: ScaleState,
              config: PlayfieldConfig = DEFAULT_PLAYFIELD) -> SessionState:
    """Apply the held movement intent once. No-op when the game is over or nothing is held."""
    if not state.running:
        return state
    if not (state.craft.moving_up or state.craft.moving_down):
        return state
    craft = replace(state.craft)
    craft.apply_movement(scale_state, config.move_step)
    return replace(state, craft=craft)


class FixedTimer:
    """
    Fixed-period accumulator. elapse(dt) lets time pass, until_next says how
    long until the period completes and fire() consumes it.
    A cancelled timer accumulates nothing and never fires until arm().
    """
    def __init__(self, interval_s: float):
        assert interval_s > 0, "interval must be > 0"
        self.interval_s = float(interval_s)
        self.accum = 0.0
        self.armed = False

    def arm(self):
        self.armed = True
        self.accum = 0.0

    def cancel(self):
        self.armed = False
        self.accum = 0.0

    @property
    def until_next(self) -> float:
        return max(0.0, self.interval_s - self.accum)

    def elapse(self, dt: float):
        if self.armed and dt > 0.0:
            self.accum += dt

    def fire(self):
        """Consume one completed period."""
        self.accum = 0.0


class SimulationClock:
    """
    Drives the simulation timer and the movement timer from one cooperative loop.
    Callbacks run one at a time in time order. On a tie the movement tick goes
    first so the collision scan sees the craft where the player put it.
    """
    def __init__(self,
                 on_sim_tick: Callable[[], None],
                 on_move_tick: Callable[[], None],
                 fps: int = FPS,
                 move_interval_ms: float = MOVE_INTERVAL_MS,
                 max_catchup_ticks: int = MAX_CATCHUP_TICKS):
        self.on_sim_tick = on_sim_tick
        self.on_move_tick = on_move_tick
        self.sim_timer = FixedTimer(1.0 / fps)
        self.move_timer = FixedTimer(move_interval_ms / 1000.0)
        self.max_catchup_s = max_catchup_ticks * self.sim_timer.interval_s

    @property
    def running(self) -> bool:
        return self.sim_timer.armed

    def start(self):
        self.sim_timer.arm()
        self.move_timer.arm()

    def stop(self):
        """Game over: no timer stays armed."""
        self.sim_timer.cancel()
        self.move_timer.cancel()

    def advance(self, dt: float) -> int:
        """Run every tick that falls due within dt seconds. Returns the simulation ticks run."""
        remaining = min(max(0.0, dt), self.max_catchup_s)
        sim_ticks = 0

        while True:
            timers = [t for t in (self.move_timer, self.sim_timer) if t.armed]
            if not timers:
                break
            nxt: Optional[FixedTimer] = min(timers, key=lambda t: t.until_next)
            wait = nxt.until_next
            if wait > remaining:
                for t in timers:
                    t.elapse(remaining)
                break

            remaining -= wait
            for t in timers:
                t.elapse(wait)
            nxt.fire()
            if nxt is self.sim_timer:
                sim_ticks += 1
                self.on_sim_tick()
            else:
                self.on_move_tick()

        return sim_ticks
