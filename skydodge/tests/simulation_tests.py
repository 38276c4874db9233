# skydodge/tests/simulation_tests.py
"""
Simulation-core tests: clamp, pool lifecycle, collisions, ticking, reset, freeze.

Usage (from repo root):
  python -m pytest skydodge/tests
  python -m skydodge.tests.simulation_tests
"""

from __future__ import annotations
import random
import sys

from skydodge.game.config import (
    DEFAULT_PLAYFIELD, PlayfieldConfig, INITIAL_SPEED, SPEED_INCREMENT, MAX_CATCHUP_TICKS
)
from skydodge.game.collision import Box, craft_box, obstacle_box, intersects, is_hit, first_hit
from skydodge.game.craft import Craft
from skydodge.game.obstacles import Obstacle, ObstaclePool, cull, advance
from skydodge.game.scale import ScaleState, recompute
from skydodge.game.session import GameSession
from skydodge.game.simulation import FixedTimer, SimulationClock, tick, initial_state

NO_SPAWN = PlayfieldConfig(spawn_rate=0.0)
UNIT = ScaleState.identity()


def _force_hit(session: GameSession):
    """Put an obstacle that will sit inside the craft's hit box after the next advance."""
    c = session.state.craft
    s = session.scale.scale
    session.state.obstacles.append(
        Obstacle(x=c.x + (38 + session.state.speed) * s, y=c.y + 30 * s, key=999))


# ------------------------ Craft ------------------------

def test_clamp_invariant_random_intents():
    for viewport in (None, (700, 350), (2100, 1050)):
        session = GameSession(config=NO_SPAWN, seed=1, viewport=viewport)
        hi = session.scale.height - session.scale.craft_size
        rng = random.Random(7)
        for _ in range(600):
            session.buttons_released()
            if rng.random() < 0.5:
                session.move_up_pressed()
            if rng.random() < 0.5:
                session.move_down_pressed()
            session.step()
            y = session.state.craft.y
            assert 0.0 <= y <= hi, f"craft y={y} escaped [0, {hi}]"


def test_up_then_down_tie_break():
    c = Craft(x=100, y=0.0, moving_up=True, moving_down=True)
    c.apply_movement(UNIT)
    assert c.y == 10.0, "at the top, up clamps to 0 and down then moves one step"

    c = Craft(x=100, y=UNIT.max_craft_y, moving_up=True, moving_down=True)
    c.apply_movement(UNIT)
    assert c.y == UNIT.max_craft_y

    c = Craft(x=100, y=300.0, moving_up=True, moving_down=True)
    c.apply_movement(UNIT)
    assert c.y == 300.0


def test_move_step_is_scaled():
    half = recompute(700, 350)
    c = Craft(x=50, y=100.0, moving_down=True)
    c.apply_movement(half)
    assert c.y == 105.0


def test_clamp_corrects_out_of_bounds():
    c = Craft(x=100, y=-25.0)
    assert c.clamp(UNIT) is True and c.y == 0.0
    c = Craft(x=100, y=float("nan"))
    assert c.clamp(UNIT) is True and c.y == UNIT.height / 2
    c = Craft(x=100, y=200.0)
    assert c.clamp(UNIT) is False


# ------------------------ Obstacle pool ------------------------

def test_cull_advance_order():
    obs = [Obstacle(x=-40.0, y=10), Obstacle(x=-39.0, y=10), Obstacle(x=500.0, y=10)]
    kept = cull(obs, 40.0)
    assert [o.x for o in kept] == [-39.0, 500.0]
    moved = advance(kept, speed=8.0, scale=0.5)
    assert [o.x for o in moved] == [-43.0, 496.0]
    assert obs[1].x == -39.0, "advance must not mutate its input"


def test_cull_drops_non_finite():
    kept = cull([Obstacle(x=float("inf"), y=0), Obstacle(x=10, y=float("nan")), Obstacle(x=10, y=0)], 40.0)
    assert len(kept) == 1


def test_spawn_cap_and_spawn_position():
    pool = ObstaclePool(seed=3, spawn_rate=1.0)
    obstacles = []
    for _ in range(200):
        before = {o.key for o in obstacles}
        obstacles = pool.update(obstacles, INITIAL_SPEED, UNIT)
        new = [o for o in obstacles if o.key not in before]
        assert len(new) <= 1, "more than one spawn in a tick"
        for o in new:
            assert o.x == UNIT.width and o.rotation == 0.0
            assert 0.0 <= o.y < UNIT.height - UNIT.obstacle_size


def test_fresh_spawn_not_advanced():
    pool = ObstaclePool(seed=3, spawn_rate=1.0)
    obstacles = pool.update([], INITIAL_SPEED, UNIT)
    assert len(obstacles) == 1 and obstacles[0].x == UNIT.width


def test_offscreen_obstacles_culled_next_tick():
    pool = ObstaclePool(seed=11, spawn_rate=0.2)
    obstacles = []
    doomed = set()
    for _ in range(1500):
        obstacles = pool.update(obstacles, 12.0, UNIT)
        keys = {o.key for o in obstacles}
        assert not (doomed & keys), "off-screen obstacle survived a tick"
        doomed = {o.key for o in obstacles if o.x <= -UNIT.obstacle_size}


def test_same_seed_same_spawns():
    def run(seed):
        pool = ObstaclePool(seed=seed)
        obstacles = []
        for _ in range(300):
            obstacles = pool.update(obstacles, INITIAL_SPEED, UNIT)
        return [(o.x, o.y) for o in obstacles]
    assert run(42) == run(42)


# ------------------------ Collision ------------------------

def test_collision_symmetry():
    rng = random.Random(5)
    for _ in range(500):
        a = craft_box(rng.uniform(0, 300), rng.uniform(0, 600), UNIT)
        b = obstacle_box(rng.uniform(0, 300), rng.uniform(0, 660), UNIT)
        assert intersects(a, b) == intersects(b, a)
        assert intersects(a, b, 10.0) == intersects(b, a, 10.0)


def test_deterministic_non_collision():
    cb = craft_box(100, 300, UNIT)
    ob = obstacle_box(500, 600, UNIT)
    assert (cb.top, cb.bottom) == (315, 370)
    assert (ob.top, ob.bottom) == (610, 630)
    assert not intersects(cb, ob)
    assert not is_hit(cb, ob, 1.0)


def test_deterministic_collision():
    cb = craft_box(100, 300, UNIT)
    ob = obstacle_box(120, 310, UNIT)
    assert cb == Box(left=130, right=170, top=315, bottom=370)
    # 310 + 40 - 10 = 340, so overlapY = min(370 - 320, 340 - 315) = 25 (not 15)
    assert ob == Box(left=130, right=150, top=320, bottom=340)
    assert min(cb.right - ob.left, ob.right - cb.left) == 20
    assert min(cb.bottom - ob.top, ob.bottom - cb.top) == 25
    assert is_hit(cb, ob, 1.0)


def test_hit_box_pads_follow_scale():
    half = recompute(700, 350)
    cb = craft_box(100, 300, half)
    assert cb == Box(left=115, right=135, top=307.5, bottom=335)
    ob = obstacle_box(100, 300, half)
    assert ob == Box(left=105, right=115, top=305, bottom=315)


def test_graze_is_not_a_hit():
    cb = Box(left=0, right=100, top=0, bottom=100)
    ob = Box(left=95, right=150, top=0, bottom=100)   # 5px deep
    assert intersects(cb, ob)
    assert not is_hit(cb, ob, 1.0)


def test_first_hit_short_circuits_in_order():
    a = Obstacle(x=120, y=310, key=1)
    b = Obstacle(x=121, y=311, key=2)
    assert first_hit(100, 300, [a, b], UNIT) is a
    assert first_hit(100, 300, [Obstacle(x=900, y=0)], UNIT) is None


# ------------------------ Ticking ------------------------

def test_speed_and_score_per_tick():
    state = initial_state(UNIT)
    pool = ObstaclePool(seed=9, spawn_rate=0.0)
    for i in range(100):
        nxt = tick(state, UNIT, pool)
        assert nxt.score == state.score + 1
        assert nxt.speed == state.speed + SPEED_INCREMENT
        assert nxt.ticks == i + 1
        state = nxt


def test_collision_ends_game():
    session = GameSession(config=NO_SPAWN, seed=1)
    _force_hit(session)
    session.step()
    assert session.running is False
    assert session.snapshot().running is False
    assert session.clock.running is False


def test_post_game_over_freeze():
    session = GameSession(seed=1)
    _force_hit(session)
    session.step()
    assert not session.running

    frozen = (session.state.score, session.state.speed, [(o.x, o.y) for o in session.state.obstacles])
    session.move_down_pressed()
    for _ in range(10):
        session.step()
    session.advance(1.0)
    pool = ObstaclePool(seed=2, spawn_rate=1.0)
    assert tick(session.state, session.scale, pool) is session.state
    assert (session.state.score, session.state.speed, [(o.x, o.y) for o in session.state.obstacles]) == frozen
    assert session.state.craft.moving_down is False


def test_reset_from_any_state():
    session = GameSession(seed=4, viewport=(700, 350))
    for _ in range(50):
        session.step()
    _force_hit(session)
    session.step()
    assert not session.running

    for _ in range(2):
        snap = session.reset()
        st = session.state
        assert (st.score, st.speed, st.obstacles, st.running) == (0, INITIAL_SPEED, [], True)
        assert st.craft.y == session.scale.height / 2
        assert st.craft.x == DEFAULT_PLAYFIELD.lane_x * session.scale.scale
        assert snap.running and snap.score == 0 and snap.obstacles == ()


def test_reset_with_seed_replays_spawns():
    session = GameSession(seed=8)
    runs = []
    for _ in range(2):
        session.reset(seed=8)
        for _ in range(120):
            session.step()
        runs.append([(o.x, o.y) for o in session.state.obstacles])
    assert runs[0] == runs[1]


# ------------------------ Clock ------------------------

def test_fixed_timer_cancel_gate():
    t = FixedTimer(0.1)
    t.elapse(1.0)
    assert t.accum == 0.0, "unarmed timer must not accumulate"
    t.arm()
    t.elapse(0.04)
    assert abs(t.until_next - 0.06) < 1e-9
    t.elapse(0.06)
    assert t.until_next < 1e-9
    t.fire()
    assert t.until_next == 0.1
    t.cancel()
    t.elapse(5.0)
    assert not t.armed and t.accum == 0.0


def test_clock_orders_ticks_and_caps_catchup():
    events = []
    clock = SimulationClock(on_sim_tick=lambda: events.append("sim"),
                            on_move_tick=lambda: events.append("move"))
    clock.start()
    clock.advance(1 / 60)
    assert events == ["move", "sim"]

    events.clear()
    n = clock.advance(10.0)
    assert n <= MAX_CATCHUP_TICKS
    assert events.count("sim") == n

    clock.stop()
    events.clear()
    assert clock.advance(1.0) == 0 and events == []


def test_clock_stops_on_game_over():
    session = GameSession(config=NO_SPAWN, seed=1)
    _force_hit(session)
    ticks = session.advance(1.0)
    assert ticks == 1
    assert not session.running and not session.clock.running
    assert session.advance(1.0) == 0


def main():
    tests = [(name, fn) for name, fn in sorted(globals().items()) if name.startswith("test_") and callable(fn)]
    failed = 0
    for name, fn in tests:
        try:
            fn()
        except AssertionError as e:
            failed += 1
            print(f"✗ {name}: {e}", file=sys.stderr)
        else:
            print(f"✓ {name}")
    if failed:
        sys.exit(1)
    print("🎉 All simulation tests passed")


if __name__ == "__main__":
    main()
