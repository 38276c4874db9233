# skydodge/tests/observations_tests.py
import numpy as np
from skydodge.env.observations import build_observation, observation_bounds, OBS_DIM, EMPTY_SLOT
from skydodge.game.config import INITIAL_SPEED
from skydodge.game.scale import ScaleState
from skydodge.game.session import Snapshot, CraftView, ObstacleView

UNIT = ScaleState.identity()


def make_snapshot(craft_y, obstacles):
    return Snapshot(
        craft=CraftView(x_px=100.0, y_px=craft_y, size_px=100.0),
        obstacles=tuple(
            ObstacleView(x_px=x, y_px=y, size_px=40.0, rotation_deg=0.0, key=i)
            for i, (x, y) in enumerate(obstacles)
        ),
        score=0,
        running=True,
        width_px=1400.0,
        height_px=700.0,
    )


def test_shape_and_bounds():
    snap = make_snapshot(300.0, [(800.0, 100.0), (400.0, 640.0), (50.0, 300.0), (1300.0, 0.0)])
    obs = build_observation(snap, INITIAL_SPEED + 5.0, UNIT)
    low, high = observation_bounds()
    assert isinstance(obs, np.ndarray) and obs.dtype == np.float32 and obs.shape == (OBS_DIM,)
    assert np.all(obs >= low) and np.all(obs <= high)
    assert np.isclose(obs[0], 0.5)
    assert np.isclose(obs[1], 0.25)


def test_nearest_ahead_first():
    # x=70 overlaps the craft (70+40 > 100) so it still counts as ahead, at dx=0
    snap = make_snapshot(300.0, [(800.0, 100.0), (400.0, 640.0), (70.0, 330.0)])
    obs = build_observation(snap, INITIAL_SPEED, UNIT)
    assert obs[2] == 0.0 and np.isclose(obs[3], 0.0)          # centred on craft
    assert np.isclose(obs[4], 300.0 / 1400.0)
    assert np.isclose(obs[5], (660.0 - 350.0) / 700.0)
    assert np.isclose(obs[6], 700.0 / 1400.0)


def test_passed_obstacles_ignored_and_empty_slots():
    snap = make_snapshot(0.0, [(20.0, 0.0), (-30.0, 10.0)])   # both fully behind the craft
    obs = build_observation(snap, INITIAL_SPEED, UNIT)
    assert obs[0] == 0.0 and obs[1] == 0.0
    for i in range(3):
        assert tuple(obs[2 + 2 * i: 4 + 2 * i]) == EMPTY_SLOT


def test_speed_norm_uses_given_initial_speed():
    snap = make_snapshot(300.0, [])
    assert build_observation(snap, 4.0, UNIT, initial_speed=4.0)[1] == 0.0
    assert np.isclose(build_observation(snap, 9.0, UNIT, initial_speed=4.0)[1], 0.25)
    assert build_observation(snap, 9.0, UNIT)[1] < 0.1


def main():
    test_shape_and_bounds()
    test_nearest_ahead_first()
    test_passed_obstacles_ignored_and_empty_slots()
    test_speed_norm_uses_given_initial_speed()
    print("✓ observation unit sanity passed")


if __name__ == "__main__":
    main()
