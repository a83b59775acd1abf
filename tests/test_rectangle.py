import math

import numpy as np
import pytest

from billiards.errors import ErrorKind, SimulationError
from billiards.rectangle import (RectTrajectory, TableConfig, WallHit, clamp_max_bounces,
                                 initial_direction, simulate_hits, simulate_rectangle)


def on_boundary(p, a, b, tol=1e-9):
    return (abs(p[0]) < tol or abs(p[0] - a) < tol or abs(p[1]) < tol or abs(p[1] - b) < tol)


def test_initial_direction():
    np.testing.assert_allclose(initial_direction(math.inf), [0, 1])
    np.testing.assert_allclose(initial_direction(1e-13), [1, 0])
    np.testing.assert_allclose(initial_direction(1.0), [math.sqrt(0.5), math.sqrt(0.5)])
    d = initial_direction(-3.0)
    assert d[0] > 0 and d[1] < 0
    assert np.hypot(*d) == pytest.approx(1.0)


def test_nan_slope_rejected():
    with pytest.raises(SimulationError) as exc:
        simulate_rectangle(math.nan)
    assert exc.value.kind is ErrorKind.INVALID_PARAMETER


def test_horizontal_slope():
    traj = simulate_rectangle(0.0, 10)
    assert len(traj.points) == 11
    np.testing.assert_allclose(traj.points[:, 1], 0.4)
    np.testing.assert_allclose(traj.points[1], [2.0, 0.4])
    np.testing.assert_allclose(traj.points[2], [0.0, 0.4])
    assert set(traj.hits) == {WallHit.VERTICAL}
    assert not traj.corner_hit
    assert traj.stop_reason is None


def test_custom_tol_collapses_small_slope():
    traj = simulate_rectangle(1e-6, 4, tol=1e-5)
    np.testing.assert_allclose(traj.points[:, 1], 0.4)
    assert traj.hits == (WallHit.VERTICAL,) * 4
    # default tolerance keeps the same slope tilted
    assert not np.allclose(simulate_rectangle(1e-6, 4).points[:, 1], 0.4, rtol=0, atol=1e-9)


def test_infinite_slope():
    traj = simulate_rectangle(math.inf, 5)
    assert len(traj.points) == 6
    np.testing.assert_allclose(traj.points[:, 0], 0.3)
    np.testing.assert_allclose(traj.points[1:, 1], [1, 0, 1, 0, 1])
    assert traj.hits == (WallHit.HORIZONTAL,) * 5


@pytest.mark.parametrize('slope', [0.1, math.sqrt(2) / 5, 0.5 + 1e-3, 1.7, -0.8, 12.0])
def test_points_on_boundary_and_flips_match_tags(slope):
    traj = simulate_rectangle(slope, 150)
    a, b = traj.table.width, traj.table.height
    assert all(on_boundary(p, a, b) for p in traj.points[1:])
    assert np.all(traj.points >= -1e-12)
    assert np.all(traj.points[:, 0] <= a + 1e-12) and np.all(traj.points[:, 1] <= b + 1e-12)

    d = np.diff(traj.points, axis=0)
    for k in range(len(d) - 1):
        flip_x = np.sign(d[k, 0]) != np.sign(d[k + 1, 0])
        flip_y = np.sign(d[k, 1]) != np.sign(d[k + 1, 1])
        hit = traj.hits[k]
        assert flip_x == (hit in (WallHit.VERTICAL, WallHit.CORNER))
        assert flip_y == (hit in (WallHit.HORIZONTAL, WallHit.CORNER))


def test_no_coincident_consecutive_points():
    traj = simulate_rectangle(0.37, 300)
    assert np.all(np.hypot(*np.diff(traj.points, axis=0).T) > 1e-12)


def test_corner_hit_terminates():
    # aimed straight at the (2, 1) corner from (0.3, 0.4)
    traj = simulate_rectangle(0.6 / 1.7, 50)
    assert traj.corner_hit
    assert traj.hits == (WallHit.CORNER,)
    np.testing.assert_allclose(traj.points[-1], [2.0, 1.0])


def test_max_bounces_limit():
    assert simulate_rectangle(0.3, 7).bounces == 7


@pytest.mark.parametrize('n', [0, -1, 3.0, True])
def test_invalid_max_bounces(n):
    with pytest.raises(SimulationError):
        simulate_rectangle(0.3, n)


def test_clamp_max_bounces():
    assert clamp_max_bounces(0) == 1
    assert clamp_max_bounces(200) == 200
    assert clamp_max_bounces(10 ** 6) == 5000


def test_custom_table():
    table = TableConfig(width=3.0, height=2.0, start=(1.0, 1.0))
    traj = simulate_rectangle(0.0, 2, table=table)
    np.testing.assert_allclose(traj.points, [[1, 1], [3, 1], [0, 1]])


def test_table_rejects_outside_start():
    with pytest.raises(SimulationError):
        TableConfig(start=(3.0, 0.5))


def test_trajectory_requires_one_tag_per_segment():
    with pytest.raises(SimulationError):
        RectTrajectory(points=np.zeros((3, 2)), hits=(WallHit.VERTICAL,))


def test_hits_mode_passes_through_corners():
    # from (0.5, 0) along (3, 2) the first hit is the (2, 1) corner
    traj = simulate_hits((3, 2), 4)
    assert traj.hits[0] is WallHit.CORNER
    assert traj.corner_hit
    assert traj.bounces == 4
    np.testing.assert_allclose(traj.points[2], [0.5, 0.0], atol=1e-12)


def test_hits_mode_direction_not_normalized():
    a = simulate_hits((2, 1), 6)
    b = simulate_hits((20, 10), 6)
    np.testing.assert_allclose(a.points, b.points)


def test_hits_mode_zero_direction_falls_back_to_x():
    traj = simulate_hits((0, 0), 2)
    np.testing.assert_allclose(traj.points[:, 1], 0.0)


def test_hits_mode_heading_out_of_table_stops():
    # start sits on the bottom wall; heading down is a zero-length step
    traj = simulate_hits((1, -1), 5)
    assert len(traj.points) == 1
    assert traj.hits == ()
    assert traj.stop_reason is ErrorKind.DEGENERATE_STEP


@pytest.mark.parametrize('hits', [0, 201])
def test_hits_mode_range(hits):
    with pytest.raises(SimulationError):
        simulate_hits((2, 1), hits)


def test_hits_mode_rejects_non_finite_direction():
    with pytest.raises(SimulationError):
        simulate_hits((math.inf, 1), 3)
