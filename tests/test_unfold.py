import math

import numpy as np
import pytest

from billiards.errors import SimulationError
from billiards.geometry import segment_lengths
from billiards.rectangle import WallHit, simulate_hits, simulate_rectangle
from billiards.unfold import tile_bounds, unfold, unfold_hits, unfold_points


def assert_straight(U, tol=1e-9):
    d = U[-1] - U[0]
    d = d / np.linalg.norm(d)
    rel = U - U[0]
    cross = rel[:, 0] * d[1] - rel[:, 1] * d[0]
    np.testing.assert_allclose(cross, 0.0, atol=tol)


@pytest.mark.parametrize('slope', [0.0, 0.25, math.sqrt(2) / 5, 1.3, -0.45, math.inf])
def test_segment_lengths_preserved_slope_mode(slope):
    traj = simulate_rectangle(slope, 60)
    U = unfold(traj)
    assert U.shape == traj.points.shape
    np.testing.assert_allclose(segment_lengths(U), segment_lengths(traj.points), atol=1e-9)


@pytest.mark.parametrize('direction', [(2, 1), (1, 3), (-2, 1), (3, 2), (5, 0.7)])
def test_segment_lengths_preserved_hits_mode(direction):
    result = unfold_hits(direction, 40)
    np.testing.assert_allclose(segment_lengths(result.unfolded),
                               segment_lengths(result.folded.points), atol=1e-9)


@pytest.mark.parametrize('direction', [(2, 1), (-2, 1), (3, 2), (1, 0.31)])
def test_unfolded_path_is_straight(direction):
    result = unfold_hits(direction, 30)
    assert_straight(result.unfolded)
    # and runs along the launch direction
    d = result.unfolded[-1] - result.unfolded[0]
    v = np.asarray(direction, dtype=float)
    assert np.dot(d, v) > 0
    assert d[0] * v[1] - d[1] * v[0] == pytest.approx(0.0, abs=1e-9)


def test_slope_mode_unfolds_straight():
    assert_straight(unfold(simulate_rectangle(math.sqrt(3) / 7, 80)))


def test_tile_mapping_by_hand():
    # start (0.3, 0.4), slope 0 on a 2x1 table
    traj = simulate_rectangle(0.0, 3)
    U = unfold(traj)
    np.testing.assert_allclose(U, [[0.3, 0.4], [2.0, 0.4], [4.0, 0.4], [6.0, 0.4]])


def test_corner_advances_both_tiles():
    traj = simulate_hits((3, 2), 2)
    U = unfold(traj)
    np.testing.assert_allclose(U, [[0.5, 0.0], [2.0, 1.0], [3.5, 2.0]], atol=1e-12)


def test_first_point_copied_and_single_point():
    pts = np.array([[0.3, 0.4]])
    np.testing.assert_array_equal(unfold_points(2.0, 1.0, pts, ()), pts)


def test_mismatched_tags_rejected():
    with pytest.raises(SimulationError):
        unfold_points(2.0, 1.0, [[0, 0], [1, 1]], (WallHit.VERTICAL, WallHit.VERTICAL))


def test_tile_bounds_cover_path():
    result = unfold_hits((2, 1), 12)
    ti, tj = tile_bounds(result.unfolded, 2.0, 1.0)
    U = result.unfolded
    assert ti.start * 2.0 < U[:, 0].min() and (ti.stop - 1) * 2.0 > U[:, 0].max() - 2.0
    assert tj.start * 1.0 < U[:, 1].min() and (tj.stop - 1) * 1.0 > U[:, 1].max() - 1.0
