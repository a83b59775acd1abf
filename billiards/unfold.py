"""
Unfolding: reflect the table instead of the ray.

Each wall hit moves the path into the mirrored neighbour tile, so the folded
billiard path becomes one straight line across the tiled plane.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

import billiards as P
from billiards.errors import invalid
from billiards.geometry import as_points
from billiards.rectangle import UNFOLD_TABLE, RectTrajectory, TableConfig, WallHit, simulate_hits


@dataclass(frozen=True, eq=False)
class UnfoldResult:
    folded: RectTrajectory
    unfolded: np.ndarray


def _travel_sign(delta: float) -> int:
    return -1 if delta < 0 else 1


def unfold_points(width: float, height: float, points,
                  hits: Sequence[WallHit]) -> np.ndarray:
    """
    Map folded wall-hit points to the tiled plane.

    Tile (rx, ry) is mirrored in x when rx is odd and in y when ry is odd.
    Tiles step in the direction the first segment travels, so paths heading
    left or down unfold into negative tiles.
    """
    pts = as_points(points)
    if len(hits) != len(pts) - 1:
        raise invalid("Unfolding needs exactly one wall tag per segment",
                      (len(pts), len(hits)))

    out = np.empty_like(pts)
    out[0] = pts[0]
    if len(pts) == 1:
        return out

    first = pts[1] - pts[0]
    sx, sy = _travel_sign(first[0]), _travel_sign(first[1])

    rx = ry = 0
    for k in range(1, len(pts)):
        x, y = pts[k]
        out[k, 0] = rx * width + (x if rx % 2 == 0 else width - x)
        out[k, 1] = ry * height + (y if ry % 2 == 0 else height - y)

        hit = hits[k - 1]
        if hit in (WallHit.VERTICAL, WallHit.CORNER):
            rx += sx
        if hit in (WallHit.HORIZONTAL, WallHit.CORNER):
            ry += sy
    return out


def unfold(trajectory: RectTrajectory) -> np.ndarray:
    t = trajectory.table
    return unfold_points(t.width, t.height, trajectory.points, trajectory.hits)


def unfold_hits(direction: Sequence[float], hits: int = P.UNFOLD_HITS,
                table: TableConfig = UNFOLD_TABLE) -> UnfoldResult:
    folded = simulate_hits(direction, hits, table)
    return UnfoldResult(folded=folded, unfolded=unfold(folded))


def tile_bounds(unfolded: np.ndarray, width: float,
                height: float) -> Tuple[range, range]:
    """Tile index ranges covering the unfolded path, one extra tile each side."""
    xs, ys = unfolded[:, 0], unfolded[:, 1]
    i_min = int(np.floor(xs.min() / width)) - 1
    i_max = int(np.floor(xs.max() / width)) + 1
    j_min = int(np.floor(ys.min() / height)) - 1
    j_max = int(np.floor(ys.max() / height)) + 1
    return range(i_min, i_max + 1), range(j_min, j_max + 1)
