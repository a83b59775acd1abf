"""
Rectangular billiard in [0, A] x [0, B].

- Point particle, unit speed, specular wall reflections
- Exact time-to-wall stepping (no fixed dt)
- Corner hits are terminal in slope mode and continued in unfold mode
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Sequence, Tuple

import numpy as np

import billiards as P
from billiards.errors import ErrorKind, invalid, require_positive_int
from billiards.geometry import unit

logger = logging.getLogger(__name__)


class WallHit(str, Enum):
    VERTICAL = 'vertical'
    HORIZONTAL = 'horizontal'
    CORNER = 'corner'


@dataclass(frozen=True)
class TableConfig:
    width: float = P.RECT_WIDTH
    height: float = P.RECT_HEIGHT
    start: Tuple[float, float] = P.RECT_START

    def __post_init__(self):
        if not (self.width > 0 and self.height > 0):
            raise invalid("Table dimensions must be positive", (self.width, self.height))
        x, y = self.start
        if not (0 <= x <= self.width and 0 <= y <= self.height):
            raise invalid("Start point must lie inside the table", self.start)


UNFOLD_TABLE = TableConfig(start=P.UNFOLD_START)


@dataclass(frozen=True, eq=False)
class RectTrajectory:
    """Wall-hit points and their tags, owned together.

    hits[k] is the wall struck on arrival at points[k + 1].
    """
    points: np.ndarray
    hits: Tuple[WallHit, ...]
    corner_hit: bool = False
    table: TableConfig = field(default_factory=TableConfig)
    # DEGENERATE_STEP when the loop ended before max_bounces on a zero or infinite step
    stop_reason: Optional[ErrorKind] = None

    def __post_init__(self):
        if len(self.hits) != len(self.points) - 1:
            raise invalid("Trajectory needs exactly one wall tag per segment",
                          (len(self.points), len(self.hits)))

    @property
    def bounces(self) -> int:
        return len(self.hits)

    def segments(self) -> Iterator[Tuple[np.ndarray, np.ndarray, WallHit]]:
        for k, hit in enumerate(self.hits):
            yield self.points[k], self.points[k + 1], hit


def initial_direction(slope: float, tol: float = P.STEP_TOL) -> np.ndarray:
    """Unit direction with vx >= 0 for a slope (infinite slope is straight up)."""
    try:
        slope = float(slope)
    except (TypeError, ValueError) as e:
        raise invalid("Slope must be a real number or infinity", slope) from e
    if math.isnan(slope):
        raise invalid("Slope must be a real number or infinity", slope)
    if math.isinf(slope):
        return np.array([0.0, 1.0])
    if abs(slope) < tol:
        return np.array([1.0, 0.0])
    den = math.sqrt(1.0 + slope * slope)
    return np.array([1.0 / den, slope / den])


def clamp_max_bounces(n: int) -> int:
    lo, hi = P.MAX_BOUNCES_RANGE
    return max(lo, min(hi, int(n)))


def _snap(v: float, wall: float) -> float:
    if abs(v) < P.SNAP_TOL:
        return 0.0
    if abs(v - wall) < P.SNAP_TOL:
        return wall
    return v


def trace_rectangle(start: Sequence[float], direction: Sequence[float],
                    max_bounces: int, tol: float = P.STEP_TOL,
                    table: Optional[TableConfig] = None,
                    stop_at_corner: bool = True) -> RectTrajectory:
    """
    Step wall to wall from `start` along unit `direction`.

    Stops early (no error) when the next step time is non-finite or <= tol,
    which covers motion parallel to and grazing along a wall.
    """
    table = table or TableConfig()
    a, b = table.width, table.height
    x, y = float(start[0]), float(start[1])
    vx, vy = float(direction[0]), float(direction[1])

    pts = [(x, y)]
    hits = []
    corner = False
    stop_reason = None

    for _ in range(max_bounces):
        tx = ty = math.inf
        if abs(vx) > tol:
            tx = (a - x) / vx if vx > 0 else (0.0 - x) / vx
        if abs(vy) > tol:
            ty = (b - y) / vy if vy > 0 else (0.0 - y) / vy

        t = min(tx, ty)
        if not math.isfinite(t) or t <= tol:
            logger.debug(f"Degenerate step t={t} at ({x:.6g}, {y:.6g}), stopping after {len(hits)} hits")
            stop_reason = ErrorKind.DEGENERATE_STEP
            break

        x = _snap(x + vx * t, a)
        y = _snap(y + vy * t, b)
        pts.append((x, y))

        hit_v = abs(t - tx) < P.HIT_TOL
        hit_h = abs(t - ty) < P.HIT_TOL

        if hit_v and hit_h:
            hits.append(WallHit.CORNER)
            vx, vy = -vx, -vy
            corner = True
            if stop_at_corner:
                logger.debug(f"Corner hit at ({x:.6g}, {y:.6g}), trajectory ends")
                break
        elif hit_v:
            hits.append(WallHit.VERTICAL)
            vx = -vx
        else:
            hits.append(WallHit.HORIZONTAL)
            vy = -vy

    return RectTrajectory(points=np.array(pts, dtype=float), hits=tuple(hits),
                          corner_hit=corner, table=table, stop_reason=stop_reason)


def simulate_rectangle(slope: float, max_bounces: int = P.MAX_BOUNCES,
                       tol: float = P.STEP_TOL,
                       table: Optional[TableConfig] = None) -> RectTrajectory:
    """Trajectory from the table's start point along `slope`; ends on a corner."""
    max_bounces = require_positive_int('max_bounces', max_bounces)
    table = table or TableConfig()
    direction = initial_direction(slope, tol)
    return trace_rectangle(table.start, direction, max_bounces, tol, table,
                           stop_at_corner=True)


def simulate_hits(direction: Sequence[float], hits: int = P.UNFOLD_HITS,
                  table: TableConfig = UNFOLD_TABLE) -> RectTrajectory:
    """Fixed number of wall hits along an arbitrary direction; corners are passed through."""
    lo, hi = P.UNFOLD_HITS_RANGE
    hits = require_positive_int('hits', hits)
    if hits > hi or hits < lo:
        raise invalid(f"Hits must be an integer between {lo} and {hi}", hits)
    try:
        v = np.asarray(direction, dtype=float)
    except (TypeError, ValueError) as e:
        raise invalid("Direction must be two finite numbers", direction) from e
    if v.shape != (2,) or not np.all(np.isfinite(v)):
        raise invalid("Direction must be two finite numbers", tuple(direction))

    v = unit(v)
    if not v.any():
        v = np.array([1.0, 0.0])
    return trace_rectangle(table.start, v, hits, P.STEP_TOL, table,
                           stop_at_corner=False)
