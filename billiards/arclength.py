"""
Arc-length parametrization of a polyline.

A constant rate of change in u moves the particle at constant speed no
matter how long each chord is.
"""

from dataclasses import dataclass

import numpy as np

import billiards as P
from billiards.geometry import as_points, segment_lengths


@dataclass(frozen=True, eq=False)
class ArcLengthTable:
    """s[i] = path length up to points[i]; total is floored at ARC_EPS."""
    s: np.ndarray
    total: float


def build_arc_table(points) -> ArcLengthTable:
    pts = as_points(points)
    s = np.concatenate([[0.0], np.cumsum(segment_lengths(pts))])
    s.setflags(write=False)
    return ArcLengthTable(s=s, total=max(float(s[-1]), P.ARC_EPS))


def _lerp(p0: np.ndarray, p1: np.ndarray, s0: float, s1: float, u: float) -> np.ndarray:
    seg = s1 - s0
    w = (u - s0) / seg if seg > 0 else 0.0
    return p0 + w * (p1 - p0)


def position_at(points, table: ArcLengthTable, u: float) -> np.ndarray:
    pts = as_points(points)
    s = table.s
    t = min(max(u, 0.0), table.total)
    # first i >= 1 with s[i] >= t
    i = max(int(np.searchsorted(s, t, side='left')), 1)
    if i >= len(s):
        return pts[-1].copy()
    return _lerp(pts[i - 1], pts[i], s[i - 1], s[i], t)


def positions_at(points, table: ArcLengthTable, us) -> np.ndarray:
    """Vectorized position_at: (k,) parameters -> (k, 2) positions; a scalar gives (2,)."""
    pts = as_points(points)
    s = table.s
    us = np.asarray(us, dtype=float)
    t = np.clip(np.atleast_1d(us), 0.0, table.total)
    if len(pts) == 1:
        out = np.repeat(pts, len(t), axis=0)
    else:
        idx = np.clip(np.searchsorted(s, t, side='left'), 1, len(s) - 1)
        s0, s1 = s[idx - 1], s[idx]
        seg = s1 - s0
        w = np.divide(t - s0, seg, out=np.zeros_like(t), where=seg > 0)
        w = np.clip(w, 0.0, 1.0)
        out = pts[idx - 1] + w[:, None] * (pts[idx] - pts[idx - 1])
    return out[0] if us.ndim == 0 else out


def prefix_up_to(points, table: ArcLengthTable, u: float) -> np.ndarray:
    """Vertices already reached at parameter u, plus the partial one."""
    pts = as_points(points)
    s = table.s
    if u <= 0:
        return pts[:1].copy()

    # vertices with s[i] <= u
    i = int(np.searchsorted(s, u, side='right'))
    out = pts[:i]
    if i >= len(s) or u <= s[i - 1]:
        return out.copy()
    tip = _lerp(pts[i - 1], pts[i], s[i - 1], s[i], u)
    return np.vstack([out, tip])


def advance(u: float, total: float, speed: float, dt: float) -> float:
    """One animation step, saturating at total."""
    u = u + max(speed, 0.0) * max(dt, 0.0)
    return min(max(u, 0.0), total)


class ArcLengthParametrizer:
    """Points and their arc table, bound together for one animation."""

    def __init__(self, points):
        self.points = as_points(points)
        self.table = build_arc_table(self.points)

    @property
    def total(self) -> float:
        return self.table.total

    def position(self, u: float) -> np.ndarray:
        return position_at(self.points, self.table, u)

    def positions(self, us) -> np.ndarray:
        return positions_at(self.points, self.table, us)

    def prefix(self, u: float) -> np.ndarray:
        return prefix_up_to(self.points, self.table, u)

    def progress(self, fraction: float) -> float:
        """Arc parameter at a fraction of the whole path."""
        return min(max(fraction, 0.0), 1.0) * self.total

    def __len__(self):
        return len(self.points)
