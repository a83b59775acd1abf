"""
Circular billiard with a fixed impact angle.

- Particle bounces inside the unit disk
- Every reflection keeps the angle between ray and tangent, so fixing it at
  the first bounce fixes it everywhere
- All chords are tangent to the caustic circle of radius cos(alpha)
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

import billiards as P
from billiards.errors import invalid, require_positive_int
from billiards.geometry import reflect, unit

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class DiskTrajectory:
    """Start point, then one row per bounce on the unit circle."""
    points: np.ndarray
    alpha: float
    caustic_radius: float
    offset_fraction: float

    @property
    def bounces(self) -> int:
        return len(self.points) - 1

    @property
    def bounce_points(self) -> np.ndarray:
        return self.points[1:]


def validate_alpha(alpha: float) -> float:
    try:
        alpha = float(alpha)
    except (TypeError, ValueError) as e:
        raise invalid("Angle must be a real number", alpha) from e
    if not math.isfinite(alpha) or not (0.0 < alpha <= math.pi / 2 + P.ALPHA_MAX_TOL):
        raise invalid("Angle must be in (0, pi/2]", alpha)
    return alpha


def seed_ray(alpha: float):
    """Outgoing and incoming directions at q0 = (1, 0)."""
    n0 = np.array([1.0, 0.0])
    t0 = np.array([0.0, 1.0])
    inward0 = np.array([-1.0, 0.0])
    d_out = unit(t0 * math.cos(alpha) + inward0 * math.sin(alpha))
    d_in = unit(reflect(d_out, n0))
    return d_out, d_in


def simulate_disk(alpha: float, bounces: int, seed: Optional[int] = P.SEED,
                  offset_fraction: Optional[float] = None) -> DiskTrajectory:
    """
    Bounce sequence in the unit disk at impact angle `alpha`.

    The start point sits on the incoming pre-image of the seed ray at
    `offset_fraction * 2 sin(alpha)` from q0. The fraction is drawn from a
    RandomState(seed) unless given explicitly; it only moves the start point.
    Returns bounces + 1 points.
    """
    alpha = validate_alpha(alpha)
    bounces = require_positive_int('bounces', bounces)

    lo, hi = P.START_OFFSET_RANGE
    if offset_fraction is None:
        offset_fraction = float(np.random.RandomState(seed).uniform(lo, hi))
    elif not (lo <= offset_fraction <= hi):
        raise invalid(f"Start offset fraction must be in [{lo}, {hi}]", offset_fraction)

    q = np.array([1.0, 0.0])
    d_out, d_in = seed_ray(alpha)
    s = offset_fraction * 2.0 * math.sin(alpha)
    p0 = q - d_in * s

    pts = [p0, q.copy()]
    p, d = q, d_out
    for _ in range(1, bounces):
        tau = -2.0 * np.dot(p, d)
        if tau <= P.MIN_CHORD_STEP:
            logger.debug(f"Grazing chord (tau={tau:.3e}), clamped to {P.MIN_CHORD_STEP}")
            tau = P.MIN_CHORD_STEP
        q_next = p + d * tau
        n = unit(q_next)
        d = unit(reflect(d, n))
        p = q_next
        pts.append(p.copy())

    return DiskTrajectory(
        points=np.array(pts),
        alpha=alpha,
        caustic_radius=math.cos(alpha),
        offset_fraction=offset_fraction,
    )
