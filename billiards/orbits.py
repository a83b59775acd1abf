"""
Periodic-orbit search on the rectangle.

A path that meets each pair of horizontal walls m times and each pair of
vertical walls n times makes 2(m + n) reflections and comes back to a
translate of its starting state along slope m*B / (n*A). Candidates are
enumerated from that family and each one is checked by simulation. The
check is a heuristic existence test, not a proof of periodicity.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

import numpy as np

import billiards as P
from billiards.errors import invalid
from billiards.rectangle import RectTrajectory, TableConfig, simulate_rectangle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrbitCandidate:
    m: int
    n: int
    slope: float


@dataclass(frozen=True, eq=False)
class CandidateCheck:
    candidate: Optional[OrbitCandidate]
    trajectory: RectTrajectory
    returned_near_start: bool

    @property
    def corner_hit(self) -> bool:
        return self.trajectory.corner_hit

    @property
    def qualifies(self) -> bool:
        return not self.corner_hit and self.returned_near_start


@dataclass(frozen=True, eq=False)
class OrbitSearchResult:
    n_bounces: int
    chosen: CandidateCheck
    ranked: List[CandidateCheck]

    @property
    def qualified(self) -> bool:
        return self.chosen.qualifies


def _is_even_target(n_bounces) -> bool:
    return (isinstance(n_bounces, (int, np.integer)) and not isinstance(n_bounces, bool)
            and n_bounces >= 2 and n_bounces % 2 == 0)


def candidate_slopes(n_bounces: int, table: Optional[TableConfig] = None) -> List[OrbitCandidate]:
    """Rational slopes for N = 2(m + n); empty unless N is even and >= 2."""
    if not _is_even_target(n_bounces):
        return []
    table = table or TableConfig()
    target = n_bounces // 2
    out = []
    for m in range(1, target):
        n = target - m
        if n >= 1:
            out.append(OrbitCandidate(m, n, (m * table.height) / (n * table.width)))
    out.sort(key=lambda c: c.slope)
    return out


def returned_near_start(points: np.ndarray, eps: float = P.RETURN_EPS) -> bool:
    start = points[0]
    return bool(np.any(np.all(np.abs(points[1:] - start) < eps, axis=1)))


def check_candidate(candidate: Union[OrbitCandidate, float], n_bounces: int,
                    table: Optional[TableConfig] = None) -> CandidateCheck:
    """Simulate N + slack bounces and look for a point back at the start."""
    if isinstance(candidate, OrbitCandidate):
        slope = candidate.slope
    else:
        slope, candidate = float(candidate), None
    traj = simulate_rectangle(slope, n_bounces + P.SEARCH_SLACK, table=table)
    return CandidateCheck(candidate, traj, returned_near_start(traj.points))


def rank_candidates(n_bounces: int, table: Optional[TableConfig] = None) -> List[CandidateCheck]:
    return [check_candidate(c, n_bounces, table) for c in candidate_slopes(n_bounces, table)]


def find_periodic_orbit(n_bounces: int,
                        table: Optional[TableConfig] = None) -> Optional[OrbitSearchResult]:
    """
    Pick the orbit shown for a target bounce count.

    First candidate with no corner hit that returns near the start, else the
    first candidate regardless. None when N admits no candidates at all.
    """
    if not _is_even_target(n_bounces):
        raise invalid("Bounce count must be an even integer >= 2", n_bounces)

    ranked = rank_candidates(n_bounces, table)
    if not ranked:
        logger.debug(f"No slope candidates for N={n_bounces}")
        return None

    chosen = next((c for c in ranked if c.qualifies), ranked[0])
    logger.debug(f"N={n_bounces}: {len(ranked)} candidates, chose slope={chosen.candidate.slope:.6g} "
                 f"(corner={chosen.corner_hit}, returned={chosen.returned_near_start})")
    return OrbitSearchResult(n_bounces, chosen, ranked)
