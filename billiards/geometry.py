import numpy as np


def as_points(points) -> np.ndarray:
    """Coerce a sequence of (x, y) pairs to a float (n, 2) array."""
    pts = np.asarray(points, dtype=float)
    if pts.ndim != 2 or pts.shape[1] != 2 or len(pts) == 0:
        raise ValueError(f"Expected a non-empty (n, 2) point array, got shape {pts.shape}")
    return pts


def unit(v: np.ndarray) -> np.ndarray:
    """Normalize; the zero vector stays zero."""
    n = np.hypot(v[0], v[1])
    if n == 0:
        return np.zeros(2)
    return np.asarray(v, dtype=float) / n


def reflect(v: np.ndarray, n_unit: np.ndarray) -> np.ndarray:
    """Specular reflection of v about the unit normal n_unit."""
    return v - 2.0 * np.dot(v, n_unit) * n_unit


def segment_lengths(points: np.ndarray) -> np.ndarray:
    """(n-1,) Euclidean lengths of consecutive segments."""
    d = np.diff(points, axis=0)
    return np.hypot(d[:, 0], d[:, 1])
