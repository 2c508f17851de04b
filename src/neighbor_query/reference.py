"""Brute-force neighbor query and random fixtures for checking and benchmarking the grid."""

from __future__ import annotations

from typing import Iterator, Optional

import numpy as np

from .query_accel import squared_distances


def distance_sq(a, b) -> float:
    """Squared Euclidean distance between two points."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    return float(((a - b) ** 2).sum())


def naive_query(points, queried_idx: int, radius: float) -> Iterator[int]:
    """O(N) query: indices of all points within ``radius`` of ``queried_idx``, self excluded."""
    X = np.asarray(points, dtype=float)
    d2 = squared_distances(X, X[queried_idx])
    hits = np.flatnonzero(d2 <= radius * radius)
    return (int(i) for i in hits if i != queried_idx)


def random_points(
    n: int, size: float, dim: int = 2, rng: Optional[np.random.Generator] = None
) -> np.ndarray:
    """Create n random points, each coordinate uniform in [-size, size)."""
    if rng is None:
        rng = np.random.default_rng()
    return rng.uniform(-size, size, size=(n, dim))


def random_indices(n: int, max_index: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Create n random indices in the range [0, max_index)."""
    if rng is None:
        rng = np.random.default_rng()
    return rng.integers(0, max_index, size=n)
