"""
Uniform hash grid for fixed-radius neighbor queries in D dimensions.

Space is divided into axis-aligned cells whose side equals the query radius,
so every point within ``radius`` of a query point lies in the query's own cell
or in one of the cells adjacent to it (3**D cells in total).
"""

from __future__ import annotations

import itertools
import logging
import math
import operator
from typing import Dict, Iterator, List, Tuple

import numpy as np

from .errors import ConfigError, InputError

logger = logging.getLogger(__name__)

CellKey = Tuple[int, ...]

# floor(x / radius) must stay representable as int64
_KEY_LIMIT = 2.0**63

# slack on the search reach so rounding in the distance test never outruns it
_REACH = 1.0 + 1e-9


def check_radius(radius: float) -> float:
    try:
        r = float(radius)
    except (TypeError, ValueError):
        raise ConfigError(f"radius must be a number, got {radius!r}") from None
    if not math.isfinite(r) or r <= 0:
        raise ConfigError(f"radius must be finite and > 0, got {radius!r}")
    return r


def as_points(points) -> np.ndarray:
    """Convert ``points`` to a float array of shape (N, D) with finite entries.

    Raises:
        InputError: if the data is not 2-D numeric or holds NaN/inf.
    """
    try:
        X = np.asarray(points, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InputError(f"points must be numeric: {exc}") from exc
    if X.ndim != 2 or X.shape[1] == 0:
        raise InputError(f"points must have shape (N, D) with D >= 1, got {X.shape}")
    finite = np.isfinite(X).all(axis=1)
    if not finite.all():
        bad = int(np.flatnonzero(~finite)[0])
        raise InputError(f"point {bad} has non-finite coordinates: {X[bad].tolist()}")
    return X


def quantize(points: np.ndarray, radius: float) -> np.ndarray:
    """Integer cell coordinates ``floor(p / radius)`` of one point or an (N, D) batch."""
    cells = np.floor(np.asarray(points, dtype=float) / radius)
    if not np.all(np.abs(cells) < _KEY_LIMIT):
        raise InputError(
            f"cell coordinates overflow int64 for radius={radius}; "
            "the radius is too small for the coordinate range"
        )
    return cells.astype(np.int64)


def neighborhood(dim: int) -> List[CellKey]:
    """All 3**dim cell offsets with components in {-1, 0, 1}, zero offset included."""
    if dim < 1:
        raise ValueError(f"dimension must be >= 1, got {dim}")
    return list(itertools.product((-1, 0, 1), repeat=dim))


def squared_distances(X: np.ndarray, p: np.ndarray) -> np.ndarray:
    """Squared Euclidean distance from each row of X to p."""
    return ((X - p) ** 2).sum(axis=1)


class QueryAccelerator:
    """
    Euclidean neighborhood query accelerator backed by a hash grid.

    The grid maps each cell key (a tuple of D ints) to the ascending indices
    of the points quantizing into that cell. It is built once from an
    immutable point array and never changes afterwards, so a single instance
    can serve concurrent queries.

    Queries must be given the same point array the accelerator was built
    from. A mismatched length is reported as an ``IndexError``; a different
    array of the same shape silently yields meaningless results.

    Args:
        points: Array-like of shape (N, D).
        radius: Query radius, also the grid cell size.
    """

    def __init__(self, points, radius: float):
        self.radius = check_radius(radius)
        self.radius_sq = self.radius * self.radius
        X = as_points(points)
        self.n_points, self.dim = X.shape
        self.neighbors = neighborhood(self.dim)

        cells: Dict[CellKey, List[int]] = {}
        for idx, key in enumerate(quantize(X, self.radius).tolist()):
            cells.setdefault(tuple(key), []).append(idx)
        self.cells: Dict[CellKey, np.ndarray] = {
            key: np.asarray(indices, dtype=np.intp) for key, indices in cells.items()
        }
        logger.debug(
            "Indexed %d points of dimension %d into %d cells (radius=%g)",
            self.n_points,
            self.dim,
            len(self.cells),
            self.radius,
        )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(n_points={self.n_points}, dim={self.dim}, "
            f"radius={self.radius}, n_cells={len(self.cells)})"
        )

    def sort_indices(self) -> QueryAccelerator:
        """Sort each cell's indices ascending for better locality during queries.

        Only the order in which neighbors are produced can change, never the set.
        """
        for indices in self.cells.values():
            indices.sort()
        return self

    def query_neighbors(self, points, queried_idx: int) -> Iterator[int]:
        """Lazily yield the indices of all points within ``radius`` of ``queried_idx``.

        The queried point itself is never yielded and no index is yielded
        twice. Arguments are validated immediately; calling again with the
        same arguments produces the same sequence. Only the queried row and
        the candidate rows are read, so list input costs the same as an
        ndarray.

        Raises:
            IndexError: if ``queried_idx`` is outside [0, N) or ``points`` does
                not have the shape the accelerator was built with.
            TypeError: if ``queried_idx`` is not an integer (bools included).
        """
        if len(points) != self.n_points:
            raise IndexError(
                f"point array of length {len(points)} does not match the "
                f"{self.n_points} indexed points"
            )
        if isinstance(queried_idx, bool):
            raise TypeError(f"query index must be an integer, got {queried_idx!r}")
        idx = operator.index(queried_idx)
        if not 0 <= idx < self.n_points:
            raise IndexError(f"query index {idx} out of range for {self.n_points} points")
        query_point = np.asarray(points[idx], dtype=float)
        if query_point.shape != (self.dim,):
            raise IndexError(
                f"point {idx} has shape {query_point.shape}, expected ({self.dim},)"
            )
        return self._iter_neighbors(points, idx, query_point)

    def _candidate_offsets(self, query_point: np.ndarray, origin: List[int]) -> List[CellKey]:
        # floor(x / radius) can land a neighbor two cells away near a cell edge,
        # so the reach is taken from the rounded bounds of [x - r, x + r].
        reach = self.radius * _REACH
        lo = quantize(query_point - reach, self.radius).tolist()
        hi = quantize(query_point + reach, self.radius).tolist()
        if all(o - 1 <= a and b <= o + 1 for o, a, b in zip(origin, lo, hi)):
            return self.neighbors
        return list(
            itertools.product(*(range(a - o, b - o + 1) for o, a, b in zip(origin, lo, hi)))
        )

    def _iter_neighbors(self, points, queried_idx: int, query_point: np.ndarray) -> Iterator[int]:
        origin = quantize(query_point, self.radius).tolist()
        for diff in self._candidate_offsets(query_point, origin):
            cell = self.cells.get(tuple(o + d for o, d in zip(origin, diff)))
            if cell is None:
                continue
            d2 = squared_distances(_rows(points, cell), query_point)
            keep = (d2 <= self.radius_sq) & (cell != queried_idx)
            yield from cell[keep].tolist()


def _rows(points, indices: np.ndarray) -> np.ndarray:
    if isinstance(points, np.ndarray):
        return np.asarray(points[indices], dtype=float)
    return np.asarray([points[i] for i in indices.tolist()], dtype=float)


def build_index(points, radius: float) -> QueryAccelerator:
    """Build a QueryAccelerator over ``points``.

    Raises:
        ConfigError: radius is not finite and positive.
        InputError: points are not an (N, D) array of finite values.
    """
    return QueryAccelerator(points, radius)


def query_neighbors(accel: QueryAccelerator, points, index: int) -> Iterator[int]:
    return accel.query_neighbors(points, index)


def sort_for_locality(accel: QueryAccelerator) -> QueryAccelerator:
    return accel.sort_indices()
