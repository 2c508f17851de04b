from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np

from .errors import ConfigError
from .query_accel import QueryAccelerator, as_points, check_radius

logger = logging.getLogger(__name__)

UNDEFINED = 0
NOISE = -1


@dataclass
class ClusterSummary:
    n_clusters: int
    n_noise: int
    sizes: Dict[int, int] = field(default_factory=dict)


def summarize_labels(labels: np.ndarray) -> ClusterSummary:
    """Count clusters, noise points and cluster sizes in a label array."""
    labels = np.asarray(labels, dtype=int)
    ids, counts = np.unique(labels[labels > 0], return_counts=True)
    return ClusterSummary(
        n_clusters=len(ids),
        n_noise=int((labels == NOISE).sum()),
        sizes={int(i): int(c) for i, c in zip(ids, counts)},
    )


def expand_cluster(
    accel: QueryAccelerator,
    points: np.ndarray,
    labels: np.ndarray,
    point_idx: int,
    neighbors: List[int],
    cluster_id: int,
    min_pts: int,
) -> None:
    """Grow cluster ``cluster_id`` from the core point ``point_idx``.

    Neighbors already in a cluster are left alone. Noise neighbors become
    border points of this cluster without being expanded. Unlabeled neighbors
    join the cluster and, only if they are core points themselves, push their
    own neighbors onto the frontier.

    Args:
        accel: Accelerator built over ``points``.
        points: Array (N, D) the accelerator was built from.
        labels: Label array, modified in place.
        point_idx: Index of the core point seeding the cluster.
        neighbors: Neighbors of ``point_idx``.
        cluster_id: Id of the cluster being grown.
        min_pts: Minimum number of other points within radius for a core point.
    """
    labels[point_idx] = cluster_id
    seen = set(neighbors)
    seen.add(point_idx)
    frontier = deque(neighbors)
    while frontier:
        neighbor_idx = frontier.popleft()
        label = labels[neighbor_idx]
        if label > 0:
            continue
        labels[neighbor_idx] = cluster_id
        if label == NOISE:
            continue
        new_neighbors = list(accel.query_neighbors(points, neighbor_idx))
        if len(new_neighbors) >= min_pts:
            for new_neighbor in new_neighbors:
                if new_neighbor not in seen:
                    seen.add(new_neighbor)
                    frontier.append(new_neighbor)


def dbscan(points, radius: float = 0.1, min_pts: int = 5, sort_indices: bool = True) -> np.ndarray:
    """Cluster points with DBSCAN using a hash-grid neighbor index.

    Label convention:
        -  0: unvisited (never present in the result)
        - -1: noise
        - >0: cluster id, numbered in order of discovery

    Points are scanned in index order, so the labeling is fully deterministic.

    Args:
        points: Array-like of shape (N, D).
        radius: Neighborhood radius.
        min_pts: Minimum number of *other* points within ``radius`` for a
            point to be a core point. Must be >= 1.
        sort_indices: Sort the grid cells before querying.

    Returns:
        labels: int64 array of shape (N,).
    """
    radius = check_radius(radius)
    if isinstance(min_pts, bool) or not isinstance(min_pts, (int, np.integer)) or min_pts < 1:
        raise ConfigError(f"min_pts must be an integer >= 1, got {min_pts!r}")
    min_pts = int(min_pts)

    if len(points) == 0:
        return np.empty((0,), dtype=np.int64)
    X = as_points(points)

    accel = QueryAccelerator(X, radius)
    if sort_indices:
        accel.sort_indices()

    labels = np.full(len(X), UNDEFINED, dtype=np.int64)
    cluster_id = 0
    for point_idx in range(len(X)):
        if labels[point_idx] != UNDEFINED:
            continue
        neighbors = list(accel.query_neighbors(X, point_idx))
        if len(neighbors) < min_pts:
            labels[point_idx] = NOISE
            continue
        cluster_id += 1
        expand_cluster(accel, X, labels, point_idx, neighbors, cluster_id, min_pts)

    if logger.isEnabledFor(logging.DEBUG):
        summary = summarize_labels(labels)
        logger.debug(
            "DBSCAN radius=%g min_pts=%d: %d clusters, %d noise of %d points",
            radius,
            min_pts,
            summary.n_clusters,
            summary.n_noise,
            len(X),
        )
    return labels


cluster = dbscan
