#!/usr/bin/env python3
import logging
import sys
import time
from pathlib import Path
from typing import List

import numpy as np

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from neighbor_query import QueryAccelerator, naive_query, random_indices, random_points  # noqa: E402

logger = logging.getLogger(__name__)

RADIUS = 0.10
N_POINTS = 100_000
N_QUERIES = 10_000
SIZE = 1.0


def run(radius: float, n_points: int, n_queries: int, size: float = SIZE) -> None:
    rng = np.random.default_rng(0)
    points = random_points(n_points, size, dim=2, rng=rng)
    indices = random_indices(n_queries, len(points), rng=rng).tolist()

    start = time.perf_counter()
    total = sum(sum(naive_query(points, idx, radius)) for idx in indices)
    logger.info("Naive took %.3fs, sum = %d", time.perf_counter() - start, total)

    start = time.perf_counter()
    accel = QueryAccelerator(points, radius).sort_indices()
    total = sum(sum(accel.query_neighbors(points, idx)) for idx in indices)
    logger.info("Accelerator took %.3fs, sum = %d", time.perf_counter() - start, total)


def main(argv: List[str]) -> int:
    logging.basicConfig(level=logging.INFO)
    if len(argv) > 4:
        print("Usage: benchmark.py [radius] [n_points] [n_queries]")
        return 2
    radius = float(argv[1]) if len(argv) > 1 else RADIUS
    n_points = int(argv[2]) if len(argv) > 2 else N_POINTS
    n_queries = int(argv[3]) if len(argv) > 3 else N_QUERIES
    run(radius, n_points, n_queries)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
