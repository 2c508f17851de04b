#!/usr/bin/env python3
import logging
import os
import sys
from pathlib import Path
from typing import List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from neighbor_query import NOISE, dbscan, load_points, save_labels, summarize_labels  # noqa: E402

logger = logging.getLogger(__name__)


def plot_clusters(points: np.ndarray, labels: np.ndarray, out_path: str, title: str) -> None:
    fig, ax = plt.subplots(1, 1, figsize=(6, 6), dpi=140)
    noise = labels == NOISE
    ax.scatter(points[noise, 0], points[noise, 1], s=4, c="lightgray", label="noise")
    clustered = ~noise
    ax.scatter(points[clustered, 0], points[clustered, 1], s=4, c=labels[clustered], cmap="tab20")
    ax.set_title(title)
    ax.set_aspect("equal", adjustable="box")
    ax.grid(True, ls=":", alpha=0.4)
    ax.legend(loc="best", fontsize=8)
    fig.tight_layout()
    os.makedirs(Path(out_path).parent, exist_ok=True)
    fig.savefig(out_path)
    plt.close(fig)


def main(argv: List[str]) -> int:
    logging.basicConfig(level=logging.INFO)
    if len(argv) != 5:
        print("Usage: plot_clusters.py <points.csv> <radius> <min_pts> <out_prefix>")
        return 2
    points = load_points(argv[1])
    radius = float(argv[2])
    min_pts = int(argv[3])
    labels = dbscan(points, radius=radius, min_pts=min_pts)
    summary = summarize_labels(labels)
    logger.info("%d clusters, %d noise points", summary.n_clusters, summary.n_noise)

    save_labels(argv[4] + "_labels.csv", points, labels)
    if points.shape[1] < 2:
        logger.warning("Points have %d dimension(s); skipping plot", points.shape[1])
        return 0
    plot_clusters(points, labels, argv[4] + ".png", title=f"radius={radius} min_pts={min_pts}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
