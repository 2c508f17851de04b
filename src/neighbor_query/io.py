from __future__ import annotations

import csv
from pathlib import Path
from typing import Sequence

import numpy as np


def load_points(path: str) -> np.ndarray:
    """Load a CSV point file with a header row (e.g. 'x,y' or 'x,y,z').

    Every column is read as one coordinate axis.

    Args:
        path: CSV file path.

    Returns:
        float64 array of shape (N, D).
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Point file not found: {path}")
    arr = np.genfromtxt(str(p), delimiter=",", names=True, dtype=float)
    X = np.column_stack([np.atleast_1d(arr[name]) for name in arr.dtype.names])
    return X.astype(float)


def save_labels(path: str, points: np.ndarray, labels: Sequence[int]) -> None:
    """Write points and their cluster labels to CSV with header 'x0,...,label'."""
    X = np.asarray(points, dtype=float)
    labels = np.asarray(labels, dtype=int)
    if len(X) != len(labels):
        raise ValueError(f"{len(X)} points but {len(labels)} labels")
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([f"x{i}" for i in range(X.shape[1])] + ["label"])
        for row, label in zip(X.tolist(), labels.tolist()):
            writer.writerow(row + [label])
