from .errors import ConfigError, InputError
from .query_accel import (
    QueryAccelerator,
    build_index,
    query_neighbors,
    sort_for_locality,
    quantize,
    neighborhood,
)
from .clustering import NOISE, UNDEFINED, cluster, dbscan, summarize_labels
from .reference import naive_query, random_points, random_indices
from .io import load_points, save_labels

__all__ = [
    "ConfigError",
    "InputError",
    "QueryAccelerator",
    "build_index",
    "query_neighbors",
    "sort_for_locality",
    "quantize",
    "neighborhood",
    "NOISE",
    "UNDEFINED",
    "cluster",
    "dbscan",
    "summarize_labels",
    "naive_query",
    "random_points",
    "random_indices",
    "load_points",
    "save_labels",
]
