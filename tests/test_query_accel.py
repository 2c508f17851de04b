import math

import numpy as np
import pytest

from neighbor_query import (
    ConfigError,
    InputError,
    QueryAccelerator,
    build_index,
    naive_query,
    neighborhood,
    quantize,
    query_neighbors,
    random_indices,
    random_points,
    sort_for_locality,
)


@pytest.mark.parametrize("dim,radius", [(1, 0.05), (2, 0.75), (2, 0.1), (3, 0.4)])
def test_answers_agree(dim, radius):
    rng = np.random.default_rng(dim)
    points = random_points(1000, 3.343, dim=dim, rng=rng)
    accel = build_index(points, radius)

    for idx in random_indices(100, len(points), rng=rng).tolist():
        naive = sorted(naive_query(points, idx, radius))
        fast = sorted(accel.query_neighbors(points, idx))
        assert naive == fast


def test_neighbors():
    expect = [
        (-1, -1),
        (0, -1),
        (1, -1),
        (-1, 0),
        (0, 0),
        (1, 0),
        (-1, 1),
        (0, 1),
        (1, 1),
    ]
    assert sorted(neighborhood(2)) == sorted(expect)


@pytest.mark.parametrize("dim", [1, 2, 3, 4])
def test_neighborhood_size(dim):
    offsets = neighborhood(dim)
    assert len(offsets) == 3**dim
    assert len(set(offsets)) == 3**dim
    assert (0,) * dim in offsets


def test_quantize_floors_negative_coordinates():
    cells = quantize(np.array([[0.05, -0.05], [0.1, -0.1], [0.25, 0.0]]), 0.1)
    assert cells.tolist() == [[0, -1], [1, -1], [2, 0]]


def test_two_points():
    points = [[0.0, 0.0], [0.05, 0.0]]
    accel = build_index(points, 0.1)
    assert set(query_neighbors(accel, points, 0)) == {1}
    assert set(query_neighbors(accel, points, 1)) == {0}


def test_boundary_distance_is_inclusive():
    points = np.array([[0.0, 0.0], [0.5, 0.0], [0.0, -0.5], [0.5, 0.5]])
    accel = build_index(points, 0.5)
    assert sorted(accel.query_neighbors(points, 0)) == [1, 2]


def test_self_excluded_and_no_duplicates():
    rng = np.random.default_rng(1)
    points = random_points(500, 1.0, dim=2, rng=rng)
    accel = build_index(points, 0.2)
    for idx in range(len(points)):
        result = list(accel.query_neighbors(points, idx))
        assert idx not in result
        assert len(result) == len(set(result))


def test_duplicate_points_are_neighbors():
    points = np.array([[1.0, 1.0], [1.0, 1.0], [1.0, 1.0]])
    accel = build_index(points, 0.1)
    assert sorted(accel.query_neighbors(points, 1)) == [0, 2]


def test_symmetry():
    rng = np.random.default_rng(2)
    points = random_points(300, 1.0, dim=3, rng=rng)
    accel = build_index(points, 0.3)
    neighbors = [set(accel.query_neighbors(points, i)) for i in range(len(points))]
    for i, ns in enumerate(neighbors):
        for j in ns:
            assert i in neighbors[j]


def test_sort_preserves_result_sets():
    rng = np.random.default_rng(3)
    points = random_points(400, 2.0, dim=2, rng=rng)
    # shuffle each cell so sorting actually changes something
    accel = build_index(points, 0.5)
    for indices in accel.cells.values():
        rng.shuffle(indices)
    before = [set(accel.query_neighbors(points, i)) for i in range(len(points))]

    assert sort_for_locality(accel) is accel
    for indices in accel.cells.values():
        assert np.all(np.diff(indices) > 0)
    after = [set(accel.query_neighbors(points, i)) for i in range(len(points))]
    assert before == after


def test_query_is_restartable():
    rng = np.random.default_rng(4)
    points = random_points(200, 1.0, dim=2, rng=rng)
    accel = build_index(points, 0.3)
    first = list(accel.query_neighbors(points, 7))
    second = list(accel.query_neighbors(points, 7))
    assert first == second


def test_every_index_in_exactly_one_cell():
    rng = np.random.default_rng(5)
    points = random_points(250, 1.0, dim=2, rng=rng)
    accel = build_index(points, 0.25)
    stored = np.concatenate(list(accel.cells.values()))
    assert sorted(stored.tolist()) == list(range(len(points)))


def test_empty_point_set():
    accel = QueryAccelerator(np.empty((0, 2)), 1.0)
    assert accel.n_points == 0
    assert accel.cells == {}


@pytest.mark.parametrize("radius", [0.0, -1.0, math.inf, math.nan, "abc"])
def test_bad_radius(radius):
    with pytest.raises(ConfigError):
        build_index([[0.0, 0.0]], radius)


@pytest.mark.parametrize(
    "points",
    [
        [[0.0, math.nan]],
        [[0.0, 0.0], [math.inf, 1.0]],
        [1.0, 2.0],
        [[]],
    ],
)
def test_bad_points(points):
    with pytest.raises(InputError):
        build_index(points, 1.0)


def test_key_overflow_rejected():
    with pytest.raises(InputError):
        build_index([[1e300, 0.0]], 1e-300)


def test_query_index_out_of_range():
    points = np.array([[0.0, 0.0], [1.0, 1.0]])
    accel = build_index(points, 1.0)
    with pytest.raises(IndexError):
        accel.query_neighbors(points, 2)
    with pytest.raises(IndexError):
        accel.query_neighbors(points, -1)


def test_query_with_wrong_point_array():
    points = np.array([[0.0, 0.0], [1.0, 1.0]])
    accel = build_index(points, 1.0)
    with pytest.raises(IndexError):
        accel.query_neighbors(points[:1], 0)
    with pytest.raises(IndexError):
        accel.query_neighbors(np.zeros((2, 3)), 0)


class CountingRows:
    """Sequence of points that counts how many rows are read."""

    def __init__(self, rows):
        self.rows = rows
        self.reads = 0

    def __len__(self):
        return len(self.rows)

    def __getitem__(self, i):
        self.reads += 1
        return self.rows[i]


def test_neighbor_across_rounded_cell_edge():
    # -1e-20 / 0.1 floors to cell -1 while 0.1 lands in cell 1
    points = [[-1e-20], [0.1]]
    accel = build_index(points, 0.1)
    assert list(naive_query(points, 0, 0.1)) == [1]
    assert list(accel.query_neighbors(points, 0)) == [1]
    assert list(accel.query_neighbors(points, 1)) == [0]


def test_answers_agree_near_cell_edges():
    radius = 0.1
    edges = np.arange(-20, 20) * radius
    offsets = np.array([-1e-17, -1e-20, 0.0, 1e-20, 1e-17])
    coords = (edges[:, None] + offsets[None, :]).ravel()
    rng = np.random.default_rng(6)
    points = rng.choice(coords, size=(600, 2))
    accel = build_index(points, radius)
    for idx in range(len(points)):
        assert sorted(accel.query_neighbors(points, idx)) == sorted(naive_query(points, idx, radius))


def test_list_input_reads_only_candidate_rows():
    rng = np.random.default_rng(7)
    points = random_points(10_000, 50.0, dim=2, rng=rng)
    accel = build_index(points, 1.0)
    rows = CountingRows(points.tolist())
    for idx in (0, 1234, 9999):
        rows.reads = 0
        assert list(accel.query_neighbors(rows, idx)) == list(accel.query_neighbors(points, idx))
        assert rows.reads < 100


def test_list_and_array_input_agree():
    rng = np.random.default_rng(8)
    points = random_points(300, 1.0, dim=2, rng=rng)
    accel = build_index(points, 0.2)
    as_list = points.tolist()
    for idx in range(len(points)):
        assert list(accel.query_neighbors(as_list, idx)) == list(accel.query_neighbors(points, idx))


@pytest.mark.parametrize("idx", [True, False, 1.0])
def test_non_integer_query_index(idx):
    points = np.array([[0.0, 0.0], [1.0, 1.0]])
    accel = build_index(points, 1.0)
    with pytest.raises(TypeError):
        accel.query_neighbors(points, idx)
