import numpy as np
import pytest
from scipy.spatial import cKDTree

from planet_generator.octree import SpatialIndex


@pytest.fixture
def random_points():
    rng = np.random.default_rng(42)
    return rng.uniform(-1.0, 1.0, size=(500, 3))


@pytest.fixture
def filled_index(random_points):
    index = SpatialIndex(bounds=(random_points.min(axis=0), random_points.max(axis=0)))
    for i, p in enumerate(random_points):
        assert index.insert(p, i)
    return index


def _walk(node):
    yield node
    for child in node.children or []:
        yield from _walk(child)


class TestSpatialIndex:
    def test_round_trip_returns_every_point_once(self, filled_index, random_points):
        assert len(filled_index) == len(random_points)
        found = filled_index.query_radius((0.0, 0.0, 0.0), 10.0)
        ids = [p.data for p in found]
        assert len(ids) == len(random_points)
        assert sorted(ids) == list(range(len(random_points)))

    @pytest.mark.parametrize("radius", [0.05, 0.2, 0.5])
    def test_radius_query_matches_kdtree(self, filled_index, random_points, radius):
        tree = cKDTree(random_points)
        rng = np.random.default_rng(7)
        for center in rng.uniform(-1.0, 1.0, size=(20, 3)):
            expected = set(tree.query_ball_point(center, radius))
            assert {p.data for p in filled_index.query_radius(center, radius)} == expected

    def test_box_query_matches_brute_force(self, filled_index, random_points):
        center, half = np.array([0.1, -0.2, 0.3]), 0.25
        inside = np.all(np.abs(random_points - center) <= half, axis=1)
        found = {p.data for p in filled_index.query_box(center, half)}
        assert found == set(np.flatnonzero(inside))

    def test_zero_radius_misses_non_matching_point(self, filled_index):
        assert filled_index.query_radius((0.123, 0.456, 0.789), 0.0) == []

    def test_zero_radius_hits_exact_point(self, filled_index, random_points):
        hits = filled_index.query_radius(random_points[10], 0.0)
        assert [p.data for p in hits] == [10]

    def test_out_of_bounds_insert_is_rejected(self, filled_index):
        before = len(filled_index)
        assert filled_index.insert((5.0, 5.0, 5.0), 'outside') is False
        assert len(filled_index) == before
        assert all(p.data != 'outside' for p in filled_index.all())

    def test_nodes_hold_points_or_children_never_both(self, filled_index):
        for node in _walk(filled_index.root):
            assert (node.points is None) != (node.children is None)
            if node.children is not None:
                assert len(node.children) == 8
            else:
                assert len(node.points) <= filled_index.capacity or node.depth >= filled_index.max_depth

    def test_coincident_points_stop_at_max_depth(self):
        index = SpatialIndex(size=1.0, capacity=2, max_depth=6)
        for i in range(50):
            assert index.insert((0.5, 0.5, 0.5), i)
        assert len(index) == 50
        assert max(depth for _, _, depth in index.node_boxes()) <= 6
        assert len(index.query_radius((0.5, 0.5, 0.5), 0.0)) == 50

    def test_bounds_inferred_from_points(self):
        index = SpatialIndex(points=[(0, 0, 0), (1, 2, 3)])
        assert index.bounds == ((0.0, 0.0, 0.0), (1.0, 2.0, 3.0))
        assert len(index) == 2

    def test_size_gives_symmetric_cube(self):
        index = SpatialIndex(size=2.0)
        assert index.bounds == ((-2.0, -2.0, -2.0), (2.0, 2.0, 2.0))

    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            SpatialIndex(capacity=0)
        with pytest.raises(ValueError):
            SpatialIndex(bounds=((1, 1, 1), (0, 0, 0)))

    def test_min_distance_clear(self):
        index = SpatialIndex(size=1.0)
        index.insert((0.0, 0.0, 0.0))
        assert index.min_distance_clear((0.5, 0.0, 0.0), 0.4)
        assert not index.min_distance_clear((0.1, 0.0, 0.0), 0.4)

    def test_clear_keeps_bounds(self, filled_index):
        bounds = filled_index.bounds
        filled_index.clear()
        assert len(filled_index) == 0
        assert filled_index.all() == []
        assert filled_index.bounds == bounds
