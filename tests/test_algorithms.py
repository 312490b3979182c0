import pytest

from surfacegrid.algorithms import build_adjacency, moore, ring_points, von_neumann
from surfacegrid.cube import CubeSphereGrid
from surfacegrid.rectangle import RectanglePoint, RectangleSphereGrid


def pt(x, y):
    return RectanglePoint(x, y, 10, 10)


def test_von_neumann_order():
    assert von_neumann(pt(2, 5)) == (pt(2, 4), pt(2, 6), pt(1, 5), pt(3, 5))


def test_moore_order():
    assert moore(pt(2, 5)) == (
        pt(1, 4), pt(2, 4), pt(3, 4),
        pt(1, 5), pt(3, 5),
        pt(1, 6), pt(2, 6), pt(3, 6),
    )


def test_ring_points_bfs():
    rings = ring_points(pt(2, 5), max_depth=2)

    assert rings[0] == [pt(2, 5)]
    assert rings[1] == [pt(2, 4), pt(2, 6), pt(1, 5), pt(3, 5)]
    assert set(rings[2]) == {
        pt(2, 3), pt(2, 7), pt(0, 5), pt(4, 5),
        pt(1, 4), pt(3, 4), pt(1, 6), pt(3, 6),
    }


def test_ring_points_stops_when_exhausted():
    start = RectanglePoint(0, 0, 2, 1)
    rings = ring_points(start, max_depth=5)
    assert rings == {0: [start], 1: [RectanglePoint(1, 0, 2, 1)]}


def test_ring_points_cover_cube():
    grid = CubeSphereGrid(3)
    rings = ring_points(next(iter(grid)), max_depth=100)
    reached = [p for ring in rings.values() for p in ring]
    assert len(reached) == len(set(reached)) == len(grid)


def test_ring_points_negative_depth():
    with pytest.raises(ValueError):
        ring_points(pt(0, 0), max_depth=-1)


def test_build_adjacency_drops_duplicates():
    grid = RectangleSphereGrid(2, 1)
    adjacency = build_adjacency(grid.points())
    assert adjacency == {
        RectanglePoint(0, 0, 2, 1): [RectanglePoint(1, 0, 2, 1)],
        RectanglePoint(1, 0, 2, 1): [RectanglePoint(0, 0, 2, 1)],
    }
