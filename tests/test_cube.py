"""Tests for the cube-sphere grid: seams, loops and projection."""

import math

import pytest

from surfacegrid.cube import (
    FACE_ORDER,
    FRAMES,
    SEAMS,
    CubeFace,
    CubePoint,
    CubeSphereGrid,
)
from surfacegrid.diagnostics import (
    inverse_errors,
    loop_length,
    max_neighbour_angle,
    neighbour_symmetry_errors,
    off_sphere_errors,
    round_trip_errors,
)
from surfacegrid.models import Direction

F, R, B, L, T, D = (
    CubeFace.FRONT,
    CubeFace.RIGHT,
    CubeFace.BACK,
    CubeFace.LEFT,
    CubeFace.TOP,
    CubeFace.BOTTOM,
)


def crosses_edge(point, direction):
    m = point.size - 1
    return (
        (direction is Direction.UP and point.y == 0)
        or (direction is Direction.DOWN and point.y == m)
        or (direction is Direction.LEFT and point.x == 0)
        or (direction is Direction.RIGHT and point.x == m)
    )


def folded_neighbour(point, direction):
    """Locate the neighbour across an edge by folding the face onto the next one."""
    n, u, v = FRAMES[point.face]
    a, b = point.face_coordinates()
    if direction is Direction.UP:
        b = -1.0
    elif direction is Direction.DOWN:
        b = 1.0
    elif direction is Direction.LEFT:
        a = -1.0
    else:
        a = 1.0
    depth = 1.0 - 1.0 / point.size
    vector = tuple(depth * n[i] + a * u[i] + b * v[i] for i in range(3))
    return CubePoint.from_vector(vector, point.size)


# ═══════════════════════════════════════════════════════════════════
# Points
# ═══════════════════════════════════════════════════════════════════

class TestCubePoint:

    def test_coordinates_clamped(self):
        assert CubePoint(F, -3, 12, 10) == CubePoint(F, 0, 9, 10)

    def test_face_from_name(self):
        assert CubePoint("front", 0, 0, 3).face is F

    def test_size_must_be_positive(self):
        with pytest.raises(ValueError):
            CubePoint(F, 0, 0, 0)
        with pytest.raises(ValueError):
            CubeSphereGrid(0)

    def test_interior_moves_are_uniform(self):
        for face in FACE_ORDER:
            p = CubePoint(face, 1, 1, 3)
            assert p.up() == CubePoint(face, 1, 0, 3)
            assert p.down() == CubePoint(face, 1, 2, 3)
            assert p.left() == CubePoint(face, 0, 1, 3)
            assert p.right() == CubePoint(face, 2, 1, 3)


# ═══════════════════════════════════════════════════════════════════
# Seams
# ═══════════════════════════════════════════════════════════════════

class TestSeams:

    def test_table_has_entry_per_face_and_direction(self):
        assert len(SEAMS) == 24
        assert {key[0] for key in SEAMS} == set(CubeFace)

    def test_front_up_enters_top_bottom_row(self):
        p = CubePoint(F, 0, 0, 10).up()
        assert p.face is T
        assert p == CubePoint(T, 0, 9, 10)

    def test_front_neighbours(self):
        assert CubePoint(F, 4, 9, 10).down() == CubePoint(D, 4, 0, 10)
        assert CubePoint(F, 0, 4, 10).left() == CubePoint(L, 9, 4, 10)
        assert CubePoint(F, 9, 4, 10).right() == CubePoint(R, 0, 4, 10)

    def test_top_left_transposes_onto_left_face(self):
        assert CubePoint(T, 0, 3, 10).left() == CubePoint(L, 3, 0, 10)

    @pytest.mark.parametrize("size", [1, 2, 4, 5])
    def test_table_matches_face_frames(self, size):
        for p in CubeSphereGrid(size).points():
            for direction in Direction:
                if crosses_edge(p, direction):
                    assert p.move(direction) == folded_neighbour(p, direction), (p, direction)

    @pytest.mark.parametrize("size", [1, 2, 3, 6])
    def test_neighbour_relation_symmetric(self, size):
        assert neighbour_symmetry_errors(CubeSphereGrid(size).points()) == []

    def test_interior_moves_invert(self):
        points = [p for p in CubeSphereGrid(6).points() if 0 < p.x < 5 and 0 < p.y < 5]
        assert inverse_errors(points) == []

    def test_up_ring_inverts_across_seams(self):
        grid = CubeSphereGrid(4)
        for p in grid.points():
            if p.face in (F, T, B, D):
                assert p.up().down() == p
                assert p.down().up() == p


# ═══════════════════════════════════════════════════════════════════
# Loops
# ═══════════════════════════════════════════════════════════════════

class TestLoops:

    def test_twelve_ups_on_size_three(self):
        start = CubePoint(F, 1, 1, 3)
        p = start
        for _ in range(12):
            p = p.up()
        assert p == start

    def test_twelve_ups_from_bottom(self):
        assert loop_length(CubePoint(D, 1, 2, 3), Direction.UP) == 12

    @pytest.mark.parametrize("size", [1, 2, 3, 5])
    def test_vertical_ring_closes(self, size):
        for p in CubeSphereGrid(size).points():
            if p.face in (F, T, B, D):
                assert loop_length(p, Direction.UP) == 4 * size
                assert loop_length(p, Direction.DOWN) == 4 * size

    @pytest.mark.parametrize("size", [1, 2, 3, 5])
    def test_equatorial_ring_closes(self, size):
        for p in CubeSphereGrid(size).points():
            if p.face in (F, R, B, L):
                assert loop_length(p, Direction.LEFT) == 4 * size
                assert loop_length(p, Direction.RIGHT) == 4 * size


# ═══════════════════════════════════════════════════════════════════
# Projection
# ═══════════════════════════════════════════════════════════════════

class TestProjection:

    @pytest.mark.parametrize("size", [1, 3, 8])
    def test_positions_on_unit_sphere(self, size):
        assert off_sphere_errors(CubeSphereGrid(size).points()) == []

    def test_position_scales(self):
        p = CubePoint(R, 2, 3, 7)
        assert p.position(3.0) == pytest.approx(tuple(3.0 * c for c in p.position()))

    def test_face_centres(self):
        assert CubePoint(F, 50, 50, 101).position() == pytest.approx((0.0, 0.0, 1.0))
        assert CubePoint(T, 50, 50, 101).position() == pytest.approx((0.0, 1.0, 0.0))
        assert CubePoint(R, 50, 50, 101).position() == pytest.approx((1.0, 0.0, 0.0))

    @pytest.mark.parametrize("size", [1, 2, 3, 8])
    def test_cells_round_trip(self, size):
        assert round_trip_errors(CubeSphereGrid(size)) == []

    @pytest.mark.parametrize(
        "lat,lon,face",
        [
            (math.pi / 2, 0.0, T),
            (-math.pi / 2, 0.0, D),
            (0.0, 0.0, F),
            (0.0, math.pi / 2, R),
            (0.0, math.pi, B),
            (0.0, 3 * math.pi / 2, L),
        ],
    )
    def test_axis_directions_land_on_face_centres(self, lat, lon, face):
        assert CubePoint.from_geographic(lat, lon, 101) == CubePoint(face, 50, 50, 101)

    def test_pole_latitude(self):
        assert CubePoint(T, 50, 50, 101).latitude() == pytest.approx(math.pi / 2)
        assert CubePoint(D, 50, 50, 101).latitude() == pytest.approx(-math.pi / 2)

    def test_longitude_range(self):
        for p in CubeSphereGrid(4).points():
            assert 0.0 <= p.longitude() < 2 * math.pi

    def test_nearby_coordinates_agree(self):
        # A fine grid resolves small steps to neighbouring cells.
        grid = CubeSphereGrid(64)
        p = grid.point_from_geographic(0.3, 1.0)
        assert abs(p.latitude() - 0.3) < 2.0 / 64
        assert abs(p.longitude() - 1.0) < 2.0 / 64

    @pytest.mark.parametrize("size", [4, 8, 16])
    def test_neighbours_are_close(self, size):
        assert max_neighbour_angle(CubeSphereGrid(size).points()) < 3.0 / size

    def test_tie_prefers_poles(self):
        p = CubePoint.from_vector((0.0, 1.0, 1.0), 5)
        assert p.face is T

    def test_zero_vector_rejected(self):
        with pytest.raises(ValueError):
            CubePoint.from_vector((0.0, 0.0, 0.0), 5)


# ═══════════════════════════════════════════════════════════════════
# Grid
# ═══════════════════════════════════════════════════════════════════

class TestCubeGrid:

    def test_enumeration_is_face_major(self):
        points = list(CubeSphereGrid(2).points())
        assert [p.face for p in points[::4]] == list(FACE_ORDER)
        assert [(p.x, p.y) for p in points[:4]] == [(0, 0), (1, 0), (0, 1), (1, 1)]

    def test_face_accessor_writes_through(self):
        grid = CubeSphereGrid(3)
        grid.face(F)[1][2] = 7
        assert grid[CubePoint(F, 2, 1, 3)] == 7

    def test_shape(self):
        assert CubeSphereGrid(4).shape == (6, 4, 4)

    def test_wrong_size_point_rejected(self):
        with pytest.raises(ValueError):
            CubeSphereGrid(4)[CubePoint(F, 0, 0, 5)]

    def test_geographic_lookup(self):
        grid = CubeSphereGrid.from_fn(5, lambda p: p.face.value)
        assert grid[grid.point_from_geographic(math.pi / 2, 0.0)] == "top"
