"""Cube-sphere grid.

Six ``size × size`` faces glued along their edges into a closed
surface, projected onto the sphere gnomonically (each cube-surface point
is pushed out along the ray from the centre).

Frames
------
Every face carries an orthonormal frame ``(n, u, v)``: ``n`` is the
outward normal, ``u`` the world direction of increasing local ``x`` and
``v`` of increasing local ``y``.  World ``+y`` is north and longitude 0
faces ``+z``.  On the four equatorial faces ``y`` grows southwards, so
``up`` always means ``y - 1`` inside a face.

Seams
-----
Leaving a face is resolved by :data:`SEAMS`, one entry per face and
direction.  Each entry names the face entered and how the local
coordinates of the cell being left map onto it.  The Front/Top/Back/
Bottom ring is closed under ``up`` and the Front/Right/Back/Left ring
under ``right``.  The remaining ring (Top/Right/Bottom/Left) meets its
neighbours with rotated labels, so near those seams a move's inverse
may be a different direction; the neighbour *relation* is still
symmetric everywhere.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, TypeVar

from .config import ParallelConfig
from .grid import SurfaceGrid, row_shape_errors
from .models import Direction, SpherePoint

logger = logging.getLogger(__name__)

T = TypeVar("T")

Vec3 = Tuple[float, float, float]

TWO_PI = 2.0 * math.pi


class CubeFace(Enum):
    """The six faces, declared in grid enumeration order."""

    TOP = "top"
    LEFT = "left"
    FRONT = "front"
    RIGHT = "right"
    BACK = "back"
    BOTTOM = "bottom"


FACE_ORDER: Tuple[CubeFace, ...] = tuple(CubeFace)
_FACE_INDEX = {face: i for i, face in enumerate(FACE_ORDER)}

# ═══════════════════════════════════════════════════════════════════
# Face frames  (n, u, v)
# ═══════════════════════════════════════════════════════════════════

_X: Vec3 = (1.0, 0.0, 0.0)
_Y: Vec3 = (0.0, 1.0, 0.0)
_Z: Vec3 = (0.0, 0.0, 1.0)


def _neg(v: Vec3) -> Vec3:
    return (-v[0], -v[1], -v[2])


def _dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


FRAMES: Dict[CubeFace, Tuple[Vec3, Vec3, Vec3]] = {
    CubeFace.FRONT: (_Z, _X, _neg(_Y)),
    CubeFace.RIGHT: (_X, _neg(_Z), _neg(_Y)),
    CubeFace.BACK: (_neg(_Z), _neg(_X), _Y),
    CubeFace.LEFT: (_neg(_X), _Z, _neg(_Y)),
    CubeFace.TOP: (_Y, _X, _Z),
    CubeFace.BOTTOM: (_neg(_Y), _X, _neg(_Z)),
}

# ═══════════════════════════════════════════════════════════════════
# Seam table
# ═══════════════════════════════════════════════════════════════════


class Seam(NamedTuple):
    """Where a move off the edge of a face lands.

    ``x`` and ``y`` are coordinate rules evaluated on the cell being
    left, with ``m = size - 1``: one of ``"x"``, ``"y"``, ``"m-x"``,
    ``"m-y"``, ``"0"`` or ``"m"``.
    """

    target: CubeFace
    x: str
    y: str


def _seams(face: CubeFace, up: Seam, down: Seam, left: Seam, right: Seam):
    return {
        (face, Direction.UP): up,
        (face, Direction.DOWN): down,
        (face, Direction.LEFT): left,
        (face, Direction.RIGHT): right,
    }


_F, _R, _B, _L, _T, _D = (
    CubeFace.FRONT,
    CubeFace.RIGHT,
    CubeFace.BACK,
    CubeFace.LEFT,
    CubeFace.TOP,
    CubeFace.BOTTOM,
)

SEAMS: Dict[Tuple[CubeFace, Direction], Seam] = {
    **_seams(_F, Seam(_T, "x", "m"), Seam(_D, "x", "0"), Seam(_L, "m", "y"), Seam(_R, "0", "y")),
    **_seams(_R, Seam(_T, "m", "m-x"), Seam(_D, "m", "x"), Seam(_F, "m", "y"), Seam(_B, "0", "m-y")),
    **_seams(_B, Seam(_D, "m-x", "m"), Seam(_T, "m-x", "0"), Seam(_R, "m", "m-y"), Seam(_L, "0", "m-y")),
    **_seams(_L, Seam(_T, "0", "x"), Seam(_D, "0", "m-x"), Seam(_B, "m", "m-y"), Seam(_F, "0", "y")),
    **_seams(_T, Seam(_B, "m-x", "m"), Seam(_F, "x", "0"), Seam(_L, "y", "0"), Seam(_R, "m-y", "0")),
    **_seams(_D, Seam(_F, "x", "m"), Seam(_B, "m-x", "0"), Seam(_L, "m-y", "m"), Seam(_R, "y", "m")),
}

_RULES: Dict[str, Callable[[int, int, int], int]] = {
    "x": lambda x, y, m: x,
    "y": lambda x, y, m: y,
    "m-x": lambda x, y, m: m - x,
    "m-y": lambda x, y, m: m - y,
    "0": lambda x, y, m: 0,
    "m": lambda x, y, m: m,
}

_STEPS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


# ═══════════════════════════════════════════════════════════════════
# Points
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CubePoint(SpherePoint):
    """Cell ``(x, y)`` of one face of a cube-sphere with ``size`` cells per edge.

    Coordinates outside ``[0, size)`` are clamped onto the face.
    """

    face: CubeFace
    x: int
    y: int
    size: int

    def __post_init__(self) -> None:
        if self.size < 1:
            raise ValueError(f"Cube size must be positive, got {self.size}")
        if not isinstance(self.face, CubeFace):
            object.__setattr__(self, "face", CubeFace(self.face))
        m = self.size - 1
        object.__setattr__(self, "x", min(max(self.x, 0), m))
        object.__setattr__(self, "y", min(max(self.y, 0), m))

    # ── moves ───────────────────────────────────────────────────────

    def move(self, direction: Direction) -> "CubePoint":
        dx, dy = _STEPS[direction]
        x, y = self.x + dx, self.y + dy
        if 0 <= x < self.size and 0 <= y < self.size:
            return CubePoint(self.face, x, y, self.size)
        seam = SEAMS[(self.face, direction)]
        m = self.size - 1
        return CubePoint(
            seam.target,
            _RULES[seam.x](self.x, self.y, m),
            _RULES[seam.y](self.x, self.y, m),
            self.size,
        )

    def up(self) -> "CubePoint":
        return self.move(Direction.UP)

    def down(self) -> "CubePoint":
        return self.move(Direction.DOWN)

    def left(self) -> "CubePoint":
        return self.move(Direction.LEFT)

    def right(self) -> "CubePoint":
        return self.move(Direction.RIGHT)

    # ── geography ───────────────────────────────────────────────────

    def face_coordinates(self) -> Tuple[float, float]:
        """Cell centre in face-plane units ``(a, b)``, each in ``(-1, 1)``."""
        return (
            (2 * self.x + 1) / self.size - 1.0,
            (2 * self.y + 1) / self.size - 1.0,
        )

    def position(self, scale: float = 1.0) -> Vec3:
        n, u, v = FRAMES[self.face]
        a, b = self.face_coordinates()
        p = tuple(n[i] + a * u[i] + b * v[i] for i in range(3))
        k = scale / math.sqrt(_dot(p, p))
        return (p[0] * k, p[1] * k, p[2] * k)

    def latitude(self) -> float:
        x, y, z = self.position()
        return math.atan2(y, math.hypot(x, z))

    def longitude(self) -> float:
        x, _, z = self.position()
        return math.atan2(x, z) % TWO_PI

    @classmethod
    def from_vector(cls, vector: Vec3, size: int) -> "CubePoint":
        """Return the cell whose face region the ray along *vector* crosses.

        The face is picked by the dominant axis; ties go to Top/Bottom,
        then Front/Back, then Left/Right.
        """
        x, y, z = vector
        ax, ay, az = abs(x), abs(y), abs(z)
        if ax == ay == az == 0.0:
            raise ValueError("Cannot locate the zero vector on a cube-sphere")
        if ay >= ax and ay >= az:
            face = CubeFace.TOP if y > 0 else CubeFace.BOTTOM
        elif az >= ax:
            face = CubeFace.FRONT if z > 0 else CubeFace.BACK
        else:
            face = CubeFace.RIGHT if x > 0 else CubeFace.LEFT
        n, u, v = FRAMES[face]
        depth = _dot(vector, n)
        a = _dot(vector, u) / depth
        b = _dot(vector, v) / depth
        return cls(face, _cell_index(a, size), _cell_index(b, size), size)

    @classmethod
    def from_geographic(cls, latitude: float, longitude: float, size: int) -> "CubePoint":
        cos_lat = math.cos(latitude)
        vector = (
            cos_lat * math.sin(longitude),
            math.sin(latitude),
            cos_lat * math.cos(longitude),
        )
        return cls.from_vector(vector, size)


def _cell_index(coordinate: float, size: int) -> int:
    index = int(math.floor((coordinate + 1.0) / 2.0 * size))
    return min(max(index, 0), size - 1)


@lru_cache(maxsize=32)
def _cube_rows(size: int) -> Tuple[Tuple[CubePoint, ...], ...]:
    return tuple(
        tuple(CubePoint(face, x, y, size) for x in range(size))
        for face in FACE_ORDER
        for y in range(size)
    )


# ═══════════════════════════════════════════════════════════════════
# Grid
# ═══════════════════════════════════════════════════════════════════


class CubeSphereGrid(SurfaceGrid[T, CubePoint]):
    """Dense values over a :class:`CubePoint` topology.

    Storage is ``6 × size`` rows of ``size`` values, face-major in
    :data:`FACE_ORDER`, each face row-major.
    """

    TOPOLOGY = "cube"

    def __init__(self, size: int, fill: Any = 0) -> None:
        if size < 1:
            raise ValueError(f"Cube size must be positive, got {size}")
        self.size = size
        self._rows = [[fill] * size for _ in range(6 * size)]
        logger.debug("Created %r", self)

    @classmethod
    def from_fn(cls, size: int, fn: Callable[[CubePoint], T]) -> "CubeSphereGrid[T]":
        grid = cls(size, fill=None)
        grid.set_from_fn(fn)
        return grid

    @classmethod
    def from_fn_par(
        cls,
        size: int,
        fn: Callable[[CubePoint], T],
        config: Optional[ParallelConfig] = None,
    ) -> "CubeSphereGrid[T]":
        grid = cls(size, fill=None)
        grid.set_from_fn_par(fn, config)
        return grid

    def face(self, face: CubeFace) -> List[List[T]]:
        """The ``size`` storage rows of *face*; edits write through."""
        start = _FACE_INDEX[CubeFace(face)] * self.size
        return self._rows[start : start + self.size]

    # ── topology hooks ──────────────────────────────────────────────

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (6, self.size, self.size)

    def _row_points(self, row: int) -> Tuple[CubePoint, ...]:
        return _cube_rows(self.size)[row]

    def _locate(self, point: CubePoint) -> Tuple[int, int]:
        if not isinstance(point, CubePoint):
            raise TypeError(f"Expected CubePoint, got {type(point).__name__}")
        if point.size != self.size:
            raise ValueError(
                f"Point of a size-{point.size} cube used on a size-{self.size} cube"
            )
        return _FACE_INDEX[point.face] * self.size + point.y, point.x

    def _blank(self) -> "CubeSphereGrid[Any]":
        return CubeSphereGrid(self.size, fill=None)

    def point_from_geographic(self, latitude: float, longitude: float) -> CubePoint:
        return CubePoint.from_geographic(latitude, longitude, self.size)

    # ── serialisation ───────────────────────────────────────────────

    def _size_payload(self) -> Dict[str, int]:
        return {"size": self.size}

    def _rows_payload(self) -> Dict[str, List[List[Any]]]:
        return {face.value: [list(row) for row in self.face(face)] for face in FACE_ORDER}

    @classmethod
    def from_dict(cls, payload: dict) -> "CubeSphereGrid[Any]":
        errors = cube_payload_errors(payload)
        if errors:
            raise ValueError("Invalid cube grid payload: " + "; ".join(errors))
        grid = cls(payload["size"], fill=None)
        grid._rows = [
            list(row) for face in FACE_ORDER for row in payload["rows"][face.value]
        ]
        return grid

    @classmethod
    def from_numpy(cls, array: Any) -> "CubeSphereGrid[Any]":
        """Build a grid from a ``(6, size, size)`` array in :data:`FACE_ORDER`."""
        shape = tuple(array.shape)
        if len(shape) != 3 or shape[0] != 6 or shape[1] != shape[2]:
            raise ValueError(f"Expected an array of shape (6, S, S), got {shape}")
        grid = cls(int(shape[1]), fill=None)
        grid._rows = grid._rows_from_array(array)
        return grid


def cube_payload_errors(payload: dict) -> List[str]:
    """Structural problems in a cube grid payload (empty means valid)."""
    if payload.get("topology") != CubeSphereGrid.TOPOLOGY:
        return [f"topology: expected 'cube', got {payload.get('topology')!r}"]
    size = payload.get("size")
    if not isinstance(size, int) or size < 1:
        return [f"size: expected a positive integer, got {size!r}"]
    rows = payload.get("rows")
    if not isinstance(rows, dict):
        return ["rows: expected a mapping of face name to rows"]
    errors: List[str] = []
    for face in FACE_ORDER:
        if face.value not in rows:
            errors.append(f"rows: missing face {face.value!r}")
            continue
        errors.extend(row_shape_errors(rows[face.value], size, size, f"rows.{face.value}"))
    return errors
