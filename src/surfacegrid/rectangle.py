"""Equirectangular sphere grid.

A ``width × height`` array wrapped around a sphere: columns are
longitude bands, rows are latitude bands with row 0 at the north pole.
Left/right wrap around the equator.  Up/down reflect across the poles:
walking off the first or last row re-enters that same row in the
antipodal column ``x + width/2``, and the meaning of up/down flips in
the far half of the columns so that the two moves stay inverse to one
another everywhere.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from .config import ParallelConfig
from .grid import SurfaceGrid, row_shape_errors
from .models import SpherePoint

logger = logging.getLogger(__name__)

T = TypeVar("T")

TWO_PI = 2.0 * math.pi

# Absorbs rounding when a coordinate lands exactly on a cell edge.
_EDGE_EPS = 1e-9


def _check_size(width: int, height: int) -> None:
    if width < 1 or height < 1:
        raise ValueError(f"Grid size must be positive, got {width}x{height}")
    if width % 2:
        raise ValueError(f"Rectangle width must be even for the pole wrap, got {width}")


@dataclass(frozen=True)
class RectanglePoint(SpherePoint):
    """A cell ``(x, y)`` of a ``width × height`` equirectangular grid.

    Coordinates are reduced modulo the grid size on construction, so
    ``RectanglePoint(-1, 0, 10, 10) == RectanglePoint(9, 0, 10, 10)``.
    """

    x: int
    y: int
    width: int
    height: int

    def __post_init__(self) -> None:
        _check_size(self.width, self.height)
        object.__setattr__(self, "x", self.x % self.width)
        object.__setattr__(self, "y", self.y % self.height)

    def _at(self, x: int, y: int) -> "RectanglePoint":
        return RectanglePoint(x, y, self.width, self.height)

    # ── moves ───────────────────────────────────────────────────────

    def _northward(self) -> bool:
        return self.x < self.width // 2

    def _vertical(self, dy: int) -> "RectanglePoint":
        y = self.y + dy
        if 0 <= y < self.height:
            return self._at(self.x, y)
        # Pole crossing: same row, antipodal column.
        return self._at(self.x + self.width // 2, self.y)

    def up(self) -> "RectanglePoint":
        return self._vertical(-1 if self._northward() else 1)

    def down(self) -> "RectanglePoint":
        return self._vertical(1 if self._northward() else -1)

    def left(self) -> "RectanglePoint":
        return self._at(self.x - 1, self.y)

    def right(self) -> "RectanglePoint":
        return self._at(self.x + 1, self.y)

    # ── geography ───────────────────────────────────────────────────

    def latitude(self) -> float:
        return math.pi / 2 - self.y / self.height * math.pi

    def longitude(self) -> float:
        return self.x / self.width * TWO_PI

    def position(self, scale: float = 1.0) -> Tuple[float, float, float]:
        lat = self.latitude()
        lon = self.longitude()
        return (
            scale * math.cos(lat) * math.sin(lon),
            scale * math.sin(lat),
            scale * math.cos(lat) * math.cos(lon),
        )

    @classmethod
    def from_geographic(
        cls, latitude: float, longitude: float, width: int, height: int
    ) -> "RectanglePoint":
        """Return the cell containing ``(latitude, longitude)`` (radians).

        Latitudes beyond the poles are folded back onto the sphere by
        reflection; longitude is taken modulo 2π.
        """
        _check_size(width, height)
        t = ((math.pi / 2 - latitude) / math.pi) % 2.0
        if t > 1.0:
            t = 2.0 - t
        row = min(int(math.floor(t * height + _EDGE_EPS)), height - 1)
        col = int(math.floor(longitude / TWO_PI * width + _EDGE_EPS)) % width
        return cls(col, row, width, height)


@lru_cache(maxsize=32)
def _rectangle_rows(width: int, height: int) -> Tuple[Tuple[RectanglePoint, ...], ...]:
    return tuple(
        tuple(RectanglePoint(x, y, width, height) for x in range(width))
        for y in range(height)
    )


class RectangleSphereGrid(SurfaceGrid[T, RectanglePoint]):
    """Dense values over a :class:`RectanglePoint` topology.

    Storage is one list per row, ``height`` rows of ``width`` values.

    Parameters
    ----------
    width, height : int
        Grid size.  ``width`` must be even.
    fill
        Initial value of every cell.
    """

    TOPOLOGY = "rectangle"

    def __init__(self, width: int, height: int, fill: Any = 0) -> None:
        _check_size(width, height)
        self.width = width
        self.height = height
        self._rows = [[fill] * width for _ in range(height)]
        logger.debug("Created %r", self)

    @classmethod
    def from_fn(
        cls, width: int, height: int, fn: Callable[[RectanglePoint], T]
    ) -> "RectangleSphereGrid[T]":
        grid = cls(width, height, fill=None)
        grid.set_from_fn(fn)
        return grid

    @classmethod
    def from_fn_par(
        cls,
        width: int,
        height: int,
        fn: Callable[[RectanglePoint], T],
        config: Optional[ParallelConfig] = None,
    ) -> "RectangleSphereGrid[T]":
        grid = cls(width, height, fill=None)
        grid.set_from_fn_par(fn, config)
        return grid

    # ── topology hooks ──────────────────────────────────────────────

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    def _row_points(self, row: int) -> Tuple[RectanglePoint, ...]:
        return _rectangle_rows(self.width, self.height)[row]

    def _locate(self, point: RectanglePoint) -> Tuple[int, int]:
        if not isinstance(point, RectanglePoint):
            raise TypeError(f"Expected RectanglePoint, got {type(point).__name__}")
        if point.width != self.width or point.height != self.height:
            raise ValueError(
                f"Point of a {point.width}x{point.height} grid used on a "
                f"{self.width}x{self.height} grid"
            )
        return point.y, point.x

    def _blank(self) -> "RectangleSphereGrid[Any]":
        return RectangleSphereGrid(self.width, self.height, fill=None)

    def point_from_geographic(self, latitude: float, longitude: float) -> RectanglePoint:
        return RectanglePoint.from_geographic(latitude, longitude, self.width, self.height)

    # ── serialisation ───────────────────────────────────────────────

    def _size_payload(self) -> Dict[str, int]:
        return {"width": self.width, "height": self.height}

    def _rows_payload(self) -> List[List[Any]]:
        return [list(row) for row in self._rows]

    @classmethod
    def from_dict(cls, payload: dict) -> "RectangleSphereGrid[Any]":
        errors = rectangle_payload_errors(payload)
        if errors:
            raise ValueError("Invalid rectangle grid payload: " + "; ".join(errors))
        grid = cls(payload["width"], payload["height"], fill=None)
        grid._rows = [list(row) for row in payload["rows"]]
        return grid

    @classmethod
    def from_numpy(cls, array: Any) -> "RectangleSphereGrid[Any]":
        """Build a grid from a ``(height, width)`` array."""
        if len(array.shape) != 2:
            raise ValueError(f"Expected a 2-D array, got shape {tuple(array.shape)}")
        height, width = array.shape
        grid = cls(int(width), int(height), fill=None)
        grid._rows = grid._rows_from_array(array)
        return grid


def rectangle_payload_errors(payload: dict) -> List[str]:
    """Structural problems in a rectangle grid payload (empty means valid)."""
    if payload.get("topology") != RectangleSphereGrid.TOPOLOGY:
        return [f"topology: expected 'rectangle', got {payload.get('topology')!r}"]
    width = payload.get("width")
    height = payload.get("height")
    if not isinstance(width, int) or not isinstance(height, int):
        return ["width and height must be integers"]
    try:
        _check_size(width, height)
    except ValueError as exc:
        return [str(exc)]
    return row_shape_errors(payload.get("rows"), height, width)
