"""Point contracts shared by every surface topology.

A *grid point* is an immutable address on a wrapped surface.  It knows
its four direct neighbours and where it sits in 3-D space.  A *sphere
point* additionally converts to and from geographic coordinates.

Concrete points (:class:`~rectangle.RectanglePoint`,
:class:`~cube.CubePoint`) subclass these protocols explicitly so that
they pick up the default helpers defined here.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol, Tuple, TypeVar, runtime_checkable

P = TypeVar("P", bound="GridPoint")


class Direction(Enum):
    """One of the four moves a grid point supports."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


@runtime_checkable
class GridPoint(Protocol):
    """An addressable cell on a surface grid.

    Two points compare equal when they address the same stored cell.
    Moving repeatedly in one direction along a closed ring of the
    surface eventually returns to the starting point.
    """

    def up(self: P) -> P:
        ...

    def down(self: P) -> P:
        ...

    def left(self: P) -> P:
        ...

    def right(self: P) -> P:
        ...

    def position(self, scale: float = 1.0) -> Tuple[float, float, float]:
        """Cartesian position of the cell on a sphere of radius *scale*."""
        ...

    # ── defaults ────────────────────────────────────────────────────

    def move(self: P, direction: Direction) -> P:
        """Step once in *direction*."""
        return getattr(self, direction.value)()

    def neighbours(self: P) -> Tuple[P, P, P, P]:
        """Return ``(up, down, left, right)``."""
        return (self.up(), self.down(), self.left(), self.right())


@runtime_checkable
class SpherePoint(GridPoint, Protocol):
    """A grid point that can be expressed as latitude / longitude.

    Angles are in radians.  Latitude is 0 on the equator and positive
    towards the north pole; longitude 0 faces the ``+z`` axis and
    increases towards ``+x``.
    """

    def latitude(self) -> float:
        ...

    def longitude(self) -> float:
        ...

    def sphere_coordinates(self) -> Tuple[float, float]:
        """Return ``(longitude, latitude)``."""
        return (self.longitude(), self.latitude())
