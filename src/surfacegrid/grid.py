"""Surface grid container: dense per-cell storage over a topology.

:class:`SurfaceGrid` implements the whole container contract once:
bulk construction from a per-point function, indexing, neighbour-aware
transforms, iteration, double-buffer swapping, and the data-parallel
variants of all of these.  Topologies plug in by describing their
storage rows.

Storage
-------
Every grid keeps a list of equally long *rows*.  A rectangle grid has
``height`` rows of ``width`` cells; a cube grid concatenates its six
faces into ``6 × size`` rows of ``size`` cells (face-major, each face
row-major).  Rows are also the unit of work for the ``*_par`` methods:
each worker builds whole rows from a read-only source, so workers never
write overlapping storage.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import (
    Any,
    Callable,
    Dict,
    Generic,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
)

from .algorithms import moore, von_neumann
from .config import ParallelConfig
from .parallel import ParallelIterator, map_rows

logger = logging.getLogger(__name__)

T = TypeVar("T")
P = TypeVar("P")

NeighbourFn = Callable[[Any, Any, Any, Any, Any], Any]
DiagonalFn = Callable[[Any, Any, Any, Any, Any, Any, Any, Any, Any], Any]


class SurfaceGrid(ABC, Generic[T, P]):
    """A grid of values wrapped around a closed surface.

    Subclasses provide the topology hooks (:meth:`_row_points`,
    :meth:`_locate`, :meth:`_blank`) and the size parameters; everything
    else is shared.
    """

    VERSION = "1.0"
    TOPOLOGY = ""

    _rows: List[List[T]]

    # ── topology hooks ──────────────────────────────────────────────

    @property
    @abstractmethod
    def shape(self) -> Tuple[int, ...]:
        """Logical array shape of the stored values."""

    @abstractmethod
    def _row_points(self, row: int) -> Tuple[P, ...]:
        """Points stored in storage row *row*, in column order."""

    @abstractmethod
    def _locate(self, point: P) -> Tuple[int, int]:
        """Return ``(row, column)`` of *point*, validating its size."""

    @abstractmethod
    def _blank(self) -> "SurfaceGrid[Any, P]":
        """A new grid of the same topology and size, filled with ``None``."""

    @abstractmethod
    def point_from_geographic(self, latitude: float, longitude: float) -> P:
        """The point of this grid containing ``(latitude, longitude)``."""

    @abstractmethod
    def _size_payload(self) -> Dict[str, int]:
        ...

    @abstractmethod
    def _rows_payload(self) -> Any:
        ...

    # ── indexing ────────────────────────────────────────────────────

    def __getitem__(self, point: P) -> T:
        row, col = self._locate(point)
        return self._rows[row][col]

    def __setitem__(self, point: P, value: T) -> None:
        row, col = self._locate(point)
        self._rows[row][col] = value

    def __contains__(self, point: object) -> bool:
        try:
            self._locate(point)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return False
        return True

    def __len__(self) -> int:
        return sum(len(row) for row in self._rows)

    def __iter__(self) -> Iterator[P]:
        return self.points()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SurfaceGrid):
            return NotImplemented
        return (
            self.TOPOLOGY == other.TOPOLOGY
            and self.shape == other.shape
            and self._rows == other._rows
        )

    __hash__ = None  # type: ignore[assignment]

    @property
    def row_count(self) -> int:
        return len(self._rows)

    def copy(self) -> "SurfaceGrid[T, P]":
        """Return a grid with the same values in fresh storage."""
        other = self._blank()
        other._rows = [list(row) for row in self._rows]
        return other

    def _check_compatible(self, other: "SurfaceGrid[Any, P]", action: str) -> None:
        if not isinstance(other, SurfaceGrid):
            raise TypeError(f"Cannot {action} {type(other).__name__}; expected a SurfaceGrid")
        if other.TOPOLOGY != self.TOPOLOGY or other.shape != self.shape:
            raise ValueError(
                f"Cannot {action} a {other.TOPOLOGY} grid of shape {other.shape} "
                f"with a {self.TOPOLOGY} grid of shape {self.shape}"
            )

    # ── iteration ───────────────────────────────────────────────────

    def points(self) -> Iterator[P]:
        """Every point of the topology, in enumeration order."""
        for row in range(self.row_count):
            yield from self._row_points(row)

    def values(self) -> Iterator[T]:
        for row in self._rows:
            yield from row

    def items(self) -> Iterator[Tuple[P, T]]:
        """``(point, value)`` for every cell, in enumeration order."""
        for row, values in enumerate(self._rows):
            yield from zip(self._row_points(row), values)

    def par_points(self, config: Optional[ParallelConfig] = None) -> ParallelIterator[P]:
        return ParallelIterator(
            [self._row_points(row) for row in range(self.row_count)], config
        )

    def par_items(
        self, config: Optional[ParallelConfig] = None
    ) -> ParallelIterator[Tuple[P, T]]:
        return ParallelIterator(
            [
                tuple(zip(self._row_points(row), values))
                for row, values in enumerate(self._rows)
            ],
            config,
        )

    # ── bulk updates ────────────────────────────────────────────────

    def set_from_fn(self, fn: Callable[[P], T]) -> None:
        """Overwrite every cell with ``fn(point)``.

        *fn* is called exactly once per point.  New rows are assembled
        before they replace the old ones, so *fn* may read this grid
        and will see the previous values.
        """
        self._rows = [
            [fn(point) for point in self._row_points(row)]
            for row in range(self.row_count)
        ]

    def set_from_fn_par(
        self, fn: Callable[[P], T], config: Optional[ParallelConfig] = None
    ) -> None:
        """Parallel :meth:`set_from_fn`; *fn* must be safe to call from threads."""
        logger.debug("Parallel rebuild of %r", self)
        self._rows = map_rows(
            lambda row: [fn(point) for point in self._row_points(row)],
            self.row_count,
            config,
        )

    def apply(self, fn: Callable[[T], T]) -> None:
        """Replace every value with ``fn(value)``."""
        self._rows = [[fn(value) for value in row] for row in self._rows]

    def apply_par(self, fn: Callable[[T], T], config: Optional[ParallelConfig] = None) -> None:
        rows = self._rows
        self._rows = map_rows(
            lambda row: [fn(value) for value in rows[row]], self.row_count, config
        )

    def fill(self, value: T) -> None:
        self._rows = [[value] * len(row) for row in self._rows]

    def swap(self, other: "SurfaceGrid[T, P]") -> None:
        """Exchange backing storage with *other* (double buffering)."""
        self._check_compatible(other, "swap")
        self._rows, other._rows = other._rows, self._rows

    # ── neighbour transforms ────────────────────────────────────────

    def set_from_neighbours(self, source: "SurfaceGrid[Any, P]", fn: NeighbourFn) -> None:
        """Write ``fn(current, up, down, left, right)`` read from *source*."""
        self._check_compatible(source, "read neighbours from")
        self.set_from_fn(_neighbour_cell(source, fn))

    def set_from_neighbours_par(
        self,
        source: "SurfaceGrid[Any, P]",
        fn: NeighbourFn,
        config: Optional[ParallelConfig] = None,
    ) -> None:
        self._check_compatible(source, "read neighbours from")
        self.set_from_fn_par(_neighbour_cell(source, fn), config)

    def set_from_neighbours_diagonals(
        self, source: "SurfaceGrid[Any, P]", fn: DiagonalFn
    ) -> None:
        """Write the 3×3 stencil function of *source* into this grid.

        *fn* receives ``up_left, up, up_right, left, current, right,
        down_left, down, down_right``.
        """
        self._check_compatible(source, "read neighbours from")
        self.set_from_fn(_diagonal_cell(source, fn))

    def set_from_neighbours_diagonals_par(
        self,
        source: "SurfaceGrid[Any, P]",
        fn: DiagonalFn,
        config: Optional[ParallelConfig] = None,
    ) -> None:
        self._check_compatible(source, "read neighbours from")
        self.set_from_fn_par(_diagonal_cell(source, fn), config)

    def map_neighbours(self, fn: NeighbourFn) -> "SurfaceGrid[Any, P]":
        out = self._blank()
        out.set_from_neighbours(self, fn)
        return out

    def map_neighbours_par(
        self, fn: NeighbourFn, config: Optional[ParallelConfig] = None
    ) -> "SurfaceGrid[Any, P]":
        out = self._blank()
        out.set_from_neighbours_par(self, fn, config)
        return out

    def map_neighbours_diagonals(self, fn: DiagonalFn) -> "SurfaceGrid[Any, P]":
        out = self._blank()
        out.set_from_neighbours_diagonals(self, fn)
        return out

    def map_neighbours_diagonals_par(
        self, fn: DiagonalFn, config: Optional[ParallelConfig] = None
    ) -> "SurfaceGrid[Any, P]":
        out = self._blank()
        out.set_from_neighbours_diagonals_par(self, fn, config)
        return out

    # ── serialisation ───────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.VERSION,
            "topology": self.TOPOLOGY,
            **self._size_payload(),
            "rows": self._rows_payload(),
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, payload: dict) -> "SurfaceGrid[Any, Any]":
        raise NotImplementedError

    @classmethod
    def from_json(cls, text: str) -> "SurfaceGrid[Any, Any]":
        return cls.from_dict(json.loads(text))

    def to_numpy(self, dtype: Any = None):
        """Return the values as a numpy array of :attr:`shape`."""
        try:
            import numpy as np
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError(
                "Array export requires numpy. Install with `pip install numpy`."
            ) from exc
        return np.asarray(self._rows, dtype=dtype).reshape(self.shape)

    def _rows_from_array(self, array: Any) -> List[List[Any]]:
        if tuple(array.shape) != self.shape:
            raise ValueError(f"Expected array of shape {self.shape}, got {tuple(array.shape)}")
        row_len = self.shape[-1]
        return array.reshape(-1, row_len).tolist()

    def __repr__(self) -> str:
        sizes = ", ".join(f"{k}={v}" for k, v in self._size_payload().items())
        return f"{type(self).__name__}({sizes})"


def row_shape_errors(rows: Any, count: int, length: int, label: str = "rows") -> List[str]:
    """Check that *rows* is a list of *count* lists of *length* values."""
    if not isinstance(rows, list):
        return [f"{label}: expected a list, got {type(rows).__name__}"]
    errors: List[str] = []
    if len(rows) != count:
        errors.append(f"{label}: expected {count} rows, got {len(rows)}")
    for i, row in enumerate(rows):
        if not isinstance(row, list) or len(row) != length:
            errors.append(f"{label}[{i}]: expected a list of {length} values")
    return errors


# ═══════════════════════════════════════════════════════════════════
# Stencil adapters
# ═══════════════════════════════════════════════════════════════════

def _neighbour_cell(source: SurfaceGrid[Any, Any], fn: NeighbourFn) -> Callable[[Any], Any]:
    def cell(point: Any) -> Any:
        up, down, left, right = von_neumann(point)
        return fn(source[point], source[up], source[down], source[left], source[right])

    return cell


def _diagonal_cell(source: SurfaceGrid[Any, Any], fn: DiagonalFn) -> Callable[[Any], Any]:
    def cell(point: Any) -> Any:
        ul, u, ur, l, r, dl, d, dr = (source[q] for q in moore(point))
        return fn(ul, u, ur, l, source[point], r, dl, d, dr)

    return cell
