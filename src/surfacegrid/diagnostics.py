"""Exhaustive topology and projection checks.

Every check walks the full point set of a grid, so keep sizes modest
when running them interactively.  Checks return lists of human-readable
error strings (empty means valid); :func:`diagnostics_report` bundles
them into a JSON-friendly dict and :func:`topology_quality_gates` turns
that into pass/fail flags.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence

from .algorithms import von_neumann
from .grid import SurfaceGrid
from .models import Direction, GridPoint, SpherePoint

logger = logging.getLogger(__name__)

_INVERSE_PAIRS = (
    (Direction.UP, Direction.DOWN),
    (Direction.DOWN, Direction.UP),
    (Direction.LEFT, Direction.RIGHT),
    (Direction.RIGHT, Direction.LEFT),
)


def neighbour_symmetry_errors(points: Iterable[GridPoint]) -> List[str]:
    """Every ``q = p.move(d)`` must list ``p`` among its own neighbours."""
    errors: List[str] = []
    for point in points:
        for direction in Direction:
            other = point.move(direction)
            if point not in von_neumann(other):
                errors.append(
                    f"{point}: {direction.value} neighbour {other} does not link back"
                )
    return errors


def inverse_errors(points: Iterable[GridPoint]) -> List[str]:
    """Report points where a move is not undone by its opposite move."""
    errors: List[str] = []
    for point in points:
        for there, back in _INVERSE_PAIRS:
            returned = point.move(there).move(back)
            if returned != point:
                errors.append(f"{point}: {there.value} then {back.value} gives {returned}")
    return errors


def loop_length(point: GridPoint, direction: Direction, limit: int = 100_000) -> Optional[int]:
    """Steps in *direction* until the walk is back at *point*, or ``None``."""
    current = point.move(direction)
    steps = 1
    while current != point:
        if steps >= limit:
            return None
        current = current.move(direction)
        steps += 1
    return steps


def off_sphere_errors(points: Iterable[GridPoint], tolerance: float = 1e-9) -> List[str]:
    errors: List[str] = []
    for point in points:
        norm = math.sqrt(sum(c * c for c in point.position(1.0)))
        if abs(norm - 1.0) > tolerance:
            errors.append(f"{point}: |position| = {norm!r}")
    return errors


def round_trip_errors(grid: SurfaceGrid) -> List[str]:
    """Cells that do not map back to themselves through latitude/longitude."""
    errors: List[str] = []
    for point in grid.points():
        found = grid.point_from_geographic(point.latitude(), point.longitude())
        if found != point:
            errors.append(f"{point}: geographic round trip lands on {found}")
    return errors


def _angle(a: Sequence[float], b: Sequence[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    return math.acos(max(-1.0, min(1.0, dot)))


def max_neighbour_angle(points: Iterable[SpherePoint]) -> float:
    """Largest angle (radians) between a point and one of its neighbours."""
    worst = 0.0
    for point in points:
        here = point.position(1.0)
        for other in von_neumann(point):
            worst = max(worst, _angle(here, other.position(1.0)))
    return worst


def cell_angle(grid: SurfaceGrid) -> float:
    """Nominal angular size of one cell of *grid*."""
    if grid.TOPOLOGY == "rectangle":
        height, width = grid.shape
        return max(2 * math.pi / width, math.pi / height)
    return 2.0 / grid.shape[-1]


def diagnostics_report(grid: SurfaceGrid, max_examples: int = 5) -> Dict[str, object]:
    """Build a structured diagnostics report suitable for JSON export."""
    points = list(grid.points())
    symmetry = neighbour_symmetry_errors(points)
    inverses = inverse_errors(points)
    off_sphere = off_sphere_errors(points)
    round_trip = round_trip_errors(grid)
    # Equator at longitude 0 lies on both closed rings of either topology.
    start = grid.point_from_geographic(0.0, 0.0)

    return {
        "topology": grid.TOPOLOGY,
        "shape": list(grid.shape),
        "cells": len(grid),
        "distinct_points": len(set(points)),
        "symmetry_errors": len(symmetry),
        "inverse_errors": len(inverses),
        "off_sphere_errors": len(off_sphere),
        "round_trip_errors": len(round_trip),
        "loop_lengths": {d.value: loop_length(start, d) for d in Direction},
        "max_neighbour_angle": max_neighbour_angle(points),
        "cell_angle": cell_angle(grid),
        "examples": (symmetry + off_sphere + round_trip)[:max_examples],
    }


def topology_quality_gates(
    report: Dict[str, object],
    angle_factor: float = 1.5,
    require_inverse: bool = False,
) -> Dict[str, object]:
    """Return pass/fail flags for a :func:`diagnostics_report`.

    ``require_inverse`` also gates on local inverse moves, which hold
    everywhere on the rectangle grid but not along every cube seam.
    """
    coverage_ok = report["distinct_points"] == report["cells"]
    symmetry_ok = report["symmetry_errors"] == 0
    sphere_ok = report["off_sphere_errors"] == 0
    round_trip_ok = report["round_trip_errors"] == 0
    loops_ok = all(length is not None for length in report["loop_lengths"].values())
    angle_ok = report["max_neighbour_angle"] <= angle_factor * report["cell_angle"]
    inverse_ok = report["inverse_errors"] == 0

    gates = {
        "coverage_ok": coverage_ok,
        "symmetry_ok": symmetry_ok,
        "sphere_ok": sphere_ok,
        "round_trip_ok": round_trip_ok,
        "loops_ok": loops_ok,
        "angle_ok": angle_ok,
        "inverse_ok": inverse_ok,
    }
    required = [k for k in gates if k != "inverse_ok" or require_inverse]
    for name in required:
        if not gates[name]:
            logger.warning("%s grid %s failed %s", report["topology"], report["shape"], name)
    gates["passed"] = all(gates[k] for k in required)
    return gates
