from __future__ import annotations

from typing import Dict, Hashable, Iterable, List, Tuple, TypeVar

from .models import GridPoint

P = TypeVar("P", bound=GridPoint)


def von_neumann(point: P) -> Tuple[P, P, P, P]:
    """Return ``(up, down, left, right)`` of *point*."""
    return (point.up(), point.down(), point.left(), point.right())


def moore(point: P) -> Tuple[P, P, P, P, P, P, P, P]:
    """Return the eight surrounding points.

    Order is up-left, up, up-right, left, right, down-left, down,
    down-right.  Diagonals are composed as ``up().left()`` and so on,
    which near cube corners may not be the cell a flat grid would give.
    """
    up = point.up()
    down = point.down()
    return (
        up.left(),
        up,
        up.right(),
        point.left(),
        point.right(),
        down.left(),
        down,
        down.right(),
    )


def build_adjacency(points: Iterable[P]) -> Dict[P, List[P]]:
    """Map each point to its distinct 4-neighbours, in up/down/left/right order."""
    adjacency: Dict[P, List[P]] = {}
    for point in points:
        neighbours: List[P] = []
        for other in von_neumann(point):
            if other != point and other not in neighbours:
                neighbours.append(other)
        adjacency[point] = neighbours
    return adjacency


def ring_points(start: P, max_depth: int) -> Dict[int, List[P]]:
    """Return points grouped by BFS ring distance from *start*.

    Rings are listed in discovery order; the walk stops early once no
    new points are reachable.
    """
    if max_depth < 0:
        raise ValueError("max_depth must be >= 0")

    visited: set[Hashable] = {start}
    rings: Dict[int, List[P]] = {0: [start]}
    frontier = [start]

    for depth in range(1, max_depth + 1):
        next_frontier: List[P] = []
        for point in frontier:
            for neighbour in von_neumann(point):
                if neighbour in visited:
                    continue
                visited.add(neighbour)
                next_frontier.append(neighbour)
        if not next_frontier:
            break
        rings[depth] = next_frontier
        frontier = next_frontier

    return rings
