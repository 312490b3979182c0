from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Type, Union

from .cube import CubeSphereGrid, cube_payload_errors
from .grid import SurfaceGrid
from .rectangle import RectangleSphereGrid, rectangle_payload_errors

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

GRID_TYPES: Dict[str, Type[SurfaceGrid]] = {
    RectangleSphereGrid.TOPOLOGY: RectangleSphereGrid,
    CubeSphereGrid.TOPOLOGY: CubeSphereGrid,
}


def validate_grid_payload(payload: Any) -> List[str]:
    """Return structural errors in a serialised grid (empty means valid)."""
    if not isinstance(payload, dict):
        return [f"payload: expected an object, got {type(payload).__name__}"]
    topology = payload.get("topology")
    if topology == RectangleSphereGrid.TOPOLOGY:
        return rectangle_payload_errors(payload)
    if topology == CubeSphereGrid.TOPOLOGY:
        return cube_payload_errors(payload)
    return [f"topology: expected one of {sorted(GRID_TYPES)}, got {topology!r}"]


def grid_from_dict(payload: dict) -> SurfaceGrid:
    """Rebuild whichever grid type *payload* describes."""
    errors = validate_grid_payload(payload)
    if errors:
        raise ValueError("Invalid grid payload: " + "; ".join(errors))
    return GRID_TYPES[payload["topology"]].from_dict(payload)


def load_json(path: PathLike) -> SurfaceGrid:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    grid = grid_from_dict(data)
    logger.debug("Loaded %r from %s", grid, path)
    return grid


def save_json(grid: SurfaceGrid, path: PathLike, indent: int = 2) -> None:
    Path(path).write_text(grid.to_json(indent=indent), encoding="utf-8")
    logger.debug("Saved %r to %s", grid, path)
