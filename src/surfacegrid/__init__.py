"""SurfaceGrid — square-cell grids wrapped around a sphere.

Public API is organised into layers:

- **Core** — point contracts, the grid container, neighbourhood helpers
- **Topologies** — equirectangular rectangle grid and cube-sphere grid
- **Parallel** — fork/join helpers and their configuration
- **I/O** — JSON save/load
- **Diagnostics** — exhaustive topology and projection checks
"""

# ── Core ────────────────────────────────────────────────────────────
from .models import Direction, GridPoint, SpherePoint
from .grid import SurfaceGrid
from .algorithms import build_adjacency, moore, ring_points, von_neumann

# ── Topologies ──────────────────────────────────────────────────────
from .rectangle import RectanglePoint, RectangleSphereGrid
from .cube import FACE_ORDER, FRAMES, SEAMS, CubeFace, CubePoint, CubeSphereGrid, Seam

# ── Parallel ────────────────────────────────────────────────────────
from .config import DEFAULT_PARALLEL, SINGLE_THREADED, ParallelConfig
from .parallel import ParallelIterator, map_partitions

# ── I/O ─────────────────────────────────────────────────────────────
from .io import grid_from_dict, load_json, save_json, validate_grid_payload
from .logging_config import setup_logging

# ── Diagnostics ─────────────────────────────────────────────────────
from .diagnostics import (
    diagnostics_report,
    inverse_errors,
    loop_length,
    max_neighbour_angle,
    neighbour_symmetry_errors,
    off_sphere_errors,
    round_trip_errors,
    topology_quality_gates,
)

__all__ = [
    # Core
    "Direction",
    "GridPoint",
    "SpherePoint",
    "SurfaceGrid",
    "build_adjacency",
    "moore",
    "ring_points",
    "von_neumann",
    # Topologies
    "RectanglePoint",
    "RectangleSphereGrid",
    "CubeFace",
    "CubePoint",
    "CubeSphereGrid",
    "FACE_ORDER",
    "FRAMES",
    "SEAMS",
    "Seam",
    # Parallel
    "ParallelConfig",
    "DEFAULT_PARALLEL",
    "SINGLE_THREADED",
    "ParallelIterator",
    "map_partitions",
    # I/O
    "grid_from_dict",
    "load_json",
    "save_json",
    "validate_grid_payload",
    "setup_logging",
    # Diagnostics
    "diagnostics_report",
    "inverse_errors",
    "loop_length",
    "max_neighbour_angle",
    "neighbour_symmetry_errors",
    "off_sphere_errors",
    "round_trip_errors",
    "topology_quality_gates",
]
