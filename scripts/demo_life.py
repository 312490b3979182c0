"""Run Conway's Game of Life on a cube-sphere and print live-cell counts."""

import argparse
import logging
import random
import sys
from pathlib import Path

ROOT = Path(__file__).parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from surfacegrid import (
    CubeSphereGrid,
    ParallelConfig,
    diagnostics_report,
    setup_logging,
    topology_quality_gates,
)


def life_rule(ul, u, ur, l, c, r, dl, d, dr):
    alive = ul + u + ur + l + r + dl + d + dr
    return 1 if alive == 3 or (c and alive == 2) else 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--size", type=int, default=32)
    parser.add_argument("--steps", type=int, default=20)
    parser.add_argument("--workers", type=int, default=None)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    gates = topology_quality_gates(diagnostics_report(CubeSphereGrid(min(args.size, 8))))
    if not gates["passed"]:
        raise SystemExit(f"Topology checks failed: {gates}")

    rng = random.Random(args.seed)
    config = ParallelConfig(max_workers=args.workers, rows_per_task=4)
    current = CubeSphereGrid.from_fn(args.size, lambda p: int(rng.random() < 0.3))
    spare = CubeSphereGrid(args.size)

    for step in range(args.steps):
        spare.set_from_neighbours_diagonals_par(current, life_rule, config)
        current.swap(spare)
        print(f"step {step + 1:3d}: {sum(current.values())} live cells")


if __name__ == "__main__":
    main()
