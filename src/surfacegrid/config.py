"""Execution settings for the data-parallel grid operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ParallelConfig:
    """Tuneable parameters for the ``*_par`` grid operations.

    Attributes
    ----------
    max_workers : int or None
        Upper bound on worker threads.  ``None`` lets
        :class:`concurrent.futures.ThreadPoolExecutor` choose.  ``1``
        runs everything inline on the calling thread.
    rows_per_task : int
        Number of storage rows handed to a worker per task.  Larger
        values trade balance for less scheduling overhead.
    """

    max_workers: Optional[int] = None
    rows_per_task: int = 1

    def __post_init__(self) -> None:
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.rows_per_task < 1:
            raise ValueError(f"rows_per_task must be >= 1, got {self.rows_per_task}")


# ═══════════════════════════════════════════════════════════════════
# Presets
# ═══════════════════════════════════════════════════════════════════

DEFAULT_PARALLEL = ParallelConfig()

SINGLE_THREADED = ParallelConfig(max_workers=1)
