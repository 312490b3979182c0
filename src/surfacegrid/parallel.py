"""Fork/join helpers behind the ``*_par`` grid operations.

Work is split into *partitions* (storage rows, or runs of rows) that are
mapped on a thread pool.  Each partition only reads shared state and
produces its own result, so no locking is needed; results are always
returned in partition order which keeps parallel output identical to
the sequential form.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from itertools import chain
from typing import Callable, Generic, Iterator, List, Optional, Sequence, TypeVar

from .config import DEFAULT_PARALLEL, ParallelConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def chunked(items: Sequence[T], size: int) -> List[Sequence[T]]:
    """Split *items* into consecutive slices of at most *size* elements."""
    if size < 1:
        raise ValueError("size must be >= 1")
    return [items[i : i + size] for i in range(0, len(items), size)]


def map_partitions(
    fn: Callable[[T], R],
    partitions: Sequence[T],
    config: Optional[ParallelConfig] = None,
) -> List[R]:
    """Apply *fn* to every partition, possibly on several threads.

    Returns the results in the order of *partitions*.  Runs inline when
    only one worker is allowed or there is at most one partition.
    """
    config = config or DEFAULT_PARALLEL
    if config.max_workers == 1 or len(partitions) <= 1:
        return [fn(part) for part in partitions]

    logger.debug(
        "Mapping %d partitions on up to %s workers",
        len(partitions),
        config.max_workers or "default",
    )
    with ThreadPoolExecutor(max_workers=config.max_workers) as pool:
        return list(pool.map(fn, partitions))


def map_rows(
    fn: Callable[[int], R],
    row_count: int,
    config: Optional[ParallelConfig] = None,
) -> List[R]:
    """Evaluate ``fn(row)`` for ``row in range(row_count)`` in parallel.

    Rows are grouped into tasks of ``config.rows_per_task`` rows.
    """
    config = config or DEFAULT_PARALLEL
    tasks = chunked(range(row_count), config.rows_per_task)
    results = map_partitions(lambda rows: [fn(r) for r in rows], tasks, config)
    return list(chain.from_iterable(results))


class ParallelIterator(Generic[T]):
    """Partitioned, restartable view over grid items.

    Iterating the object directly is sequential.  :meth:`map`,
    :meth:`filter` and :meth:`for_each` spread the partitions over
    worker threads but keep enumeration order in their results.
    """

    def __init__(
        self,
        partitions: Sequence[Sequence[T]],
        config: Optional[ParallelConfig] = None,
    ) -> None:
        self._partitions = partitions
        self._config = config or DEFAULT_PARALLEL

    def __iter__(self) -> Iterator[T]:
        return chain.from_iterable(self._partitions)

    def __len__(self) -> int:
        return sum(len(part) for part in self._partitions)

    def _tasks(self) -> List[Sequence[Sequence[T]]]:
        return chunked(self._partitions, self._config.rows_per_task)

    def map(self, fn: Callable[[T], R]) -> List[R]:
        """Return ``[fn(item) for item in self]``, computed in parallel."""
        results = map_partitions(
            lambda task: [fn(item) for part in task for item in part],
            self._tasks(),
            self._config,
        )
        return list(chain.from_iterable(results))

    def filter(self, predicate: Callable[[T], bool]) -> List[T]:
        """Return the items for which *predicate* is true, in order."""
        results = map_partitions(
            lambda task: [item for part in task for item in part if predicate(item)],
            self._tasks(),
            self._config,
        )
        return list(chain.from_iterable(results))

    def for_each(self, fn: Callable[[T], object]) -> None:
        """Call *fn* on every item for its side effects."""
        map_partitions(
            lambda task: [fn(item) for part in task for item in part],
            self._tasks(),
            self._config,
        )

    def collect(self) -> List[T]:
        return list(self)
