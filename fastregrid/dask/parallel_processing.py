"""
Parallel processing utilities for the per-target loops.

Mapping and interpolation treat every target independently, so the target
sequence can be cut into blocks that are evaluated as Dask tasks. Results
are reassembled in input order.
"""
from typing import Any, Callable, List, Optional, Sequence, TypeVar

import dask
from dask.delayed import delayed

T = TypeVar("T")


def _apply_block(func: Callable[[int, Any], T], block: Sequence[Any], offset: int) -> List[T]:
    """Apply ``func(index, item)`` to one block of items."""
    return [func(offset + i, item) for i, item in enumerate(block)]


class ParallelProcessor:
    """
    Order-preserving block-parallel map using Dask.
    """

    def __init__(self, chunk_size: int = 1000, scheduler: Any = "threads",
                 num_workers: Optional[int] = None):
        """
        Initialize the parallel processor.

        Parameters
        ----------
        chunk_size : int
            Number of items per task
        scheduler : str or dask.distributed.Client
            The Dask scheduler to use ('threads', 'processes', 'synchronous', or client)
        num_workers : int, optional
            Worker count for the local schedulers. If None, Dask decides.
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self.scheduler = scheduler
        self.num_workers = num_workers

    def map_targets(self, func: Callable[[int, Any], T], items: Sequence[Any]) -> List[T]:
        """
        Evaluate ``func(index, item)`` for every item.

        Parameters
        ----------
        func : callable
            Called with the position of the item in ``items`` and the item
        items : sequence
            Items to process

        Returns
        -------
        list
            Results in the order of ``items``. The first exception raised by
            any task propagates.
        """
        n_items = len(items)
        if n_items == 0:
            return []

        tasks = []
        for start in range(0, n_items, self.chunk_size):
            stop = min(start + self.chunk_size, n_items)
            block = delayed(list(items[start:stop]), traverse=False)
            tasks.append(delayed(_apply_block)(func, block, start))

        compute_kwargs = {"scheduler": self.scheduler}
        if self.num_workers is not None:
            compute_kwargs["num_workers"] = self.num_workers
        blocks = dask.compute(*tasks, **compute_kwargs)

        return [result for block in blocks for result in block]
