"""Parallel processing utilities for independent CPU-bound tasks."""

import logging
import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Any, Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ParallelProcessor:
    """
    Runs a worker function over independent items with ProcessPoolExecutor.

    Follows project pattern:
    - ProcessPoolExecutor with optional initializer function
    - max_tasks_per_child for memory management
    - Sequential fallback when a single worker is requested

    Unlike fire-and-forget batch jobs, results come back in input order and
    the first exception, from a worker or from the progress callback,
    propagates to the caller and pending tasks are cancelled.

    Usage:
        def worker_func(args):
            dtm, k = args
            return fit_lda(dtm, k)

        processor = ParallelProcessor(max_workers=4)
        results = processor.map(worker_func, [(dtm, 2), (dtm, 3)])
    """

    def __init__(
        self,
        max_workers: Optional[int] = None,
        initializer: Optional[Callable] = None,
        max_tasks_per_child: int = 50,
    ):
        """
        Initialize parallel processor.

        Args:
            max_workers: Number of parallel workers (None = cpu count, 1 = sequential)
            initializer: Optional initialization function for workers
            max_tasks_per_child: Restart workers after N tasks (default: 50)
        """
        self.max_workers = max_workers
        self.initializer = initializer
        self.max_tasks_per_child = max_tasks_per_child

    def should_use_parallel(self, num_items: int, max_workers: Optional[int] = None) -> bool:
        """
        Determine if parallel processing is beneficial.

        Args:
            num_items: Number of items to process
            max_workers: Max workers requested (None or 1 means sequential)

        Returns:
            True if should use parallel processing
        """
        return max_workers is not None and max_workers > 1 and num_items > 1

    def resolve_workers(self, num_items: int) -> int:
        """Worker count for a batch of num_items (None means one per CPU, capped at num_items)."""
        if self.max_workers is None:
            return min(os.cpu_count() or 4, max(num_items, 1))
        return self.max_workers

    def map(
        self,
        worker_func: Callable[[T], Any],
        items: Sequence[T],
        progress_callback: Optional[Callable[[int, Any], None]] = None,
    ) -> List[Any]:
        """
        Apply ``worker_func`` to every item.

        Args:
            worker_func: Module-level (picklable) function taking one item
            items: Items to process
            progress_callback: Called with (completed_count, result) as results
                arrive; an exception raised here aborts the remaining work

        Returns:
            Results in the same order as ``items``
        """
        max_workers = self.resolve_workers(len(items))
        if not self.should_use_parallel(len(items), max_workers):
            return self._map_sequential(worker_func, items, progress_callback)

        return self._map_parallel(
            worker_func, items, progress_callback, max_workers
        )

    def _map_sequential(
        self,
        worker_func: Callable,
        items: Sequence[T],
        progress_callback: Optional[Callable],
    ) -> List[Any]:
        """Process items sequentially."""
        results = []

        for idx, item in enumerate(items, 1):
            result = worker_func(item)
            results.append(result)

            if progress_callback:
                progress_callback(idx, result)

        return results

    def _map_parallel(
        self,
        worker_func: Callable,
        items: Sequence[T],
        progress_callback: Optional[Callable],
        max_workers: int,
    ) -> List[Any]:
        """Process items in parallel, re-raising the first worker failure."""
        results: List[Any] = [None] * len(items)
        logger.info(f"Processing {len(items)} items with {max_workers} workers")

        with ProcessPoolExecutor(
            max_workers=max_workers,
            initializer=self.initializer,
            max_tasks_per_child=self.max_tasks_per_child,
        ) as executor:
            future_to_index = {
                executor.submit(worker_func, item): idx
                for idx, item in enumerate(items)
            }

            completed_count = 0
            try:
                for future in as_completed(future_to_index):
                    idx = future_to_index[future]
                    results[idx] = future.result()
                    completed_count += 1

                    if progress_callback:
                        progress_callback(completed_count, results[idx])
            except BaseException:
                for pending in future_to_index:
                    pending.cancel()
                raise

        return results

