"""
Parallel processing module for the scanner package.

Runs per-file work either sequentially or on a thread pool while keeping
results in input order, so progress callbacks stay monotonic no matter
which worker finishes first.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Iterator, Optional, TypeVar

from .cancellation import CancellationToken, check_cancelled

_logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R')


def iter_ordered(
    func: Callable[[T], R],
    items: Iterable[T],
    workers: int = 1,
    cancel_token: Optional[CancellationToken] = None,
) -> Iterator[tuple[T, R]]:
    """
    Apply func to every item, yielding (item, result) pairs in input order.

    Args:
        func: Per-item work; must not raise for expected per-file failures
        items: Work items
        workers: Number of worker threads (<= 1 runs inline)
        cancel_token: Checked before each item is yielded

    Yields:
        (item, result) tuples in the order items were given

    Raises:
        CancellationError: If the token is set; pending work is cancelled
    """
    items = list(items)

    if workers <= 1 or len(items) <= 1:
        for item in items:
            check_cancelled(cancel_token)
            yield item, func(item)
        return

    _logger.debug(f"Processing {len(items):,} files on {workers} workers")

    executor = ThreadPoolExecutor(max_workers=workers)
    try:
        futures = [executor.submit(func, item) for item in items]
        for item, future in zip(items, futures):
            check_cancelled(cancel_token)
            yield item, future.result()
    finally:
        # Drops queued work on cancellation or early close; running
        # tasks finish on their own
        executor.shutdown(wait=False, cancel_futures=True)


__all__ = ['iter_ordered']
