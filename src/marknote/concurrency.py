"""Bounded async fan-out over blocking filesystem work."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def map_concurrent(
    items: Sequence[T],
    fn: Callable[[T], Awaitable[Optional[R]]],
    concurrency: int,
) -> list[Optional[R]]:
    """Run ``fn`` over ``items`` with at most ``concurrency`` calls in flight.

    Workers pull the next index from a shared cursor, so completion order is
    arbitrary while each result lands in its input slot. A call that raises
    leaves ``None`` in its slot.
    """
    if concurrency <= 0:
        raise ValueError(f"concurrency must be positive, got {concurrency}")

    results: list[Optional[R]] = [None] * len(items)
    cursor = 0

    async def worker() -> None:
        nonlocal cursor
        while cursor < len(items):
            i = cursor
            cursor += 1
            try:
                results[i] = await fn(items[i])
            except Exception:
                logger.exception(f"Worker failed on item {items[i]!r}")
                results[i] = None

    worker_count = min(concurrency, len(items))
    if worker_count == 0:
        return results

    await asyncio.gather(*(worker() for _ in range(worker_count)))
    return results
