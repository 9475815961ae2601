"""Bounded fan-out/fan-in for per-source search tasks.

A fixed number of permits (``asyncio.Semaphore``) caps how many tasks
run at once; a finished task releases its permit and the next waiting
task is admitted immediately.  A task that raises contributes an
``empty()`` value instead of aborting its siblings.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

import structlog

log = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_LIMIT = 3


async def run_bounded(
    tasks: Sequence[Callable[[], Awaitable[T]]],
    limit: int = DEFAULT_LIMIT,
    *,
    empty: Callable[[], T] = list,  # type: ignore[assignment]
) -> list[T]:
    """Run *tasks* with at most *limit* in flight.

    Args:
        tasks: Zero-argument callables returning awaitables. A task is
            only called once it holds a permit.
        limit: Maximum number of tasks executing at the same time.
        empty: Factory for the value a failed task contributes.

    Returns:
        One value per task, in completion order (not input order).
    """
    if limit < 1:
        raise ValueError("limit must be >= 1")

    semaphore = asyncio.Semaphore(limit)
    results: list[T] = []

    async def _run_one(index: int, task: Callable[[], Awaitable[T]]) -> None:
        async with semaphore:
            try:
                value = await task()
            except Exception:  # noqa: BLE001
                log.warning("bounded_task_failed", task_index=index, exc_info=True)
                value = empty()
        results.append(value)

    await asyncio.gather(*(_run_one(i, t) for i, t in enumerate(tasks)))
    return results
