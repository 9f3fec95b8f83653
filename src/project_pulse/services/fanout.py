"""Fan-out / fan-in of independent async jobs with per-job failure isolation."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Job(Generic[T]):
    """One unit of fan-out work.

    ``run`` starts the coroutine; ``fallback`` produces the value used in its
    place when it raises.  ``label`` is only used for logging.
    """

    label: str
    run: Callable[[], Awaitable[T]]
    fallback: Callable[[], T]


async def _guarded(job: Job[T]) -> T:
    try:
        return await job.run()
    except Exception as exc:
        logger.warning("%s failed, continuing without it: %s", job.label, exc)
        logger.debug("%s traceback", job.label, exc_info=True)
        return job.fallback()


async def join_all(jobs: Sequence[Job[T]]) -> list[T]:
    """Run *jobs* concurrently, wait for all, and return results in input order.

    A failing job never cancels its siblings; it contributes its fallback.
    """
    if not jobs:
        return []
    return list(await asyncio.gather(*(_guarded(job) for job in jobs)))
