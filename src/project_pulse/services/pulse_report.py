"""Pulse report use case — cache in front of aggregation + summary."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from typing import Sequence

from project_pulse.domain.entities import PulseReport
from project_pulse.domain.value_objects import RepositoryIdentity
from project_pulse.services.aggregate_repo import AggregateRepoUseCase
from project_pulse.services.pulse_summary import PulseSummarizer
from project_pulse.services.result_cache import ResultCache

logger = logging.getLogger(__name__)


def cache_key(identity: RepositoryIdentity, credential: str | None = None) -> str:
    """Cache key for *identity* as seen with *credential*.

    Reports fetched with a caller credential are scoped to a digest of that
    credential and never served to other callers.
    """
    if not credential:
        return identity.key
    digest = hashlib.sha256(credential.encode("utf-8")).hexdigest()[:16]
    return f"{identity.key}#{digest}"


class PulseReportService:
    """Serves :class:`PulseReport` objects, aggregating only on a cache miss.

    Parameters
    ----------
    aggregator:
        The repository data aggregation engine.
    summarizer:
        Produces the natural-language summary for a fresh report.
    cache:
        Shared result cache keyed by :func:`cache_key`.
    timeout_seconds:
        Upper bound for one aggregation; ``None`` disables it.
    """

    def __init__(
        self,
        aggregator: AggregateRepoUseCase,
        summarizer: PulseSummarizer,
        cache: ResultCache[PulseReport],
        timeout_seconds: float | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._summarizer = summarizer
        self._cache = cache
        self._timeout = timeout_seconds

    async def execute(
        self, reference: str, credential: str | None = None
    ) -> tuple[PulseReport, bool]:
        """Return ``(report, cached)`` for *reference*."""
        identity = RepositoryIdentity.parse(reference)

        key = cache_key(identity, credential)
        cached = self._cache.get(key)
        if cached is not None:
            logger.info("Serving cached pulse for %s", identity.full_name)
            return cached, True

        repo_data = await asyncio.wait_for(
            self._aggregator.aggregate(identity.full_name, credential),
            timeout=self._timeout,
        )
        summary, summary_error = await self._summarizer.summarize(repo_data)
        report = PulseReport(
            repo_data=repo_data, summary=summary, summary_error=summary_error
        )
        self._cache.set(key, report)
        return report, False

    async def chat(
        self,
        reference: str,
        messages: Sequence[tuple[str, str]],
        credential: str | None = None,
    ) -> str:
        """Answer *messages* using the (possibly cached) report as context."""
        report, _ = await self.execute(reference, credential)
        return await self._summarizer.chat(report.repo_data, messages)
