"""FastAPI dependency injection wiring."""

from __future__ import annotations

import httpx
from fastapi import Header

from project_pulse.domain.entities import PulseReport
from project_pulse.infrastructure.config import get_settings
from project_pulse.infrastructure.github_rest_adapter import GitHubRestClient
from project_pulse.infrastructure.openai_adapter import OpenAIAdapter
from project_pulse.services.aggregate_repo import AggregateRepoUseCase
from project_pulse.services.pulse_report import PulseReportService
from project_pulse.services.pulse_summary import PulseSummarizer
from project_pulse.services.result_cache import ResultCache

_http_client: httpx.AsyncClient | None = None
_openai_adapter: OpenAIAdapter | None = None
_result_cache: ResultCache[PulseReport] | None = None


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client, _openai_adapter, _result_cache  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout_seconds))
    if settings.openai_api_key:
        _openai_adapter = OpenAIAdapter(
            api_key=settings.openai_api_key.get_secret_value(),
            model=settings.openai_model,
        )
    _result_cache = ResultCache(ttl_seconds=settings.cache_ttl_seconds)


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client, _openai_adapter, _result_cache  # noqa: PLW0603

    if _http_client:
        await _http_client.aclose()
        _http_client = None
    if _openai_adapter:
        await _openai_adapter.close()
        _openai_adapter = None
    _result_cache = None


def get_credential(
    x_github_token: str | None = Header(default=None),
) -> str | None:
    """Per-request GitHub token override (``X-GitHub-Token`` header)."""
    return x_github_token or None


def get_report_service() -> PulseReportService:
    """Build the report service around the shared client, LLM and cache."""
    settings = get_settings()

    assert _http_client is not None, "startup() was not called"
    assert _result_cache is not None, "startup() was not called"

    token = settings.github_token.get_secret_value() if settings.github_token else None
    fetcher = GitHubRestClient(
        client=_http_client, token=token, base_url=settings.github_api_url
    )

    return PulseReportService(
        aggregator=AggregateRepoUseCase(
            fetcher, branch_detail_concurrency=settings.branch_detail_concurrency
        ),
        summarizer=PulseSummarizer(_openai_adapter),
        cache=_result_cache,
        timeout_seconds=settings.aggregate_timeout_seconds,
    )
