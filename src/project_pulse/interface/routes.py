"""API routes — thin controllers that delegate to the use case."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from project_pulse.interface.dependencies import get_credential, get_report_service
from project_pulse.interface.schemas import (
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    HealthResponse,
    PulseRequest,
    PulseResponse,
    RepoDataOut,
    SummaryOut,
)
from project_pulse.services.pulse_report import PulseReportService

router = APIRouter(prefix="/api")


@router.post(
    "/pulse",
    response_model=PulseResponse,
    response_model_by_alias=True,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid repository reference"},
        403: {"model": ErrorResponse, "description": "Repository is private"},
        404: {"model": ErrorResponse, "description": "Repository not found"},
        429: {"model": ErrorResponse, "description": "GitHub API rate limit exceeded"},
        502: {"model": ErrorResponse, "description": "GitHub API error"},
        504: {"model": ErrorResponse, "description": "Aggregation timed out"},
    },
)
async def pulse(
    body: PulseRequest,
    service: PulseReportService = Depends(get_report_service),
    credential: str | None = Depends(get_credential),
) -> PulseResponse:
    """Return the health snapshot of a public GitHub repository."""
    report, cached = await service.execute(body.repo_url, credential)
    return PulseResponse(
        repo_data=RepoDataOut.model_validate(report.repo_data),
        summary=SummaryOut.model_validate(report.summary) if report.summary else None,
        summary_error=report.summary_error,
        cached=cached,
    )


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={502: {"model": ErrorResponse, "description": "LLM provider error"}},
)
async def chat(
    body: ChatRequest,
    service: PulseReportService = Depends(get_report_service),
    credential: str | None = Depends(get_credential),
) -> ChatResponse:
    """Ask a question about a repository's recent activity."""
    reply = await service.chat(
        body.repo_url,
        [(m.role, m.content) for m in body.messages],
        credential,
    )
    return ChatResponse(reply=reply)


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(timestamp=datetime.now(timezone.utc))
