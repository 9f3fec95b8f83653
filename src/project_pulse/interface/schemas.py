"""Pydantic request / response DTOs for the API boundary."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ── Requests ────────────────────────────────────────────────────────────────


class PulseRequest(_CamelModel):
    """Request body for ``POST /api/pulse``."""

    repo_url: str

    @field_validator("repo_url")
    @classmethod
    def _must_not_be_empty(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            msg = "repoUrl must not be empty."
            raise ValueError(msg)
        return stripped


class ChatMessage(_CamelModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(PulseRequest):
    """Request body for ``POST /api/chat``."""

    messages: list[ChatMessage] = Field(min_length=1)


# ── Repository document ─────────────────────────────────────────────────────


class MetadataOut(_CamelModel):
    name: str
    full_name: str
    owner: str | None
    owner_avatar_url: str | None
    default_branch: str
    description: str | None
    language: str | None
    stars: int
    forks: int
    open_issues: int
    created_at: datetime | None
    updated_at: datetime | None
    pushed_at: datetime | None
    html_url: str | None


class CommitOut(_CamelModel):
    sha: str
    author: str
    author_avatar_url: str | None
    timestamp: datetime | None
    message: str
    branch: str


class BranchOut(_CamelModel):
    name: str
    last_commit_at: datetime | None
    last_commit_author: str | None
    days_since_last_commit: int | None
    has_open_pull_request: bool
    is_stale: bool


class PullRequestOut(_CamelModel):
    number: int
    title: str
    author: str
    author_avatar_url: str | None
    state: str
    created_at: datetime | None
    updated_at: datetime | None
    merged_at: datetime | None
    head_branch: str | None
    base_branch: str | None
    is_draft: bool


class LabelOut(_CamelModel):
    name: str
    color: str | None


class AssigneeOut(_CamelModel):
    login: str
    avatar_url: str | None


class IssueOut(_CamelModel):
    number: int
    title: str
    state: str
    author: str
    created_at: datetime | None
    updated_at: datetime | None
    labels: list[LabelOut]
    assignees: list[AssigneeOut]


class ContributorOut(_CamelModel):
    login: str
    avatar_url: str | None
    total_commits: int
    commits_by_day: dict[str, int]


class RepoDataOut(_CamelModel):
    metadata: MetadataOut
    commits: list[CommitOut]
    branches: list[BranchOut]
    pull_requests: list[PullRequestOut]
    issues: list[IssueOut]
    contributors: list[ContributorOut]
    fetched_at: datetime


class SummaryOut(_CamelModel):
    overview: str
    activity: str
    blockers: list[str]
    recommendations: list[str]


# ── Responses ───────────────────────────────────────────────────────────────


class PulseResponse(_CamelModel):
    """Successful response from ``POST /api/pulse``."""

    repo_data: RepoDataOut
    summary: SummaryOut | None
    summary_error: str | None
    cached: bool


class ChatResponse(_CamelModel):
    reply: str


class HealthResponse(_CamelModel):
    status: str = "ok"
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    code: str
    message: str
