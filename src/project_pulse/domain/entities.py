"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Mapping


@dataclass(frozen=True, slots=True)
class RepositoryMetadata:
    """Descriptive fields of a GitHub repository."""

    name: str
    full_name: str
    owner: str | None
    default_branch: str
    description: str | None = None
    owner_avatar_url: str | None = None
    language: str | None = None
    stars: int = 0
    forks: int = 0
    open_issues: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None
    html_url: str | None = None


@dataclass(frozen=True, slots=True)
class Commit:
    """A commit seen on one of the fetched branches; ``sha`` is the identity."""

    sha: str
    author: str
    author_avatar_url: str | None
    timestamp: datetime | None
    message: str  # first line only
    branch: str


@dataclass(frozen=True, slots=True)
class Branch:
    """A branch and the state of its tip commit."""

    name: str
    last_commit_at: datetime | None = None
    last_commit_author: str | None = None
    days_since_last_commit: int | None = None
    has_open_pull_request: bool = False
    is_stale: bool = False


@dataclass(frozen=True, slots=True)
class PullRequest:
    """An open pull request."""

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
    is_draft: bool = False


@dataclass(frozen=True, slots=True)
class Label:
    name: str
    color: str | None = None


@dataclass(frozen=True, slots=True)
class Assignee:
    login: str
    avatar_url: str | None = None


@dataclass(frozen=True, slots=True)
class Issue:
    """An open issue (pull requests excluded)."""

    number: int
    title: str
    state: str
    author: str
    created_at: datetime | None
    updated_at: datetime | None
    labels: tuple[Label, ...] = ()
    assignees: tuple[Assignee, ...] = ()


@dataclass(frozen=True, slots=True)
class Contributor:
    """A contributor with lifetime totals and recent per-day activity."""

    login: str
    avatar_url: str | None
    total_commits: int
    commits_by_day: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AggregatedResult:
    """The normalized repository snapshot returned by the aggregation engine."""

    metadata: RepositoryMetadata
    commits: tuple[Commit, ...]
    branches: tuple[Branch, ...]
    pull_requests: tuple[PullRequest, ...]
    issues: tuple[Issue, ...]
    contributors: tuple[Contributor, ...]
    fetched_at: datetime


@dataclass(frozen=True, slots=True)
class PulseSummary:
    """Structured natural-language summary generated by the LLM."""

    overview: str
    activity: str = ""
    blockers: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PulseReport:
    """What the request layer caches: repository data plus its summary."""

    repo_data: AggregatedResult
    summary: PulseSummary | None = None
    summary_error: str | None = None
