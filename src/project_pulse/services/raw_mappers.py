"""Raw GitHub payload shapes and the pure functions that normalize them.

Upstream records are only partially populated (deleted users, commits made
with an unlinked e-mail, etc.), so every shape below is ``total=False`` and
every fallback rule lives in its own small function.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, TypedDict

from project_pulse.domain.entities import (
    Assignee,
    Branch,
    Commit,
    Contributor,
    Issue,
    Label,
    PullRequest,
    RepositoryMetadata,
)

UNKNOWN_AUTHOR = "unknown"


# ── Raw shapes ──────────────────────────────────────────────────────────────


class RawUser(TypedDict, total=False):
    login: str
    avatar_url: str


class RawGitActor(TypedDict, total=False):
    name: str
    email: str
    date: str


class RawGitCommit(TypedDict, total=False):
    author: RawGitActor | None
    committer: RawGitActor | None
    message: str


class RawCommit(TypedDict, total=False):
    sha: str
    author: RawUser | None
    commit: RawGitCommit


class RawBranchTip(TypedDict, total=False):
    sha: str


class RawBranch(TypedDict, total=False):
    name: str
    commit: RawBranchTip


class RawRef(TypedDict, total=False):
    ref: str


class RawPullRequest(TypedDict, total=False):
    number: int
    title: str
    user: RawUser | None
    state: str
    created_at: str
    updated_at: str
    merged_at: str | None
    head: RawRef | None
    base: RawRef | None
    draft: bool


class RawLabel(TypedDict, total=False):
    name: str
    color: str


class RawIssue(TypedDict, total=False):
    number: int
    title: str
    state: str
    user: RawUser | None
    labels: list[RawLabel]
    assignees: list[RawUser]
    created_at: str
    updated_at: str
    pull_request: dict[str, Any]


class RawContributor(TypedDict, total=False):
    login: str
    avatar_url: str
    contributions: int


class RawRepository(TypedDict, total=False):
    name: str
    full_name: str
    description: str | None
    owner: RawUser | None
    default_branch: str
    language: str | None
    stargazers_count: int
    forks_count: int
    open_issues_count: int
    created_at: str
    updated_at: str
    pushed_at: str
    html_url: str


# ── Field-level fallbacks ───────────────────────────────────────────────────


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a GitHub ISO-8601 timestamp (``...Z``); ``None`` when absent or invalid."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def user_login(user: RawUser | None) -> str:
    """``user.login`` else ``"unknown"``."""
    return (user or {}).get("login") or UNKNOWN_AUTHOR


def user_avatar(user: RawUser | None) -> str | None:
    return (user or {}).get("avatar_url") or None


def commit_author(raw: RawCommit) -> str:
    """Linked account login, else the raw git author name, else ``"unknown"``."""
    login = (raw.get("author") or {}).get("login")
    if login:
        return login
    git_author = (raw.get("commit") or {}).get("author") or {}
    return git_author.get("name") or UNKNOWN_AUTHOR


def commit_timestamp(raw: RawCommit) -> datetime | None:
    """Author date, else committer date."""
    git_commit = raw.get("commit") or {}
    authored = (git_commit.get("author") or {}).get("date")
    committed = (git_commit.get("committer") or {}).get("date")
    return parse_timestamp(authored or committed)


def first_line(message: str | None) -> str:
    return (message or "").split("\n", 1)[0].strip()


def is_pull_request(raw: RawIssue) -> bool:
    """The issues endpoint also lists PRs; they carry a ``pull_request`` back-reference."""
    return bool(raw.get("pull_request"))


def days_between(earlier: datetime | None, now: datetime) -> int | None:
    """Whole days elapsed from *earlier* to *now* (floored); ``None`` if unknown."""
    if earlier is None:
        return None
    return (now - earlier) // timedelta(days=1)


# ── Record mappers ──────────────────────────────────────────────────────────


def map_metadata(raw: RawRepository) -> RepositoryMetadata:
    owner = raw.get("owner") or {}
    return RepositoryMetadata(
        name=raw.get("name", ""),
        full_name=raw.get("full_name", ""),
        owner=owner.get("login"),
        owner_avatar_url=owner.get("avatar_url"),
        default_branch=raw.get("default_branch") or "main",
        description=raw.get("description"),
        language=raw.get("language"),
        stars=raw.get("stargazers_count") or 0,
        forks=raw.get("forks_count") or 0,
        open_issues=raw.get("open_issues_count") or 0,
        created_at=parse_timestamp(raw.get("created_at")),
        updated_at=parse_timestamp(raw.get("updated_at")),
        pushed_at=parse_timestamp(raw.get("pushed_at")),
        html_url=raw.get("html_url"),
    )


def map_commit(raw: RawCommit, branch: str) -> Commit:
    return Commit(
        sha=raw.get("sha", ""),
        author=commit_author(raw),
        author_avatar_url=user_avatar(raw.get("author")),
        timestamp=commit_timestamp(raw),
        message=first_line((raw.get("commit") or {}).get("message")),
        branch=branch,
    )


def map_branch(raw: RawBranch, tip: RawCommit | None, now: datetime) -> Branch:
    """Build a :class:`Branch`; *tip* is ``None`` when its detail lookup failed."""
    if tip is None:
        return Branch(name=raw.get("name", ""))
    last_commit_at = commit_timestamp(tip)
    return Branch(
        name=raw.get("name", ""),
        last_commit_at=last_commit_at,
        last_commit_author=commit_author(tip),
        days_since_last_commit=days_between(last_commit_at, now),
    )


def map_pull_request(raw: RawPullRequest) -> PullRequest:
    return PullRequest(
        number=raw.get("number", 0),
        title=raw.get("title", ""),
        author=user_login(raw.get("user")),
        author_avatar_url=user_avatar(raw.get("user")),
        state=raw.get("state", "open"),
        created_at=parse_timestamp(raw.get("created_at")),
        updated_at=parse_timestamp(raw.get("updated_at")),
        merged_at=parse_timestamp(raw.get("merged_at")),
        head_branch=(raw.get("head") or {}).get("ref") or None,
        base_branch=(raw.get("base") or {}).get("ref") or None,
        is_draft=bool(raw.get("draft", False)),
    )


def map_issue(raw: RawIssue) -> Issue:
    return Issue(
        number=raw.get("number", 0),
        title=raw.get("title", ""),
        state=raw.get("state", "open"),
        author=user_login(raw.get("user")),
        created_at=parse_timestamp(raw.get("created_at")),
        updated_at=parse_timestamp(raw.get("updated_at")),
        labels=tuple(
            Label(name=label.get("name", ""), color=label.get("color"))
            for label in raw.get("labels") or []
        ),
        assignees=tuple(
            Assignee(login=user_login(user), avatar_url=user_avatar(user))
            for user in raw.get("assignees") or []
        ),
    )


def map_contributor(raw: RawContributor) -> Contributor:
    return Contributor(
        login=raw.get("login") or UNKNOWN_AUTHOR,
        avatar_url=raw.get("avatar_url"),
        total_commits=raw.get("contributions") or 0,
    )
