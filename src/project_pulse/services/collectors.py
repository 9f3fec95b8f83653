"""Resource collectors — one upstream resource type each, normalized.

Collectors raise whatever the fetcher raises unless the failure is local to
a single record or branch (tip detail, one branch's history, contributors);
the orchestrator decides what else is tolerable.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import cast

from project_pulse.domain.entities import (
    Branch,
    Commit,
    Contributor,
    Issue,
    PullRequest,
    RepositoryMetadata,
)
from project_pulse.domain.exceptions import PulseError
from project_pulse.domain.ports.page_fetcher import PageFetcher
from project_pulse.domain.value_objects import RepositoryIdentity
from project_pulse.services.raw_mappers import (
    RawBranch,
    RawCommit,
    RawContributor,
    RawIssue,
    RawPullRequest,
    RawRepository,
    is_pull_request,
    map_branch,
    map_commit,
    map_contributor,
    map_issue,
    map_metadata,
    map_pull_request,
)

logger = logging.getLogger(__name__)

# ── Aggregation window ──────────────────────────────────────────────────────

BRANCH_PAGE_CAP = 5
PULL_REQUEST_PAGE_CAP = 3
ISSUE_PAGE_CAP = 3
CONTRIBUTOR_PAGE_CAP = 3
COMMIT_PAGE_CAP = 5
COMMIT_LOOKBACK = timedelta(days=7)


def _repo_path(identity: RepositoryIdentity) -> str:
    return f"/repos/{identity.owner}/{identity.name}"


async def collect_metadata(
    fetcher: PageFetcher, identity: RepositoryIdentity
) -> RepositoryMetadata:
    """GET /repos/{owner}/{repo} → RepositoryMetadata."""
    raw = await fetcher.fetch_page(_repo_path(identity))
    return map_metadata(cast(RawRepository, raw or {}))


async def collect_branches(
    fetcher: PageFetcher,
    identity: RepositoryIdentity,
    now: datetime,
    concurrency: int = 10,
) -> list[Branch]:
    """List branches, then resolve each tip commit for author and date."""
    raw_branches: list[RawBranch] = await fetcher.fetch_all_pages(
        f"{_repo_path(identity)}/branches", max_pages=BRANCH_PAGE_CAP
    )
    sem = asyncio.Semaphore(max(concurrency, 1))

    async def _resolve(raw: RawBranch) -> Branch:
        sha = (raw.get("commit") or {}).get("sha")
        tip: RawCommit | None = None
        if sha:
            async with sem:
                try:
                    detail = await fetcher.fetch_page(f"{_repo_path(identity)}/commits/{sha}")
                except PulseError:
                    logger.warning(
                        "Could not fetch tip commit for branch %s of %s",
                        raw.get("name"),
                        identity.full_name,
                    )
                else:
                    tip = detail if isinstance(detail, dict) else None
        return map_branch(raw, tip, now)

    return list(await asyncio.gather(*(_resolve(raw) for raw in raw_branches)))


async def collect_pull_requests(
    fetcher: PageFetcher, identity: RepositoryIdentity
) -> list[PullRequest]:
    """Open pull requests, in upstream order."""
    raw_prs: list[RawPullRequest] = await fetcher.fetch_all_pages(
        f"{_repo_path(identity)}/pulls",
        params={"state": "open"},
        max_pages=PULL_REQUEST_PAGE_CAP,
    )
    return [map_pull_request(raw) for raw in raw_prs]


async def collect_issues(
    fetcher: PageFetcher, identity: RepositoryIdentity
) -> list[Issue]:
    """Open issues with pull requests filtered out."""
    raw_issues: list[RawIssue] = await fetcher.fetch_all_pages(
        f"{_repo_path(identity)}/issues",
        params={"state": "open"},
        max_pages=ISSUE_PAGE_CAP,
    )
    return [map_issue(raw) for raw in raw_issues if not is_pull_request(raw)]


async def collect_contributors(
    fetcher: PageFetcher, identity: RepositoryIdentity
) -> list[Contributor]:
    """Contributors with lifetime commit totals; empty on failure."""
    try:
        raw_contributors: list[RawContributor] = await fetcher.fetch_all_pages(
            f"{_repo_path(identity)}/contributors",
            max_pages=CONTRIBUTOR_PAGE_CAP,
        )
    except PulseError as exc:
        logger.warning("Could not fetch contributors for %s: %s", identity.full_name, exc)
        return []
    return [map_contributor(raw) for raw in raw_contributors]


async def collect_recent_commits(
    fetcher: PageFetcher,
    identity: RepositoryIdentity,
    branch: str,
    now: datetime,
) -> list[Commit]:
    """Commits on *branch* within the lookback window; empty on failure.

    Records without a ``sha`` are dropped.
    """
    since = (now - COMMIT_LOOKBACK).astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    try:
        raw_commits: list[RawCommit] = await fetcher.fetch_all_pages(
            f"{_repo_path(identity)}/commits",
            params={"sha": branch, "since": since},
            max_pages=COMMIT_PAGE_CAP,
        )
    except PulseError as exc:
        logger.warning("Could not fetch commits for branch %s: %s", branch, exc)
        return []
    return [map_commit(raw, branch) for raw in raw_commits if raw.get("sha")]
