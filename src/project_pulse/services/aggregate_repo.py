"""Aggregate-repository use case — the repository data aggregation engine.

Metadata is fetched first because it names the default branch.  Branches,
pull requests, issues and contributors are then collected concurrently,
followed by recent commit history for the default branch and the head
branches of open pull requests.  Everything except identity parsing and
metadata degrades to an empty slice on failure.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Sequence

from project_pulse.domain.entities import (
    AggregatedResult,
    Branch,
    Commit,
    Contributor,
    PullRequest,
)
from project_pulse.domain.ports.page_fetcher import PageFetcher
from project_pulse.domain.value_objects import RepositoryIdentity
from project_pulse.services.collectors import (
    collect_branches,
    collect_contributors,
    collect_issues,
    collect_metadata,
    collect_pull_requests,
    collect_recent_commits,
)
from project_pulse.services.fanout import Job, join_all

logger = logging.getLogger(__name__)

MAX_HISTORY_BRANCHES = 5
STALE_AFTER_DAYS = 2

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Pure steps ──────────────────────────────────────────────────────────────


def select_history_branches(
    default_branch: str,
    pull_requests: Iterable[PullRequest],
    limit: int = MAX_HISTORY_BRANCHES,
) -> list[str]:
    """Default branch first, then distinct PR head branches in PR order."""
    selected: list[str] = [default_branch]
    for pr in pull_requests:
        if pr.head_branch and pr.head_branch not in selected:
            selected.append(pr.head_branch)
    return selected[:limit]


def merge_commits(per_branch: Iterable[Sequence[Commit]]) -> list[Commit]:
    """Flatten, keep the first copy of each ``sha``, newest first."""
    seen: dict[str, Commit] = {}
    for commits in per_branch:
        for commit in commits:
            seen.setdefault(commit.sha, commit)
    return sorted(seen.values(), key=lambda c: c.timestamp or _EPOCH, reverse=True)


def enrich_contributors(
    contributors: Iterable[Contributor], commits: Iterable[Commit]
) -> list[Contributor]:
    """Fill ``commits_by_day`` from the recent commit window (UTC dates)."""
    activity: dict[str, dict[str, int]] = defaultdict(dict)
    for commit in commits:
        if commit.timestamp is None:
            continue
        day = commit.timestamp.astimezone(timezone.utc).date().isoformat()
        by_day = activity[commit.author]
        by_day[day] = by_day.get(day, 0) + 1
    return [
        replace(contributor, commits_by_day=dict(activity.get(contributor.login, {})))
        for contributor in contributors
    ]


def mark_stale_branches(
    branches: Iterable[Branch], pull_requests: Iterable[PullRequest]
) -> list[Branch]:
    """Stale means inactive for ``STALE_AFTER_DAYS`` *and* head of an open PR.

    Only the PR head branch is matched; base branches are not considered.
    """
    pr_heads = {pr.head_branch for pr in pull_requests if pr.head_branch}
    enriched: list[Branch] = []
    for branch in branches:
        has_open_pr = branch.name in pr_heads
        inactive = (
            branch.days_since_last_commit is not None
            and branch.days_since_last_commit >= STALE_AFTER_DAYS
        )
        enriched.append(
            replace(
                branch,
                has_open_pull_request=has_open_pr,
                is_stale=inactive and has_open_pr,
            )
        )
    return enriched


# ── Use case ────────────────────────────────────────────────────────────────


class AggregateRepoUseCase:
    """Builds an :class:`AggregatedResult` for one repository.

    Parameters
    ----------
    fetcher:
        Adapter that can read paginated resources from GitHub.
    branch_detail_concurrency:
        Maximum in-flight tip-commit lookups while collecting branches.
    clock:
        Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        branch_detail_concurrency: int = 10,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._fetcher = fetcher
        self._branch_concurrency = branch_detail_concurrency
        self._clock = clock

    async def aggregate(
        self, reference: str, credential: str | None = None
    ) -> AggregatedResult:
        """Run the full aggregation; identity and metadata failures propagate."""
        identity = RepositoryIdentity.parse(reference)
        fetcher = self._fetcher.with_credential(credential) if credential else self._fetcher
        now = self._clock()
        logger.info("Aggregating %s", identity.full_name)

        # 1. Metadata first (default branch drives commit history)
        metadata = await collect_metadata(fetcher, identity)

        # 2. Independent collectors, concurrently
        fanned: list[Any] = await join_all(
            [
                Job(
                    "branches",
                    lambda: collect_branches(fetcher, identity, now, self._branch_concurrency),
                    list,
                ),
                Job("pull requests", lambda: collect_pull_requests(fetcher, identity), list),
                Job("issues", lambda: collect_issues(fetcher, identity), list),
                Job("contributors", lambda: collect_contributors(fetcher, identity), list),
            ]
        )
        branches, pull_requests, issues, contributors = fanned

        # 3. Recent commit history for the default branch + PR head branches
        history_branches = select_history_branches(metadata.default_branch, pull_requests)
        per_branch = await join_all(
            [
                Job(
                    f"commits on {name}",
                    lambda name=name: collect_recent_commits(fetcher, identity, name, now),
                    list,
                )
                for name in history_branches
            ]
        )
        commits = merge_commits(per_branch)

        # 4. Enrichment
        result = AggregatedResult(
            metadata=metadata,
            commits=tuple(commits),
            branches=tuple(mark_stale_branches(branches, pull_requests)),
            pull_requests=tuple(pull_requests),
            issues=tuple(issues),
            contributors=tuple(enrich_contributors(contributors, commits)),
            fetched_at=self._clock(),
        )
        logger.info(
            "Aggregated %s: %d commits, %d branches, %d PRs, %d issues, %d contributors",
            identity.full_name,
            len(result.commits),
            len(result.branches),
            len(result.pull_requests),
            len(result.issues),
            len(result.contributors),
        )
        return result
