"""Pulse summary — LLM-generated narrative over an aggregated snapshot.

The summarizer never fails a pulse request: any problem producing the
summary is reported back as a reason string next to a ``None`` summary.
Chat answers, on the other hand, raise :class:`LlmError`.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from project_pulse.domain.entities import AggregatedResult, PulseSummary
from project_pulse.domain.exceptions import LlmError
from project_pulse.domain.ports.llm_gateway import LlmGateway

logger = logging.getLogger(__name__)

# ── Prompt templates ────────────────────────────────────────────────────────

SYSTEM_PROMPT = """\
You are an engineering lead reviewing the recent health of a GitHub \
repository.  Given a JSON digest of the repository (metadata, commits from \
the last seven days, branches, open pull requests, open issues and \
contributor activity), produce a structured JSON assessment.

Return **only** valid JSON with exactly these four keys:

{
  "overview": "<2-3 sentence description of the project's current state>",
  "activity": "<1-3 sentences on who has been committing and how much>",
  "blockers": ["<stale branch, long-open PR or issue that needs attention>", ...],
  "recommendations": ["<short, concrete next step>", ...]
}

Guidelines:
- Be specific and factual — refer to branch names, PR and issue numbers.
- A branch marked "stale" has an open pull request but no commits for two \
or more days; treat it as a likely blocker.
- Do NOT invent information that is not supported by the digest.
"""

CHAT_SYSTEM_PROMPT = """\
You are a helpful assistant answering questions about a GitHub repository. \
Answer using only the JSON digest below; say so when the digest does not \
contain the answer.  Keep answers short.

Repository digest:
{digest}
"""

_DIGEST_COMMITS = 30
_DIGEST_ITEMS = 20


def _iso(value: Any) -> str | None:
    return value.isoformat() if value is not None else None


def build_digest(result: AggregatedResult) -> dict[str, Any]:
    """Condense *result* into a compact, JSON-serialisable context."""
    meta = result.metadata
    active = [c for c in result.contributors if c.commits_by_day]
    return {
        "repository": {
            "fullName": meta.full_name,
            "description": meta.description,
            "language": meta.language,
            "defaultBranch": meta.default_branch,
            "stars": meta.stars,
            "forks": meta.forks,
            "openIssues": meta.open_issues,
            "pushedAt": _iso(meta.pushed_at),
        },
        "counts": {
            "recentCommits": len(result.commits),
            "branches": len(result.branches),
            "staleBranches": sum(1 for b in result.branches if b.is_stale),
            "openPullRequests": len(result.pull_requests),
            "openIssues": len(result.issues),
            "contributors": len(result.contributors),
        },
        "recentCommits": [
            {
                "author": c.author,
                "date": _iso(c.timestamp),
                "message": c.message,
                "branch": c.branch,
            }
            for c in result.commits[:_DIGEST_COMMITS]
        ],
        "staleBranches": [
            {"name": b.name, "daysSinceLastCommit": b.days_since_last_commit}
            for b in result.branches
            if b.is_stale
        ],
        "openPullRequests": [
            {
                "number": pr.number,
                "title": pr.title,
                "author": pr.author,
                "branch": pr.head_branch,
                "draft": pr.is_draft,
                "createdAt": _iso(pr.created_at),
            }
            for pr in result.pull_requests[:_DIGEST_ITEMS]
        ],
        "openIssues": [
            {
                "number": issue.number,
                "title": issue.title,
                "labels": [label.name for label in issue.labels],
                "assignees": [a.login for a in issue.assignees],
            }
            for issue in result.issues[:_DIGEST_ITEMS]
        ],
        "activeContributors": [
            {
                "login": c.login,
                "recentCommits": sum(c.commits_by_day.values()),
                "totalCommits": c.total_commits,
            }
            for c in active
        ],
    }


def _strip_fences(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        first_nl = text.index("\n") if "\n" in text else 3
        text = text[first_nl + 1 :]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()
    return text


def parse_summary(raw: str) -> PulseSummary:
    """Parse the LLM JSON output into a :class:`PulseSummary`."""
    try:
        data = json.loads(_strip_fences(raw))
    except json.JSONDecodeError as exc:
        raise LlmError(f"LLM returned invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise LlmError("LLM returned a JSON value that is not an object.")

    overview = data.get("overview")
    if not isinstance(overview, str) or not overview:
        raise LlmError("LLM response missing 'overview' field.")

    activity = data.get("activity")
    return PulseSummary(
        overview=overview,
        activity=activity if isinstance(activity, str) else "",
        blockers=_string_list(data.get("blockers")),
        recommendations=_string_list(data.get("recommendations")),
    )


def _string_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if item)


class PulseSummarizer:
    """Turns an :class:`AggregatedResult` into a summary or a chat reply.

    *llm_gateway* may be ``None`` when no provider is configured; summaries
    are then reported as unavailable.
    """

    def __init__(self, llm_gateway: LlmGateway | None) -> None:
        self._llm = llm_gateway

    async def summarize(
        self, result: AggregatedResult
    ) -> tuple[PulseSummary | None, str | None]:
        """Return ``(summary, None)`` or ``(None, reason)``."""
        if self._llm is None:
            return None, "AI summary unavailable: no LLM provider configured."

        context = json.dumps(build_digest(result), indent=1)
        try:
            raw = await self._llm.complete(SYSTEM_PROMPT, context)
            summary = parse_summary(raw)
        except LlmError as exc:
            logger.warning("Summary generation failed for %s: %s", result.metadata.full_name, exc)
            return None, str(exc)

        logger.info("Summary generated for %s", result.metadata.full_name)
        return summary, None

    async def chat(
        self, result: AggregatedResult, messages: Sequence[tuple[str, str]]
    ) -> str:
        """Answer the last user message of *messages* about the repository."""
        if self._llm is None:
            raise LlmError("Chat unavailable: no LLM provider configured.")
        if not messages:
            raise LlmError("Chat requires at least one message.")

        system = CHAT_SYSTEM_PROMPT.format(digest=json.dumps(build_digest(result)))
        reply = await self._llm.converse(system, messages)
        return reply.strip()
