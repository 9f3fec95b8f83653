"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
"""

from __future__ import annotations

from datetime import datetime


class PulseError(Exception):
    """Base exception for the entire application."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidReferenceError(PulseError):
    """The supplied reference is neither a repository URL nor ``owner/name``."""


# ── GitHub API errors ───────────────────────────────────────────────────────


class RepositoryNotFoundError(PulseError):
    """The repository does not exist or is not accessible (404)."""


class AccessDeniedError(PulseError):
    """Access to the repository was denied (403)."""


class RateLimitedError(PulseError):
    """GitHub API rate limit exceeded (429 / 403 with rate-limit header)."""

    def __init__(self, message: str, reset_at: datetime | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class UpstreamError(PulseError):
    """Any other non-2xx answer or transport failure from the upstream API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reason: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


# ── LLM errors ──────────────────────────────────────────────────────────────


class LlmError(PulseError):
    """Any error originating from the LLM provider."""
