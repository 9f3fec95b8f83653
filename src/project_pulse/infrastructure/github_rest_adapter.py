"""GitHub REST API adapter — implements the PageFetcher port."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping

import httpx

from project_pulse.domain.exceptions import (
    AccessDeniedError,
    RateLimitedError,
    RepositoryNotFoundError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
USER_AGENT = "project-pulse/1.0"
PAGE_SIZE = 100


class GitHubRestClient:
    """Concrete PageFetcher backed by the GitHub v3 REST API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str | None = None,
        base_url: str = GITHUB_API,
    ) -> None:
        self._client = client
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._api_headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }
        if token:
            self._api_headers["Authorization"] = f"Bearer {token}"

    def with_credential(self, token: str | None) -> GitHubRestClient:
        """Return a client on the same transport authenticated with *token*."""
        return GitHubRestClient(self._client, token=token, base_url=self._base_url)

    async def fetch_page(
        self, endpoint: str, params: Mapping[str, str] | None = None
    ) -> Any:
        """GET *endpoint* and return the decoded JSON body."""
        resp = await self._api_get(endpoint, params)
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(
                f"GitHub API returned a non-JSON body for {endpoint}",
                status_code=resp.status_code,
            ) from exc

    async def fetch_all_pages(
        self,
        endpoint: str,
        params: Mapping[str, str] | None = None,
        max_pages: int = 10,
    ) -> list[Any]:
        """Collect records page by page.

        Stops on an empty or non-list page, on a page shorter than
        ``PAGE_SIZE``, or once *max_pages* pages have been read.
        """
        results: list[Any] = []
        for page in range(1, max_pages + 1):
            page_params = {**(params or {}), "per_page": str(PAGE_SIZE), "page": str(page)}
            data = await self.fetch_page(endpoint, page_params)
            if not isinstance(data, list) or not data:
                break
            results.extend(data)
            if len(data) < PAGE_SIZE:
                break
        else:
            logger.debug("Page cap (%d) reached for %s", max_pages, endpoint)
        return results

    async def _api_get(
        self,
        endpoint: str,
        params: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """Perform a GitHub API GET request with error translation."""
        url = f"{self._base_url}{endpoint}"
        try:
            resp = await self._client.get(
                url, headers=self._api_headers, params=params
            )
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Network error fetching {url}: {exc}") from exc

        if resp.is_success:
            return resp

        if resp.status_code == 404:
            raise RepositoryNotFoundError(
                "Repository not found. Make sure the repository exists and is public."
            )

        if resp.status_code == 403:
            if resp.headers.get("x-ratelimit-remaining", "") == "0":
                raise _rate_limited(resp)
            raise AccessDeniedError(
                "Access forbidden. The repository may be private."
            )

        if resp.status_code == 429:
            raise _rate_limited(resp)

        raise UpstreamError(
            f"GitHub API error: {resp.status_code} {resp.reason_phrase}",
            status_code=resp.status_code,
            reason=resp.reason_phrase,
        )


def parse_reset_header(raw: str | None) -> datetime | None:
    """Turn an ``x-ratelimit-reset`` epoch-seconds value into a UTC datetime."""
    if not raw:
        return None
    try:
        return datetime.fromtimestamp(int(raw), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def _rate_limited(resp: httpx.Response) -> RateLimitedError:
    reset_at = parse_reset_header(resp.headers.get("x-ratelimit-reset"))
    if reset_at is not None:
        hint = f"Resets at {reset_at.strftime('%Y-%m-%d %H:%M:%S UTC')}."
    else:
        hint = "Try again later."
    return RateLimitedError(
        f"GitHub API rate limit exceeded. {hint} "
        "Set the GITHUB_TOKEN environment variable to increase the limit.",
        reset_at=reset_at,
    )
