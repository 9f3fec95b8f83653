"""Port: paginated page fetcher — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Any, Mapping, Protocol


class PageFetcher(Protocol):
    """Abstract contract for reading JSON resources from the upstream API."""

    async def fetch_page(
        self, endpoint: str, params: Mapping[str, str] | None = None
    ) -> Any:
        """Return the decoded JSON body of a single GET."""
        ...

    async def fetch_all_pages(
        self,
        endpoint: str,
        params: Mapping[str, str] | None = None,
        max_pages: int = 10,
    ) -> list[Any]:
        """Walk numbered pages and return every record, in upstream order."""
        ...

    def with_credential(self, token: str | None) -> PageFetcher:
        """Return a fetcher sharing this transport but using *token*."""
        ...
