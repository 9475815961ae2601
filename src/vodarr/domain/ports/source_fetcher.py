"""Per-source fetcher port."""

from __future__ import annotations

from typing import Protocol

from vodarr.domain.entities.search import SearchResult
from vodarr.domain.entities.source import Source


class SourceFetcherPort(Protocol):
    async def fetch_from_source(
        self, source: Source, query: str, include_adult: bool
    ) -> list[SearchResult]:
        """Search one source (with pagination). Never raises."""
        ...

    async def fetch_detail(self, source: Source, item_id: str) -> SearchResult:
        """Fetch a single item's detail.

        Raises:
            DetailUnavailable: upstream failure or empty payload.
        """
        ...
