"""Search cache port - memoized answers to search requests."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from vodarr.domain.entities.search import CacheEntry, SearchResult


class SearchCachePort(Protocol):
    """Port for a process-local, TTL- and size-bounded search cache.

    Implementations:
      - InMemorySearchCache
    """

    async def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for *key*. None = not found / expired."""
        ...

    async def put(self, key: str, results: Sequence[SearchResult]) -> None:
        """Store *results* under *key*. Empty result sets are not stored."""
        ...

    async def clear(self) -> None:
        """Drop ALL entries."""
        ...
