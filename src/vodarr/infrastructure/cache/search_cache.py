"""In-memory search cache with lazy TTL expiry and a soft size cap."""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict
from collections.abc import Callable, Sequence

import structlog

from vodarr.domain.entities.search import CacheEntry, SearchResult

log = structlog.get_logger(__name__)


def normalize_query(query: str) -> str:
    """Lowercase, trim and collapse whitespace runs."""
    return " ".join(query.lower().split())


def build_cache_key(query: str, caller: str | None, include_adult: bool) -> str:
    """Compute the cache key ``<query>:<caller|anonymous>:<true|false>``."""
    flag = "true" if include_adult else "false"
    return f"{normalize_query(query)}:{caller or 'anonymous'}:{flag}"


class InMemorySearchCache:
    """Process-local cache of merged search answers.

    - Entries live ``ttl_seconds`` from ``put()``; an expired entry is a miss.
    - Before an insert that would exceed ``max_entries``, expired entries
      are swept; if that is not enough the oldest entries (by insertion)
      are evicted. Eviction is by age, not by access.
    - Empty result sets are never stored.
    - All map access is serialized through an ``asyncio.Lock``.

    Args:
        ttl_seconds: Entry lifetime (default: 5 minutes).
        max_entries: Soft cap on stored entries (default: 1000).
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()

        log.info(
            "search_cache_init",
            ttl_seconds=ttl_seconds,
            max_entries=max_entries,
        )

    def __len__(self) -> int:
        """Number of live entries; expired ones awaiting a sweep are not counted."""
        now = self._clock()
        return sum(1 for e in self._entries.values() if self._is_live(e, now))

    def _is_live(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp < self.ttl_seconds

    async def get(self, key: str) -> CacheEntry | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                log.debug("cache_get", key=key, hit=False)
                return None
            if not self._is_live(entry, self._clock()):
                del self._entries[key]
                log.debug("cache_expired", key=key)
                return None
            log.debug("cache_get", key=key, hit=True)
            return entry

    async def put(self, key: str, results: Sequence[SearchResult]) -> None:
        if not results:
            log.debug("cache_skip_empty", key=key)
            return

        async with self._lock:
            now = self._clock()
            # Re-inserting a key moves it to the young end.
            self._entries.pop(key, None)

            if len(self._entries) >= self.max_entries:
                self._sweep_expired(now)
            while len(self._entries) >= self.max_entries:
                oldest_key, _ = self._entries.popitem(last=False)
                log.debug("cache_evicted", key=oldest_key)

            self._entries[key] = CacheEntry(
                key=key, results=tuple(results), timestamp=now
            )
            log.debug("cache_set", key=key, result_count=len(results))

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()
            log.warning("search_cache_cleared")

    def _sweep_expired(self, now: float) -> None:
        expired = [k for k, e in self._entries.items() if not self._is_live(e, now)]
        for k in expired:
            del self._entries[k]
        if expired:
            log.debug("cache_swept", removed=len(expired))
