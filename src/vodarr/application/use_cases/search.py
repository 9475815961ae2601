"""Federated search across all eligible upstream sources."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from vodarr.domain.entities import (
    AggregateGroup,
    InvalidCallerInput,
    RegistryUnavailable,
    SearchResult,
)
from vodarr.domain.ports import (
    SearchCachePort,
    SourceFetcherPort,
    SourceRegistryPort,
    UserPreferencePort,
)
from vodarr.infrastructure.aggregation import aggregate, group
from vodarr.infrastructure.cache.search_cache import build_cache_key
from vodarr.infrastructure.concurrency import DEFAULT_LIMIT, run_bounded

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SearchRequest:
    query: str
    caller: str | None = None
    # None = use the caller's stored preference
    include_adult: bool | None = None


@dataclass(frozen=True)
class SearchOutcome:
    """Use case response carrying results + cache metadata."""

    results: list[SearchResult] = field(default_factory=list)
    cached: bool = False
    elapsed_ms: int = 0
    degraded: bool = False


@dataclass(frozen=True)
class GroupedSearchOutcome:
    groups: list[AggregateGroup] = field(default_factory=list)
    cached: bool = False
    elapsed_ms: int = 0
    degraded: bool = False


class FederatedSearchUseCase:
    """Runs one query against every eligible source and merges the answers.

    Flow:
        1. Resolve whether adult content is allowed for the caller
        2. Serve from the search cache when a live entry exists
        3. Ask the registry for eligible sources
        4. Fan out one fetch per source through the concurrency limiter
        5. Concatenate the per-source lists and cache the non-empty result

    Upstream failures never surface here: a failing source contributes
    an empty list.  An unreadable registry yields an empty, ``degraded``
    answer that is not cached.
    """

    def __init__(
        self,
        registry: SourceRegistryPort,
        fetcher: SourceFetcherPort,
        cache: SearchCachePort,
        preferences: UserPreferencePort,
        *,
        concurrency_limit: int = DEFAULT_LIMIT,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.registry = registry
        self.fetcher = fetcher
        self.cache = cache
        self.preferences = preferences
        self._limit = concurrency_limit
        self._clock = clock

    async def resolve_include_adult(self, request: SearchRequest) -> bool:
        """Explicit request flag wins; otherwise the caller's preference."""
        if request.include_adult is not None:
            return request.include_adult
        try:
            filter_adult = await self.preferences.get_filter_adult(request.caller)
        except Exception:  # noqa: BLE001
            log.warning(
                "user_preference_lookup_failed",
                caller=request.caller,
                exc_info=True,
            )
            filter_adult = True
        return not filter_adult

    async def execute(self, request: SearchRequest) -> SearchOutcome:
        start = self._clock()
        query = request.query.strip()
        if not query:
            return SearchOutcome()

        include_adult = await self.resolve_include_adult(request)
        cache_key = build_cache_key(query, request.caller, include_adult)

        entry = await self.cache.get(cache_key)
        if entry is not None:
            log.info("search_cache_hit", query=query, results=len(entry.results))
            return SearchOutcome(
                results=list(entry.results),
                cached=True,
                elapsed_ms=self._elapsed_ms(start),
            )

        try:
            sources = await self.registry.list_eligible_sources(include_adult)
        except RegistryUnavailable:
            log.warning("search_registry_unavailable", query=query)
            return SearchOutcome(degraded=True, elapsed_ms=self._elapsed_ms(start))

        if not sources:
            log.info("search_no_sources", query=query, include_adult=include_adult)
            return SearchOutcome(elapsed_ms=self._elapsed_ms(start))

        tasks = [
            functools.partial(
                self.fetcher.fetch_from_source, source, query, include_adult
            )
            for source in sources
        ]
        per_source = await run_bounded(tasks, self._limit)
        results = aggregate(per_source)

        await self.cache.put(cache_key, results)

        elapsed_ms = self._elapsed_ms(start)
        log.info(
            "search_completed",
            query=query,
            sources=len(sources),
            results=len(results),
            include_adult=include_adult,
            elapsed_ms=elapsed_ms,
        )
        return SearchOutcome(results=results, elapsed_ms=elapsed_ms)

    async def execute_grouped(self, request: SearchRequest) -> GroupedSearchOutcome:
        """Search, then bucket the flat results by title/year/kind.

        Raises:
            InvalidCallerInput: missing or blank query.
        """
        query = request.query.strip()
        if not query:
            raise InvalidCallerInput("missing query")

        outcome = await self.execute(request)
        return GroupedSearchOutcome(
            groups=group(outcome.results, query),
            cached=outcome.cached,
            elapsed_ms=outcome.elapsed_ms,
            degraded=outcome.degraded,
        )

    def _elapsed_ms(self, start: float) -> int:
        return int((self._clock() - start) * 1000)
