"""Tests for FederatedSearchUseCase."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from conftest import FakeClock, make_item, make_result, make_source
from vodarr.application.use_cases.search import (
    FederatedSearchUseCase,
    SearchRequest,
)
from vodarr.domain.entities import InvalidCallerInput, RegistryUnavailable
from vodarr.infrastructure.cache import InMemorySearchCache
from vodarr.infrastructure.config.schema import SearchConfig
from vodarr.infrastructure.upstream import AdultContentPolicy, HttpxSourceFetcher


def _make_uc(
    registry: AsyncMock,
    fetcher: AsyncMock | HttpxSourceFetcher,
    cache: InMemorySearchCache,
    preferences: MagicMock,
    concurrency_limit: int = 3,
    clock: FakeClock | None = None,
) -> FederatedSearchUseCase:
    kwargs = {"clock": clock} if clock is not None else {}
    return FederatedSearchUseCase(
        registry,
        fetcher,
        cache,
        preferences,
        concurrency_limit=concurrency_limit,
        **kwargs,
    )


def _api(key: str) -> str:
    return f"https://{key}.example.com/api.php/provide/vod"


# ---------------------------------------------------------------------------
# Input handling
# ---------------------------------------------------------------------------


class TestBlankQuery:
    async def test_blank_query_returns_empty_without_io(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)
        outcome = await uc.execute(SearchRequest(query="   "))

        assert outcome.results == []
        assert outcome.cached is False
        mock_registry.list_eligible_sources.assert_not_awaited()
        mock_fetcher.fetch_from_source.assert_not_awaited()

    async def test_grouped_blank_query_raises(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)
        with pytest.raises(InvalidCallerInput):
            await uc.execute_grouped(SearchRequest(query=""))


# ---------------------------------------------------------------------------
# Adult-content resolution
# ---------------------------------------------------------------------------


class TestResolveIncludeAdult:
    async def test_explicit_flag_wins(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)
        request = SearchRequest(query="x", caller="bob", include_adult=True)

        assert await uc.resolve_include_adult(request) is True
        mock_preferences.get_filter_adult.assert_not_awaited()

    async def test_preference_inverted(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        mock_preferences.get_filter_adult.return_value = False
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)

        assert await uc.resolve_include_adult(SearchRequest("x", "bob")) is True
        mock_preferences.get_filter_adult.assert_awaited_once_with("bob")

    async def test_preference_failure_filters(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        mock_preferences.get_filter_adult.side_effect = RuntimeError("db down")
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)

        assert await uc.resolve_include_adult(SearchRequest("x", "bob")) is False

    async def test_registry_receives_resolved_flag(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)
        await uc.execute(SearchRequest(query="matrix"))

        mock_registry.list_eligible_sources.assert_awaited_once_with(False)
        for call in mock_fetcher.fetch_from_source.await_args_list:
            assert call.args[2] is False


# ---------------------------------------------------------------------------
# Fan-out and aggregation
# ---------------------------------------------------------------------------


class TestFanOut:
    async def test_one_fetch_per_source(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)
        outcome = await uc.execute(SearchRequest(query="inception"))

        assert mock_fetcher.fetch_from_source.await_count == 2
        assert sorted(r.source_key for r in outcome.results) == ["alpha", "beta"]
        assert outcome.cached is False
        assert outcome.degraded is False

    async def test_no_sources_means_no_fetches(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        mock_registry.list_eligible_sources.return_value = []
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)

        outcome = await uc.execute(SearchRequest(query="inception"))

        assert outcome.results == []
        mock_fetcher.fetch_from_source.assert_not_awaited()

    async def test_failing_source_contributes_nothing(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        async def _fetch(source, query, include_adult):
            if source.key == "alpha":
                raise RuntimeError("boom")
            return [make_result(source_key=source.key)]

        mock_fetcher.fetch_from_source.side_effect = _fetch
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)

        outcome = await uc.execute(SearchRequest(query="inception"))
        assert [r.source_key for r in outcome.results] == ["beta"]

    async def test_concurrency_limit_respected(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        mock_registry.list_eligible_sources.return_value = [
            make_source(f"s{i}") for i in range(6)
        ]
        in_flight = 0
        peak = 0

        async def _fetch(source, query, include_adult):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return [make_result(source_key=source.key)]

        mock_fetcher.fetch_from_source.side_effect = _fetch
        uc = _make_uc(
            mock_registry,
            mock_fetcher,
            search_cache,
            mock_preferences,
            concurrency_limit=2,
        )

        outcome = await uc.execute(SearchRequest(query="inception"))
        assert len(outcome.results) == 6
        assert peak == 2


# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------


class TestCaching:
    async def test_second_call_served_from_cache(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)
        first = await uc.execute(SearchRequest(query="Inception"))
        second = await uc.execute(SearchRequest(query="  inception "))

        assert second.cached is True
        assert second.results == first.results
        assert mock_fetcher.fetch_from_source.await_count == 2
        assert mock_registry.list_eligible_sources.await_count == 1

    async def test_cache_is_per_caller(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)
        await uc.execute(SearchRequest(query="inception", caller="alice"))
        outcome = await uc.execute(SearchRequest(query="inception", caller="bob"))

        assert outcome.cached is False
        assert mock_fetcher.fetch_from_source.await_count == 4

    async def test_expired_entry_refetches(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
        fake_clock: FakeClock,
    ) -> None:
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)
        await uc.execute(SearchRequest(query="inception"))
        fake_clock.advance(301)

        outcome = await uc.execute(SearchRequest(query="inception"))
        assert outcome.cached is False
        assert mock_fetcher.fetch_from_source.await_count == 4

    async def test_empty_answer_not_cached(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        mock_fetcher.fetch_from_source.side_effect = None
        mock_fetcher.fetch_from_source.return_value = []
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)

        await uc.execute(SearchRequest(query="nothing"))
        outcome = await uc.execute(SearchRequest(query="nothing"))

        assert outcome.cached is False
        assert len(search_cache) == 0


# ---------------------------------------------------------------------------
# Degraded mode
# ---------------------------------------------------------------------------


class TestRegistryUnavailable:
    async def test_degraded_empty_answer(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        mock_registry.list_eligible_sources.side_effect = RegistryUnavailable("x")
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)

        outcome = await uc.execute(SearchRequest(query="inception"))

        assert outcome.degraded is True
        assert outcome.results == []
        assert len(search_cache) == 0
        mock_fetcher.fetch_from_source.assert_not_awaited()

    async def test_grouped_carries_degraded(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        mock_registry.list_eligible_sources.side_effect = RegistryUnavailable("x")
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)

        outcome = await uc.execute_grouped(SearchRequest(query="inception"))
        assert outcome.degraded is True
        assert outcome.groups == []


# ---------------------------------------------------------------------------
# End-to-end scenarios with the real fetcher
# ---------------------------------------------------------------------------


def _real_fetcher(client: httpx.AsyncClient) -> HttpxSourceFetcher:
    return HttpxSourceFetcher(
        client,
        policy=AdultContentPolicy(),
        search_config=SearchConfig(max_pages=1),
    )


class TestScenarios:
    async def test_same_title_from_two_sources_forms_one_group(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        async def _fetch(source, query, include_adult):
            return [
                make_result("The Matrix", source_key=source.key, year="1999"),
            ]

        mock_fetcher.fetch_from_source.side_effect = _fetch
        uc = _make_uc(mock_registry, mock_fetcher, search_cache, mock_preferences)

        outcome = await uc.execute_grouped(SearchRequest(query="Matrix"))

        assert len(outcome.groups) == 1
        group = outcome.groups[0]
        assert group.key == "TheMatrix-1999-movie"
        assert {r.source_key for r in group.results} == {"alpha", "beta"}

    @respx.mock
    async def test_adult_item_filtered_unless_included(
        self,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        respx.get(url__startswith=_api("alpha")).mock(
            return_value=httpx.Response(
                200,
                json={
                    "list": [
                        make_item(1, "Night Story", type_name="伦理片"),
                        make_item(2, "Night Story 2"),
                    ],
                    "pagecount": 1,
                },
            )
        )
        registry = AsyncMock()
        registry.list_eligible_sources = AsyncMock(
            return_value=[make_source("alpha")]
        )

        async with httpx.AsyncClient() as client:
            fetcher = _real_fetcher(client)
            uc = _make_uc(registry, fetcher, search_cache, mock_preferences)

            filtered = await uc.execute(SearchRequest(query="night"))
            included = await uc.execute(
                SearchRequest(query="night", include_adult=True)
            )

        assert [r.id for r in filtered.results] == ["2"]
        assert sorted(r.id for r in included.results) == ["1", "2"]

    @respx.mock
    async def test_timed_out_source_is_skipped(
        self,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        def _page(key: str, count: int) -> httpx.Response:
            items = [make_item(f"{key}{i}", f"{key} title {i}") for i in range(count)]
            return httpx.Response(200, json={"list": items, "pagecount": 1})

        respx.get(url__startswith=_api("alpha")).mock(return_value=_page("a", 5))
        respx.get(url__startswith=_api("beta")).mock(
            side_effect=httpx.ReadTimeout("timed out")
        )
        respx.get(url__startswith=_api("gamma")).mock(return_value=_page("g", 7))

        registry = AsyncMock()
        registry.list_eligible_sources = AsyncMock(
            return_value=[make_source(k) for k in ("alpha", "beta", "gamma")]
        )

        async with httpx.AsyncClient() as client:
            fetcher = _real_fetcher(client)
            uc = _make_uc(registry, fetcher, search_cache, mock_preferences)
            outcome = await uc.execute(SearchRequest(query="title"))

        assert len(outcome.results) == 12
        assert {r.source_key for r in outcome.results} == {"alpha", "gamma"}
        assert outcome.degraded is False


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------


class TestElapsed:
    async def test_elapsed_ms_from_clock(
        self,
        mock_registry: AsyncMock,
        mock_fetcher: AsyncMock,
        search_cache: InMemorySearchCache,
        mock_preferences: MagicMock,
    ) -> None:
        clock = FakeClock(start=10.0)

        async def _fetch(source, query, include_adult):
            clock.advance(0.25)
            return [make_result(source_key=source.key)]

        mock_fetcher.fetch_from_source.side_effect = _fetch
        uc = _make_uc(
            mock_registry, mock_fetcher, search_cache, mock_preferences, clock=clock
        )

        outcome = await uc.execute(SearchRequest(query="inception"))
        assert outcome.elapsed_ms == 500
