"""Shared test fixtures for the vodarr test suite."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from vodarr.domain.entities import SearchResult, Source
from vodarr.infrastructure.cache import InMemorySearchCache
from vodarr.infrastructure.config.schema import SearchConfig

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_source(key: str = "alpha", **kwargs: Any) -> Source:
    defaults: dict[str, Any] = {
        "key": key,
        "name": f"{key.title()} Source",
        "api_base_url": f"https://{key}.example.com/api.php/provide/vod",
    }
    defaults.update(kwargs)
    return Source(**defaults)


def make_result(
    title: str = "Inception",
    *,
    source_key: str = "alpha",
    item_id: str = "1",
    **kwargs: Any,
) -> SearchResult:
    defaults: dict[str, Any] = {
        "id": item_id,
        "title": title,
        "source_key": source_key,
        "source_name": f"{source_key.title()} Source",
        "episodes": ("https://cdn.example.com/1/index.m3u8",),
        "year": "2010",
    }
    defaults.update(kwargs)
    return SearchResult(**defaults)


def make_item(
    vod_id: int | str = 1,
    vod_name: str = "Inception",
    **kwargs: Any,
) -> dict[str, Any]:
    """Raw upstream videolist item."""
    item: dict[str, Any] = {
        "vod_id": vod_id,
        "vod_name": vod_name,
        "vod_pic": "https://img.example.com/p.jpg",
        "vod_play_url": f"HD$https://cdn.example.com/{vod_id}/index.m3u8",
        "vod_class": "Sci-Fi",
        "vod_year": "2010",
        "vod_content": "<p>A thief who steals secrets.</p>",
        "type_name": "Movie",
    }
    item.update(kwargs)
    return item


# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def source() -> Source:
    return make_source()


@pytest.fixture()
def search_result() -> SearchResult:
    """Minimal valid SearchResult."""
    return make_result()


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def search_cache(fake_clock: FakeClock) -> InMemorySearchCache:
    return InMemorySearchCache(ttl_seconds=300, max_entries=1000, clock=fake_clock)


@pytest.fixture()
def search_config() -> SearchConfig:
    return SearchConfig()


# ---------------------------------------------------------------------------
# Mock port fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_registry() -> AsyncMock:
    """Mock SourceRegistryPort with two plain sources."""
    registry = AsyncMock()
    registry.list_eligible_sources = AsyncMock(
        return_value=[make_source("alpha"), make_source("beta")]
    )
    registry.get = AsyncMock(return_value=make_source("alpha"))
    return registry


@pytest.fixture()
def mock_fetcher() -> AsyncMock:
    """Mock SourceFetcherPort returning one result per source."""
    fetcher = AsyncMock()

    async def _fetch(source: Source, query: str, include_adult: bool) -> list:
        return [make_result(source_key=source.key)]

    fetcher.fetch_from_source = AsyncMock(side_effect=_fetch)
    fetcher.fetch_detail = AsyncMock(return_value=make_result())
    return fetcher


@pytest.fixture()
def mock_preferences() -> MagicMock:
    """Mock UserPreferencePort (adult content filtered)."""
    prefs = MagicMock()
    prefs.get_filter_adult = AsyncMock(return_value=True)
    return prefs
