from __future__ import annotations

from dataclasses import dataclass, field

UNKNOWN_YEAR = "unknown"


@dataclass(frozen=True)
class SearchResult:
    """One title returned by one source, in canonical shape.

    Instances are built by the response normalizer and never mutated
    afterwards; ``episodes`` is a tuple to keep it that way.
    """

    id: str
    title: str
    source_key: str
    source_name: str
    episodes: tuple[str, ...] = ()
    poster_url: str | None = None
    category: str | None = None
    year: str = UNKNOWN_YEAR  # 4 ASCII digits or "unknown"
    description: str = ""
    type_name: str | None = None
    douban_id: int | str | None = None


@dataclass(frozen=True)
class CacheEntry:
    key: str
    results: tuple[SearchResult, ...]
    timestamp: float  # clock reading at put() time


@dataclass(frozen=True)
class AggregateGroup:
    """Display-time bucket of results judged to be the same title."""

    key: str
    results: tuple[SearchResult, ...] = field(default_factory=tuple)

    @property
    def representative(self) -> SearchResult:
        return self.results[0]

    @property
    def kind(self) -> str:
        return "movie" if len(self.representative.episodes) == 1 else "tv"
