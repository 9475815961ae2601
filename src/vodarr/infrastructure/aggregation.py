"""Merge per-source result lists and group them for display.

Both functions are pure: the same input always gives the same output.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from vodarr.domain.entities.search import UNKNOWN_YEAR, AggregateGroup, SearchResult


def aggregate(per_source: Iterable[Sequence[SearchResult]]) -> list[SearchResult]:
    """Concatenate per-source lists. No dedup, no reordering."""
    flat: list[SearchResult] = []
    for results in per_source:
        flat.extend(results)
    return flat


def _strip_spaces(text: str) -> str:
    return text.replace(" ", "")


def group_key(result: SearchResult) -> str:
    """``<title without spaces>-<year>-<movie|tv>``.

    A single episode means a movie; zero or several episodes mean a series.
    """
    kind = "movie" if len(result.episodes) == 1 else "tv"
    return f"{_strip_spaces(result.title)}-{result.year}-{kind}"


def _year_rank(year: str) -> int:
    # Known years sort newest first; "unknown" goes after all of them
    if year == UNKNOWN_YEAR or not (year.isascii() and year.isdigit()):
        return 1
    return -int(year)


def group(results: Iterable[SearchResult], query: str) -> list[AggregateGroup]:
    """Bucket *results* by ``group_key`` and order the buckets.

    Ordering:
      1. groups whose first member's title contains the space-stripped
         query come first;
      2. then by year, newest first, ``"unknown"`` last;
      3. then by group key.

    Members keep their input order inside a group.
    """
    buckets: dict[str, list[SearchResult]] = {}
    for result in results:
        buckets.setdefault(group_key(result), []).append(result)

    needle = _strip_spaces(query.strip())

    def sort_key(key: str) -> tuple[int, int, str]:
        first = buckets[key][0]
        exact = 0 if needle and needle in _strip_spaces(first.title) else 1
        return (exact, _year_rank(first.year), key)

    return [
        AggregateGroup(key=key, results=tuple(buckets[key]))
        for key in sorted(buckets, key=sort_key)
    ]
