"""Tests for result aggregation and display grouping."""

from __future__ import annotations

import random

from conftest import make_result
from vodarr.infrastructure.aggregation import aggregate, group, group_key


class TestAggregate:
    def test_concatenates_in_order(self) -> None:
        a = [make_result(item_id="1"), make_result(item_id="2")]
        b = [make_result(item_id="3", source_key="beta")]
        assert aggregate([a, [], b]) == a + b

    def test_no_dedup(self) -> None:
        r = make_result()
        assert aggregate([[r], [r]]) == [r, r]

    def test_empty(self) -> None:
        assert aggregate([]) == []


class TestGroupKey:
    def test_movie(self) -> None:
        assert group_key(make_result(title="The Matrix")) == "TheMatrix-2010-movie"

    def test_series(self) -> None:
        r = make_result(title="Lost", year="2004", episodes=("a.m3u8", "b.m3u8"))
        assert group_key(r) == "Lost-2004-tv"

    def test_unknown_year(self) -> None:
        r = make_result(title="X", year="unknown", episodes=())
        assert group_key(r) == "X-unknown-tv"


class TestGroup:
    def test_identical_title_year_form_one_group(self) -> None:
        results = [
            make_result(title="Inception", source_key="alpha"),
            make_result(title="Inception", source_key="beta"),
        ]
        groups = group(results, "Inception")
        assert len(groups) == 1
        assert [r.source_key for r in groups[0].results] == ["alpha", "beta"]

    def test_spaces_ignored_in_title(self) -> None:
        results = [make_result(title="Dark Knight"), make_result(title="DarkKnight")]
        assert len(group(results, "dark")) == 1

    def test_movie_and_series_kept_apart(self) -> None:
        results = [
            make_result(title="Fargo"),
            make_result(title="Fargo", episodes=("a.m3u8", "b.m3u8")),
        ]
        assert {g.kind for g in group(results, "Fargo")} == {"movie", "tv"}

    def test_query_match_sorts_first(self) -> None:
        results = [
            make_result(title="Zzz", year="2024"),
            make_result(title="Star Trek", year="1979"),
        ]
        groups = group(results, "Star Trek")
        assert groups[0].representative.title == "Star Trek"

    def test_year_descending_unknown_last(self) -> None:
        results = [
            make_result(title="A", year="unknown"),
            make_result(title="B", year="1999"),
            make_result(title="C", year="2021"),
        ]
        groups = group(results, "nomatch")
        assert [g.representative.year for g in groups] == ["2021", "1999", "unknown"]

    def test_non_ascii_digit_year_sorts_as_unknown(self) -> None:
        results = [
            make_result(title="A", year="２０２３"),
            make_result(title="B", year="1999"),
        ]
        groups = group(results, "nomatch")
        assert [g.representative.title for g in groups] == ["B", "A"]

    def test_key_breaks_ties(self) -> None:
        results = [make_result(title="Beta"), make_result(title="Alpha")]
        groups = group(results, "nomatch")
        assert [g.key for g in groups] == ["Alpha-2010-movie", "Beta-2010-movie"]

    def test_deterministic(self) -> None:
        results = [
            make_result(title=t, year=y, item_id=str(i))
            for i, (t, y) in enumerate(
                [("A", "2001"), ("B", "unknown"), ("A", "2001"), ("Query X", "1990")]
            )
        ]
        first = group(results, "Query")
        for _ in range(5):
            shuffled = list(results)
            random.shuffle(shuffled)
            again = group(shuffled, "Query")
            assert [g.key for g in again] == [g.key for g in first]
        assert group(results, "Query") == first

    def test_empty(self) -> None:
        assert group([], "x") == []
