"""JSON shapes of search results as served to clients."""

from __future__ import annotations

from typing import Any

from vodarr.domain.entities import AggregateGroup, SearchResult, Source


def present_result(result: SearchResult) -> dict[str, Any]:
    return {
        "id": result.id,
        "title": result.title,
        "poster": result.poster_url or "",
        "episodes": list(result.episodes),
        "source": result.source_key,
        "source_name": result.source_name,
        "class": result.category,
        "year": result.year,
        "desc": result.description,
        "type_name": result.type_name,
        "douban_id": result.douban_id,
    }


def present_group(group: AggregateGroup) -> dict[str, Any]:
    first = group.representative
    return {
        "key": group.key,
        "title": first.title,
        "year": first.year,
        "kind": group.kind,
        "results": [present_result(r) for r in group.results],
    }


def present_source(source: Source) -> dict[str, Any]:
    return {
        "key": source.key,
        "name": source.name,
        "api": source.api_base_url,
        "detail": source.detail_page_url or "",
        "is_adult": source.is_adult,
        "disabled": not source.enabled,
        "sort_order": source.sort_order,
        "from": source.origin,
    }
