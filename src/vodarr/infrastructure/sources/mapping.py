from __future__ import annotations

import dataclasses
from collections.abc import Iterable
from typing import Any

from vodarr.domain.entities.source import Source
from vodarr.infrastructure.config.schema import SourceEntry


def source_from_entry(entry: SourceEntry) -> Source:
    return Source(
        key=entry.key,
        name=entry.name,
        api_base_url=entry.api.rstrip("?"),
        detail_page_url=entry.detail or None,
        is_adult=entry.is_adult,
        enabled=not entry.disabled,
        sort_order=entry.sort_order,
        origin="config",
    )


def sources_from_entries(entries: Iterable[SourceEntry]) -> list[Source]:
    return [source_from_entry(e) for e in entries]


def source_to_record(source: Source) -> dict[str, Any]:
    return dataclasses.asdict(source)


def source_from_record(record: dict[str, Any]) -> Source:
    fields = {f.name for f in dataclasses.fields(Source)}
    return Source(**{k: v for k, v in record.items() if k in fields})
