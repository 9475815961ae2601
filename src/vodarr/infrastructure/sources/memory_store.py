"""In-process source store seeded from configuration."""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Iterable
from typing import Any

from vodarr.domain.entities.source import Source
from vodarr.infrastructure.config.schema import SourceEntry

from .mapping import sources_from_entries


class InMemorySourceStore:
    """Keeps sources in a plain dict (insertion-ordered).

    Changes are lost on restart; the config file is the source of truth.
    """

    def __init__(self, entries: Iterable[SourceEntry] = ()) -> None:
        self._sources: dict[str, Source] = {
            s.key: s for s in sources_from_entries(entries)
        }
        self._lock = asyncio.Lock()

    async def list_sources(self) -> list[Source]:
        async with self._lock:
            return list(self._sources.values())

    async def get(self, key: str) -> Source | None:
        async with self._lock:
            return self._sources.get(key)

    async def add(self, source: Source) -> None:
        async with self._lock:
            self._sources[source.key] = source

    async def update(self, key: str, **changes: Any) -> Source | None:
        async with self._lock:
            current = self._sources.get(key)
            if current is None:
                return None
            updated = dataclasses.replace(current, **changes)
            self._sources[key] = updated
            return updated

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._sources.pop(key, None) is not None

    async def aclose(self) -> None:
        return None
