"""Diskcache source store - SQLite-backed, survives restarts."""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
from diskcache import Cache as DiskCache

from vodarr.domain.entities.source import Source
from vodarr.infrastructure.config.schema import SourceEntry

from .mapping import source_from_record, source_to_record, sources_from_entries

log = structlog.get_logger(__name__)

_SOURCES_KEY = "sources:v1"


class DiskcacheSourceStore:
    """Async wrapper around a diskcache.Cache holding the source list.

    - All sources live under one key as a list of plain dicts, so the
      insertion order is preserved and every write is a single put.
    - Disk I/O runs via ``asyncio.to_thread``; an ``asyncio.Lock``
      serializes read-modify-write cycles.
    - On open, config entries whose key is not stored yet are appended.
      Stored sources (including admin edits) are never overwritten by
      the config file.

    Args:
        directory: diskcache directory.
        seed: Config entries to sync into the store on open.
    """

    def __init__(
        self,
        directory: str | Path,
        seed: Iterable[SourceEntry] = (),
    ) -> None:
        self.directory = Path(directory)
        self._seed = sources_from_entries(seed)
        self._cache: DiskCache | None = None
        self._lock = asyncio.Lock()

    # --- Context Manager ---
    async def __aenter__(self) -> DiskcacheSourceStore:
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def open(self) -> None:
        if self._cache is not None:
            return
        self._cache = await asyncio.to_thread(DiskCache, str(self.directory))
        log.info("source_store_opened", directory=str(self.directory))
        await self._sync_seed()

    async def aclose(self) -> None:
        if self._cache is not None:
            await asyncio.to_thread(self._cache.close)
            self._cache = None
            log.info("source_store_closed", directory=str(self.directory))

    async def _sync_seed(self) -> None:
        async with self._lock:
            records = await self._read()
            stored = {r["key"] for r in records}
            missing = [s for s in self._seed if s.key not in stored]
            if missing:
                records.extend(source_to_record(s) for s in missing)
                await self._write(records)
            log.info(
                "source_store_seeded",
                stored=len(stored),
                added=[s.key for s in missing],
            )

    async def _read(self) -> list[dict[str, Any]]:
        if self._cache is None:
            raise RuntimeError(
                "Source store not initialized. "
                "Use 'async with store:' or await store.open()"
            )
        value = await asyncio.to_thread(self._cache.get, _SOURCES_KEY, default=None)
        return list(value or [])

    async def _write(self, records: list[dict[str, Any]]) -> None:
        if self._cache is None:
            raise RuntimeError("Source store not initialized.")
        await asyncio.to_thread(self._cache.set, _SOURCES_KEY, records)

    # --- SourceStorePort implementation ---
    async def list_sources(self) -> list[Source]:
        async with self._lock:
            return [source_from_record(r) for r in await self._read()]

    async def get(self, key: str) -> Source | None:
        for source in await self.list_sources():
            if source.key == key:
                return source
        return None

    async def add(self, source: Source) -> None:
        async with self._lock:
            records = [r for r in await self._read() if r["key"] != source.key]
            records.append(source_to_record(source))
            await self._write(records)

    async def update(self, key: str, **changes: Any) -> Source | None:
        async with self._lock:
            records = await self._read()
            for i, record in enumerate(records):
                if record["key"] != key:
                    continue
                updated = dataclasses.replace(source_from_record(record), **changes)
                records[i] = source_to_record(updated)
                await self._write(records)
                return updated
            return None

    async def delete(self, key: str) -> bool:
        async with self._lock:
            records = await self._read()
            kept = [r for r in records if r["key"] != key]
            if len(kept) == len(records):
                return False
            await self._write(kept)
            log.debug("source_deleted", key=key)
            return True
