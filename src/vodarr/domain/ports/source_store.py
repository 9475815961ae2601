"""Source store port - backing storage for the site registry."""

from __future__ import annotations

from typing import Any, Protocol

from vodarr.domain.entities.source import Source


class SourceStorePort(Protocol):
    """Persistent collection of configured sources.

    Implementations:
      - InMemorySourceStore (seeded from config)
      - DiskcacheSourceStore (SQLite-based, survives restarts)

    ``list_sources()`` returns sources in insertion order; any backend
    failure is raised as-is and translated by the registry.
    """

    async def list_sources(self) -> list[Source]: ...

    async def get(self, key: str) -> Source | None: ...

    async def add(self, source: Source) -> None: ...

    async def update(self, key: str, **changes: Any) -> Source | None: ...

    async def delete(self, key: str) -> bool: ...

    async def aclose(self) -> None: ...
