"""Site registry: which upstream sources a search may use.

Wraps a ``SourceStorePort`` and adds ordering, eligibility rules and the
administrative operations.  Any failure of the backing store surfaces as
``RegistryUnavailable``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

import structlog

from vodarr.domain.entities.errors import (
    DuplicateSource,
    InvalidCallerInput,
    RegistryUnavailable,
    SourceNotFound,
)
from vodarr.domain.entities.source import Source
from vodarr.domain.ports.source_store import SourceStorePort

log = structlog.get_logger(__name__)

T = TypeVar("T")


def _ordered(sources: Sequence[Source]) -> list[Source]:
    # sorted() is stable: equal sort_order keeps insertion order
    return sorted(sources, key=lambda s: s.sort_order)


class SourceRegistry:
    def __init__(self, store: SourceStorePort) -> None:
        self._store = store

    async def _store_call(
        self, op: str, call: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """Run one store operation, mapping backend failures."""
        try:
            return await call(*args, **kwargs)
        except Exception as e:
            log.error("source_registry_unavailable", op=op, error=str(e))
            raise RegistryUnavailable(str(e)) from e

    async def _load(self) -> list[Source]:
        return await self._store_call("list", self._store.list_sources)

    # --- Search pipeline ---

    async def list_eligible_sources(self, include_adult: bool) -> list[Source]:
        sources = [
            s
            for s in await self._load()
            if s.enabled and (include_adult or not s.is_adult)
        ]
        return _ordered(sources)

    # --- Administration ---

    async def list_all(self) -> list[Source]:
        return _ordered(await self._load())

    async def get(self, key: str) -> Source:
        source = await self._store_call("get", self._store.get, key)
        if source is None:
            raise SourceNotFound(key)
        return source

    async def add(
        self,
        key: str,
        name: str,
        api_base_url: str,
        *,
        detail_page_url: str | None = None,
        is_adult: bool = False,
    ) -> Source:
        """Register an administrator-defined source (enabled, sort_order 0)."""
        if await self._store_call("get", self._store.get, key) is not None:
            raise DuplicateSource(key)
        source = Source(
            key=key,
            name=name,
            api_base_url=api_base_url,
            detail_page_url=detail_page_url or None,
            is_adult=is_adult,
            origin="custom",
        )
        await self._store_call("add", self._store.add, source)
        log.info("source_added", key=key, is_adult=is_adult)
        return source

    async def set_enabled(self, key: str, enabled: bool) -> Source:
        updated = await self._store_call(
            "update", self._store.update, key, enabled=enabled
        )
        if updated is None:
            raise SourceNotFound(key)
        log.info("source_enabled" if enabled else "source_disabled", key=key)
        return updated

    async def delete(self, key: str) -> None:
        """Remove a custom source.

        Raises:
            SourceNotFound: unknown key.
            InvalidCallerInput: sources seeded from config cannot be deleted
                (disable them instead).
        """
        source = await self.get(key)
        if source.origin == "config":
            raise InvalidCallerInput(
                f"source {key!r} comes from config and cannot be deleted"
            )
        await self._store_call("delete", self._store.delete, key)
        log.info("source_deleted", key=key)

    async def reorder(self, keys: Sequence[str]) -> list[Source]:
        """Set ``sort_order`` to each key's position in *keys*.

        Sources not listed keep their current ``sort_order``.
        """
        known = {s.key for s in await self._load()}
        unknown = [k for k in keys if k not in known]
        if unknown:
            raise SourceNotFound(", ".join(unknown))

        for position, key in enumerate(keys):
            await self._store_call(
                "update", self._store.update, key, sort_order=position
            )
        log.info("sources_reordered", order=list(keys))
        return await self.list_all()
