"""Source store factory - creates the adapter configured in ``sources.backend``."""

from __future__ import annotations

import structlog

from vodarr.domain.ports.source_store import SourceStorePort
from vodarr.infrastructure.config.schema import SourcesConfig

from .diskcache_store import DiskcacheSourceStore
from .memory_store import InMemorySourceStore

log = structlog.get_logger(__name__)


async def create_source_store(config: SourcesConfig) -> SourceStorePort:
    """Create and open the source store for *config*.

    Raises:
        ValueError: unknown backend.
    """
    log.info(
        "source_store_create",
        backend=config.backend,
        seeded=len(config.entries),
    )
    if config.backend == "memory":
        return InMemorySourceStore(config.entries)
    if config.backend == "diskcache":
        store = DiskcacheSourceStore(config.directory, seed=config.entries)
        await store.open()
        return store
    raise ValueError(f"Unknown source store backend: {config.backend}")
