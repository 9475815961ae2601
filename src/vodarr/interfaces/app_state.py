"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from vodarr.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from vodarr.domain.ports import SourceFetcherPort, SourceStorePort
    from vodarr.infrastructure.cache import InMemorySearchCache
    from vodarr.infrastructure.sources import ConfigUserDirectory, SourceRegistry


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    search_cache: InMemorySearchCache
    source_store: SourceStorePort

    # Domain Ports
    registry: SourceRegistry
    fetcher: SourceFetcherPort
    users: ConfigUserDirectory
