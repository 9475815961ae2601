"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from vodarr.infrastructure.cache import InMemorySearchCache
from vodarr.infrastructure.common.retry_transport import RetryTransport
from vodarr.infrastructure.config.schema import AppConfig
from vodarr.infrastructure.sources import (
    ConfigUserDirectory,
    SourceRegistry,
    create_source_store,
)
from vodarr.infrastructure.upstream import AdultContentPolicy, HttpxSourceFetcher
from vodarr.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_http_client(config: AppConfig) -> httpx.AsyncClient:
    """Shared upstream client: retry transport, default timeout and UA."""
    transport = RetryTransport(
        httpx.AsyncHTTPTransport(),
        max_retries=config.search.retry_attempts,
        backoff_seconds=config.search.retry_backoff_seconds,
    )
    return httpx.AsyncClient(
        transport=transport,
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={
            "User-Agent": config.http_user_agent,
            "Accept": "application/json",
        },
        follow_redirects=config.http_follow_redirects,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. Search cache (process-local, injected into the search use case)
        2. HTTP client (required by the fetcher)
        3. Source store + registry
        4. User directory
        5. Fetcher (uses HTTP client + content policy)
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) Search cache
    state.search_cache = InMemorySearchCache(
        ttl_seconds=config.cache.ttl_seconds,
        max_entries=config.cache.max_entries,
    )
    log.info(
        "search_cache_initialized",
        ttl_seconds=config.cache.ttl_seconds,
        max_entries=config.cache.max_entries,
    )

    # 2) HTTP client with retry on network errors / non-2xx
    state.http_client = build_http_client(config)
    log.info(
        "http_client_initialized",
        timeout_seconds=config.http_timeout_seconds,
        retry_attempts=config.search.retry_attempts,
    )

    # 3) Sources
    state.source_store = await create_source_store(config.sources)
    state.registry = SourceRegistry(state.source_store)

    # 4) Users (preferences + authorization)
    state.users = ConfigUserDirectory(config.users)

    # 5) Fetcher
    state.fetcher = HttpxSourceFetcher(
        state.http_client,
        policy=AdultContentPolicy(config.search.adult_keywords),
        search_config=config.search,
        timeout_seconds=config.http_timeout_seconds,
        detail_timeout_seconds=config.http_detail_timeout_seconds,
    )

    log.info(
        "app_startup_complete",
        environment=config.environment,
        sources_backend=config.sources.backend,
    )

    try:
        yield
    finally:
        await state.http_client.aclose()
        log.info("http_client_closed")

        await state.source_store.aclose()
        log.info("source_store_closed")

        log.info("app_shutdown_complete")
