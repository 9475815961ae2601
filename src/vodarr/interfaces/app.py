"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from vodarr import __version__
from vodarr.infrastructure.config import AppConfig
from vodarr.interfaces.app_state import AppState
from vodarr.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration ONLY, NO resource initialization.

    Resources (HTTP client, cache, source store) are created in lifespan().
    """
    app = FastAPI(
        title="vodarr",
        description="Federated search over videolist-compatible VOD sources",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from vodarr.interfaces.api.admin.router import router as admin_router
    from vodarr.interfaces.api.detail.router import router as detail_router
    from vodarr.interfaces.api.search.router import router as search_router

    app.include_router(search_router, prefix="/api/v1")
    app.include_router(detail_router, prefix="/api/v1")
    app.include_router(admin_router, prefix="/api/v1")

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str | int]:
        """Liveness check: returns 200 as long as the process is running."""
        cache = getattr(app.state, "search_cache", None)
        return {
            "status": "ok",
            "version": __version__,
            "cached_searches": len(cache) if cache is not None else 0,
        }

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
            )

    return app
