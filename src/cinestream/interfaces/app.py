"""FastAPI application factory."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Any, cast

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from cinestream import __version__
from cinestream.infrastructure.config import AppConfig
from cinestream.interfaces.api.stremio.router import router as stremio_router
from cinestream.interfaces.app_state import AppState
from cinestream.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


async def _log_request(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Access log line per request, including requests that raised."""
    started = time.perf_counter()
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
            duration_ms=round((time.perf_counter() - started) * 1000.0, 2),
        )


def create_app(config: AppConfig) -> FastAPI:
    """Build the app around *config*.

    Nothing is connected here: the HTTP client, sources, identifier store and
    sweeper are created by ``lifespan`` when the server starts.
    """
    app = FastAPI(
        title="CineStream",
        description="Stremio addon aggregating movie and series streams",
        version=__version__,
        lifespan=lifespan,
    )
    app.state = AppState()
    app.state.config = config

    app.include_router(stremio_router)
    app.middleware("http")(_log_request)

    @app.get("/healthz")
    async def healthz() -> dict[str, Any]:
        """Liveness probe: registered sources and stored identifier count."""
        state = cast(AppState, app.state)
        aggregator = getattr(state, "aggregator", None)
        store = getattr(state, "identifier_store", None)
        return {
            "status": "ok",
            "sources": [s.name for s in aggregator.sources] if aggregator else [],
            "identifiers": store.size() if store else 0,
        }

    return app
