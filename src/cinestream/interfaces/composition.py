"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import structlog
from fastapi import FastAPI

from cinestream.application.use_cases import ContentAggregator, StremioAddonUseCase
from cinestream.domain.ports.fetcher import FetcherPort
from cinestream.infrastructure.config.schema import AppConfig
from cinestream.infrastructure.http.fetcher import HttpxFetcher, create_http_client
from cinestream.infrastructure.persistence import (
    IdentifierSweeper,
    InMemoryIdentifierStore,
)
from cinestream.infrastructure.sources import build_sources, select_descriptors
from cinestream.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_aggregator(
    config: AppConfig,
    fetcher: FetcherPort,
    store: InMemoryIdentifierStore,
) -> ContentAggregator:
    """Wire sources from config into an aggregator sharing *store*."""
    descriptors = select_descriptors(
        enabled=config.sources.enabled,
        base_urls=config.sources.base_urls,
    )
    sources = build_sources(fetcher, descriptors)
    if not sources:
        log.warning("no_sources_enabled", enabled=config.sources.enabled)

    return ContentAggregator(
        sources,
        store,
        max_results=config.search.max_results,
        concurrent=config.search.concurrent,
        source_timeout=config.search.source_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create every long-lived resource at startup, release them at shutdown.

    Startup order (shutdown runs the other way round):
        1. HTTP client + fetcher (required by sources)
        2. Identifier store (shared by aggregator and sweeper)
        3. Sources + aggregator
        4. Stremio use case
        5. Sweeper task (stopped first on shutdown)
    """
    state = cast(AppState, app.state)
    config = state.config

    # 1) HTTP client shared by all sources
    state.http_client = create_http_client(
        timeout=config.http_timeout_seconds,
        max_redirects=config.http_max_redirects,
    )
    state.fetcher = HttpxFetcher(
        state.http_client,
        timeout=config.http_timeout_seconds,
        max_redirects=config.http_max_redirects,
        user_agent=config.http_user_agent,
    )
    log.info(
        "http_client_initialized",
        timeout=config.http_timeout_seconds,
        max_redirects=config.http_max_redirects,
    )

    # 2) Identifier store
    state.identifier_store = InMemoryIdentifierStore()

    # 3) Sources + aggregator
    state.aggregator = build_aggregator(config, state.fetcher, state.identifier_store)
    log.info(
        "sources_registered",
        sources=[s.name for s in state.aggregator.sources],
    )

    # 4) Stremio use case
    state.stremio_uc = StremioAddonUseCase(state.aggregator)

    # 5) Periodic identifier sweep
    state.sweeper = IdentifierSweeper(
        state.identifier_store,
        max_age_seconds=config.store.max_age_seconds,
        interval_seconds=config.store.sweep_interval_seconds,
    )
    state.sweeper.start()

    log.info("app_startup_complete")

    try:
        yield
    finally:
        await state.sweeper.stop()
        log.info("identifier_sweeper_stopped")

        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
