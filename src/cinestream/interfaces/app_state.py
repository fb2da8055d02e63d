"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from starlette.datastructures import State

from cinestream.infrastructure.config import AppConfig

if TYPE_CHECKING:
    from cinestream.application.use_cases import (
        ContentAggregator,
        StremioAddonUseCase,
    )
    from cinestream.infrastructure.http.fetcher import HttpxFetcher
    from cinestream.infrastructure.persistence import (
        IdentifierSweeper,
        InMemoryIdentifierStore,
    )


class AppState(State):
    """Typed view of ``app.state``.

    ``config`` is set by ``create_app``; everything else is populated by
    ``lifespan`` at startup.
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    fetcher: HttpxFetcher

    # Process-wide identifier store (single shared instance)
    identifier_store: InMemoryIdentifierStore
    sweeper: IdentifierSweeper

    # Application Services
    aggregator: ContentAggregator
    stremio_uc: StremioAddonUseCase
