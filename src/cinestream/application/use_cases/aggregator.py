"""Fan-out search across sources and identifier-based stream resolution.

query -> every source (isolated) -> merged, capped results -> identifiers
identifier -> stored entry -> owning source -> streams
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence

import structlog

from cinestream.domain.entities.content import (
    CatalogItem,
    MediaKind,
    ResolvedStream,
    SearchResult,
    StoredEntry,
)
from cinestream.domain.exceptions import UnknownSource
from cinestream.domain.ports.identifier_store import IdentifierStorePort
from cinestream.domain.ports.source import SourcePort

log = structlog.get_logger(__name__)

DEFAULT_MAX_RESULTS = 20


class ContentAggregator:
    """Owns the registered sources and the shared identifier store.

    Never raises for scraping failures or lookup misses: a failing source
    contributes nothing, an unknown identifier resolves to no streams.
    """

    def __init__(
        self,
        sources: Sequence[SourcePort],
        store: IdentifierStorePort,
        *,
        max_results: int = DEFAULT_MAX_RESULTS,
        concurrent: bool = True,
        source_timeout: float | None = None,
    ) -> None:
        self._sources = list(sources)
        self._store = store
        self._max_results = max_results
        self._concurrent = concurrent
        self._source_timeout = source_timeout

    @property
    def sources(self) -> list[SourcePort]:
        """Registered sources in registration order."""
        return list(self._sources)

    @property
    def store(self) -> IdentifierStorePort:
        return self._store

    def get_source(self, name: str) -> SourcePort | None:
        """Case-insensitive exact name match."""
        wanted = name.lower()
        for source in self._sources:
            if source.name.lower() == wanted:
                return source
        return None

    def require_source(self, name: str) -> SourcePort:
        source = self.get_source(name)
        if source is None:
            raise UnknownSource(name)
        return source

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def _search_one(
        self, source: SourcePort, query: str, media_kind: MediaKind
    ) -> list[SearchResult]:
        start = time.perf_counter()
        try:
            if self._source_timeout is not None:
                results = await asyncio.wait_for(
                    source.search(query, media_kind), timeout=self._source_timeout
                )
            else:
                results = await source.search(query, media_kind)
        except asyncio.TimeoutError:
            log.warning(
                "aggregator_source_timeout",
                source=source.name,
                query=query,
                timeout=self._source_timeout,
            )
            return []
        except Exception:
            log.warning(
                "aggregator_source_failed",
                source=source.name,
                query=query,
                exc_info=True,
            )
            return []

        log.debug(
            "aggregator_source_done",
            source=source.name,
            results=len(results),
            duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
        )
        return list(results)

    async def search_all(
        self, query: str, media_kind: MediaKind = "movie"
    ) -> list[SearchResult]:
        """Search every source; concatenate in registration order, cap."""
        if not query.strip() or not self._sources:
            return []

        if self._concurrent:
            per_source = await asyncio.gather(
                *(self._search_one(s, query, media_kind) for s in self._sources)
            )
        else:
            per_source = [
                await self._search_one(s, query, media_kind) for s in self._sources
            ]

        merged = [r for results in per_source for r in results]
        log.info(
            "aggregator_search_done",
            query=query,
            media_kind=media_kind,
            sources=len(self._sources),
            total=len(merged),
            returned=min(len(merged), self._max_results),
        )
        return merged[: self._max_results]

    async def search(
        self, query: str, media_kind: MediaKind = "movie"
    ) -> list[CatalogItem]:
        """``search_all`` plus an identifier for every result."""
        results = await self.search_all(query, media_kind)
        return [
            CatalogItem(
                id=self._store.store(r.detail_url, r.source_name, r.title),
                result=r,
            )
            for r in results
        ]

    # ------------------------------------------------------------------
    # Lookup / resolution
    # ------------------------------------------------------------------

    def get_entry(self, identifier: str) -> StoredEntry | None:
        return self._store.get_entry(identifier)

    async def resolve_streams_for_identifier(
        self, identifier: str
    ) -> list[ResolvedStream]:
        entry = self._store.get_entry(identifier)
        if entry is None:
            log.info("aggregator_unknown_identifier", id=identifier)
            return []

        source = self.get_source(entry.source_name)
        if source is None:
            log.warning(
                "aggregator_unknown_source",
                id=identifier,
                source=entry.source_name,
            )
            return []

        try:
            streams = await source.resolve_streams(entry.source_url)
        except Exception:
            log.warning(
                "aggregator_resolve_failed",
                id=identifier,
                source=source.name,
                exc_info=True,
            )
            return []

        log.info(
            "aggregator_streams_resolved",
            id=identifier,
            source=source.name,
            streams=len(streams),
        )
        return list(streams)
