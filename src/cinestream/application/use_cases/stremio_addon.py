"""Stremio addon use case: catalog, meta and stream handlers.

Plain async functions returning values; "nothing found" is an empty list or
``None``, never an exception.
"""

from __future__ import annotations

from typing import Protocol

import structlog

from cinestream.domain.entities.content import (
    CatalogItem,
    MediaKind,
    ResolvedStream,
    StoredEntry,
)
from cinestream.domain.entities.stremio import (
    StremioMeta,
    StremioMetaPreview,
    StremioStream,
)

log = structlog.get_logger(__name__)


class _Aggregator(Protocol):
    """What the addon needs from ``ContentAggregator``."""

    async def search(self, query: str, media_kind: MediaKind = ...) -> list[CatalogItem]: ...

    def get_entry(self, identifier: str) -> StoredEntry | None: ...

    async def resolve_streams_for_identifier(
        self, identifier: str
    ) -> list[ResolvedStream]: ...


def _to_preview(item: CatalogItem, media_kind: MediaKind) -> StremioMetaPreview:
    r = item.result
    return StremioMetaPreview(
        id=item.id,
        type=media_kind,
        name=r.title,
        poster=r.poster_url or "",
        description=f"From {r.source_name}",
    )


def _to_stremio_stream(stream: ResolvedStream, source_name: str) -> StremioStream:
    return StremioStream(
        name=f"{source_name} - {stream.quality_label}",
        title=stream.display_title,
        url=stream.play_url,
    )


class StremioAddonUseCase:
    def __init__(self, aggregator: _Aggregator) -> None:
        self._aggregator = aggregator

    async def catalog(
        self,
        media_kind: MediaKind,
        search: str | None = None,
        skip: int = 0,
    ) -> list[StremioMetaPreview]:
        """Search-backed catalog. Without a search term the catalog is empty."""
        if not search or not search.strip():
            return []

        try:
            items = await self._aggregator.search(search, media_kind)
        except Exception:
            log.warning(
                "stremio_catalog_search_error",
                media_kind=media_kind,
                query=search,
                exc_info=True,
            )
            return []

        previews = [_to_preview(item, media_kind) for item in items]
        return previews[max(skip, 0):]

    async def meta(self, media_kind: MediaKind, identifier: str) -> StremioMeta | None:
        entry = self._aggregator.get_entry(identifier)
        if entry is None:
            return None
        return StremioMeta(
            id=entry.id,
            type=media_kind,
            name=entry.title,
            description=f"Content from {entry.source_name}",
        )

    async def streams(self, identifier: str) -> list[StremioStream]:
        entry = self._aggregator.get_entry(identifier)
        if entry is None:
            return []

        try:
            resolved = await self._aggregator.resolve_streams_for_identifier(
                identifier
            )
        except Exception:
            log.warning("stremio_stream_error", id=identifier, exc_info=True)
            return []

        return [_to_stremio_stream(s, entry.source_name) for s in resolved]
