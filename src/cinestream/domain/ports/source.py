"""Port for a searchable content source."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cinestream.domain.entities.content import MediaKind, ResolvedStream, SearchResult


@runtime_checkable
class SourcePort(Protocol):
    """One content site: search it, resolve a detail page into streams.

    Both methods are best-effort and must not raise for scraping failures.
    """

    name: str

    async def search(
        self, query: str, media_kind: MediaKind = "movie"
    ) -> list[SearchResult]: ...

    async def resolve_streams(self, detail_url: str) -> list[ResolvedStream]: ...
