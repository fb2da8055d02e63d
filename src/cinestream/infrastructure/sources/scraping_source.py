"""Descriptor-driven scraping source.

One algorithm serves every site; per-site differences live in
``SourceDescriptor`` data (see ``catalog.py``).
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from cinestream.domain.entities.content import (
    MediaCandidate,
    MediaFormat,
    MediaKind,
    ResolvedStream,
    SearchResult,
)
from cinestream.domain.entities.source import SourceDescriptor
from cinestream.domain.exceptions import ExtractionMiss, NetworkError
from cinestream.domain.ports.fetcher import FetcherPort
from cinestream.infrastructure.common.html_selectors import (
    absolute_url,
    first_attr,
    first_text,
    parse_html,
    select_first_group,
)
from cinestream.infrastructure.extraction.media_extractor import (
    extract_media_candidates,
)

ExtractFn = Callable[[str, str], list[MediaCandidate]]


class ScrapingSource:
    """Search a content site and resolve its detail pages into streams.

    Both public methods are best-effort: every failure is logged and turned
    into an empty list, nothing propagates to the caller.
    """

    def __init__(
        self,
        descriptor: SourceDescriptor,
        fetcher: FetcherPort,
        *,
        extract: ExtractFn = extract_media_candidates,
    ) -> None:
        self.descriptor = descriptor
        self._fetcher = fetcher
        self._extract = extract
        self._log = structlog.get_logger(__name__).bind(source=descriptor.name)

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def base_url(self) -> str:
        return self.descriptor.base_url

    def __repr__(self) -> str:
        return f"ScrapingSource(name={self.name!r}, base_url={self.base_url!r})"

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search(
        self, query: str, media_kind: MediaKind = "movie"
    ) -> list[SearchResult]:
        if not query.strip():
            return []

        url = self.descriptor.search_url(query)
        try:
            html = await self._fetcher.fetch(url)
            results = self._parse_search_page(html, media_kind)
        except NetworkError as exc:
            self._log.warning(
                "source_search_failed", query=query, url=url, reason=exc.reason
            )
            return []
        except Exception:  # noqa: BLE001
            self._log.warning(
                "source_search_failed", query=query, url=url, exc_info=True
            )
            return []

        self._log.info("source_search_done", query=query, results=len(results))
        return results

    def _parse_search_page(
        self, html: str, media_kind: MediaKind
    ) -> list[SearchResult]:
        d = self.descriptor
        soup = parse_html(html)
        results: list[SearchResult] = []

        for container in select_first_group(soup, d.container_selectors):
            title = first_text(container, d.title_selectors)
            link = first_attr(container, d.link_selectors, ("href",))
            if not title or not link:
                continue

            poster = first_attr(container, d.poster_selectors, d.poster_attrs)
            results.append(
                SearchResult(
                    title=title,
                    detail_url=absolute_url(d.base_url, link),
                    source_name=d.name,
                    media_kind=media_kind,
                    poster_url=absolute_url(d.base_url, poster) if poster else None,
                )
            )
            if len(results) >= d.max_results:
                break

        return results

    # ------------------------------------------------------------------
    # Stream resolution
    # ------------------------------------------------------------------

    async def resolve_streams(self, detail_url: str) -> list[ResolvedStream]:
        try:
            html = await self._fetcher.fetch(detail_url)
        except NetworkError as exc:
            self._log.warning(
                "source_detail_failed", url=detail_url, reason=exc.reason
            )
            return []
        except Exception:  # noqa: BLE001
            self._log.warning("source_detail_failed", url=detail_url, exc_info=True)
            return []

        try:
            candidates = self._detail_candidates(html, detail_url)
        except ExtractionMiss as miss:
            self._log.debug("extraction_miss", url=miss.url)
            return []

        playable: list[MediaCandidate] = []
        for candidate in candidates:
            if candidate.is_playable:
                playable.append(candidate)
            else:
                playable.extend(await self._embed_hop(candidate.url))

        streams = self._to_streams(playable)
        self._log.info(
            "source_streams_resolved",
            url=detail_url,
            candidates=len(candidates),
            streams=len(streams),
        )
        return streams

    def _detail_candidates(self, html: str, detail_url: str) -> list[MediaCandidate]:
        # Detail pages resolve relative references against the site root.
        candidates = self._extract(html, self.base_url)
        if not candidates:
            raise ExtractionMiss(detail_url)
        return candidates

    async def _embed_hop(self, embed_url: str) -> list[MediaCandidate]:
        """Fetch an embed page once and keep only playable candidates.

        Embeds nested inside the embed page are dropped: depth is fixed at 1.
        """
        try:
            html = await self._fetcher.fetch(embed_url)
        except NetworkError as exc:
            self._log.warning("embed_hop_failed", url=embed_url, reason=exc.reason)
            return []
        except Exception:  # noqa: BLE001
            self._log.warning("embed_hop_failed", url=embed_url, exc_info=True)
            return []

        return [c for c in self._extract(html, embed_url) if c.is_playable]

    def _to_streams(self, candidates: list[MediaCandidate]) -> list[ResolvedStream]:
        return [
            ResolvedStream(
                play_url=c.url,
                media_format=c.media_format,
                quality_label=c.quality_label,
                display_title=_display_title(self.name, c.media_format),
            )
            for c in candidates
        ]


def _display_title(source_name: str, media_format: MediaFormat) -> str:
    return f"{source_name} - {media_format.label}"
