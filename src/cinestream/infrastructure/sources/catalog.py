"""Built-in content sites.

All five sites run WordPress-style themes (``/?s=`` search, post cards), so
they differ only in which card and heading classes their templates use.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import structlog

from cinestream.domain.entities.source import SourceDescriptor
from cinestream.domain.ports.fetcher import FetcherPort

from .scraping_source import ScrapingSource

log = structlog.get_logger(__name__)

_CARD_CONTAINERS = (".post-item", ".movie-item", ".item")
_CARD_TITLES = ("h2 a", ".title a", "h3 a")

VEGAMOVIES = SourceDescriptor(
    name="VegaMovies",
    base_url="https://vegamovies.nl",
    container_selectors=(".post-item", ".movie-item"),
    title_selectors=("h2 a", ".title a"),
)

MOVIESMOD = SourceDescriptor(
    name="MoviesMode",
    base_url="https://moviesmod.net",
    container_selectors=_CARD_CONTAINERS,
    title_selectors=_CARD_TITLES,
)

MOVIESDRIVE = SourceDescriptor(
    name="MoviesDrive",
    base_url="https://moviesdrive.net",
    container_selectors=_CARD_CONTAINERS,
    title_selectors=_CARD_TITLES,
)

BOLLYFLIX = SourceDescriptor(
    name="Bollyflix",
    base_url="https://bollyflix.net",
    container_selectors=_CARD_CONTAINERS,
    title_selectors=_CARD_TITLES,
)

MULTIMOVIES = SourceDescriptor(
    name="MultiMovies",
    base_url="https://multimovies.net",
    container_selectors=_CARD_CONTAINERS,
    title_selectors=_CARD_TITLES,
)

# Registration order = result order in merged searches.
BUILTIN_SOURCES: tuple[SourceDescriptor, ...] = (
    VEGAMOVIES,
    MOVIESMOD,
    MOVIESDRIVE,
    BOLLYFLIX,
    MULTIMOVIES,
)


def select_descriptors(
    descriptors: Iterable[SourceDescriptor] = BUILTIN_SOURCES,
    *,
    enabled: Iterable[str] | None = None,
    base_urls: Mapping[str, str] | None = None,
) -> list[SourceDescriptor]:
    """Filter *descriptors* by name and apply base URL overrides.

    Names match case-insensitively. Unknown names in *enabled* or
    *base_urls* are logged and ignored. Registration order is preserved.
    """
    available = list(descriptors)
    known = {d.name.lower() for d in available}

    wanted: set[str] | None = None
    if enabled is not None:
        wanted = {name.lower() for name in enabled}
        for name in sorted(wanted - known):
            log.warning("unknown_source_enabled", source=name)

    overrides = {name.lower(): url for name, url in (base_urls or {}).items()}
    for name in sorted(set(overrides) - known):
        log.warning("unknown_source_override", source=name)

    selected: list[SourceDescriptor] = []
    for d in available:
        if wanted is not None and d.name.lower() not in wanted:
            continue
        override = overrides.get(d.name.lower())
        selected.append(d.with_base_url(override) if override else d)
    return selected


def build_sources(
    fetcher: FetcherPort,
    descriptors: Iterable[SourceDescriptor] = BUILTIN_SOURCES,
) -> list[ScrapingSource]:
    """Instantiate one ``ScrapingSource`` per descriptor, sharing *fetcher*."""
    return [ScrapingSource(d, fetcher) for d in descriptors]
