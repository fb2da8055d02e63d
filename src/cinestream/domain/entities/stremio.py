"""Domain entities for the Stremio addon protocol.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass

from .content import MediaKind


@dataclass(frozen=True)
class StremioStream:
    """Stremio protocol Stream object (JSON-serializable)."""

    name: str  # e.g. "VegaMovies - 720p"
    title: str  # e.g. "VegaMovies - M3U8"
    url: str  # Direct stream URL


@dataclass(frozen=True)
class StremioMetaPreview:
    """Stremio catalog item (MetaPreview object)."""

    id: str  # Identifier from the identifier store, e.g. "cs_vegamovies_..."
    type: MediaKind
    name: str
    poster: str = ""
    description: str = ""


@dataclass(frozen=True)
class StremioMeta:
    """Stremio meta object for a stored search result."""

    id: str
    type: MediaKind
    name: str
    description: str = ""
