"""Domain entities for content discovery and stream resolution.

Pure value objects without framework dependencies or I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

MediaKind = Literal["movie", "series"]

UNKNOWN_QUALITY = "Unknown"


class MediaFormat(str, Enum):
    """How a media reference is played back."""

    DIRECT_FILE = "direct-file"  # .mp4 and friends
    ADAPTIVE_PLAYLIST = "adaptive-playlist"  # .m3u8 (HLS)
    EMBED = "embed"  # player page that wraps the actual file

    @property
    def label(self) -> str:
        """Short label shown in stream titles."""
        return _FORMAT_LABELS[self]


_FORMAT_LABELS: dict[MediaFormat, str] = {
    MediaFormat.DIRECT_FILE: "MP4",
    MediaFormat.ADAPTIVE_PLAYLIST: "M3U8",
    MediaFormat.EMBED: "EMBED",
}


@dataclass(frozen=True)
class MediaCandidate:
    """An unverified media reference found in an HTML page."""

    url: str
    media_format: MediaFormat
    quality_label: str = UNKNOWN_QUALITY

    @property
    def is_playable(self) -> bool:
        return self.media_format is not MediaFormat.EMBED


@dataclass(frozen=True)
class SearchResult:
    """A search hit produced by a Source (no identity until stored)."""

    title: str
    detail_url: str
    source_name: str
    media_kind: MediaKind = "movie"
    poster_url: str | None = None


@dataclass(frozen=True)
class StoredEntry:
    """Identifier-store record bridging the browse and play phases."""

    id: str
    source_url: str
    source_name: str
    title: str
    created_at: float  # epoch seconds

    def age(self, now: float) -> float:
        return now - self.created_at


@dataclass(frozen=True)
class CatalogItem:
    """A search result together with the identifier assigned to it."""

    id: str
    result: SearchResult


@dataclass(frozen=True)
class ResolvedStream:
    """A playable stream URL with best-effort annotations.

    ``media_format`` and ``quality_label`` are hints scraped from markup,
    not verified properties of the file behind ``play_url``.
    """

    play_url: str
    media_format: MediaFormat
    display_title: str
    quality_label: str = UNKNOWN_QUALITY
