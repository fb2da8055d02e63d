from .content import (
    UNKNOWN_QUALITY,
    CatalogItem,
    MediaCandidate,
    MediaFormat,
    MediaKind,
    ResolvedStream,
    SearchResult,
    StoredEntry,
)
from .source import SourceDescriptor, source_key
from .stremio import StremioMeta, StremioMetaPreview, StremioStream

__all__ = [
    "UNKNOWN_QUALITY",
    "CatalogItem",
    "MediaCandidate",
    "MediaFormat",
    "MediaKind",
    "ResolvedStream",
    "SearchResult",
    "SourceDescriptor",
    "StoredEntry",
    "StremioMeta",
    "StremioMetaPreview",
    "StremioStream",
    "source_key",
]
