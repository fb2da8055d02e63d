from __future__ import annotations

from .catalog import BUILTIN_SOURCES, build_sources, select_descriptors
from .scraping_source import ScrapingSource

__all__ = [
    "BUILTIN_SOURCES",
    "ScrapingSource",
    "build_sources",
    "select_descriptors",
]
