"""Heuristic media reference extraction from arbitrary HTML.

Rules run in a fixed order and their matches are concatenated rule by rule:

1. ``iframe`` embeds (``src``, falling back to ``data-src``)
2. ``video source`` tags and anchors linking ``.mp4`` / ``.m3u8`` files
3. ``div`` containers exposing ``data-src`` / ``data-url``

The order only affects the order of the returned candidates. Formats and
quality labels are hints: the ``720p`` given to direct references is a
placeholder, not a property of the file.
"""

from __future__ import annotations

import structlog
from bs4 import BeautifulSoup

from cinestream.domain.entities.content import (
    UNKNOWN_QUALITY,
    MediaCandidate,
    MediaFormat,
)
from cinestream.infrastructure.common.html_selectors import (
    absolute_url,
    attr_value,
    parse_html,
)

log = structlog.get_logger(__name__)

PLACEHOLDER_QUALITY = "720p"

_IFRAME_SELECTOR = "iframe"
_IFRAME_ATTRS = ("src", "data-src")

_DIRECT_SELECTOR = 'video source, a[href*=".mp4"], a[href*=".m3u8"]'
_DIRECT_ATTRS = ("href", "src")

_DATA_EMBED_SELECTOR = "div[data-src], div[data-url]"
_DATA_EMBED_ATTRS = ("data-src", "data-url")


def classify_direct(ref: str) -> MediaFormat | None:
    """``.m3u8`` -> adaptive playlist, ``.mp4`` -> direct file, else None."""
    lowered = ref.lower()
    if ".m3u8" in lowered:
        return MediaFormat.ADAPTIVE_PLAYLIST
    if ".mp4" in lowered:
        return MediaFormat.DIRECT_FILE
    return None


def _iframe_candidates(soup: BeautifulSoup, base_url: str) -> list[MediaCandidate]:
    out: list[MediaCandidate] = []
    for tag in soup.select(_IFRAME_SELECTOR):
        ref = attr_value(tag, _IFRAME_ATTRS)
        if ref:
            out.append(
                MediaCandidate(
                    url=absolute_url(base_url, ref),
                    media_format=MediaFormat.EMBED,
                    quality_label=UNKNOWN_QUALITY,
                )
            )
    return out


def _direct_candidates(soup: BeautifulSoup, base_url: str) -> list[MediaCandidate]:
    out: list[MediaCandidate] = []
    for tag in soup.select(_DIRECT_SELECTOR):
        ref = attr_value(tag, _DIRECT_ATTRS)
        if not ref:
            continue
        media_format = classify_direct(ref)
        if media_format is None:
            # e.g. <video><source src="clip.webm">: not a format we play
            continue
        out.append(
            MediaCandidate(
                url=absolute_url(base_url, ref),
                media_format=media_format,
                quality_label=PLACEHOLDER_QUALITY,
            )
        )
    return out


def _data_embed_candidates(
    soup: BeautifulSoup, base_url: str
) -> list[MediaCandidate]:
    out: list[MediaCandidate] = []
    for tag in soup.select(_DATA_EMBED_SELECTOR):
        ref = attr_value(tag, _DATA_EMBED_ATTRS)
        if ref:
            out.append(
                MediaCandidate(
                    url=absolute_url(base_url, ref),
                    media_format=MediaFormat.EMBED,
                    quality_label=UNKNOWN_QUALITY,
                )
            )
    return out


def extract_media_candidates(html: str, base_url: str) -> list[MediaCandidate]:
    """Find candidate media references in *html*.

    Relative references are resolved against *base_url*. Never raises:
    unparseable input is logged and yields an empty list.
    """
    if not html or not html.strip():
        return []

    try:
        soup = parse_html(html)
        return [
            *_iframe_candidates(soup, base_url),
            *_direct_candidates(soup, base_url),
            *_data_embed_candidates(soup, base_url),
        ]
    except Exception:  # noqa: BLE001
        log.warning("media_extraction_failed", base_url=base_url, exc_info=True)
        return []
