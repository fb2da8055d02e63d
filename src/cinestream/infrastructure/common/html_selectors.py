"""CSS-selector-based HTML extraction with fallback chains.

Every helper accepts an ordered group of selectors: the first selector that
yields a non-empty value wins. Sources describe their markup as such groups,
so an extra wrapper ``<div>`` or a renamed class in one template revision
only needs one more selector in the chain.
"""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML string into a BeautifulSoup tree (lxml parser)."""
    return BeautifulSoup(html, "lxml")


def select_first_group(
    root: BeautifulSoup | Tag,
    selectors: Sequence[str],
) -> list[Tag]:
    """Return all matches of the first selector that matches anything."""
    for sel in selectors:
        items = root.select(sel)
        if items:
            return items
    return []


def first_text(element: Tag, selectors: Sequence[str], default: str = "") -> str:
    """Stripped text of the first match with non-empty text."""
    for sel in selectors:
        match = element.select_one(sel)
        if match is None:
            continue
        text = match.get_text(strip=True)
        if text:
            return text
    return default


def first_attr(
    element: Tag,
    selectors: Sequence[str],
    attrs: Sequence[str],
    default: str = "",
) -> str:
    """First non-empty attribute value across *selectors* x *attrs*.

    For each selector only its first match is inspected, trying *attrs* in
    order (``src`` before ``data-src`` for lazy-loaded images).
    """
    for sel in selectors:
        match = element.select_one(sel)
        if match is None:
            continue
        value = attr_value(match, attrs)
        if value:
            return value
    return default


def attr_value(element: Tag, attrs: Sequence[str]) -> str:
    """First non-blank value among *attrs* on *element* itself."""
    for attr in attrs:
        val = element.get(attr)
        if isinstance(val, list):  # multi-valued attributes such as class
            val = " ".join(val)
        if val and str(val).strip():
            return str(val).strip()
    return ""


def absolute_url(base_url: str, ref: str) -> str:
    """Resolve *ref* against *base_url*; absolute refs pass through."""
    if ref.startswith(("http://", "https://")):
        return ref
    return urljoin(base_url, ref)
