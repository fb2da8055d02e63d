"""Common infrastructure utilities."""

from __future__ import annotations

from .html_selectors import (
    absolute_url,
    attr_value,
    first_attr,
    first_text,
    parse_html,
    select_first_group,
)

__all__ = [
    "absolute_url",
    "attr_value",
    "first_attr",
    "first_text",
    "parse_html",
    "select_first_group",
]
