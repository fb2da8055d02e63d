"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "cinestream",
    "environment": "dev",
    "http": {
        "timeout_seconds": 15.0,
        "max_redirects": 5,
        "user_agent": DEFAULT_USER_AGENT,
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "store": {
        "max_age_seconds": 24 * 60 * 60,
        "sweep_interval_seconds": 60 * 60,
    },
    "search": {
        "max_results": 20,
        "concurrent": True,
        "source_timeout_seconds": 30.0,
    },
    "sources": {
        "enabled": None,  # None = all built-in sources
        "base_urls": {},
    },
}
