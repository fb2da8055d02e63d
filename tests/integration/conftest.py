"""Shared fixtures for integration tests.

These tests wire real components (HttpxFetcher, ScrapingSource,
InMemoryIdentifierStore, the FastAPI app) with mocked HTTP via respx.
"""

from __future__ import annotations

import pytest
import respx


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop CINESTREAM_* variables leaking in from the developer shell."""
    import os

    for key in list(os.environ):
        if key.startswith("CINESTREAM_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def respx_mock() -> respx.MockRouter:
    """Explicit respx mock router for request interception."""
    with respx.mock(assert_all_called=False) as router:
        yield router
