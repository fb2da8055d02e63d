"""Shared test fixtures for CineStream test suite."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from cinestream.domain.entities import SearchResult, SourceDescriptor
from cinestream.domain.exceptions import NetworkError
from cinestream.infrastructure.persistence import InMemoryIdentifierStore

# ---------------------------------------------------------------------------
# Domain entity fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def search_result() -> SearchResult:
    """Minimal valid SearchResult."""
    return SearchResult(
        title="Iron Man (2008)",
        detail_url="https://vegamovies.test/iron-man-2008/",
        source_name="VegaMovies",
        media_kind="movie",
        poster_url="https://vegamovies.test/wp-content/iron-man.jpg",
    )


@pytest.fixture()
def descriptor() -> SourceDescriptor:
    """Descriptor for a fake WordPress-style site."""
    return SourceDescriptor(
        name="TestSite",
        base_url="https://site.test",
        container_selectors=(".post-item", ".movie-item"),
        title_selectors=("h2 a", ".title a"),
    )


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeClock:
    """Controllable epoch-seconds clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """FetcherPort serving canned pages and recording every call.

    Unknown URLs raise ``NetworkError`` like a 404 would.
    """

    def __init__(self, pages: Mapping[str, str | Exception] | None = None) -> None:
        self.pages: dict[str, str | Exception] = dict(pages or {})
        self.calls: list[str] = []

    async def fetch(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> str:
        self.calls.append(url)
        page = self.pages.get(url)
        if page is None:
            raise NetworkError(url, "HTTP 404", status_code=404)
        if isinstance(page, Exception):
            raise page
        return page


class FakeSource:
    """Minimal SourcePort with canned results."""

    def __init__(
        self,
        name: str,
        results: list[SearchResult] | None = None,
        *,
        error: Exception | None = None,
        streams: list[Any] | None = None,
    ) -> None:
        self.name = name
        self._results = results or []
        self._error = error
        self._streams = streams or []
        self.search_calls: list[tuple[str, str]] = []
        self.resolve_calls: list[str] = []

    async def search(self, query: str, media_kind: str = "movie") -> list[SearchResult]:
        self.search_calls.append((query, media_kind))
        if self._error is not None:
            raise self._error
        return list(self._results)

    async def resolve_streams(self, detail_url: str) -> list[Any]:
        self.resolve_calls.append(detail_url)
        return list(self._streams)


def make_results(source_name: str, count: int) -> list[SearchResult]:
    return [
        SearchResult(
            title=f"{source_name} Movie {i}",
            detail_url=f"https://{source_name.lower()}.test/movie-{i}/",
            source_name=source_name,
        )
        for i in range(count)
    ]


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store(clock: FakeClock) -> InMemoryIdentifierStore:
    """Isolated identifier store driven by the fake clock."""
    return InMemoryIdentifierStore(clock=clock)


@pytest.fixture()
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()
