"""Port for the network fetch primitive."""

from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class FetcherPort(Protocol):
    """Async HTTP GET returning the document text.

    Implementations raise ``NetworkError`` on any failure.
    """

    async def fetch(
        self, url: str, *, headers: Mapping[str, str] | None = None
    ) -> str: ...
