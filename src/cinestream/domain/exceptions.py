"""CineStream exceptions.

Only ``SourceDescriptorError`` is meant to be fatal. Everything else describes
routine scraping outcomes that callers log and degrade to empty results.
"""

from __future__ import annotations


class CineStreamError(Exception):
    """Base class for all CineStream errors."""


class NetworkError(CineStreamError):
    """Raised by the fetcher on timeout, connection failure, non-2xx or redirect overflow."""

    def __init__(self, url: str, reason: str, status_code: int | None = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"{reason}: {url}")


class ExtractionMiss(CineStreamError):
    """No media candidates were found on a page.

    Not an error condition: extractors return an empty list. Sources raise it
    internally and log it at the source boundary.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"no media candidates found: {url}")


class UnknownIdentifier(CineStreamError):
    """Raised by strict identifier lookups when the id is not stored."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"unknown identifier: {identifier}")


class UnknownSource(CineStreamError):
    """Raised by strict source lookups when no registered source matches."""

    def __init__(self, source_name: str) -> None:
        self.source_name = source_name
        super().__init__(f"unknown source: {source_name}")


class SourceDescriptorError(CineStreamError):
    """Raised when a source descriptor is malformed (programming error)."""
