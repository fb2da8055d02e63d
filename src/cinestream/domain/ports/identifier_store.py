"""Port for the identifier -> source URL bridge."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from cinestream.domain.entities.content import StoredEntry


@runtime_checkable
class IdentifierStorePort(Protocol):
    """Synchronous, process-wide, time-bounded identifier map."""

    def store(self, url: str, source_name: str, title: str) -> str: ...
    def get(self, identifier: str) -> str | None: ...
    def get_entry(self, identifier: str) -> StoredEntry | None: ...
    def get_id_by_url(self, url: str) -> str | None: ...
    def entries(self) -> list[StoredEntry]: ...
    def sweep(self, max_age: float, now: float | None = None) -> int: ...
    def size(self) -> int: ...
    def clear(self) -> None: ...
