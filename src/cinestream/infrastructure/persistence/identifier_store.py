"""In-memory identifier store with time-based eviction.

Bridges the stateless protocol's browse and play phases: search results are
stored under an opaque identifier, and a later stream request hands the
identifier back to look up the source URL.

Entries expire by age (``sweep``), not by access. Nothing survives a
process restart.
"""

from __future__ import annotations

import hashlib
import threading
import time
from collections.abc import Callable

import structlog

from cinestream.domain.entities.content import StoredEntry
from cinestream.domain.entities.source import source_key
from cinestream.domain.exceptions import UnknownIdentifier

log = structlog.get_logger(__name__)

# Must match the manifest's idPrefixes so clients route ids back to us.
ID_PREFIX = "cs"

_DIGEST_LENGTH = 24


def make_identifier(source_name: str, url: str, title: str) -> str:
    """Deterministic identifier for ``(source_name, url, title)``.

    ``cs_<source key>_<24 hex chars of sha256>``. Changing any input changes
    the digest; the unit separator keeps ``("a", "bc")`` and ``("ab", "c")``
    apart.
    """
    payload = "\x1f".join((source_name, url, title)).encode("utf-8")
    digest = hashlib.sha256(payload).hexdigest()[:_DIGEST_LENGTH]
    key = source_key(source_name) or "source"
    return f"{ID_PREFIX}_{key}_{digest}"


class InMemoryIdentifierStore:
    """Bidirectional, time-bounded ``id <-> source URL`` map.

    One instance is shared by the whole process (created in the composition
    root and injected). Every read and write holds the lock for a single map
    mutation, so a reader never sees an entry whose forward and reverse
    mappings disagree.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, StoredEntry] = {}
        self._ids_by_url: dict[str, str] = {}

    def store(self, url: str, source_name: str, title: str) -> str:
        """Store a search result and return its identifier (idempotent)."""
        identifier = make_identifier(source_name, url, title)
        entry = StoredEntry(
            id=identifier,
            source_url=url,
            source_name=source_name,
            title=title,
            created_at=self._clock(),
        )
        with self._lock:
            self._entries[identifier] = entry
            self._ids_by_url[url] = identifier
        return identifier

    def get(self, identifier: str) -> str | None:
        """Source URL for *identifier*, or None."""
        entry = self.get_entry(identifier)
        return entry.source_url if entry is not None else None

    def get_entry(self, identifier: str) -> StoredEntry | None:
        with self._lock:
            return self._entries.get(identifier)

    def require(self, identifier: str) -> StoredEntry:
        """Like ``get_entry`` but raises ``UnknownIdentifier`` on a miss."""
        entry = self.get_entry(identifier)
        if entry is None:
            raise UnknownIdentifier(identifier)
        return entry

    def get_id_by_url(self, url: str) -> str | None:
        with self._lock:
            return self._ids_by_url.get(url)

    def entries(self) -> list[StoredEntry]:
        """Snapshot of all stored entries (diagnostics)."""
        with self._lock:
            return list(self._entries.values())

    def sweep(self, max_age: float, now: float | None = None) -> int:
        """Evict entries older than *max_age* seconds; return how many.

        An entry exactly *max_age* old is kept. Candidates are collected from
        a snapshot and evicted one lock acquisition at a time, so concurrent
        requests are never blocked for the whole sweep.
        """
        if now is None:
            now = self._clock()

        expired = [e for e in self.entries() if e.age(now) > max_age]
        removed = 0
        for stale in expired:
            with self._lock:
                current = self._entries.get(stale.id)
                # Re-stored since the snapshot -> fresh created_at, keep it.
                if current is None or current.age(now) <= max_age:
                    continue
                del self._entries[stale.id]
                if self._ids_by_url.get(current.source_url) == stale.id:
                    del self._ids_by_url[current.source_url]
                removed += 1

        if removed:
            log.info(
                "identifier_store_swept",
                removed=removed,
                remaining=self.size(),
                max_age=max_age,
            )
        return removed

    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._ids_by_url.clear()
