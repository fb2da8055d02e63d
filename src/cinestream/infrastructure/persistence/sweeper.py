"""Background sweeper evicting expired identifiers on a fixed interval."""

from __future__ import annotations

import asyncio
from contextlib import suppress

import structlog

from cinestream.domain.ports.identifier_store import IdentifierStorePort

log = structlog.get_logger(__name__)


class IdentifierSweeper:
    """Runs ``store.sweep(max_age)`` every *interval_seconds*.

    Owned by the app lifespan: :meth:`start` at startup, :meth:`stop` at
    teardown. Cancellation lands in the sleep, so no sweep is cut short.
    """

    def __init__(
        self,
        store: IdentifierStorePort,
        *,
        max_age_seconds: float = 86400.0,
        interval_seconds: float = 3600.0,
    ) -> None:
        self._store = store
        self._max_age = max_age_seconds
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        removed = self._store.sweep(self._max_age)
        log.debug(
            "identifier_sweep_done",
            removed=removed,
            remaining=self._store.size(),
        )
        return removed

    async def run_forever(self) -> None:
        """Main loop: sleep, sweep, repeat."""
        log.info(
            "identifier_sweeper_started",
            interval_seconds=self._interval,
            max_age_seconds=self._max_age,
        )
        try:
            while True:
                await asyncio.sleep(self._interval)
                try:
                    self.run_once()
                except Exception:
                    log.error("identifier_sweep_error", exc_info=True)
        except asyncio.CancelledError:
            log.info("identifier_sweeper_cancelled")
            raise

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
