from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Iterable

from kinote.domain.ports.clock import ClockPort
from kinote.domain.ports.expiring_store import ExpiringStorePort

logger = logging.getLogger(__name__)


class CleanupScheduler:
    """
    Sweeps expired entries out of the pending-registration stores on a fixed
    period, whether or not anyone reads or writes them.

    The sweep runs as a background asyncio task: it never keeps the process
    alive by itself and is cancelled when the owning loop shuts down.
    """

    def __init__(
        self,
        stores: Iterable[ExpiringStorePort],
        *,
        clock: ClockPort,
        interval_seconds: float = 60.0,
    ) -> None:
        self.stores = tuple(stores)
        self.clock = clock
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> bool:
        """
        Schedule the periodic sweep on the running loop.
        Returns False (and does nothing) if it is already running.
        """
        if self.is_running:
            return False
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(
            self.run_forever(), name="kinote-registration-cleanup"
        )
        logger.info(
            "registration cleanup started",
            extra={"interval_s": self.interval_seconds},
        )
        return True

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        logger.info("registration cleanup stopped")

    async def run_forever(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.sweep_once()

    def sweep_once(self) -> int:
        """
        Single tick: evict every entry whose deadline is strictly before now.
        Never raises; returns how many entries were removed in total.
        """
        try:
            now = self.clock.now()
        except Exception:  # noqa: BLE001
            logger.exception("cleanup tick skipped: clock unavailable")
            return 0

        total = 0
        for store in self.stores:
            try:
                removed = store.evict_expired(now)
            except Exception:  # noqa: BLE001
                logger.exception("cleanup failed", extra={"store": store.name})
                continue
            if removed:
                logger.info(
                    "evicted expired entries",
                    extra={"store": store.name, "count": removed},
                )
                total += removed
        return total
