"""Expiry reaper: periodically hard-deletes expired temporary messages."""
from __future__ import annotations

import argparse
import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from typing import Callable

from dm_service.application.ports.clock import Clock, SystemClock
from dm_service.application.uow import UnitOfWork
from dm_service.services import expiry_service

logger = logging.getLogger(__name__)

UoWFactory = Callable[[], AbstractAsyncContextManager[UnitOfWork]]


class ExpiryReaper:
    """Ticker task around expiry_service.reap_expired.

    Reads already hide expired messages, so a missed or failed sweep only
    delays storage reclamation.
    """

    def __init__(
        self,
        uow_factory: UoWFactory,
        interval_seconds: float,
        clock: Clock | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._interval = interval_seconds
        self._clock = clock or SystemClock()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        self._task = asyncio.create_task(self._loop(), name="expiry-reaper")
        logger.info("Expiry reaper started (interval=%.0fs)", self._interval)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Expiry reaper stopped")

    async def tick(self) -> int | None:
        """Run one sweep. Returns the removed count, or None if the sweep failed."""
        try:
            async with self._uow_factory() as uow:
                return await expiry_service.reap_expired(uow, self._clock)
        except Exception:
            logger.exception("Expiry sweep failed, retrying in %.0fs", self._interval)
            return None

    async def _loop(self) -> None:
        while True:
            await self.tick()
            await asyncio.sleep(self._interval)


async def run_reaper(once: bool = False) -> None:
    from dm_service.config import settings
    from dm_service.infrastructure.db.uow import sql_uow

    reaper = ExpiryReaper(sql_uow, settings.REAPER_INTERVAL_SECONDS)
    if once:
        await reaper.tick()
        return
    await reaper.start()
    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await reaper.stop()


def main() -> None:
    from dm_service.log import configure_logging

    parser = argparse.ArgumentParser(description="Purge expired temporary messages")
    parser.add_argument("--once", action="store_true", help="run a single sweep and exit")
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run_reaper(once=args.once))


if __name__ == "__main__":
    main()
