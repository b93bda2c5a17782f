# dex_api/workers.py

import asyncio
import logging
from contextlib import suppress
from typing import Optional

from dex_api.config import CACHE_CHECK_PERIOD_SECONDS, COIN_LIST_REFRESH_SECONDS
from dex_api.services.cache_manager import CacheManager, cache_manager
from dex_api.services.coin_registry import CoinRegistry, coin_registry

logger = logging.getLogger(__name__)


class PeriodicWorker:
    """Background task that runs one cycle every interval_seconds until stopped."""

    name = "periodic-worker"

    def __init__(self, interval_seconds: float, run_immediately: bool = True) -> None:
        self.interval_seconds = interval_seconds
        self.run_immediately = run_immediately
        self._task: Optional[asyncio.Task] = None
        self._stop: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is not None:
            return  # Already started
        # Created here so the event belongs to the loop that runs the worker
        self._stop = asyncio.Event()
        logger.info("Starting %s (interval=%s sec)...", self.name, self.interval_seconds)
        self._task = asyncio.create_task(self._run(), name=self.name)

    async def stop(self) -> None:
        """Signal the worker to stop and wait for it to finish."""
        if self._task is None:
            return
        logger.info("Stopping %s...", self.name)
        self._stop.set()
        try:
            await asyncio.wait_for(self._task, timeout=5)
        except asyncio.TimeoutError:
            logger.warning("%s did not stop in time; cancelling...", self.name)
            self._task.cancel()
            with suppress(asyncio.CancelledError):
                await self._task
        finally:
            self._task = None
        logger.info("%s stopped.", self.name)

    async def _run(self) -> None:
        skip_first = not self.run_immediately
        try:
            while not self._stop.is_set():
                if not skip_first:
                    try:
                        await self.run_once()
                    except Exception:
                        logger.exception("%s cycle failed with an exception.", self.name)
                skip_first = False
                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
                except asyncio.TimeoutError:
                    pass
        finally:
            logger.info("%s loop exiting.", self.name)

    async def run_once(self) -> None:
        raise NotImplementedError


class CacheSweeper(PeriodicWorker):
    """Drops expired cache entries so unread keys do not pile up until capacity eviction."""

    name = "cache-sweeper"

    def __init__(self, manager: CacheManager = cache_manager,
                 interval_seconds: float = CACHE_CHECK_PERIOD_SECONDS) -> None:
        # The first sweep waits one full interval; nothing can have expired at startup.
        super().__init__(interval_seconds, run_immediately=False)
        self.manager = manager

    async def run_once(self) -> int:
        purged = await self.manager.purge_expired()
        if purged:
            logger.debug("Cache sweep purged %d expired entries", purged)
        return purged


class CoinListRefresher(PeriodicWorker):
    """Rebuilds the coin registry at startup and every COIN_LIST_REFRESH_SECONDS."""

    name = "coin-list-refresher"

    def __init__(self, registry: CoinRegistry = coin_registry,
                 interval_seconds: float = COIN_LIST_REFRESH_SECONDS) -> None:
        super().__init__(interval_seconds)
        self.registry = registry

    async def run_once(self) -> int:
        return await self.registry.refresh()
