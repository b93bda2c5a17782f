# dex_api/services/cache_manager.py

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from dex_api.config import CACHE_TTL_LONG, CACHE_TTL_MEDIUM, CACHE_TTL_SHORT
from dex_api.services.cache import Cache
from dex_api.services.cache_factory import get_cache

logger = logging.getLogger(__name__)

Producer = Callable[[], Union[Any, Awaitable[Any]]]


class TTL:
    SHORT = CACHE_TTL_SHORT
    MEDIUM = CACHE_TTL_MEDIUM
    LONG = CACHE_TTL_LONG


def _consume_result(task: asyncio.Task) -> None:
    # Mark the outcome as retrieved even when every waiter went away
    if not task.cancelled():
        task.exception()


class CacheManager:
    """
    Read-through cache used by every controller to avoid redundant upstream calls.

    get_or_set() is single-flight per key: the producer runs as its own task and
    every caller missing on that key awaits it, so a caller that is cancelled
    leaves the fetch running for the others. None results and producer errors
    are not stored.

    Backend failures are logged and treated as a miss (reads) or skipped
    (writes); requests are then served straight from the producer.
    """

    TTL = TTL

    def __init__(self, backend: Optional[Cache] = None):
        self._backend = backend
        self._inflight: Dict[str, asyncio.Task] = {}

    @property
    def backend(self) -> Cache:
        if self._backend is None:
            self._backend = get_cache()
        return self._backend

    async def get(self, key: str) -> Optional[Any]:
        try:
            value = await self.backend.get(key)
        except Exception:
            logger.exception("Cache read failed for key: %s", key)
            return None
        if value is not None:
            logger.debug("Cache hit for key: %s", key)
        else:
            logger.debug("Cache miss for key: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl: Optional[int] = TTL.MEDIUM) -> None:
        logger.debug("Setting cache for key: %s with TTL: %s", key, ttl)
        try:
            await self.backend.set(key, value, ttl_seconds=ttl)
        except Exception:
            logger.exception("Cache write failed for key: %s", key)

    async def _fetch(self, key: str, producer: Producer, ttl: Optional[int]) -> Any:
        logger.debug("Fetching data for key: %s...", key)
        try:
            value = producer()
            if inspect.isawaitable(value):
                value = await value
            if value is not None:
                await self.set(key, value, ttl)
            return value
        except Exception as exc:
            logger.error("Error fetching data for key %s: %s", key, exc)
            raise
        finally:
            self._inflight.pop(key, None)

    async def get_or_set(self, key: str, producer: Producer, ttl: Optional[int] = TTL.MEDIUM) -> Any:
        cached = await self.get(key)
        if cached is not None:
            return cached

        task = self._inflight.get(key)
        if task is not None:
            logger.debug("Joining in-flight fetch for key: %s", key)
        else:
            task = asyncio.ensure_future(self._fetch(key, producer, ttl))
            task.add_done_callback(_consume_result)
            self._inflight[key] = task
        return await asyncio.shield(task)

    async def invalidate(self, key: str) -> bool:
        logger.debug("Invalidating cache for key: %s", key)
        try:
            return await self.backend.delete(key)
        except Exception:
            logger.exception("Cache delete failed for key: %s", key)
            return False

    async def invalidate_pattern(self, pattern: str) -> int:
        try:
            matching = [k for k in await self.backend.keys() if pattern in k]
        except Exception:
            logger.exception("Cache key listing failed for pattern: %s", pattern)
            return 0
        logger.debug("Invalidating %d keys matching pattern: %s", len(matching), pattern)
        removed = 0
        for k in matching:
            if await self.invalidate(k):
                removed += 1
        return removed

    async def flush_all(self) -> None:
        logger.debug("Flushing entire cache")
        try:
            await self.backend.clear()
        except Exception:
            logger.exception("Cache flush failed")

    async def purge_expired(self) -> int:
        return await self.backend.purge_expired()

    async def stats(self) -> Dict[str, Any]:
        try:
            backend_stats = await self.backend.stats()
        except Exception as exc:
            logger.warning("Cache stats unavailable: %s", exc)
            backend_stats = {"error": "unavailable"}
        return {**backend_stats, "inflight": len(self._inflight)}

    async def aclose(self) -> None:
        await self.backend.aclose()


cache_manager = CacheManager()
