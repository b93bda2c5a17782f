import json
import logging
from typing import Any, Dict, List, Optional

from redis import asyncio as aioredis

from .cache import Cache
from .lru_cache import LRUCacheImpl

logger = logging.getLogger(__name__)


class InProcessLRUCache(Cache):
    """In-process LRU cache backend."""
    def __init__(self, capacity: int):
        self._lru = LRUCacheImpl(capacity=capacity)

    async def get(self, key: str) -> Optional[Any]:
        return self._lru.get(key)

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        self._lru.set(key, value, ttl_seconds)

    async def delete(self, key: str) -> bool:
        return self._lru.delete(key)

    async def keys(self) -> List[str]:
        return self._lru.keys()

    async def clear(self) -> None:
        self._lru.clear()

    async def purge_expired(self) -> int:
        return self._lru.purge_expired()

    async def stats(self) -> Dict[str, Any]:
        return {"backend": "memory", **self._lru.stats()}


class RedisCache(Cache):
    """
    Shared cache backend for running several workers behind one Redis.
    Values are stored as JSON under a key prefix; expiry is handled by Redis (SETEX).
    """
    def __init__(self, url: str, prefix: str = "dex-api:", client: Optional[aioredis.Redis] = None):
        self._prefix = prefix
        self._r = client if client is not None else aioredis.Redis.from_url(url, decode_responses=True)

    def _k(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Optional[Any]:
        raw = await self._r.get(self._k(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("redis_cache: dropping undecodable value for key %s", key)
            await self._r.delete(self._k(key))
            return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        payload = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        if ttl_seconds:
            await self._r.setex(self._k(key), ttl_seconds, payload)
        else:
            await self._r.set(self._k(key), payload)

    async def delete(self, key: str) -> bool:
        return bool(await self._r.delete(self._k(key)))

    async def _prefixed_keys(self) -> List[str]:
        return [k async for k in self._r.scan_iter(match=f"{self._prefix}*")]

    async def keys(self) -> List[str]:
        n = len(self._prefix)
        return [k[n:] for k in await self._prefixed_keys()]

    async def clear(self) -> None:
        victims = await self._prefixed_keys()
        if victims:
            await self._r.delete(*victims)

    async def stats(self) -> Dict[str, Any]:
        return {"backend": "redis", "keys": len(await self._prefixed_keys())}

    async def aclose(self) -> None:
        await self._r.aclose()
