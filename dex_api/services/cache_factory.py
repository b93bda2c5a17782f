from typing import Any, Dict, List, Optional
from .cache import Cache
from .cache_backends import InProcessLRUCache, RedisCache
from dex_api.config import CACHE_BACKEND, CACHE_CAPACITY, REDIS_URL, REDIS_KEY_PREFIX

_cache_singleton: Optional[Cache] = None

def get_cache() -> Cache:
    """
    Returns a process-wide cache backend based on configuration:
      - "none"   -> no-op backend (always misses)
      - "memory" -> in-process LRU with TTL (single instance)
      - "redis"  -> shared cache across workers
    Unknown values fall back to "memory".
    """
    global _cache_singleton
    if _cache_singleton is not None:
        return _cache_singleton

    if CACHE_BACKEND == "none":
        _cache_singleton = _NoCache()
    elif CACHE_BACKEND == "redis":
        _cache_singleton = RedisCache(REDIS_URL, prefix=REDIS_KEY_PREFIX)
    else:
        _cache_singleton = InProcessLRUCache(capacity=CACHE_CAPACITY)

    return _cache_singleton


class _NoCache(Cache):
    """No-op cache used when caching is disabled."""
    async def get(self, key: str): return None
    async def set(self, key: str, value: Any, ttl_seconds: int | None = None): pass
    async def delete(self, key: str): return False
    async def keys(self) -> List[str]: return []
    async def clear(self): pass
    async def stats(self) -> Dict[str, Any]: return {"backend": "none"}
