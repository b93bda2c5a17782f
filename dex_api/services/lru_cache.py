from collections import OrderedDict
from copy import deepcopy
from threading import RLock
from typing import Any, Dict, List, Optional, Tuple
import time


class LRUCacheImpl:
    """
    Thread-safe LRU map with optional per-entry TTL.
    Values are deep-copied on the way in and out; payloads nest lists and dicts.
    An entry with expires_at == 0 never expires.
    """
    def __init__(self, capacity: int = 10_000):
        self.capacity = max(1, capacity)
        self._data: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._lock = RLock()
        self.hits = 0
        self.misses = 0

    @staticmethod
    def _expired(expires_at: float, now: float) -> bool:
        return bool(expires_at) and expires_at <= now

    def get(self, key: str) -> Optional[Any]:
        now = time.time()
        with self._lock:
            item = self._data.get(key)
            if item is None:
                self.misses += 1
                return None
            expires_at, value = item
            if self._expired(expires_at, now):
                self._data.pop(key, None)
                self.misses += 1
                return None
            self._data.move_to_end(key)
            self.hits += 1
            return deepcopy(value)

    def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        expires_at = time.time() + ttl_seconds if ttl_seconds else 0.0
        with self._lock:
            if key in self._data:
                self._data.pop(key)
            elif len(self._data) >= self.capacity:
                self._data.popitem(last=False)  # Evict LRU
            self._data[key] = (expires_at, deepcopy(value))

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self) -> List[str]:
        now = time.time()
        with self._lock:
            return [k for k, (exp, _) in self._data.items() if not self._expired(exp, now)]

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def purge_expired(self) -> int:
        now = time.time()
        with self._lock:
            victims = [k for k, (exp, _) in self._data.items() if self._expired(exp, now)]
            for k in victims:
                del self._data[k]
        return len(victims)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {"keys": len(self._data), "hits": self.hits, "misses": self.misses}
