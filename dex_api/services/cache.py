from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class Cache(ABC):
    """
    Storage interface behind the CacheManager so backends (memory, Redis, none) can be swapped.
    Methods are coroutines so network backends never block the event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        ...

    @abstractmethod
    async def keys(self) -> List[str]:
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...

    async def purge_expired(self) -> int:
        """Drop expired entries; backends with native expiry return 0."""
        return 0

    async def stats(self) -> Dict[str, Any]:
        return {}

    async def aclose(self) -> None:
        """Release connections held by the backend."""
