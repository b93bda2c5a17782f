# dex_api/services/coin_registry.py

import asyncio
import logging
from typing import Any, Dict, List

from dex_api.config import COIN_SEARCH_LIMIT, DEFAULT_COIN_DECIMALS
from dex_api.services.aftermath import get_client
from dex_api.services.formatters import normalize_coin, parse_ticker

logger = logging.getLogger(__name__)

FALLBACK_POOL_LIMIT = 100


class CoinRegistry:
    """
    In-memory list of swappable coins plus a lowercase search index.

    Built from the router's supported coins; if that fails, from the coin types
    of the first pools. Refreshed periodically by CoinListRefresher and rebuilt
    on demand while empty.
    """

    def __init__(self) -> None:
        self.tokens: List[Dict[str, Any]] = []
        self._index: List[Dict[str, str]] = []
        self._lock = asyncio.Lock()

    async def refresh(self) -> int:
        async with self._lock:
            tokens = await self._from_router() or await self._from_pools()
            if tokens:
                self.tokens = tokens
                self._index = [
                    {
                        "address": t["type"],
                        "ticker": (t.get("symbol") or parse_ticker(t["type"])).lower(),
                        "name": t.get("name") or "",
                    }
                    for t in tokens
                ]
            logger.info("Coin registry holds %d coins", len(self.tokens))
            return len(self.tokens)

    async def _from_router(self) -> List[Dict[str, Any]]:
        try:
            raw = await get_client().get_supported_coins()
        except Exception as ex:
            logger.error("Failed to get supported coins from router: %s", ex)
            return []
        coins = [c for c in (normalize_coin(entry) for entry in raw) if c is not None]
        logger.info("Fetched %d supported coins from router", len(coins))
        return coins

    async def _from_pools(self) -> List[Dict[str, Any]]:
        logger.info("Falling back to extracting tokens from pools")
        try:
            pools = await get_client().get_all_pools()
        except Exception as ex:
            logger.error("Failed to extract tokens from pools: %s", ex)
            return []

        coin_types: Dict[str, None] = {}
        for pool in pools[:FALLBACK_POOL_LIMIT]:
            coins = (pool or {}).get("coins")
            if isinstance(coins, dict):
                coin_types.update((t, None) for t in coins if isinstance(t, str) and t)
        logger.info("Extracted %d tokens from first %d pools", len(coin_types), FALLBACK_POOL_LIMIT)
        return [
            {
                "type": t,
                "symbol": parse_ticker(t),
                "name": parse_ticker(t),
                "decimals": DEFAULT_COIN_DECIMALS,
                "price": 0,
                "isVerified": False,
            }
            for t in coin_types
        ]

    async def ensure_loaded(self) -> None:
        if not self.tokens:
            await self.refresh()

    async def supported(self) -> List[Dict[str, Any]]:
        await self.ensure_loaded()
        return self.tokens

    async def search(self, query: str, limit: int = COIN_SEARCH_LIMIT) -> List[str]:
        if not query:
            return []
        await self.ensure_loaded()
        needle = query.lower()
        results = [
            c["address"]
            for c in self._index
            if needle in c["address"].lower() or needle in c["ticker"] or needle in c["name"].lower()
        ][:limit]
        logger.info("Search query=%r => found %d tokens", query, len(results))
        return results

    def reset(self) -> None:
        self.tokens = []
        self._index = []
        self._lock = asyncio.Lock()


coin_registry = CoinRegistry()
