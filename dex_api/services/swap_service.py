# dex_api/services/swap_service.py

import logging
from typing import Any, Dict, List, Optional

from dex_api.errors import NotFoundError
from dex_api.services.aftermath import get_client
from dex_api.services.cache_manager import TTL, cache_manager
from dex_api.services.formatters import format_trade_route, normalize_coin, parse_ticker, price_impact

logger = logging.getLogger(__name__)

# Router protocol names; upstream has no endpoint listing them.
SUPPORTED_PROTOCOLS = [
    "Aftermath",
    "BlueMove",
    "Cetus",
    "DeepBook",
    "DeepBookV3",
    "DoubleUpPump",
    "FlowX",
    "FlowXClmm",
    "HopFun",
    "Kriya",
    "KriyaClmm",
    "Metastable",
    "MovePump",
    "Obric",
    "SuiSwap",
    "Turbos",
    "SpringSui",
    "Bluefin",
    "TurbosFun",
]


async def get_quote(
    coin_in_type: str,
    coin_out_type: str,
    coin_in_amount: Optional[int] = None,
    coin_out_amount: Optional[int] = None,
    slippage: Optional[float] = None,
) -> Dict[str, Any]:
    """Quote for an exact input, or an exact output when coin_in_amount is None. Never cached."""
    client = get_client()
    if coin_in_amount is not None:
        route = await client.get_trade_route_given_amount_in(coin_in_type, coin_out_type, coin_in_amount)
    else:
        route = await client.get_trade_route_given_amount_out(coin_in_type, coin_out_type, coin_out_amount, slippage)

    if not route:
        raise NotFoundError("No valid trade route found for the specified parameters")
    return {"route": format_trade_route(route), "priceImpact": price_impact(route)}


async def get_supported_protocols() -> List[str]:
    return await cache_manager.get_or_set("supported_protocols", lambda: list(SUPPORTED_PROTOCOLS), TTL.LONG)


async def get_router_volume_24h() -> Dict[str, Any]:
    volume = await cache_manager.get_or_set("router_volume_24h", lambda: get_client().get_router_volume_24h(), TTL.SHORT)
    return {"volume": volume}


async def get_router_coins() -> List[Dict[str, Any]]:
    async def load() -> List[Dict[str, Any]]:
        raw = await get_client().get_supported_coins()
        return [c for c in (normalize_coin(entry) for entry in raw) if c is not None]

    return await cache_manager.get_or_set("router_supported_coins", load, TTL.MEDIUM)


async def get_supported_tokens() -> List[str]:
    tokens = [coin["type"] for coin in await get_router_coins()]
    logger.info("Returning %d supported tokens", len(tokens))
    return tokens


async def search_tokens(query: Optional[str]) -> List[str]:
    if not query:
        return []
    needle = query.lower()
    results = [
        coin["type"]
        for coin in await get_router_coins()
        if needle in coin["type"].lower() or needle in parse_ticker(coin["type"]).lower()
    ]
    logger.info("Search query=%r => found %d tokens", query, len(results))
    return results


async def create_swap_transaction(
    wallet_address: str,
    coin_in_type: str,
    coin_out_type: str,
    coin_in_amount: int,
    slippage: float,
) -> Dict[str, Any]:
    """Route an exact-input trade and have upstream build the transaction for it."""
    client = get_client()
    logger.info("Creating swap transaction: %s %s -> %s", coin_in_amount, coin_in_type, coin_out_type)

    route = await client.get_trade_route_given_amount_in(coin_in_type, coin_out_type, coin_in_amount)
    if not route:
        raise NotFoundError("No valid trade route found for these tokens and amount")

    tx_bytes = await client.get_trade_transaction(wallet_address, route, slippage)
    logger.info("Transaction created successfully")
    return {"txBytes": tx_bytes, "route": format_trade_route(route)}
