# dex_api/services/coins_service.py

import asyncio
import logging
from typing import Any, Dict, List

from dex_api.config import DEFAULT_COIN_DECIMALS
from dex_api.errors import NotFoundError
from dex_api.services.aftermath import get_client
from dex_api.services.cache_manager import TTL, cache_manager
from dex_api.services.formatters import parse_ticker, to_number

logger = logging.getLogger(__name__)

EMPTY_PRICE = {"price": 0, "priceChange24HoursPercentage": 0}


def is_valid_coin_type(coin_type: str) -> bool:
    return bool(coin_type) and coin_type != "undefined" and "::" in coin_type


def fallback_metadata(coin_type: str) -> Dict[str, Any]:
    symbol = parse_ticker(coin_type)
    return {"symbol": symbol, "name": symbol, "decimals": DEFAULT_COIN_DECIMALS, "iconUrl": None}


async def get_coin_metadata(coin_type: str) -> Dict[str, Any]:
    """
    Upstream metadata (cached). A type-derived fallback is served when upstream
    fails (not cached); NotFoundError when upstream has no metadata for the type.
    """
    try:
        metadata = await cache_manager.get_or_set(
            f"metadata_{coin_type}", lambda: get_client().get_coin_metadata(coin_type), TTL.LONG
        )
    except Exception as ex:
        logger.error("Error fetching coin metadata for %s: %s", coin_type, ex)
        return fallback_metadata(coin_type)
    if not metadata:
        raise NotFoundError("Coin metadata not found")
    return metadata


async def _load_price(coin_type: str) -> Dict[str, Any]:
    info = await get_client().get_coin_price(coin_type)
    return {
        "price": to_number(info.get("price")),
        "priceChange24HoursPercentage": to_number(info.get("priceChange24HoursPercentage")),
    }


async def get_coin_price(coin_type: str) -> Dict[str, Any]:
    try:
        return await cache_manager.get_or_set(f"price_{coin_type}", lambda: _load_price(coin_type), TTL.SHORT)
    except Exception as ex:
        logger.error("Failed to get price for %s: %s", coin_type, ex)
        return dict(EMPTY_PRICE)


async def get_coin_prices(coin_types: List[str]) -> Dict[str, Dict[str, Any]]:
    valid = []
    for coin_type in coin_types:
        if is_valid_coin_type(coin_type):
            valid.append(coin_type)
        else:
            logger.warning("Skipping invalid coin type: %s", coin_type)
    if not valid:
        return {}
    unique = list(dict.fromkeys(valid))
    prices = await asyncio.gather(*(get_coin_price(t) for t in unique))
    return dict(zip(unique, prices))
