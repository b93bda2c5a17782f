# dex_api/services/dca_service.py

from typing import Any, Dict, List

from dex_api.services.aftermath import get_client
from dex_api.services.cache_manager import TTL, cache_manager
from dex_api.services.formatters import format_dca_order


def _format_all(orders: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [o for o in (format_dca_order(order) for order in orders) if o is not None]


async def get_user_dca_orders(address: str) -> List[Dict[str, Any]]:
    async def load():
        return _format_all(await get_client().get_all_dca_orders(address))
    # Short TTL: open orders change with every execution
    return await cache_manager.get_or_set(f"dca_orders_{address}", load, TTL.SHORT)


async def get_active_dca_orders(address: str) -> List[Dict[str, Any]]:
    async def load():
        return _format_all(await get_client().get_active_dca_orders(address))
    return await cache_manager.get_or_set(f"dca_active_orders_{address}", load, TTL.SHORT)


async def get_past_dca_orders(address: str) -> List[Dict[str, Any]]:
    async def load():
        return _format_all(await get_client().get_past_dca_orders(address))
    return await cache_manager.get_or_set(f"dca_past_orders_{address}", load, TTL.MEDIUM)
