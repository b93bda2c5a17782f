# dex_api/services/formatters.py
"""
Reshape upstream objects into the JSON the frontend consumes.

Upstream big integers arrive either as numbers or as "<digits>n" strings;
the formatters emit them as plain decimal strings and fill every missing
field with a neutral default.
"""

import logging
import re
from decimal import Decimal, InvalidOperation, ROUND_FLOOR
from typing import Any, Dict, List, Optional

from dex_api.config import DEFAULT_COIN_DECIMALS

logger = logging.getLogger(__name__)

_SUI_ADDRESS_RE = re.compile(r"^[0-9a-fA-F]{64}$")

_POOL_COIN_FIELDS = ("weight", "balance", "normalizedBalance", "tradeFeeIn", "tradeFeeOut", "depositFee", "withdrawFee")


def bigint_str(value: Any) -> str:
    """'1000n' / 1000 / '1000' -> '1000'; falsy -> '0'."""
    if value is None or value == "" or value is False:
        return "0"
    if isinstance(value, str):
        return value[:-1] if value.endswith("n") else value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_int(value: Any, default: int = 0) -> int:
    try:
        return int(bigint_str(value))
    except ValueError:
        return default


def to_number(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    try:
        return float(bigint_str(value))
    except ValueError:
        return 0


def parse_ticker(coin_type: str) -> str:
    """Symbol of a coin type: the last '::' segment ('0x2::sui::SUI' -> 'SUI')."""
    if not coin_type:
        return "UNKNOWN"
    return coin_type.split("::")[-1] or "UNKNOWN"


def is_valid_sui_address(address: Optional[str]) -> bool:
    if not address:
        return False
    clean = address[2:] if address.startswith("0x") else address
    return bool(_SUI_ADDRESS_RE.match(clean))


def normalize_address(address: str) -> str:
    if not address:
        return ""
    return address if address.startswith("0x") else f"0x{address}"


def to_base_units(amount: Any, decimals: int = DEFAULT_COIN_DECIMALS) -> int:
    """
    Convert a human amount ('1.5') to integer base units, rounding down.
    Raises ValueError unless the result is positive.
    """
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid amount value: {amount!r}")
    if not value.is_finite() or value <= 0:
        raise ValueError(f"Invalid amount value: {amount!r} (must be positive)")
    units = int((value * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_FLOOR))
    if units <= 0:
        raise ValueError(f"Amount {amount!r} is below the smallest unit")
    return units


def _format_pool_coin(coin: Dict[str, Any]) -> Dict[str, Any]:
    formatted = {field: bigint_str(coin.get(field)) for field in _POOL_COIN_FIELDS}
    formatted["decimals"] = coin.get("decimals") or DEFAULT_COIN_DECIMALS
    return formatted


def format_pool_data(pool: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not pool:
        return None
    coins = {}
    for coin_type, coin in (pool.get("coins") or {}).items():
        if not coin:
            continue
        if not isinstance(coin, dict):
            logger.warning("Unexpected coin entry for %s in pool %s", coin_type, pool.get("objectId"))
            coin = {}
        coins[coin_type] = _format_pool_coin(coin)
    return {
        "objectId": pool.get("objectId") or "",
        "name": pool.get("name") or "",
        "lpCoinType": pool.get("lpCoinType") or "",
        "lpCoinSupply": bigint_str(pool.get("lpCoinSupply")),
        "illiquidLpCoinSupply": bigint_str(pool.get("illiquidLpCoinSupply")),
        "flatness": bigint_str(pool.get("flatness")),
        "lpCoinDecimals": pool.get("lpCoinDecimals") or DEFAULT_COIN_DECIMALS,
        "coins": coins,
    }


def format_pool_stats(stats: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if stats is None:
        return None
    return {
        "volume": stats.get("volume") or 0,
        "tvl": stats.get("tvl") or 0,
        "lpPrice": stats.get("lpPrice") or 0,
        "apr": stats.get("apr") or 0,
        "fees": stats.get("fees") or 0,
        "supplyPerLps": stats.get("supplyPerLps") or {},
    }


def extract_tokens_from_pool(pool: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not pool or not isinstance(pool.get("coins"), dict):
        return []
    return [
        {
            "type": coin_type,
            "symbol": parse_ticker(coin_type),
            "decimals": (coin or {}).get("decimals") or DEFAULT_COIN_DECIMALS,
        }
        for coin_type, coin in pool["coins"].items()
    ]


def _format_route_coin(coin: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    coin = coin or {}
    return {
        "type": coin.get("type") or "",
        "amount": bigint_str(coin.get("amount")),
        "tradeFee": bigint_str(coin.get("tradeFee")),
    }


def format_trade_route(route: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not route:
        return None
    return {
        "routes": route.get("routes") or [],
        "netTradeFeePercentage": route.get("netTradeFeePercentage") or 0,
        "referrer": route.get("referrer"),
        "externalFee": route.get("externalFee") or 0,
        "slippage": route.get("slippage") or 0,
        "coinIn": _format_route_coin(route.get("coinIn")),
        "coinOut": _format_route_coin(route.get("coinOut")),
        "spotPrice": route.get("spotPrice") or 0,
    }


def price_impact(route: Dict[str, Any]) -> float:
    """|1 - amountOut / (amountIn * spotPrice)|, or 0 when it cannot be computed."""
    amount_in = to_number((route.get("coinIn") or {}).get("amount"))
    amount_out = to_number((route.get("coinOut") or {}).get("amount"))
    spot = to_number(route.get("spotPrice"))
    denominator = amount_in * spot
    if not denominator:
        return 0
    return abs(1 - amount_out / denominator)


def _coin_amount(entry: Optional[Dict[str, Any]]) -> Dict[str, str]:
    entry = entry or {}
    return {"coin": entry.get("coin") or "", "amount": bigint_str(entry.get("amount"))}


def _format_dca_trade(trade: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "allocatedCoin": _coin_amount(trade.get("allocatedCoin")),
        "buyCoin": _coin_amount(trade.get("buyCoin")),
        "tnxDigest": trade.get("tnxDigest") or "",
        "tnxDate": trade.get("tnxDate") or "",
        "rate": trade.get("rate") or 0,
    }


def format_dca_order(order: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not order:
        return None
    overview = order.get("overview") or {}
    strategy = overview.get("strategy")
    formatted_overview = {
        "allocatedCoin": _coin_amount(overview.get("allocatedCoin")),
        "buyCoin": _coin_amount(overview.get("buyCoin")),
        "totalSpent": bigint_str(overview.get("totalSpent")),
        "intervalMs": overview.get("intervalMs") or 0,
        "totalTrades": overview.get("totalTrades") or 0,
        "tradesRemaining": overview.get("tradesRemaining") or 0,
        "maxSlippageBps": overview.get("maxSlippageBps") or 0,
        "progress": overview.get("progress") or 0,
        "recipient": overview.get("recipient") or "",
        "integratorFee": overview.get("integratorFee") or 0,
    }
    if strategy:
        formatted_overview["strategy"] = {
            "minPrice": bigint_str(strategy.get("minPrice")),
            "maxPrice": bigint_str(strategy.get("maxPrice")),
        }
    return {
        "objectId": order.get("objectId") or "",
        "overview": formatted_overview,
        "trades": [_format_dca_trade(t or {}) for t in order.get("trades") or []],
        "failed": bool(order.get("failed")),
    }


def normalize_coin(entry: Any) -> Optional[Dict[str, Any]]:
    """Router coin entries are either bare coin types or objects with a 'type' key."""
    if isinstance(entry, str) and entry:
        symbol = parse_ticker(entry)
        return {"type": entry, "symbol": symbol, "name": symbol, "decimals": DEFAULT_COIN_DECIMALS}
    if isinstance(entry, dict) and isinstance(entry.get("type"), str):
        symbol = entry.get("symbol") or parse_ticker(entry["type"])
        return {
            **entry,
            "symbol": symbol,
            "name": entry.get("name") or symbol,
            "decimals": entry.get("decimals") or DEFAULT_COIN_DECIMALS,
        }
    return None
