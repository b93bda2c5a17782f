# dex_api/services/pools_service.py

import asyncio
import logging
from typing import Any, Dict, List, Optional

from dex_api.config import DEFAULT_COIN_DECIMALS, POOL_BATCH_DELAY_SECONDS, POOL_STATS_BATCH_SIZE
from dex_api.errors import NotFoundError
from dex_api.services.aftermath import get_client
from dex_api.services.cache_manager import TTL, cache_manager
from dex_api.services.formatters import (
    extract_tokens_from_pool,
    format_pool_data,
    format_pool_stats,
    to_int,
    to_number,
)
from dex_api.services.retry import retry_operation

logger = logging.getLogger(__name__)

ALL_POOLS_KEY = "all_pools"


def lp_positions_key(address: str) -> str:
    return f"lp_positions_{address}"


async def _stats_in_batches(pool_ids: List[str]) -> List[Dict[str, Any]]:
    """
    Fetch stats for many pools, POOL_STATS_BATCH_SIZE ids per upstream call.
    A batch that keeps failing yields empty stats instead of failing the whole request.
    """
    client = get_client()
    results: List[Dict[str, Any]] = []
    for start in range(0, len(pool_ids), POOL_STATS_BATCH_SIZE):
        batch = pool_ids[start:start + POOL_STATS_BATCH_SIZE]
        batch_no = start // POOL_STATS_BATCH_SIZE + 1
        try:
            stats = await retry_operation(lambda: client.get_pools_stats(batch))
            logger.info("Fetched stats for batch %d (%d pools)", batch_no, len(batch))
        except Exception as ex:
            logger.error("Failed to get pool stats for batch %d: %s", batch_no, ex)
            stats = []
        stats = list(stats or [])
        results.extend(stats[i] if i < len(stats) and stats[i] else {} for i in range(len(batch)))

        # Pause between batches to stay under upstream rate limits
        if start + POOL_STATS_BATCH_SIZE < len(pool_ids) and POOL_BATCH_DELAY_SECONDS:
            await asyncio.sleep(POOL_BATCH_DELAY_SECONDS)
    return results


async def _load_all_pools() -> List[Dict[str, Any]]:
    client = get_client()
    pools = await retry_operation(client.get_all_pools)
    logger.info("Successfully fetched %d pools", len(pools))

    stats = await _stats_in_batches([p.get("objectId") for p in pools])
    formatted = []
    for pool, pool_stats in zip(pools, stats):
        data = format_pool_data(pool)
        if data is None:
            continue
        formatted.append({
            **data,
            "id": data["objectId"],
            "tvl": pool_stats.get("tvl") or 0,
            "volume24h": pool_stats.get("volume") or 0,
            "apr": pool_stats.get("apr") or 0,
            "fees24h": pool_stats.get("fees") or 0,
            "tokens": extract_tokens_from_pool(pool),
        })
    return formatted


async def list_pools() -> List[Dict[str, Any]]:
    return await cache_manager.get_or_set(ALL_POOLS_KEY, _load_all_pools, TTL.MEDIUM)


async def get_pool(pool_id: str) -> Dict[str, Any]:
    async def load() -> Optional[Dict[str, Any]]:
        client = get_client()
        pool = await retry_operation(lambda: client.get_pool(pool_id))
        if not pool:
            return None
        try:
            volume_24h = await client.get_pool_volume_24h(pool_id)
        except Exception as ex:
            logger.warning("Failed to get 24h volume for pool %s: %s", pool_id, ex)
            volume_24h = 0
        data = format_pool_data(pool)
        return {**data, "id": data["objectId"], "tokens": extract_tokens_from_pool(pool), "volume24h": volume_24h}

    pool_data = await cache_manager.get_or_set(f"pool_{pool_id}", load, TTL.MEDIUM)
    if pool_data is None:
        raise NotFoundError("Pool not found")
    return pool_data


async def _with_fallback(label: str, pool_id: str, operation, fallback):
    try:
        return await retry_operation(operation)
    except Exception as ex:
        logger.error("Failed to get %s for pool %s: %s", label, pool_id, ex)
        return fallback


async def get_pool_stats(pool_id: str) -> Dict[str, Any]:
    async def load() -> Optional[Dict[str, Any]]:
        client = get_client()
        pool = await retry_operation(lambda: client.get_pool(pool_id))
        if not pool:
            return None
        stats, volume_data, fee_data = await asyncio.gather(
            _with_fallback("stats", pool_id, lambda: client.get_pool_stats(pool_id), {}),
            _with_fallback("volume data", pool_id, lambda: client.get_pool_volume_data(pool_id, "1D"), []),
            _with_fallback("fee data", pool_id, lambda: client.get_pool_fee_data(pool_id, "1D"), []),
        )
        return {"stats": format_pool_stats(stats), "volumeData": volume_data, "feeData": fee_data}

    data = await cache_manager.get_or_set(f"pool_stats_{pool_id}", load, TTL.SHORT)
    if data is None:
        raise NotFoundError("Pool not found")
    return data


async def get_batch_pool_stats(pool_ids: List[str]) -> Dict[str, Dict[str, Any]]:
    """Stats for several pools keyed by pool id; duplicates are collapsed, order kept."""
    unique_ids = list(dict.fromkeys(pool_ids))

    async def load() -> Dict[str, Dict[str, Any]]:
        stats = await _stats_in_batches(unique_ids)
        return {pid: format_pool_stats(s) for pid, s in zip(unique_ids, stats)}

    key = "pool_stats_batch_" + ",".join(sorted(unique_ids))
    return await cache_manager.get_or_set(key, load, TTL.SHORT)


async def _enrich_position(lp_coin: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    client = get_client()
    lp_coin_type = lp_coin.get("coinType") or ""
    try:
        pool_id = await retry_operation(lambda: client.get_pool_id_for_lp_coin_type(lp_coin_type))
        if not pool_id:
            logger.warning("Could not find pool for LP coin type: %s", lp_coin_type)
            return None
        pool = await retry_operation(lambda: client.get_pool(pool_id))
        if not pool:
            logger.warning("Could not find pool with ID: %s", pool_id)
            return None
    except Exception as ex:
        logger.error("Error processing LP position for %s: %s", lp_coin_type, ex)
        return None

    try:
        stats = await retry_operation(lambda: client.get_pool_stats(pool_id))
    except Exception as ex:
        logger.error("Failed to get stats for pool %s: %s", pool_id, ex)
        stats = {}

    lp_decimals = pool.get("lpCoinDecimals") or DEFAULT_COIN_DECIMALS
    lp_amount = to_int(lp_coin.get("amount"))
    lp_price = to_number(stats.get("lpPrice"))
    total_supply = to_int(pool.get("lpCoinSupply"))
    return {
        "poolId": pool_id,
        "poolName": pool.get("name") or "Unknown Pool",
        "lpCoinType": lp_coin_type,
        "lpAmount": str(lp_amount),
        "lpDecimals": lp_decimals,
        "usdValue": lp_amount * lp_price / 10 ** lp_decimals,
        "apr": stats.get("apr") or 0,
        "share": lp_amount / total_supply if total_supply else 0,
        "tokens": extract_tokens_from_pool(pool),
    }


async def get_user_lp_positions(address: str) -> List[Dict[str, Any]]:
    async def load() -> List[Dict[str, Any]]:
        client = get_client()
        lp_coins = await retry_operation(lambda: client.get_owned_lp_coins(address))
        positions = await asyncio.gather(*(_enrich_position(c) for c in lp_coins))
        return [p for p in positions if p is not None]

    return await cache_manager.get_or_set(lp_positions_key(address), load, TTL.SHORT)


async def build_deposit_transaction(
    wallet_address: str,
    pool_id: str,
    amounts_in: Dict[str, int],
    slippage: float,
    referrer: Optional[str] = None,
) -> str:
    tx_bytes = await get_client().get_deposit_transaction(wallet_address, pool_id, amounts_in, slippage, referrer)
    await cache_manager.invalidate(lp_positions_key(wallet_address))
    logger.info("Built deposit transaction for pool %s (%d coins)", pool_id, len(amounts_in))
    return tx_bytes


async def build_withdraw_transaction(
    wallet_address: str,
    pool_id: str,
    lp_coin_amount: int,
    amounts_out_direction: Dict[str, int],
    slippage: float,
    referrer: Optional[str] = None,
) -> str:
    tx_bytes = await get_client().get_withdraw_transaction(
        wallet_address, pool_id, lp_coin_amount, amounts_out_direction, slippage, referrer
    )
    await cache_manager.invalidate(lp_positions_key(wallet_address))
    logger.info("Built withdraw transaction for pool %s", pool_id)
    return tx_bytes


async def build_publish_lp_coin_transaction(wallet_address: str, lp_coin_decimals: int) -> str:
    return await get_client().get_publish_lp_coin_transaction(wallet_address, lp_coin_decimals)


async def build_create_pool_transaction(payload: Dict[str, Any]) -> str:
    tx_bytes = await get_client().get_create_pool_transaction(payload)
    await cache_manager.invalidate(ALL_POOLS_KEY)
    logger.info("Built create-pool transaction for %s", payload.get("poolName"))
    return tx_bytes
