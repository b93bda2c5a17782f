# dex_api/services/aftermath.py

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from dex_api.config import AFTERMATH_API_URL, HTTP_TIMEOUT_SECONDS, SUI_NETWORK
from dex_api.errors import ServiceNotReadyError, UpstreamError
from dex_api.services.retry import retry_operation

logger = logging.getLogger(__name__)


def _bigint(value: int) -> str:
    """Upstream expects big integers as decimal strings with an 'n' suffix."""
    return f"{int(value)}n"


def _first(items: Any) -> Optional[Any]:
    if isinstance(items, list):
        return items[0] if items else None
    return items


def _tx_bytes(result: Any) -> str:
    if isinstance(result, dict):
        for key in ("txBytes", "tx", "transaction"):
            if result.get(key):
                return result[key]
    if isinstance(result, str) and result:
        return result
    raise UpstreamError("Aftermath API returned an empty transaction")


class AftermathClient:
    """
    Async client for the Aftermath Finance REST API.

    All pool, router, price and DCA logic lives upstream; this class only issues
    requests and turns transport/HTTP failures into UpstreamError.
    """

    def __init__(
        self,
        base_url: str = AFTERMATH_API_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )
        self.initialized = False
        self.addresses: Dict[str, Any] = {}

    async def init(self) -> "AftermathClient":
        """Fetch the protocol package addresses; fails if the API is unreachable."""
        logger.info("Initializing Aftermath client on %s (%s)", SUI_NETWORK, self.base_url)
        addresses = await retry_operation(lambda: self._request("GET", "addresses"))
        self.addresses = addresses if isinstance(addresses, dict) else {}
        self.initialized = True
        logger.info("Aftermath client initialized successfully")
        return self

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._http.request(method, path, json=payload)
        except httpx.RequestError as ex:
            raise UpstreamError(f"Aftermath API request failed: {method} {path}: {ex}") from ex

        if response.is_error:
            raise UpstreamError(
                f"Aftermath API returned {response.status_code} for {method} {path}: {response.text[:200]}",
                upstream_status=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as ex:
            raise UpstreamError(f"Aftermath API returned invalid JSON for {method} {path}") from ex

    # ---------- Pools ----------

    async def get_all_pools(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "pools") or []

    async def get_pools(self, pool_ids: List[str]) -> List[Dict[str, Any]]:
        return await self._request("POST", "pools", {"poolIds": pool_ids}) or []

    async def get_pool(self, pool_id: str) -> Optional[Dict[str, Any]]:
        try:
            return _first(await self.get_pools([pool_id]))
        except UpstreamError as ex:
            if ex.upstream_status == 404:
                return None
            raise

    async def get_pools_stats(self, pool_ids: List[str]) -> List[Dict[str, Any]]:
        return await self._request("POST", "pools/stats", {"poolIds": pool_ids}) or []

    async def get_pool_stats(self, pool_id: str) -> Dict[str, Any]:
        return _first(await self.get_pools_stats([pool_id])) or {}

    async def get_pool_volume_24h(self, pool_id: str) -> float:
        return await self._request("GET", f"pools/{pool_id}/volume-24hrs") or 0

    async def get_pool_volume_data(self, pool_id: str, timeframe: str = "1D") -> List[Any]:
        return await self._request("GET", f"pools/{pool_id}/volume/{timeframe}") or []

    async def get_pool_fee_data(self, pool_id: str, timeframe: str = "1D") -> List[Any]:
        return await self._request("GET", f"pools/{pool_id}/fees/{timeframe}") or []

    async def get_owned_lp_coins(self, wallet_address: str) -> List[Dict[str, Any]]:
        return await self._request("POST", "pools/owned-lp-coins", {"walletAddress": wallet_address}) or []

    async def get_pool_id_for_lp_coin_type(self, lp_coin_type: str) -> Optional[str]:
        ids = await self._request("POST", "pools/pool-object-ids", {"lpCoinTypes": [lp_coin_type]})
        return _first(ids)

    async def get_deposit_transaction(
        self,
        wallet_address: str,
        pool_id: str,
        amounts_in: Dict[str, int],
        slippage: float,
        referrer: Optional[str] = None,
    ) -> str:
        result = await self._request("POST", "pools/transactions/deposit", {
            "walletAddress": wallet_address,
            "poolId": pool_id,
            "amountsIn": {coin: _bigint(amount) for coin, amount in amounts_in.items()},
            "slippage": slippage,
            "referrer": referrer,
        })
        return _tx_bytes(result)

    async def get_withdraw_transaction(
        self,
        wallet_address: str,
        pool_id: str,
        lp_coin_amount: int,
        amounts_out_direction: Dict[str, int],
        slippage: float,
        referrer: Optional[str] = None,
    ) -> str:
        result = await self._request("POST", "pools/transactions/withdraw", {
            "walletAddress": wallet_address,
            "poolId": pool_id,
            "lpCoinAmount": _bigint(lp_coin_amount),
            "amountsOutDirection": {coin: _bigint(amount) for coin, amount in amounts_out_direction.items()},
            "slippage": slippage,
            "referrer": referrer,
        })
        return _tx_bytes(result)

    async def get_publish_lp_coin_transaction(self, wallet_address: str, lp_coin_decimals: int) -> str:
        result = await self._request("POST", "pools/transactions/publish-lp-coin", {
            "walletAddress": wallet_address,
            "lpCoinDecimals": lp_coin_decimals,
        })
        return _tx_bytes(result)

    async def get_create_pool_transaction(self, payload: Dict[str, Any]) -> str:
        body = dict(payload)
        body["poolFlatness"] = _bigint(body["poolFlatness"])
        body["coinsInfo"] = [
            {
                **info,
                "weight": _bigint(info["weight"]),
                "tradeFeeIn": _bigint(info["tradeFeeIn"]),
                "initialDeposit": _bigint(info["initialDeposit"]),
            }
            for info in body["coinsInfo"]
        ]
        result = await self._request("POST", "pools/transactions/create-pool", body)
        return _tx_bytes(result)

    # ---------- Router ----------

    async def get_trade_route_given_amount_in(
        self, coin_in_type: str, coin_out_type: str, coin_in_amount: int
    ) -> Optional[Dict[str, Any]]:
        return await self._request("POST", "router/trade-route", {
            "coinInType": coin_in_type,
            "coinOutType": coin_out_type,
            "coinInAmount": _bigint(coin_in_amount),
        })

    async def get_trade_route_given_amount_out(
        self, coin_in_type: str, coin_out_type: str, coin_out_amount: int, slippage: float
    ) -> Optional[Dict[str, Any]]:
        return await self._request("POST", "router/trade-route", {
            "coinInType": coin_in_type,
            "coinOutType": coin_out_type,
            "coinOutAmount": _bigint(coin_out_amount),
            "slippage": slippage,
        })

    async def get_trade_transaction(self, wallet_address: str, route: Dict[str, Any], slippage: float) -> str:
        result = await self._request("POST", "router/transactions/trade", {
            "walletAddress": wallet_address,
            "completeRoute": route,
            "slippage": slippage,
        })
        return _tx_bytes(result)

    async def get_supported_coins(self) -> List[Any]:
        return await self._request("GET", "router/supported-coins") or []

    async def get_router_volume_24h(self) -> float:
        return await self._request("GET", "router/volume-24hrs") or 0

    # ---------- Coins ----------

    async def get_coin_metadata(self, coin_type: str) -> Optional[Dict[str, Any]]:
        return _first(await self._request("POST", "coins/metadata", {"coins": [coin_type]}))

    async def get_coin_prices(self, coin_types: List[str]) -> Dict[str, Any]:
        return await self._request("POST", "price-info", {"coins": coin_types}) or {}

    async def get_coin_price(self, coin_type: str) -> Dict[str, Any]:
        info = (await self.get_coin_prices([coin_type])).get(coin_type)
        if isinstance(info, dict):
            return info
        return {"price": info or 0}

    # ---------- DCA ----------

    async def get_dca_orders(self, wallet_address: str) -> Dict[str, List[Dict[str, Any]]]:
        orders = await self._request("POST", "dca/orders", {"walletAddress": wallet_address}) or {}
        return {"active": orders.get("active") or [], "past": orders.get("past") or []}

    async def get_all_dca_orders(self, wallet_address: str) -> List[Dict[str, Any]]:
        orders = await self.get_dca_orders(wallet_address)
        return orders["active"] + orders["past"]

    async def get_active_dca_orders(self, wallet_address: str) -> List[Dict[str, Any]]:
        return (await self.get_dca_orders(wallet_address))["active"]

    async def get_past_dca_orders(self, wallet_address: str) -> List[Dict[str, Any]]:
        return (await self.get_dca_orders(wallet_address))["past"]


# Singleton accessors
_client: Optional[AftermathClient] = None
_init_lock: Optional[asyncio.Lock] = None


async def init_client() -> AftermathClient:
    """Create and initialize the process-wide client once; concurrent callers share the work."""
    global _client, _init_lock
    if _client is not None and _client.initialized:
        return _client
    if _init_lock is None:
        _init_lock = asyncio.Lock()
    async with _init_lock:
        if _client is None:
            _client = AftermathClient()
        if not _client.initialized:
            await _client.init()
    return _client


def get_client() -> AftermathClient:
    if _client is None or not _client.initialized:
        raise ServiceNotReadyError("Aftermath client not initialized")
    return _client


def set_client(client: Optional[AftermathClient]) -> None:
    global _client
    _client = client


async def close_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
