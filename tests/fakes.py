# tests/fakes.py
"""In-memory stand-in for AftermathClient used by the API tests."""

from collections import Counter
from typing import Any, Dict, List, Optional

from dex_api.errors import UpstreamError

WALLET = "0x" + "a" * 64
OTHER_WALLET = "0x" + "b" * 64
POOL_1 = "0x" + "1" * 64
POOL_2 = "0x" + "2" * 64
POOL_3 = "0x" + "3" * 64
UNKNOWN_POOL = "0x" + "f" * 64
SUI = "0x2::sui::SUI"
USDC = "0x" + "d" * 64 + "::usdc::USDC"
CETUS = "0x" + "c" * 64 + "::cetus::CETUS"
LP_1 = "0x" + "e" * 64 + "::af_lp::AF_LP_1"


def make_pool(object_id: str, name: str, coins: List[str], supply: str = "1000000000000n") -> Dict[str, Any]:
    return {
        "objectId": object_id,
        "name": name,
        "lpCoinType": LP_1 if object_id == POOL_1 else f"0x{object_id[2:]}::af_lp::AF_LP",
        "lpCoinSupply": supply,
        "illiquidLpCoinSupply": "1000n",
        "flatness": "0n",
        "lpCoinDecimals": 9,
        "coins": {
            coin: {
                "weight": "500000000000000000n",
                "balance": "2000000000000n",
                "normalizedBalance": "2000000000000000000000n",
                "tradeFeeIn": "2500000000000000n",
                "tradeFeeOut": "0n",
                "depositFee": "0n",
                "withdrawFee": "0n",
                "decimals": 6 if coin == USDC else 9,
            }
            for coin in coins
        },
    }


class FakeAftermath:
    """
    API-compatible with AftermathClient for the calls the services make.
    `failures[name] = n` makes the next n calls of method `name` raise UpstreamError.
    """

    def __init__(self) -> None:
        self.initialized = True
        self.closed = False
        self.calls: Counter = Counter()
        self.failures: Counter = Counter()
        self.requests: List[tuple] = []
        self.pools = {
            POOL_1: make_pool(POOL_1, "SUI/USDC", [SUI, USDC]),
            POOL_2: make_pool(POOL_2, "SUI/CETUS", [SUI, CETUS]),
            POOL_3: make_pool(POOL_3, "USDC/CETUS", [USDC, CETUS]),
        }
        self.stats = {
            POOL_1: {"volume": 1200.5, "tvl": 50000, "lpPrice": 2.0, "apr": 0.12, "fees": 3.6, "supplyPerLps": []},
            POOL_2: {"volume": 300, "tvl": 8000, "lpPrice": 1.5, "apr": 0.2, "fees": 0.9, "supplyPerLps": []},
            POOL_3: {"volume": 10, "tvl": 900, "lpPrice": 1.0, "apr": 0.05, "fees": 0.03, "supplyPerLps": []},
        }
        self.supported_coins: List[Any] = [SUI, USDC, CETUS]
        self.prices = {
            SUI: {"price": 3.5, "priceChange24HoursPercentage": -1.25},
            USDC: {"price": 1.0, "priceChange24HoursPercentage": 0.01},
        }
        self.metadata = {
            SUI: {"symbol": "SUI", "name": "Sui", "decimals": 9, "iconUrl": "https://example.com/sui.png"},
        }
        self.owned_lp_coins = {WALLET: [{"coinType": LP_1, "amount": "5000000000n"}]}
        self.dca_orders = {
            WALLET: {
                "active": [{
                    "objectId": "0x" + "9" * 64,
                    "overview": {
                        "allocatedCoin": {"coin": USDC, "amount": "100000000n"},
                        "buyCoin": {"coin": SUI, "amount": "0n"},
                        "totalSpent": "25000000n",
                        "intervalMs": 3600000,
                        "totalTrades": 4,
                        "tradesRemaining": 3,
                        "maxSlippageBps": 100,
                        "progress": 0.25,
                        "recipient": WALLET,
                        "strategy": {"minPrice": "1n", "maxPrice": "10n"},
                    },
                    "trades": [{
                        "allocatedCoin": {"coin": USDC, "amount": "25000000n"},
                        "buyCoin": {"coin": SUI, "amount": "7000000000n"},
                        "tnxDigest": "digest-1",
                        "tnxDate": 1720000000000,
                        "rate": 3.57,
                    }],
                    "failed": False,
                }],
                "past": [{
                    "objectId": "0x" + "8" * 64,
                    "overview": {"allocatedCoin": {"coin": SUI, "amount": "1000n"}, "buyCoin": {"coin": USDC}},
                    "trades": [],
                    "failed": True,
                }],
            }
        }
        self.route: Optional[Dict[str, Any]] = {
            "routes": [{"paths": []}],
            "netTradeFeePercentage": 0.003,
            "spotPrice": 3.5,
            "coinIn": {"type": SUI, "amount": "1000000000n", "tradeFee": "3000000n"},
            "coinOut": {"type": USDC, "amount": "3430000000n", "tradeFee": "0n"},
        }
        self.router_volume = 987654.32

    def _hit(self, name: str, *args) -> None:
        self.calls[name] += 1
        self.requests.append((name, args))
        if self.failures[name] > 0:
            self.failures[name] -= 1
            raise UpstreamError(f"{name} failed", upstream_status=500)

    async def aclose(self) -> None:
        self.closed = True

    # pools
    async def get_all_pools(self):
        self._hit("get_all_pools")
        return list(self.pools.values())

    async def get_pool(self, pool_id):
        self._hit("get_pool", pool_id)
        return self.pools.get(pool_id)

    async def get_pools_stats(self, pool_ids):
        self._hit("get_pools_stats", *pool_ids)
        return [self.stats.get(pid, {}) for pid in pool_ids]

    async def get_pool_stats(self, pool_id):
        self._hit("get_pool_stats", pool_id)
        return self.stats.get(pool_id, {})

    async def get_pool_volume_24h(self, pool_id):
        self._hit("get_pool_volume_24h", pool_id)
        return self.stats.get(pool_id, {}).get("volume", 0)

    async def get_pool_volume_data(self, pool_id, timeframe="1D"):
        self._hit("get_pool_volume_data", pool_id, timeframe)
        return [{"time": 1, "value": 10}]

    async def get_pool_fee_data(self, pool_id, timeframe="1D"):
        self._hit("get_pool_fee_data", pool_id, timeframe)
        return [{"time": 1, "value": 0.03}]

    async def get_owned_lp_coins(self, wallet_address):
        self._hit("get_owned_lp_coins", wallet_address)
        return self.owned_lp_coins.get(wallet_address, [])

    async def get_pool_id_for_lp_coin_type(self, lp_coin_type):
        self._hit("get_pool_id_for_lp_coin_type", lp_coin_type)
        for pid, pool in self.pools.items():
            if pool["lpCoinType"] == lp_coin_type:
                return pid
        return None

    async def get_deposit_transaction(self, wallet_address, pool_id, amounts_in, slippage, referrer=None):
        self._hit("get_deposit_transaction", wallet_address, pool_id, amounts_in, slippage, referrer)
        return "deposit-tx-bytes"

    async def get_withdraw_transaction(self, wallet_address, pool_id, lp_coin_amount, amounts_out_direction,
                                       slippage, referrer=None):
        self._hit("get_withdraw_transaction", wallet_address, pool_id, lp_coin_amount, amounts_out_direction,
                  slippage, referrer)
        return "withdraw-tx-bytes"

    async def get_publish_lp_coin_transaction(self, wallet_address, lp_coin_decimals):
        self._hit("get_publish_lp_coin_transaction", wallet_address, lp_coin_decimals)
        return "publish-tx-bytes"

    async def get_create_pool_transaction(self, payload):
        self._hit("get_create_pool_transaction", payload)
        return "create-pool-tx-bytes"

    # router
    async def get_trade_route_given_amount_in(self, coin_in_type, coin_out_type, coin_in_amount):
        self._hit("get_trade_route_given_amount_in", coin_in_type, coin_out_type, coin_in_amount)
        return self.route

    async def get_trade_route_given_amount_out(self, coin_in_type, coin_out_type, coin_out_amount, slippage):
        self._hit("get_trade_route_given_amount_out", coin_in_type, coin_out_type, coin_out_amount, slippage)
        return self.route

    async def get_trade_transaction(self, wallet_address, route, slippage):
        self._hit("get_trade_transaction", wallet_address, route, slippage)
        return "swap-tx-bytes"

    async def get_supported_coins(self):
        self._hit("get_supported_coins")
        return list(self.supported_coins)

    async def get_router_volume_24h(self):
        self._hit("get_router_volume_24h")
        return self.router_volume

    # coins
    async def get_coin_metadata(self, coin_type):
        self._hit("get_coin_metadata", coin_type)
        return self.metadata.get(coin_type)

    async def get_coin_price(self, coin_type):
        self._hit("get_coin_price", coin_type)
        return self.prices.get(coin_type, {"price": 0})

    # dca
    async def get_all_dca_orders(self, wallet_address):
        self._hit("get_all_dca_orders", wallet_address)
        orders = self.dca_orders.get(wallet_address, {"active": [], "past": []})
        return orders["active"] + orders["past"]

    async def get_active_dca_orders(self, wallet_address):
        self._hit("get_active_dca_orders", wallet_address)
        return self.dca_orders.get(wallet_address, {}).get("active", [])

    async def get_past_dca_orders(self, wallet_address):
        self._hit("get_past_dca_orders", wallet_address)
        return self.dca_orders.get(wallet_address, {}).get("past", [])
