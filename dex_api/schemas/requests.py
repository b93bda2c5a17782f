# dex_api/schemas/requests.py

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from dex_api.services.formatters import normalize_address, to_int

BaseUnits = Union[int, str]


def _units(values: Dict[str, BaseUnits]) -> Dict[str, int]:
    return {coin: to_int(amount) for coin, amount in values.items()}


class BatchStatsRequest(BaseModel):
    poolIds: List[str] = Field(..., description="Pool object ids to fetch stats for.")

    @field_validator("poolIds")
    @classmethod
    def _norm_pool_ids(cls, v: List[str]) -> List[str]:
        return [normalize_address(pid) for pid in v]


class DepositRequest(BaseModel):
    walletAddress: str = Field(..., description="Sender of the deposit transaction.")
    poolId: str = Field(..., description="Pool object id.")
    amountsIn: Dict[str, BaseUnits] = Field(..., description="Base-unit amount per coin type.")
    slippage: float = Field(0.01, description="Max slippage as a fraction (0.01 = 1%).")
    referrer: Optional[str] = Field(None, description="Referrer address.")

    @field_validator("walletAddress")
    @classmethod
    def _norm_wallet(cls, v: str) -> str:
        return normalize_address(v)

    def amounts_in_units(self) -> Dict[str, int]:
        return _units(self.amountsIn)


class WithdrawRequest(BaseModel):
    walletAddress: str = Field(..., description="Owner of the LP coins.")
    poolId: str = Field(..., description="Pool object id.")
    lpCoinAmount: BaseUnits = Field(..., description="LP coins to burn, base units.")
    amountsOutDirection: Dict[str, BaseUnits] = Field(default_factory=dict, description="Preferred split of the output.")
    slippage: float = Field(0.01, description="Max slippage as a fraction.")
    referrer: Optional[str] = Field(None, description="Referrer address.")

    @field_validator("walletAddress")
    @classmethod
    def _norm_wallet(cls, v: str) -> str:
        return normalize_address(v)

    def lp_coin_units(self) -> int:
        return to_int(self.lpCoinAmount)

    def amounts_out_units(self) -> Dict[str, int]:
        return _units(self.amountsOutDirection)


class PublishLpCoinRequest(BaseModel):
    walletAddress: str = Field(..., description="Publisher of the LP coin package.")
    lpCoinDecimals: int = Field(9, description="Decimals of the LP coin.")


class LpCoinMetadata(BaseModel):
    name: str
    symbol: str
    description: str = ""
    iconUrl: Optional[str] = None


class CreatePoolCoinInfo(BaseModel):
    coinType: str
    weight: BaseUnits
    decimals: Optional[int] = None
    tradeFeeIn: BaseUnits
    initialDeposit: BaseUnits


class CreatePoolRequest(BaseModel):
    walletAddress: str
    lpCoinType: str = Field(..., description="Coin type published by /api/pools/publish.")
    lpCoinMetadata: LpCoinMetadata
    coinsInfo: List[CreatePoolCoinInfo]
    poolName: str
    poolFlatness: BaseUnits
    createPoolCapId: str = Field(..., description="Capability object returned by the publish transaction.")
    respectDecimals: bool = True
    forceLpDecimals: Optional[int] = None

    def upstream_payload(self) -> dict:
        payload = self.model_dump(exclude_none=True)
        payload["walletAddress"] = normalize_address(self.walletAddress)
        payload["poolFlatness"] = to_int(self.poolFlatness)
        payload["coinsInfo"] = [
            {
                **info.model_dump(exclude_none=True),
                "weight": to_int(info.weight),
                "tradeFeeIn": to_int(info.tradeFeeIn),
                "initialDeposit": to_int(info.initialDeposit),
            }
            for info in self.coinsInfo
        ]
        return payload


class SwapTransactionRequest(BaseModel):
    fromToken: str
    toToken: str
    amount: Union[str, float] = Field(..., description="Human amount of fromToken, e.g. '1.5'.")
    slippage: float = 0.01
    walletAddress: str


class LegacySwapRequest(BaseModel):
    coinInType: str
    coinOutType: str
    amountIn: Union[str, float]
    slippage: float = 0.01
    walletAddress: str


class CoinPricesRequest(BaseModel):
    coins: List[Optional[str]]
