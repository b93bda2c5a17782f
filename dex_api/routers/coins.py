# dex_api/routers/coins.py

from typing import Optional

from fastapi import APIRouter, Request

from dex_api.errors import BadRequestError
from dex_api.schemas.envelope import ok
from dex_api.schemas.requests import CoinPricesRequest
from dex_api.services import coins_service
from dex_api.services.coin_registry import coin_registry
from dex_api.validation import parse_body

router = APIRouter(prefix="/api/coins", tags=["coins"])


@router.get("/supported")
async def supported_coins():
    return ok(await coin_registry.supported())


@router.get("/search")
async def search_coins(query: Optional[str] = None):
    return ok(await coin_registry.search(query or ""))


# Coin types contain "::" and may arrive percent-encoded; Starlette decodes path params.
@router.get("/metadata/{coin_type:path}")
async def coin_metadata(coin_type: str):
    if not coin_type:
        raise BadRequestError("Coin type is required")
    return ok(await coins_service.get_coin_metadata(coin_type))


@router.get("/price/{coin_type:path}")
async def coin_price(coin_type: str):
    if not coins_service.is_valid_coin_type(coin_type):
        raise BadRequestError("Invalid coin type format")
    return ok(await coins_service.get_coin_price(coin_type))


@router.post("/prices")
async def coin_prices(request: Request):
    body = await parse_body(request, "coin_prices", CoinPricesRequest)
    return ok(await coins_service.get_coin_prices([c for c in body.coins if c]))
