# dex_api/routers/swap.py

import logging
from typing import Optional

from fastapi import APIRouter, Request

from dex_api.errors import BadRequestError
from dex_api.schemas.envelope import ok
from dex_api.schemas.requests import LegacySwapRequest, SwapTransactionRequest
from dex_api.services import swap_service
from dex_api.services.coin_registry import coin_registry
from dex_api.services.formatters import normalize_address, to_base_units
from dex_api.validation import parse_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/swap", tags=["swap"])

# Top-level aliases kept for older frontend builds.
legacy_router = APIRouter(prefix="/api", tags=["legacy"])


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise BadRequestError(f"{name} must be an integer amount in base units")
    if value <= 0:
        raise BadRequestError(f"{name} must be positive")
    return value


def _base_units(raw) -> int:
    try:
        return to_base_units(raw)
    except ValueError:
        raise BadRequestError("Invalid amount value")


@router.get("/quote")
async def get_quote(
    coinInType: Optional[str] = None,
    coinOutType: Optional[str] = None,
    coinInAmount: Optional[str] = None,
    coinOutAmount: Optional[str] = None,
    slippage: Optional[float] = None,
):
    """
    GET /api/swap/quote
    Exact input when coinInAmount is given, otherwise exact output (coinOutAmount + slippage).
    Amounts are integer base units. Quotes are never cached.
    """
    if coinInAmount:
        if not coinInType or not coinOutType:
            raise BadRequestError("coinInType, coinOutType, and coinInAmount are required for exact input quotes")
        data = await swap_service.get_quote(
            coinInType, coinOutType, coin_in_amount=_positive_int("coinInAmount", coinInAmount)
        )
    elif coinOutAmount:
        if not coinInType or not coinOutType or slippage is None:
            raise BadRequestError(
                "coinInType, coinOutType, coinOutAmount, and slippage are required for exact output quotes"
            )
        data = await swap_service.get_quote(
            coinInType,
            coinOutType,
            coin_out_amount=_positive_int("coinOutAmount", coinOutAmount),
            slippage=slippage,
        )
    else:
        raise BadRequestError("Either coinInAmount or coinOutAmount must be provided")
    return ok(data)


@router.get("/protocols")
async def get_protocols():
    return ok(await swap_service.get_supported_protocols())


@router.get("/volume24h")
async def get_volume_24h():
    return ok(await swap_service.get_router_volume_24h())


@router.get("/tokens")
async def get_tokens():
    return ok(await swap_service.get_supported_tokens())


@router.get("/search")
async def search(query: Optional[str] = None):
    return ok(await swap_service.search_tokens(query))


@router.post("/transaction")
async def create_transaction(request: Request):
    """POST /api/swap/transaction -> {txBytes, route}; amount is a human decimal of fromToken."""
    body = await parse_body(request, "swap_transaction", SwapTransactionRequest)
    data = await swap_service.create_swap_transaction(
        normalize_address(body.walletAddress),
        body.fromToken,
        body.toToken,
        _base_units(body.amount),
        body.slippage,
    )
    return ok(data)


@legacy_router.post("/swap")
async def legacy_swap(request: Request):
    """
    POST /api/swap (legacy)
    Same as /api/swap/transaction with the older field names; txBytes is
    also returned at the top level for older clients.
    """
    body = await parse_body(request, "legacy_swap", LegacySwapRequest)
    logger.info(
        "Received swap request: %s -> %s amount: %s slippage: %s",
        body.coinInType, body.coinOutType, body.amountIn, body.slippage,
    )
    data = await swap_service.create_swap_transaction(
        normalize_address(body.walletAddress),
        body.coinInType,
        body.coinOutType,
        _base_units(body.amountIn),
        body.slippage,
    )
    return ok(data, txBytes=data["txBytes"])


@legacy_router.get("/supported-tokens")
async def legacy_supported_tokens():
    return [t["type"] for t in await coin_registry.supported()]


@legacy_router.get("/search-tokens")
async def legacy_search_tokens(query: Optional[str] = None):
    return await coin_registry.search(query or "")
