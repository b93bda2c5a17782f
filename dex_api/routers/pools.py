# dex_api/routers/pools.py

from fastapi import APIRouter, Request

from dex_api.schemas.envelope import ok
from dex_api.schemas.requests import (
    BatchStatsRequest,
    CreatePoolRequest,
    DepositRequest,
    PublishLpCoinRequest,
    WithdrawRequest,
)
from dex_api.services import pools_service
from dex_api.validation import parse_body, require_sui_address

router = APIRouter(prefix="/api/pools", tags=["pools"])


@router.get("")
async def list_pools():
    """
    GET /api/pools
    Every pool with tvl, 24h volume, apr and 24h fees merged in.
    Stats are fetched in batches; a failed batch leaves its pools with zero stats.
    """
    return ok(await pools_service.list_pools())


@router.post("/batch-stats")
async def batch_stats(request: Request):
    body = await parse_body(request, "batch_stats", BatchStatsRequest)
    return ok(await pools_service.get_batch_pool_stats(body.poolIds))


@router.post("/deposit")
async def deposit(request: Request):
    """POST /api/pools/deposit -> {txBytes} for the wallet to sign."""
    body = await parse_body(request, "deposit", DepositRequest)
    tx_bytes = await pools_service.build_deposit_transaction(
        body.walletAddress, body.poolId, body.amounts_in_units(), body.slippage, body.referrer
    )
    return ok({"txBytes": tx_bytes})


@router.post("/withdraw")
async def withdraw(request: Request):
    """POST /api/pools/withdraw -> {txBytes} for the wallet to sign."""
    body = await parse_body(request, "withdraw", WithdrawRequest)
    tx_bytes = await pools_service.build_withdraw_transaction(
        body.walletAddress,
        body.poolId,
        body.lp_coin_units(),
        body.amounts_out_units(),
        body.slippage,
        body.referrer,
    )
    return ok({"txBytes": tx_bytes})


@router.post("/publish")
async def publish_lp_coin(request: Request):
    """
    POST /api/pools/publish
    First step of pool creation: publishes the LP coin package. The resulting
    create-pool capability id is then passed to /api/pools/create.
    """
    body = await parse_body(request, "publish_lp_coin", PublishLpCoinRequest)
    wallet = require_sui_address(body.walletAddress)
    return ok({"txBytes": await pools_service.build_publish_lp_coin_transaction(wallet, body.lpCoinDecimals)})


@router.post("/create")
async def create_pool(request: Request):
    body = await parse_body(request, "create_pool", CreatePoolRequest)
    return ok({"txBytes": await pools_service.build_create_pool_transaction(body.upstream_payload())})


# Declared before /{pool_id} so "user" is not captured as a pool id.
@router.get("/user/{address}")
async def user_lp_positions(address: str):
    wallet = require_sui_address(address)
    return ok(await pools_service.get_user_lp_positions(wallet))


@router.get("/{pool_id}")
async def get_pool(pool_id: str):
    """
    GET /api/pools/{id}
    Status codes:
      - 200: pool with tokens and 24h volume
      - 400: id is not an object id
      - 404: unknown pool
    """
    pid = require_sui_address(pool_id, "Pool ID")
    return ok(await pools_service.get_pool(pid))


@router.get("/{pool_id}/stats")
async def get_pool_stats(pool_id: str):
    pid = require_sui_address(pool_id, "Pool ID")
    return ok(await pools_service.get_pool_stats(pid))
