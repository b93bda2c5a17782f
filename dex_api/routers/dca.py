# dex_api/routers/dca.py

from fastapi import APIRouter

from dex_api.schemas.envelope import ok
from dex_api.services import dca_service
from dex_api.validation import require_sui_address

router = APIRouter(prefix="/api/dca", tags=["dca"])


@router.get("/user/{address}")
async def user_orders(address: str):
    """All DCA orders of a wallet, active first."""
    return ok(await dca_service.get_user_dca_orders(require_sui_address(address)))


@router.get("/user/{address}/active")
async def active_orders(address: str):
    return ok(await dca_service.get_active_dca_orders(require_sui_address(address)))


@router.get("/user/{address}/past")
async def past_orders(address: str):
    return ok(await dca_service.get_past_dca_orders(require_sui_address(address)))
