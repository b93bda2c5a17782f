# dex_api/main.py

from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dex_api.config import CORS_ORIGINS, LOG_LEVEL
from dex_api.errors import ApiError, BadRequestError, UpstreamError
from dex_api.routers import coins, dca, pools, swap
from dex_api.schemas.envelope import fail
from dex_api.services.aftermath import close_client, get_client, init_client
from dex_api.services.cache_manager import cache_manager
from dex_api.workers import CacheSweeper, CoinListRefresher

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

cache_sweeper = CacheSweeper()
coin_list_refresher = CoinListRefresher()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: the upstream client must be ready before any worker or request uses it
    await init_client()
    await cache_sweeper.start()
    await coin_list_refresher.start()
    try:
        yield
    finally:
        await coin_list_refresher.stop()
        await cache_sweeper.stop()
        await close_client()
        await cache_manager.aclose()


app = FastAPI(title="Sui DEX API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(pools.router)
app.include_router(swap.router)
app.include_router(swap.legacy_router)
app.include_router(coins.router)
app.include_router(dca.router)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if isinstance(exc, UpstreamError):
        # Upstream detail is logged, never echoed to the client
        logger.error("Upstream failure on %s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=fail("Upstream service error"))
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    validation_errors = exc.validation_errors if isinstance(exc, BadRequestError) else None
    return JSONResponse(status_code=exc.status_code, content=fail(exc.message, validation_errors=validation_errors))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [f"{'/'.join(map(str, e['loc']))}: {e['msg']}" for e in exc.errors()]
    return JSONResponse(status_code=400, content=fail("Invalid request", validation_errors=errors))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content=fail(message), headers=getattr(exc, "headers", None))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=fail("Internal server error"))


@app.get("/health")
async def health_check():
    try:
        upstream = "connected" if get_client().initialized else "initializing"
    except ApiError as e:
        upstream = e.message
    return {
        "status": "ok" if upstream == "connected" else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "upstream": upstream,
        "cache": await cache_manager.stats(),
    }
