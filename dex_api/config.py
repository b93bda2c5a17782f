# dex_api/config.py
import os

# Upstream Aftermath API:
#   SUI_NETWORK: "mainnet" | "testnet"; picks the default base URL
#   AFTERMATH_API_URL: explicit override of the base URL
SUI_NETWORK = os.getenv("SUI_NETWORK", "mainnet").lower()
_NETWORK_API_URLS = {
    "mainnet": "https://aftermath.finance/api",
    "testnet": "https://testnet.aftermath.finance/api",
}
AFTERMATH_API_URL = os.getenv("AFTERMATH_API_URL") or _NETWORK_API_URLS.get(SUI_NETWORK, _NETWORK_API_URLS["mainnet"])
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

# Cache configuration:
#   CACHE_BACKEND: "none" | "memory" | "redis"
#   CACHE_CAPACITY: max number of items (memory backend only)
#   CACHE_TTL_*: TTL tiers in seconds used by the controllers
CACHE_BACKEND = os.getenv("CACHE_BACKEND", "memory").lower()
CACHE_CAPACITY = int(os.getenv("CACHE_CAPACITY", "10000"))
CACHE_TTL_SHORT = int(os.getenv("CACHE_TTL_SHORT", "60"))
CACHE_TTL_MEDIUM = int(os.getenv("CACHE_TTL_MEDIUM", "300"))
CACHE_TTL_LONG = int(os.getenv("CACHE_TTL_LONG", "3600"))
CACHE_CHECK_PERIOD_SECONDS = int(os.getenv("CACHE_CHECK_PERIOD_SECONDS", "60"))
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
REDIS_KEY_PREFIX = os.getenv("REDIS_KEY_PREFIX", "dex-api:")

# Retry: waits RETRY_BASE_DELAY_SECONDS * 2^attempt between attempts
RETRY_MAX_ATTEMPTS = int(os.getenv("RETRY_MAX_ATTEMPTS", "3"))
RETRY_BASE_DELAY_SECONDS = float(os.getenv("RETRY_BASE_DELAY_SECONDS", "1"))

POOL_STATS_BATCH_SIZE = int(os.getenv("POOL_STATS_BATCH_SIZE", "50"))
POOL_BATCH_DELAY_SECONDS = float(os.getenv("POOL_BATCH_DELAY_SECONDS", "0.5"))

# Read once at process start; change via environment variables.
COIN_LIST_REFRESH_SECONDS = int(os.getenv("COIN_LIST_REFRESH_SECONDS", "1800"))  # default 30 minutes
COIN_SEARCH_LIMIT = int(os.getenv("COIN_SEARCH_LIMIT", "100"))
DEFAULT_COIN_DECIMALS = int(os.getenv("DEFAULT_COIN_DECIMALS", "9"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))
