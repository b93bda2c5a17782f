# tests/conftest.py
import asyncio
import os
import pytest
from fastapi.testclient import TestClient

# Fast, deterministic settings; must be set before dex_api.config is imported.
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("RETRY_BASE_DELAY_SECONDS", "0")
os.environ.setdefault("POOL_BATCH_DELAY_SECONDS", "0")
os.environ.setdefault("POOL_STATS_BATCH_SIZE", "2")
os.environ.setdefault("CACHE_CHECK_PERIOD_SECONDS", "3600")
os.environ.setdefault("COIN_LIST_REFRESH_SECONDS", "3600")

from dex_api.main import app  # import after env is set
from dex_api.services import aftermath
from dex_api.services.cache_manager import cache_manager
from dex_api.services.coin_registry import coin_registry

from fakes import FakeAftermath


@pytest.fixture(autouse=True)
def _clean_state():
    """Every test starts with an empty cache and coin registry."""
    asyncio.run(cache_manager.flush_all())
    coin_registry.reset()
    yield
    asyncio.run(cache_manager.flush_all())
    coin_registry.reset()
    aftermath.set_client(None)


@pytest.fixture
def fake_sdk():
    fake = FakeAftermath()
    aftermath.set_client(fake)
    return fake


@pytest.fixture
def client(fake_sdk):
    """A FastAPI TestClient running the app lifespan against the fake upstream."""
    with TestClient(app) as c:
        yield c
