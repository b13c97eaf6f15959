"""
Test Configuration and Fixtures

Shared fixtures for TRAILGUARD PRIME API tests.
Provides an isolated runtime with paper feeds and a funded paper ledger.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from trailguard_prime.api.dependencies import get_engine_runtime
from trailguard_prime.api.main import create_app
from trailguard_prime.api.services.runtime import EngineRuntime, build_runtime
from trailguard_prime.core.config_manager import ConfigManager

E18 = 10 ** 18
USDC = 10 ** 6


# ==================== Runtime Fixtures ====================


@pytest.fixture(scope="function")
def runtime() -> EngineRuntime:
    """Runtime with ETH/USD at 2000 and alice/taker balances."""
    config = ConfigManager()
    config.load_dict({
        "mode": "paper",
        "engine": {"admin": "ops", "operators": ["risk-desk"], "routers": ["router-1"]},
        "feeds": [{"feed_id": "ETH/USD", "decimals": 8, "price": 2000.0}],
    })
    runtime = build_runtime(config)
    runtime.ledger.mint("WETH", "alice", E18)
    runtime.ledger.mint("USDC", "taker", 5000 * USDC)
    return runtime


@pytest.fixture(scope="function")
def eth_feed(runtime):
    """The runtime's ETH/USD paper feed."""
    return runtime.registry.get_feed("ETH/USD")


# ==================== Application Fixtures ====================


@pytest.fixture(scope="function")
def app(runtime) -> FastAPI:
    """Create FastAPI app bound to the test runtime."""
    test_app = create_app()

    async def override_get_engine_runtime():
        return runtime

    test_app.dependency_overrides[get_engine_runtime] = override_get_engine_runtime
    return test_app


@pytest_asyncio.fixture(scope="function")
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ==================== Order Fixtures ====================


@pytest.fixture(scope="function")
def order_payload() -> dict:
    """SELL order owned by alice, stop 1990, settling WETH for USDC."""
    return {
        "oracle": "ETH/USD",
        "initial_stop_price": 1990 * E18,
        "order_type": "SELL",
        "taker_decimals": 6,
        "maker": "alice",
        "maker_asset": "WETH",
        "taker_asset": "USDC",
    }


@pytest.fixture(scope="function")
def alice_headers() -> dict:
    return {"X-Caller-Id": "alice"}


@pytest.fixture(scope="function")
def admin_headers() -> dict:
    return {"X-Caller-Id": "ops"}
