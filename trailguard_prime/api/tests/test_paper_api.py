"""
Paper API Tests

Admin-gated price and balance controls for a paper runtime.
"""

import pytest
from httpx import AsyncClient

from trailguard_prime.api.dependencies import get_engine_runtime
from trailguard_prime.api.services.runtime import build_runtime
from trailguard_prime.core.config_manager import ConfigManager

E18 = 10 ** 18
USDC = 10 ** 6


# ==================== Feeds ====================


@pytest.mark.asyncio
async def test_set_feed_price(async_client: AsyncClient, admin_headers: dict, eth_feed):
    response = await async_client.put(
        "/api/v1/paper/feeds/ETH/USD", json={"price": "2050.5"}, headers=admin_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["feed_id"] == "ETH/USD"
    assert body["raw_price"] == 205_050_000_000
    assert body["decimals"] == 8
    assert eth_feed.latest_price().raw_price == 205_050_000_000


@pytest.mark.asyncio
async def test_set_feed_price_requires_admin(
    async_client: AsyncClient, alice_headers: dict, eth_feed
):
    anonymous = await async_client.put("/api/v1/paper/feeds/ETH/USD", json={"price": 1})
    assert anonymous.status_code == 401

    stranger = await async_client.put(
        "/api/v1/paper/feeds/ETH/USD", json={"price": 1}, headers=alice_headers
    )
    assert stranger.status_code == 403
    assert stranger.json()["detail"]["code"] == "UNAUTHORIZED"
    assert eth_feed.latest_price().raw_price == 2000 * 10 ** 8


@pytest.mark.asyncio
async def test_set_unknown_feed(async_client: AsyncClient, admin_headers: dict):
    response = await async_client.put(
        "/api/v1/paper/feeds/DOGE/USD", json={"price": 1}, headers=admin_headers
    )

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "FEED_NOT_FOUND"


@pytest.mark.asyncio
async def test_set_feed_price_must_be_positive(async_client: AsyncClient, admin_headers: dict):
    response = await async_client.put(
        "/api/v1/paper/feeds/ETH/USD", json={"price": 0}, headers=admin_headers
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_refresh_revives_stale_feed(
    async_client: AsyncClient, order_payload: dict, admin_headers: dict, eth_feed
):
    order_payload["update_frequency_sec"] = 0
    await async_client.put("/api/v1/orders/o1", json=order_payload)
    eth_feed.set_raw_price(2000 * 10 ** 8, updated_at=1)

    stale = await async_client.post("/api/v1/orders/o1/update")
    assert stale.status_code == 503

    await async_client.put(
        "/api/v1/paper/feeds/ETH/USD", json={"price": 2000}, headers=admin_headers
    )
    response = await async_client.post("/api/v1/orders/o1/update")

    assert response.status_code == 200
    assert response.json()["price"] == 2000 * E18


# ==================== Balances ====================


@pytest.mark.asyncio
async def test_mint_and_read_balance(async_client: AsyncClient, admin_headers: dict, runtime):
    response = await async_client.post(
        "/api/v1/paper/balances",
        json={"token": "USDC", "account": "taker", "amount": 1000 * USDC},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["balance"] == 6000 * USDC
    assert runtime.ledger.balance_of("USDC", "taker") == 6000 * USDC

    response = await async_client.get("/api/v1/paper/balances/USDC/taker")
    assert response.json() == {"token": "USDC", "account": "taker", "balance": 6000 * USDC}


@pytest.mark.asyncio
async def test_mint_requires_admin(async_client: AsyncClient, alice_headers: dict, runtime):
    response = await async_client.post(
        "/api/v1/paper/balances",
        json={"token": "WETH", "account": "alice", "amount": E18},
        headers=alice_headers,
    )

    assert response.status_code == 403
    assert runtime.ledger.balance_of("WETH", "alice") == E18


@pytest.mark.asyncio
async def test_mint_zero_rejected(async_client: AsyncClient, admin_headers: dict):
    response = await async_client.post(
        "/api/v1/paper/balances",
        json={"token": "WETH", "account": "alice", "amount": 0},
        headers=admin_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_live_runtime_refuses_paper_controls(app, async_client: AsyncClient, admin_headers: dict):
    config = ConfigManager()
    config.load_dict({"mode": "live", "engine": {"admin": "ops"}})
    live = build_runtime(config)

    async def override_get_engine_runtime():
        return live

    app.dependency_overrides[get_engine_runtime] = override_get_engine_runtime

    response = await async_client.post(
        "/api/v1/paper/balances",
        json={"token": "WETH", "account": "alice", "amount": E18},
        headers=admin_headers,
    )

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "PAPER_MODE_REQUIRED"
