"""
Tests for Order Coordinator
===========================

Tests event forwarding, the settlement in-flight guard, router checks and
ledger movements.
"""

import asyncio

import pytest

from shared.trailguard_core.exceptions import (
    NotTriggeredError,
    RateLimitedError,
    RouterNotAllowedError,
    SettlementError,
    SettlementInProgressError,
)
from trailguard_prime.core.coordinator import OrderCoordinator
from trailguard_prime.core.event_bus import EventBus, EventType
from trailguard_prime.plugins.ledger.paper_ledger import PaperLedger

E18 = 10 ** 18
USDC = 10 ** 6


class YieldingEventBus(EventBus):
    """Bus that yields to the loop on every publish."""

    async def publish(self, event):
        await asyncio.sleep(0)
        await super().publish(event)


@pytest.fixture
def ledger():
    ledger = PaperLedger()
    ledger.mint("WETH", "alice", E18)
    ledger.mint("USDC", "taker", 5000 * USDC)
    return ledger


@pytest.fixture
def coordinator(engine, ledger):
    return OrderCoordinator(engine, ledger, YieldingEventBus())


@pytest.fixture
def configure_triggered(coordinator, make_params, feed):
    async def _configure(**overrides):
        values = dict(initial_stop_price=1990 * E18, taker_decimals=6, maker="alice")
        values.update(overrides)
        await coordinator.configure(
            "o1", make_params(**values), maker_asset="WETH", taker_asset="USDC"
        )
        feed.set_price(1980)
    return _configure


class TestEventForwarding:
    """Tests for engine-to-bus forwarding."""

    @pytest.mark.asyncio
    async def test_configure_publishes_engine_events(self, coordinator, make_params):
        await coordinator.configure("o1", make_params())

        history = coordinator.event_bus.get_history(order_id="o1")
        assert [e.event_type for e in history] == [
            EventType.CONFIG_UPDATED,
            EventType.HISTORY_SAMPLE_APPENDED,
        ]

    @pytest.mark.asyncio
    async def test_update_failure_published(self, coordinator, make_params):
        await coordinator.configure("o1", make_params())

        with pytest.raises(RateLimitedError):
            await coordinator.update("o1", caller="keeper-1")

        failed = coordinator.event_bus.get_history(event_type=EventType.UPDATE_FAILED)
        assert failed[0].data["code"] == "RATE_LIMITED"
        assert failed[0].data["caller"] == "keeper-1"

    @pytest.mark.asyncio
    async def test_update_success(self, coordinator, make_params, feed, clock):
        await coordinator.configure("o1", make_params())
        clock.advance(61)
        feed.set_price(2100)

        result = await coordinator.update("o1")
        assert result.new_stop_price == 2058 * E18

        updated = coordinator.event_bus.get_history(event_type=EventType.STOP_PRICE_UPDATED)
        assert updated[0].data["new_stop"] == 2058 * E18


class TestSettlement:
    """Tests for settlement execution."""

    @pytest.mark.asyncio
    async def test_settle_moves_assets(self, coordinator, configure_triggered, ledger, engine):
        await configure_triggered()

        receipt = await coordinator.settle("o1", E18, 2000 * USDC, counterparty="taker")

        assert receipt.plan.taking_amount == 1980 * USDC
        assert ledger.balance_of("WETH", "alice") == 0
        assert ledger.balance_of("WETH", "taker") == E18
        assert ledger.balance_of("USDC", "alice") == 1980 * USDC
        assert ledger.balance_of("USDC", "taker") == 3020 * USDC
        assert not engine.is_configured("o1")

        types = [e.event_type for e in coordinator.event_bus.get_history(order_id="o1")]
        assert EventType.TRIGGERED in types
        assert types[-1] == EventType.SETTLEMENT_COMPLETED

    @pytest.mark.asyncio
    async def test_rejected_settlement_moves_nothing(self, coordinator, make_params, ledger):
        await coordinator.configure(
            "o1", make_params(taker_decimals=6, maker="alice"),
            maker_asset="WETH", taker_asset="USDC",
        )

        with pytest.raises(NotTriggeredError):
            await coordinator.settle("o1", E18, 2000 * USDC, counterparty="taker")

        assert ledger.balance_of("WETH", "alice") == E18
        rejected = coordinator.event_bus.get_history(event_type=EventType.SETTLEMENT_REJECTED)
        assert rejected[0].data["code"] == "NOT_TRIGGERED"
        assert not coordinator.is_settling("o1")

    @pytest.mark.asyncio
    async def test_counterparty_short_reverts_maker_leg(self, coordinator, configure_triggered, ledger):
        await configure_triggered()

        with pytest.raises(SettlementError):
            await coordinator.settle("o1", E18, 2000 * USDC, counterparty="broke")

        assert ledger.balance_of("WETH", "alice") == E18
        assert ledger.balance_of("WETH", "broke") == 0

        types = [e.event_type for e in coordinator.event_bus.get_history(order_id="o1")]
        assert EventType.TRIGGERED not in types
        assert types[-1] == EventType.SETTLEMENT_REJECTED

    @pytest.mark.asyncio
    async def test_reconfigure_without_assets_clears_pair(
        self, coordinator, configure_triggered, make_params, ledger
    ):
        await configure_triggered()
        assert coordinator.get_assets("o1").maker_asset == "WETH"

        await coordinator.configure(
            "o1",
            make_params(initial_stop_price=1990 * E18, taker_decimals=6, maker="alice"),
            caller="alice",
        )
        assert coordinator.get_assets("o1") is None

        with pytest.raises(SettlementError) as exc_info:
            await coordinator.settle("o1", E18, 2000 * USDC, counterparty="taker")
        assert exc_info.value.code == "SETTLEMENT_UNAVAILABLE"
        assert ledger.balance_of("WETH", "alice") == E18

    @pytest.mark.asyncio
    async def test_settle_without_assets(self, coordinator, make_params, feed):
        await coordinator.configure(
            "o1", make_params(initial_stop_price=1990 * E18, taker_decimals=6, maker="alice")
        )
        feed.set_price(1980)

        with pytest.raises(SettlementError) as exc_info:
            await coordinator.settle("o1", E18, 2000 * USDC, counterparty="taker")
        assert exc_info.value.code == "SETTLEMENT_UNAVAILABLE"


class TestGuards:
    """Tests for router and in-flight guards."""

    @pytest.mark.asyncio
    async def test_unknown_router_rejected(self, coordinator, configure_triggered):
        await configure_triggered()
        with pytest.raises(RouterNotAllowedError):
            await coordinator.settle("o1", E18, 2000 * USDC, counterparty="taker", router="evil")

    @pytest.mark.asyncio
    async def test_allowed_router_accepted(self, coordinator, configure_triggered):
        await configure_triggered()
        receipt = await coordinator.settle(
            "o1", E18, 2000 * USDC, counterparty="taker", router="router-1"
        )
        assert receipt.router == "router-1"

    @pytest.mark.asyncio
    async def test_concurrent_settlement_rejected(self, coordinator, configure_triggered):
        await configure_triggered()

        results = await asyncio.gather(
            coordinator.settle("o1", E18, 2000 * USDC, counterparty="taker"),
            coordinator.settle("o1", E18, 2000 * USDC, counterparty="taker"),
            return_exceptions=True,
        )

        assert results[0].plan.order_id == "o1"
        assert isinstance(results[1], SettlementInProgressError)
        assert coordinator.get_statistics()["settlements_completed"] == 1

    @pytest.mark.asyncio
    async def test_remove_blocked_while_settling(self, coordinator, configure_triggered):
        await configure_triggered()

        settle = asyncio.ensure_future(
            coordinator.settle("o1", E18, 2000 * USDC, counterparty="taker")
        )
        await asyncio.sleep(0)
        with pytest.raises(SettlementInProgressError):
            await coordinator.remove("o1", caller="alice")
        await settle
