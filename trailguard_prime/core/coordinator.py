# TRAILGUARD_FEAT: coordinator-001
"""
TRAILGUARD PRIME - Order Coordinator
====================================

Service wrapper around the synchronous TrailingStopEngine.

Responsibilities:
- Forward engine events to the async EventBus
- Per-order settlement in-flight guard
- Swap router allow-list check
- Asset movement on the ledger once a settlement plan is accepted

The engine decides whether a fill is acceptable; the coordinator only
moves assets for accepted plans and reverses a half-applied transfer.

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Set

from shared.trailguard_core.exceptions import (
    RouterNotAllowedError,
    SettlementError,
    SettlementInProgressError,
    TrailGuardError,
    is_critical,
)
from shared.trailguard_core.trailing_stop_engine import (
    EngineEvent,
    EngineEventType,
    OrderConfig,
    OrderParams,
    SettlementPlan,
    TrailingStopEngine,
    TriggerCheck,
    UpdateResult,
)

from .event_bus import Event, EventBus, EventPriority, EventType

logger = logging.getLogger("TRAILGUARD_Coordinator")


class AssetLedger(Protocol):
    """Custody interface used for settlement."""

    def transfer(self, asset: str, sender: str, recipient: str, amount: int) -> Any:
        ...


@dataclass
class OrderAssets:
    """Asset pair an order settles in."""

    maker_asset: str
    taker_asset: str


@dataclass
class SettlementReceipt:
    """Completed settlement."""

    plan: SettlementPlan
    maker: str
    counterparty: str
    maker_asset: str
    taker_asset: str
    router: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "order_id": self.plan.order_id,
            "maker": self.maker,
            "counterparty": self.counterparty,
            "maker_asset": self.maker_asset,
            "taker_asset": self.taker_asset,
            "making_amount": self.plan.making_amount,
            "taking_amount": self.plan.taking_amount,
            "price": self.plan.price,
            "twap": self.plan.twap,
            "expected_price": self.plan.expected_price,
            "slippage_bps": self.plan.slippage_bps,
            "stop_price": self.plan.stop_price,
            "router": self.router,
        }


class OrderCoordinator:
    """
    Async facade over the engine for keepers and the HTTP API.

    Example:
        coordinator = OrderCoordinator(engine, ledger, bus)
        await coordinator.configure("order-1", params, maker_asset="WETH", taker_asset="USDC")
        await coordinator.update("order-1", caller="keeper-1")
        receipt = await coordinator.settle("order-1", making, taking, counterparty="taker")
    """

    def __init__(
        self,
        engine: TrailingStopEngine,
        ledger: Optional[AssetLedger] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self._engine = engine
        self._ledger = ledger
        self._event_bus = event_bus or EventBus()

        self._assets: Dict[str, OrderAssets] = {}
        self._in_flight: Set[str] = set()
        self._pending: List[EngineEvent] = []

        self._stats = {
            "updates_failed": 0,
            "settlements_completed": 0,
            "settlements_rejected": 0,
        }

        self._engine.on_event(self._pending.append)

        logger.info("OrderCoordinator initialized")

    @property
    def engine(self) -> TrailingStopEngine:
        return self._engine

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    async def _flush(self) -> None:
        """Publish engine events collected since the last flush."""
        while self._pending:
            engine_event = self._pending.pop(0)
            await self._event_bus.publish(Event.from_engine(engine_event))

    def _discard_pending(self, order_id: str, event_type: EngineEventType) -> None:
        """Drop queued engine events of one type for an order."""
        self._pending[:] = [
            e for e in self._pending
            if not (e.order_id == order_id and e.event_type == event_type)
        ]

    async def _publish(
        self,
        event_type: EventType,
        order_id: str,
        data: Dict[str, Any],
        priority: EventPriority = EventPriority.HIGH,
    ) -> None:
        await self._event_bus.publish(Event(
            event_type=event_type,
            data={"order_id": order_id, **data},
            source="coordinator",
            priority=priority,
            order_id=order_id,
        ))

    # ==================== Lifecycle ====================

    async def configure(
        self,
        order_id: str,
        params: OrderParams,
        caller: Optional[str] = None,
        maker_asset: Optional[str] = None,
        taker_asset: Optional[str] = None,
    ) -> OrderConfig:
        """Configure or replace an order and record its asset pair."""
        try:
            cfg = self._engine.configure(order_id, params, caller=caller)
        finally:
            await self._flush()

        if maker_asset and taker_asset:
            self._assets[order_id] = OrderAssets(maker_asset, taker_asset)
        else:
            self._assets.pop(order_id, None)
        return cfg

    async def update(self, order_id: str, caller: Optional[str] = None) -> UpdateResult:
        """Run one stop update; failures are published before re-raising."""
        try:
            return self._engine.update(order_id, caller=caller)
        except TrailGuardError as e:
            self._stats["updates_failed"] += 1
            await self._publish(
                EventType.UPDATE_FAILED,
                order_id,
                {"code": e.code, "error": e.message, "caller": caller, "critical": is_critical(e)},
            )
            raise
        finally:
            await self._flush()

    async def check(self, order_id: str) -> TriggerCheck:
        """Trigger status at the current oracle price."""
        return self._engine.is_triggered(order_id)

    async def remove(self, order_id: str, caller: Optional[str] = None) -> None:
        if order_id in self._in_flight:
            raise SettlementInProgressError(f"Settlement in progress for {order_id}")
        try:
            self._engine.remove(order_id, caller=caller)
        finally:
            await self._flush()
        self._assets.pop(order_id, None)

    # ==================== Settlement ====================

    async def settle(
        self,
        order_id: str,
        making_amount: int,
        taking_amount: int,
        counterparty: str,
        router: Optional[str] = None,
    ) -> SettlementReceipt:
        """
        Validate and execute a fill.

        Args:
            order_id: Order identifier
            making_amount: Maker asset amount offered to the counterparty
            taking_amount: Proposed taker asset amount (bounds slippage)
            counterparty: Account receiving the maker asset
            router: Swap router used for the fill, checked against the allow-list

        Raises:
            SettlementInProgressError, RouterNotAllowedError, SettlementError,
            and every engine settlement error
        """
        if order_id in self._in_flight:
            raise SettlementInProgressError(f"Settlement in progress for {order_id}")

        registry = self._engine.registry
        if router is not None and (registry is None or not registry.is_router_allowed(router)):
            raise RouterNotAllowedError(f"Router {router} is not allowed", router=router, caller=router)

        self._in_flight.add(order_id)
        try:
            try:
                plan = self._engine.prepare_settlement(
                    order_id, making_amount, taking_amount, counterparty=counterparty
                )
                receipt = self._execute(plan, counterparty, router)
            except TrailGuardError as e:
                self._stats["settlements_rejected"] += 1
                self._discard_pending(order_id, EngineEventType.TRIGGERED)
                await self._flush()
                await self._publish(
                    EventType.SETTLEMENT_REJECTED,
                    order_id,
                    {"code": e.code, "error": e.message, "counterparty": counterparty},
                )
                raise

            await self._flush()
            self._engine.remove(order_id, caller=receipt.maker)
            self._assets.pop(order_id, None)
            await self._flush()
        finally:
            self._in_flight.discard(order_id)

        self._stats["settlements_completed"] += 1
        logger.info(
            f"Settlement completed: {order_id} {plan.making_amount} {receipt.maker_asset} -> "
            f"{counterparty}, {plan.taking_amount} {receipt.taker_asset} -> {receipt.maker}"
        )
        await self._publish(
            EventType.SETTLEMENT_COMPLETED,
            order_id,
            receipt.to_dict(),
            priority=EventPriority.CRITICAL,
        )
        return receipt

    def _execute(
        self,
        plan: SettlementPlan,
        counterparty: str,
        router: Optional[str],
    ) -> SettlementReceipt:
        cfg = self._engine.get_config(plan.order_id)
        assets = self._assets.get(plan.order_id)

        if self._ledger is None or assets is None or cfg.maker is None:
            raise SettlementError(
                f"Order {plan.order_id} has no ledger, asset pair or maker to settle with",
                code="SETTLEMENT_UNAVAILABLE",
            )

        self._ledger.transfer(assets.maker_asset, cfg.maker, counterparty, plan.making_amount)
        try:
            self._ledger.transfer(assets.taker_asset, counterparty, cfg.maker, plan.taking_amount)
        except TrailGuardError:
            self._ledger.transfer(assets.maker_asset, counterparty, cfg.maker, plan.making_amount)
            raise

        return SettlementReceipt(
            plan=plan,
            maker=cfg.maker,
            counterparty=counterparty,
            maker_asset=assets.maker_asset,
            taker_asset=assets.taker_asset,
            router=router,
        )

    # ==================== Accessors ====================

    def get_assets(self, order_id: str) -> Optional[OrderAssets]:
        return self._assets.get(order_id)

    def is_settling(self, order_id: str) -> bool:
        return order_id in self._in_flight

    def get_statistics(self) -> Dict[str, Any]:
        return {
            **self._stats,
            "in_flight": len(self._in_flight),
            "engine": self._engine.get_statistics(),
            "event_bus": self._event_bus.get_stats(),
        }


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "AssetLedger",
    "OrderAssets",
    "SettlementReceipt",
    "OrderCoordinator",
]
