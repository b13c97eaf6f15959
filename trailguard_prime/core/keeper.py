# TRAILGUARD_FEAT: keeper-001
"""
TRAILGUARD PRIME - Keeper Service
=================================

Periodic driver that refreshes stop prices.

Each tick calls `update` for every watched order. Failures are logged and
the order is simply retried on the next tick; nothing is retried inside
a tick.

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

from shared.trailguard_core.exceptions import RateLimitedError, TrailGuardError, is_critical

from .coordinator import OrderCoordinator
from .event_bus import Event, EventPriority, EventType

logger = logging.getLogger("TRAILGUARD_Keeper")


class KeeperService:
    """
    Asyncio keeper loop.

    Example:
        keeper = KeeperService(coordinator, keeper_id="keeper-1", interval_sec=60)
        await keeper.start()
        ...
        await keeper.stop()

    With no watch list, every configured order is updated.
    """

    def __init__(
        self,
        coordinator: OrderCoordinator,
        keeper_id: str = "keeper",
        interval_sec: float = 60.0,
        orders: Optional[List[str]] = None,
    ):
        self._coordinator = coordinator
        self._keeper_id = keeper_id
        self._interval = interval_sec
        self._watched: Set[str] = set(orders or [])

        self._running = False
        self._task: Optional[asyncio.Task] = None
        self._last_tick_at: Optional[datetime] = None

        self._stats = {
            "ticks": 0,
            "updated": 0,
            "rate_limited": 0,
            "failed": 0,
            "triggered_seen": 0,
        }

        logger.info(f"KeeperService initialized: id={keeper_id} interval={interval_sec}s")

    @property
    def is_running(self) -> bool:
        return self._running

    def watch(self, order_id: str) -> None:
        self._watched.add(order_id)

    def unwatch(self, order_id: str) -> None:
        self._watched.discard(order_id)

    def _targets(self) -> List[str]:
        configured = self._coordinator.engine.list_orders()
        if not self._watched:
            return configured
        return [o for o in configured if o in self._watched]

    async def run_once(self) -> Dict[str, str]:
        """
        Run a single keeper tick.

        Returns:
            Mapping of order id to outcome ("updated", "triggered" or an error code)
        """
        outcomes: Dict[str, str] = {}

        for order_id in self._targets():
            # Triggered orders are not re-trailed
            check = await self._coordinator.check(order_id)
            if check.triggered:
                outcomes[order_id] = "triggered"
                self._stats["triggered_seen"] += 1
                logger.info(
                    f"Order {order_id} triggered: price={check.current_price} "
                    f"stop={check.stop_price}"
                )
                continue

            try:
                await self._coordinator.update(order_id, caller=self._keeper_id)
                outcomes[order_id] = "updated"
                self._stats["updated"] += 1
            except RateLimitedError as e:
                outcomes[order_id] = e.code
                self._stats["rate_limited"] += 1
                logger.debug(f"Keeper skip {order_id}: {e}")
            except TrailGuardError as e:
                outcomes[order_id] = e.code or type(e).__name__
                self._stats["failed"] += 1
                if is_critical(e):
                    logger.error(f"Keeper update failed for {order_id}: {e}")
                else:
                    logger.warning(f"Keeper update failed for {order_id}: {e}")

        self._stats["ticks"] += 1
        self._last_tick_at = datetime.now(timezone.utc)

        await self._coordinator.event_bus.publish(Event(
            event_type=EventType.KEEPER_TICK,
            data={"keeper_id": self._keeper_id, "outcomes": outcomes},
            source="keeper",
            priority=EventPriority.LOW,
        ))

        return outcomes

    async def start(self) -> None:
        """Start the background loop."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._loop())
        logger.info("KeeperService started")

    async def stop(self) -> None:
        """Stop the background loop."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("KeeperService stopped")

    async def _loop(self) -> None:
        while self._running:
            try:
                await self.run_once()
                await asyncio.sleep(self._interval)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Keeper loop error: {e}")
                await asyncio.sleep(self._interval)

    def get_statistics(self) -> Dict[str, object]:
        return {
            **self._stats,
            "keeper_id": self._keeper_id,
            "interval_sec": self._interval,
            "watched": sorted(self._watched),
            "last_tick_at": self._last_tick_at.isoformat() if self._last_tick_at else None,
        }


__all__ = ["KeeperService"]
