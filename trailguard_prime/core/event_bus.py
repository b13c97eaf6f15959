# TRAILGUARD_FEAT: event-bus-001
"""
TRAILGUARD PRIME - Event Bus
============================

Async pub/sub for trailing-stop observability signals.

The engine emits synchronous EngineEvents; the coordinator wraps and
forwards them here so alerting, persistence and API push channels can
subscribe without touching the engine.

Features:
- Priority queue (triggers and settlements ahead of history samples)
- Subscriptions scoped by event type and/or order id
- Dead letter records for failed handlers
- Bounded event history

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import asyncio
import itertools
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Any, Callable, Coroutine, Deque, Dict, FrozenSet, Iterable, List, Optional

from shared.trailguard_core.trailing_stop_engine import EngineEvent, EngineEventType

logger = logging.getLogger("TRAILGUARD_EventBus")

_event_ids = itertools.count(1)


class EventType(Enum):
    """Event types published on the bus."""

    # Engine signals
    CONFIG_UPDATED = auto()
    STOP_PRICE_UPDATED = auto()
    TRIGGERED = auto()
    HISTORY_SAMPLE_APPENDED = auto()
    ORDER_REMOVED = auto()

    # Service signals
    UPDATE_FAILED = auto()
    SETTLEMENT_REJECTED = auto()
    SETTLEMENT_COMPLETED = auto()
    KEEPER_TICK = auto()

    # System events
    SYSTEM_START = auto()
    SYSTEM_STOP = auto()


class EventPriority(Enum):
    """Event processing priority."""

    CRITICAL = 0  # Triggers / settlements
    HIGH = 1      # Stop updates, failures
    NORMAL = 2    # Configuration
    LOW = 3       # History samples, ticks


_ENGINE_EVENT_MAP = {
    EngineEventType.CONFIG_UPDATED: (EventType.CONFIG_UPDATED, EventPriority.NORMAL),
    EngineEventType.STOP_PRICE_UPDATED: (EventType.STOP_PRICE_UPDATED, EventPriority.HIGH),
    EngineEventType.TRIGGERED: (EventType.TRIGGERED, EventPriority.CRITICAL),
    EngineEventType.HISTORY_SAMPLE_APPENDED: (EventType.HISTORY_SAMPLE_APPENDED, EventPriority.LOW),
    EngineEventType.ORDER_REMOVED: (EventType.ORDER_REMOVED, EventPriority.NORMAL),
}


@dataclass
class Event:
    """A signal about one order (or the system when order_id is None)."""

    event_type: EventType
    data: Dict[str, Any]
    source: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    priority: EventPriority = EventPriority.NORMAL
    event_id: str = field(default_factory=lambda: f"evt_{next(_event_ids)}")
    order_id: Optional[str] = None

    @classmethod
    def from_engine(cls, engine_event: EngineEvent, source: str = "engine") -> "Event":
        """Wrap an engine signal, stamping it with the engine clock."""
        event_type, priority = _ENGINE_EVENT_MAP[engine_event.event_type]
        return cls(
            event_type=event_type,
            data={"order_id": engine_event.order_id, **engine_event.data},
            source=source,
            timestamp=datetime.fromtimestamp(engine_event.timestamp, tz=timezone.utc),
            priority=priority,
            order_id=engine_event.order_id,
        )

    def to_dict(self) -> dict:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.name,
            "order_id": self.order_id,
            "priority": self.priority.name,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
        }


EventHandler = Callable[[Event], Coroutine[Any, Any, None]]


@dataclass
class Subscription:
    """
    Event subscription.

    None for event_types or order_ids means "all".
    """

    subscriber_id: str
    handler: EventHandler
    event_types: Optional[FrozenSet[EventType]] = None
    order_ids: Optional[FrozenSet[str]] = None
    filter_func: Optional[Callable[[Event], bool]] = None
    priority: int = 0

    def matches(self, event: Event) -> bool:
        if self.event_types is not None and event.event_type not in self.event_types:
            return False
        if self.order_ids is not None and event.order_id not in self.order_ids:
            return False
        return self.filter_func is None or self.filter_func(event)


@dataclass
class DeadLetter:
    """An event a handler failed to process."""

    event: Event
    subscriber_id: str
    error: str
    failed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class EventBus:
    """
    Async event bus for trailing-stop signals.

    `publish` queues for the background worker; `publish_sync` dispatches
    inline. Both record the event in history immediately.

    Example:
        bus = EventBus()

        async def on_trigger(event: Event):
            print(f"Order {event.order_id} triggered at {event.data['stop_price']}")

        bus.subscribe("alerts", {EventType.TRIGGERED}, on_trigger)
        await bus.start()
    """

    def __init__(self, max_queue_size: int = 10000, history_size: int = 1000):
        # Kept sorted by subscription priority
        self._subscriptions: List[Subscription] = []
        self._queue: asyncio.PriorityQueue = asyncio.PriorityQueue(maxsize=max_queue_size)
        self._dead_letter: List[DeadLetter] = []
        self._history: Deque[Event] = deque(maxlen=history_size)
        self._sequence = itertools.count()
        self._running = False
        self._worker_task: Optional[asyncio.Task] = None
        self._stats = {
            "events_published": 0,
            "events_delivered": 0,
            "events_failed": 0,
            "events_dropped": 0,
        }

        logger.info(f"EventBus initialized: queue={max_queue_size} history={history_size}")

    def subscribe(
        self,
        subscriber_id: str,
        event_types: Optional[Iterable[EventType]],
        handler: EventHandler,
        filter_func: Optional[Callable[[Event], bool]] = None,
        priority: int = 0,
        order_ids: Optional[Iterable[str]] = None,
    ) -> Subscription:
        """
        Subscribe to events, replacing any subscription with the same id.

        Args:
            subscriber_id: Unique subscriber identifier
            event_types: Event types to receive (None for all)
            handler: Async handler
            filter_func: Extra predicate applied after type/order scoping
            priority: Handler order (lower runs first)
            order_ids: Orders to receive events for (None for all)
        """
        self.unsubscribe(subscriber_id)

        subscription = Subscription(
            subscriber_id=subscriber_id,
            handler=handler,
            event_types=frozenset(event_types) if event_types is not None else None,
            order_ids=frozenset(order_ids) if order_ids is not None else None,
            filter_func=filter_func,
            priority=priority,
        )
        self._subscriptions.append(subscription)
        self._subscriptions.sort(key=lambda s: s.priority)

        types = sorted(e.name for e in subscription.event_types) if subscription.event_types else "ALL"
        logger.debug(f"Subscription added: {subscriber_id} -> {types}")
        return subscription

    def unsubscribe(self, subscriber_id: str) -> bool:
        """Remove a subscription."""
        before = len(self._subscriptions)
        self._subscriptions = [s for s in self._subscriptions if s.subscriber_id != subscriber_id]
        removed = len(self._subscriptions) < before
        if removed:
            logger.debug(f"Subscription removed: {subscriber_id}")
        return removed

    def _record(self, event: Event) -> None:
        self._history.append(event)
        self._stats["events_published"] += 1

    async def publish(self, event: Event) -> None:
        """Record an event and queue it for the worker."""
        self._record(event)
        try:
            self._queue.put_nowait((event.priority.value, next(self._sequence), event))
        except asyncio.QueueFull:
            self._stats["events_dropped"] += 1
            logger.warning(f"Event queue full, dropped {event.event_type.name} for {event.order_id}")
            return

        logger.debug(f"Event published: {event.event_type.name} order={event.order_id}")

    async def publish_sync(self, event: Event) -> int:
        """
        Record an event and dispatch it inline.

        Returns:
            Number of handlers that processed the event
        """
        self._record(event)
        return await self._dispatch(event)

    async def _dispatch(self, event: Event) -> int:
        delivered = 0
        for subscription in list(self._subscriptions):
            if not subscription.matches(event):
                continue
            try:
                await subscription.handler(event)
            except Exception as e:
                logger.error(f"Handler {subscription.subscriber_id} failed on {event.event_type.name}: {e}")
                self._dead_letter.append(DeadLetter(event, subscription.subscriber_id, str(e)))
                self._stats["events_failed"] += 1
            else:
                delivered += 1
                self._stats["events_delivered"] += 1
        return delivered

    async def start(self) -> None:
        """Start the background worker."""
        if self._running:
            return
        self._running = True
        self._worker_task = asyncio.create_task(self._worker())
        logger.info("EventBus started")

    async def stop(self) -> None:
        """Stop the worker after draining queued events."""
        self._running = False

        if self._worker_task:
            self._worker_task.cancel()
            try:
                await self._worker_task
            except asyncio.CancelledError:
                pass
            self._worker_task = None

        drained = 0
        while not self._queue.empty():
            _, _, event = self._queue.get_nowait()
            await self._dispatch(event)
            drained += 1

        logger.info(f"EventBus stopped (drained {drained})")

    async def _worker(self) -> None:
        while self._running:
            try:
                _, _, event = await self._queue.get()
                await self._dispatch(event)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Worker error: {e}")

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self._stats,
            "subscribers": len(self._subscriptions),
            "queue_size": self._queue.qsize(),
            "dead_letter_count": len(self._dead_letter),
            "history_size": len(self._history),
        }

    def get_history(
        self,
        event_type: Optional[EventType] = None,
        order_id: Optional[str] = None,
        limit: int = 100,
    ) -> List[Event]:
        """Recent events, oldest first, optionally filtered by type and order."""
        events = [
            e for e in self._history
            if (event_type is None or e.event_type == event_type)
            and (order_id is None or e.order_id == order_id)
        ]
        return events[-limit:]

    def clear_dead_letter(self) -> List[DeadLetter]:
        """Clear and return dead letter records."""
        letters, self._dead_letter = self._dead_letter, []
        return letters


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "EventType",
    "EventPriority",
    "Event",
    "EventHandler",
    "Subscription",
    "DeadLetter",
    "EventBus",
]
