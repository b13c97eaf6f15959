"""
TRAILGUARD v1.0 - Price History Store
======================================

Per-order, time-bounded sequence of canonical price samples.

The store is bounded by time only: every append first drops samples older
than the order's window, then adds the new one. There is no count cap
inside the window.

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

logger = logging.getLogger("TRAILGUARD_History")


@dataclass(frozen=True)
class PriceSample:
    """A canonical (18-decimal) price observation."""

    price: int
    timestamp: int

    def to_dict(self) -> dict:
        return {"price": self.price, "timestamp": self.timestamp}


class PriceHistoryStore:
    """
    Rolling price history keyed by order id.

    Example:
        store = PriceHistoryStore()
        store.seed("order-1", PriceSample(price=2000 * 10**18, timestamp=now))
        store.append("order-1", PriceSample(price, now + 60), window=900, now=now + 60)

        samples = store.get("order-1")
    """

    def __init__(self):
        self._history: Dict[str, List[PriceSample]] = {}

    def seed(self, order_id: str, sample: PriceSample) -> None:
        """Reset an order's history to exactly one sample."""
        self._history[order_id] = [sample]
        logger.debug(f"History seeded for {order_id}: {sample.price} @ {sample.timestamp}")

    def preview(self, order_id: str, sample: PriceSample, window: int, now: int) -> List[PriceSample]:
        """History as append() would leave it, without storing anything."""
        cutoff = now - window
        kept = [s for s in self._history.get(order_id, []) if s.timestamp >= cutoff]
        kept.append(sample)
        return kept

    def append(self, order_id: str, sample: PriceSample, window: int, now: int) -> int:
        """
        Prune samples older than the window, then append.

        Args:
            order_id: Order identifier
            sample: New observation
            window: Window length in seconds
            now: Current time (unix seconds)

        Returns:
            Number of samples pruned
        """
        cutoff = now - window
        existing = self._history.get(order_id, [])

        kept = [s for s in existing if s.timestamp >= cutoff]
        pruned = len(existing) - len(kept)

        kept.append(sample)
        self._history[order_id] = kept

        if pruned:
            logger.debug(f"History for {order_id}: pruned {pruned}, size={len(kept)}")

        return pruned

    def get(self, order_id: str) -> List[PriceSample]:
        """Live samples for an order, oldest first."""
        return list(self._history.get(order_id, []))

    def latest(self, order_id: str):
        """Most recent sample or None."""
        samples = self._history.get(order_id)
        return samples[-1] if samples else None

    def size(self, order_id: str) -> int:
        return len(self._history.get(order_id, []))

    def clear(self, order_id: str) -> None:
        """Drop all samples for an order."""
        self._history.pop(order_id, None)

    def __contains__(self, order_id: str) -> bool:
        return order_id in self._history


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "PriceSample",
    "PriceHistoryStore",
]
