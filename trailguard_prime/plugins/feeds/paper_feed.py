# TRAILGUARD_FEAT: paper-feed-001
"""
TRAILGUARD PRIME - Paper Price Feed
===================================

Simulated price feed for paper trading, replays and tests.

Features:
- Manually set prices with native feed precision
- Timestamps taken from an injected clock
- Failure injection (raise on read)

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import logging
from decimal import Decimal
from typing import Optional, Union

from shared.trailguard_core.oracle_adapter import Clock, FeedReading, system_clock

logger = logging.getLogger("TRAILGUARD_PaperFeed")


class PaperPriceFeed:
    """
    In-memory price feed.

    Example:
        feed = PaperPriceFeed("ETH/USD", decimals=8)
        feed.set_price(2000.5)             # stamped with clock()
        feed.set_raw_price(0, updated_at=1) # invalid reading
    """

    def __init__(self, feed_id: str, decimals: int = 8, clock: Clock = system_clock):
        self.feed_id = feed_id
        self._decimals = decimals
        self._clock = clock

        self._raw_price = 0
        self._updated_at = 0
        self._failure: Optional[Exception] = None
        self._reads = 0

    def decimals(self) -> int:
        return self._decimals

    def set_price(self, price: Union[int, float, str, Decimal], updated_at: Optional[int] = None) -> int:
        """
        Set a human-readable price (e.g. 2000.5).

        Returns:
            Raw price at feed precision
        """
        raw = int(Decimal(str(price)) * (Decimal(10) ** self._decimals))
        self.set_raw_price(raw, updated_at)
        return raw

    def set_raw_price(self, raw_price: int, updated_at: Optional[int] = None) -> None:
        """Set the raw price at feed precision."""
        self._raw_price = raw_price
        self._updated_at = self._clock() if updated_at is None else updated_at
        logger.debug(f"{self.feed_id}: raw={raw_price} updated_at={self._updated_at}")

    def fail_with(self, error: Optional[Exception]) -> None:
        """Make subsequent reads raise `error` (None restores normal reads)."""
        self._failure = error

    def latest_price(self) -> FeedReading:
        self._reads += 1
        if self._failure is not None:
            raise self._failure
        return FeedReading(
            raw_price=self._raw_price,
            decimals=self._decimals,
            updated_at=self._updated_at,
        )

    @property
    def updated_at(self) -> int:
        return self._updated_at

    @property
    def reads(self) -> int:
        return self._reads

    def __repr__(self) -> str:
        return f"PaperPriceFeed({self.feed_id!r}, decimals={self._decimals})"


__all__ = ["PaperPriceFeed"]
