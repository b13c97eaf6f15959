"""
TRAILGUARD v1.0 - Price Oracle Adapter
=======================================

Reads a raw (price, decimals, updated_at) triple from an external price
feed, rejects non-positive or stale readings and rescales the price to
the canonical 18-decimal fixed-point representation.

Fetches are single-attempt: any failure aborts the calling operation and
is surfaced to the caller, who may try again on a later tick.

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Protocol, runtime_checkable

from .constants import CANONICAL_DECIMALS, DEFAULT_ORACLE_HEARTBEAT_SEC
from .exceptions import (
    InvalidOraclePriceError,
    OracleUnavailableError,
    StaleOracleError,
)

if TYPE_CHECKING:
    from .registry import EngineRegistry

logger = logging.getLogger("TRAILGUARD_Oracle")

# Unix seconds source; injected so simulations can drive time
Clock = Callable[[], int]


def system_clock() -> int:
    """Wall clock in whole unix seconds."""
    return int(time.time())


@dataclass(frozen=True)
class FeedReading:
    """Raw reading returned by a price feed."""

    raw_price: int
    decimals: int
    updated_at: int


@runtime_checkable
class PriceFeed(Protocol):
    """Interface consumed from an external price feed."""

    feed_id: str

    def decimals(self) -> int:
        ...

    def latest_price(self) -> FeedReading:
        ...


def rescale_to_canonical(raw_price: int, source_decimals: int) -> int:
    """Rescale a feed price from its native precision to 18 decimals."""
    if source_decimals < CANONICAL_DECIMALS:
        return raw_price * 10 ** (CANONICAL_DECIMALS - source_decimals)
    if source_decimals > CANONICAL_DECIMALS:
        return raw_price // 10 ** (source_decimals - CANONICAL_DECIMALS)
    return raw_price


class PriceOracleAdapter:
    """
    Validating reader for price feeds.

    Example:
        adapter = PriceOracleAdapter(registry, clock=system_clock)
        price = adapter.fetch(feed)  # 18-decimal int
    """

    def __init__(
        self,
        registry: Optional["EngineRegistry"] = None,
        clock: Clock = system_clock,
    ):
        self._registry = registry
        self._clock = clock

        self._stats = {
            "fetches": 0,
            "stale": 0,
            "invalid": 0,
            "unavailable": 0,
        }

    def heartbeat_for(self, feed: PriceFeed) -> int:
        """Maximum reading age accepted for this feed."""
        if self._registry is None:
            return DEFAULT_ORACLE_HEARTBEAT_SEC
        return self._registry.heartbeat_for(feed.feed_id)

    def fetch(self, feed: PriceFeed) -> int:
        """
        Fetch and validate the latest price.

        Args:
            feed: Price feed handle

        Returns:
            Price as an 18-decimal integer

        Raises:
            OracleUnavailableError: Feed raised while being read
            InvalidOraclePriceError: Price <= 0
            StaleOracleError: Reading older than the feed heartbeat
        """
        self._stats["fetches"] += 1
        feed_id = getattr(feed, "feed_id", repr(feed))

        try:
            reading = feed.latest_price()
        except Exception as e:
            self._stats["unavailable"] += 1
            logger.error(f"Feed {feed_id} read failed: {e}")
            raise OracleUnavailableError(
                f"Feed {feed_id} unavailable: {e}",
                details={"feed_id": feed_id},
            ) from e

        if reading.raw_price <= 0:
            self._stats["invalid"] += 1
            logger.warning(f"Feed {feed_id} returned non-positive price {reading.raw_price}")
            raise InvalidOraclePriceError(
                f"Feed {feed_id} returned invalid price {reading.raw_price}",
                details={"feed_id": feed_id, "raw_price": reading.raw_price},
            )

        now = self._clock()
        heartbeat = self.heartbeat_for(feed)
        age = now - reading.updated_at

        if reading.updated_at <= 0 or age < 0 or age > heartbeat:
            self._stats["stale"] += 1
            logger.warning(
                f"Feed {feed_id} stale: updated_at={reading.updated_at} "
                f"age={age}s heartbeat={heartbeat}s"
            )
            raise StaleOracleError(
                f"Feed {feed_id} reading is stale (age={age}s, heartbeat={heartbeat}s)",
                age_sec=age,
                heartbeat_sec=heartbeat,
                details={"feed_id": feed_id, "updated_at": reading.updated_at},
            )

        price = rescale_to_canonical(reading.raw_price, reading.decimals)
        if price == 0:
            self._stats["invalid"] += 1
            raise InvalidOraclePriceError(
                f"Feed {feed_id} price {reading.raw_price} rounds to zero at 18 decimals",
                details={"feed_id": feed_id, "raw_price": reading.raw_price},
            )

        logger.debug(
            f"Feed {feed_id}: raw={reading.raw_price} dec={reading.decimals} -> {price}"
        )
        return price

    def get_statistics(self) -> dict:
        """Get fetch counters."""
        return self._stats.copy()


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "Clock",
    "system_clock",
    "FeedReading",
    "PriceFeed",
    "rescale_to_canonical",
    "PriceOracleAdapter",
]
