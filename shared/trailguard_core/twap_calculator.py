"""
TRAILGUARD v1.0 - TWAP Calculator
==================================

Manipulation-resistant time-weighted average price over a rolling window.

Two paths, chosen by the age of the newest sample:

    Robust path (newest sample <= 120s old):
        1. median of in-window prices
        2. drop prices more than 1500 bps from that median
        3. median of the survivors -> median_price
        4. weighted average of in-window samples within 2000 bps of
           median_price
        5. TWAP = (median_price + weighted_average) / 2

    Plain path (no recent sample):
        weighted average of all in-window samples

Sample weight is (now - timestamp) + 1. This grows with sample age, so
older samples carry more influence. The formula is kept as-is for
compatibility with existing deployments.

Volatility metrics are maintained separately and feed an adaptive window
that widens in volatile markets.

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .constants import (
    BPS_DENOMINATOR,
    HIGH_VOLATILITY_BPS,
    MAX_TWAP_WINDOW_SEC,
    MEDIUM_VOLATILITY_BPS,
    METRICS_MIN_SAMPLES,
    METRICS_UPDATE_EVERY_N_SAMPLES,
    METRICS_UPDATE_INTERVAL_SEC,
    MIN_TWAP_WINDOW_SEC,
    OUTLIER_THRESHOLD_BPS,
    REFERENCE_DEVIATION_BPS,
    TWAP_FRESH_SAMPLE_SEC,
)
from .exceptions import InvalidPriceHistoryError, PriceFeedError
from .price_history import PriceSample

logger = logging.getLogger("TRAILGUARD_TWAP")


@dataclass
class TWAPMetrics:
    """Volatility metrics for one order's history."""

    volatility_bps: int = 0
    price_range: int = 0
    adaptive_window_sec: int = 0  # 0 = not computed yet
    last_update_at: int = 0
    sample_count: int = 0

    def to_dict(self) -> dict:
        return {
            "volatility_bps": self.volatility_bps,
            "price_range": self.price_range,
            "adaptive_window_sec": self.adaptive_window_sec,
            "last_update_at": self.last_update_at,
            "sample_count": self.sample_count,
        }


def median(values: Sequence[int]) -> int:
    """Median of integer prices; even counts average the middle pair."""
    if not values:
        raise ValueError("median of empty sequence")

    ordered = sorted(values)
    mid = len(ordered) // 2

    if len(ordered) % 2 == 1:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) // 2


def deviation_bps(value: int, reference: int) -> int:
    """Absolute deviation of value from reference in basis points."""
    if reference <= 0:
        raise ValueError(f"reference price must be positive: {reference}")
    return abs(value - reference) * BPS_DENOMINATOR // reference


class TWAPCalculator:
    """
    Robust TWAP over a price history.

    Example:
        calc = TWAPCalculator()
        twap = calc.compute(history, window=900, now=now)

        metrics = TWAPMetrics()
        calc.update_metrics(history, base_window=900, metrics=metrics, now=now)
    """

    def __init__(
        self,
        fresh_sample_sec: int = TWAP_FRESH_SAMPLE_SEC,
        outlier_threshold_bps: int = OUTLIER_THRESHOLD_BPS,
        reference_deviation_bps: int = REFERENCE_DEVIATION_BPS,
    ):
        self.fresh_sample_sec = fresh_sample_sec
        self.outlier_threshold_bps = outlier_threshold_bps
        self.reference_deviation_bps = reference_deviation_bps

        self._stats = {
            "robust": 0,
            "plain": 0,
            "fallbacks": 0,
            "outliers_removed": 0,
        }

        logger.info(
            f"TWAPCalculator initialized: fresh={fresh_sample_sec}s, "
            f"outlier={outlier_threshold_bps}bps, reference={reference_deviation_bps}bps"
        )

    def compute(
        self,
        history: Sequence[PriceSample],
        window: int,
        now: int,
        adaptive_window: Optional[int] = None,
        fallback: Optional[Callable[[], int]] = None,
    ) -> int:
        """
        Compute the TWAP for a history.

        Args:
            history: Samples, oldest first
            window: Configured TWAP window (seconds)
            now: Current time (unix seconds)
            adaptive_window: Volatility-adjusted window, if known
            fallback: Direct price fetch used when history is empty

        Returns:
            TWAP as an 18-decimal integer

        Raises:
            InvalidPriceHistoryError: Empty history and no usable fallback
        """
        if not history:
            return self._fallback_price(fallback)

        if len(history) == 1:
            return history[0].price

        effective_window = adaptive_window or window
        cutoff = now - effective_window
        in_window = [s for s in history if s.timestamp >= cutoff]
        latest = history[-1]

        if not in_window:
            self._stats["fallbacks"] += 1
            logger.debug("No samples in window, using latest raw sample")
            return latest.price

        if now - latest.timestamp <= self.fresh_sample_sec:
            self._stats["robust"] += 1
            twap = self._robust_twap(in_window, now)
        else:
            self._stats["plain"] += 1
            twap = self._weighted_average(in_window, now)

        if twap is None:
            self._stats["fallbacks"] += 1
            logger.debug("All samples filtered, using latest raw sample")
            return latest.price

        return twap

    def _fallback_price(self, fallback: Optional[Callable[[], int]]) -> int:
        if fallback is None:
            raise InvalidPriceHistoryError("Price history is empty and no fallback is available")

        try:
            price = fallback()
        except PriceFeedError as e:
            raise InvalidPriceHistoryError(
                f"Price history is empty and direct fetch failed: {e}"
            ) from e

        self._stats["fallbacks"] += 1
        return price

    def _robust_twap(self, samples: List[PriceSample], now: int) -> Optional[int]:
        """Median / weighted-average blend with outlier rejection."""
        filtered = self.filter_outliers([s.price for s in samples])
        if not filtered:
            return None

        median_price = median(filtered)

        weighted = self._weighted_average(samples, now, reference=median_price)
        if weighted is None:
            return None

        return (median_price + weighted) // 2

    def filter_outliers(self, prices: Sequence[int]) -> List[int]:
        """Drop prices more than the outlier threshold away from the median."""
        if not prices:
            return []

        center = median(prices)
        kept = [p for p in prices if deviation_bps(p, center) <= self.outlier_threshold_bps]

        removed = len(prices) - len(kept)
        if removed:
            self._stats["outliers_removed"] += removed
            logger.debug(f"Outliers removed: {removed} of {len(prices)} (median={center})")

        return kept

    def _weighted_average(
        self,
        samples: Sequence[PriceSample],
        now: int,
        reference: Optional[int] = None,
    ) -> Optional[int]:
        """Time-weighted average; optionally skip samples far from a reference."""
        weighted_sum = 0
        total_weight = 0

        for sample in samples:
            if reference is not None and deviation_bps(sample.price, reference) > self.reference_deviation_bps:
                continue

            weight = max(now - sample.timestamp, 0) + 1
            weighted_sum += sample.price * weight
            total_weight += weight

        if total_weight == 0:
            return None

        return weighted_sum // total_weight

    # ==================== Metrics ====================

    def update_metrics(
        self,
        history: Sequence[PriceSample],
        base_window: int,
        metrics: TWAPMetrics,
        now: int,
    ) -> bool:
        """
        Refresh volatility metrics in place when due.

        Metrics are recomputed at most every 300s, or on every 10th
        sample, and only once at least 3 samples exist.

        Returns:
            True if metrics were recomputed
        """
        if len(history) < METRICS_MIN_SAMPLES:
            return False

        due = (
            now - metrics.last_update_at >= METRICS_UPDATE_INTERVAL_SEC
            or len(history) % METRICS_UPDATE_EVERY_N_SAMPLES == 0
        )
        if not due:
            return False

        prices = [s.price for s in history]
        current = prices[-1]

        total_deviation = sum(deviation_bps(p, current) for p in prices)

        metrics.volatility_bps = total_deviation // len(prices)
        metrics.price_range = max(prices) - min(prices)
        metrics.adaptive_window_sec = self.adaptive_window(metrics.volatility_bps, base_window)
        metrics.last_update_at = now
        metrics.sample_count = len(prices)

        logger.debug(
            f"Metrics updated: vol={metrics.volatility_bps}bps "
            f"range={metrics.price_range} window={metrics.adaptive_window_sec}s"
        )
        return True

    @staticmethod
    def adaptive_window(volatility_bps: int, base_window: int) -> int:
        """Widen the window in volatile markets, clamped to [300, 3600]."""
        if volatility_bps > HIGH_VOLATILITY_BPS:
            window = base_window * 2
        elif volatility_bps > MEDIUM_VOLATILITY_BPS:
            window = base_window * 3 // 2
        else:
            window = base_window

        return max(MIN_TWAP_WINDOW_SEC, min(MAX_TWAP_WINDOW_SEC, window))

    def get_statistics(self) -> dict:
        """Get path counters."""
        return self._stats.copy()


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "TWAPMetrics",
    "median",
    "deviation_bps",
    "TWAPCalculator",
]
