# TRAILGUARD_FEAT: replay-001
"""
TRAILGUARD PRIME - Stop Replay
==============================

Backtester that replays a historical price series through the engine.

A manual clock is advanced to each row's timestamp and a paper feed is set
to the row's price. The order is checked for a trigger first; untriggered
orders are then updated. Updates refused by the rate limit or by price
validation are recorded, not raised.

Example:
    prices = pd.read_csv("prices.csv", index_col=0, parse_dates=True)["price"]
    result = StopReplay(ReplayConfig(trailing_distance_bps=300)).run(prices)
    print(result.summary)

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from shared.trailguard_core.constants import PRICE_SCALE
from shared.trailguard_core.exceptions import PriceFeedError, RateLimitedError
from shared.trailguard_core.oracle_adapter import rescale_to_canonical
from shared.trailguard_core.trailing_stop_engine import (
    OrderParams,
    OrderType,
    TrailingStopEngine,
    compute_stop_price,
)
from trailguard_prime.plugins.feeds.paper_feed import PaperPriceFeed

logger = logging.getLogger("TRAILGUARD_Replay")


class ManualClock:
    """Settable unix-seconds clock."""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now

    def set(self, now: int) -> None:
        self.now = now


@dataclass
class ReplayConfig:
    """Order parameters for a replay."""

    order_type: OrderType = OrderType.SELL
    trailing_distance_bps: int = 200
    update_frequency_sec: int = 60
    max_slippage_bps: int = 100
    max_price_deviation_bps: int = 500
    twap_window_sec: int = 900
    initial_stop_price: Optional[int] = None  # default: trailing stop off the first price
    feed_decimals: int = 8
    feed_id: str = "REPLAY"
    stop_on_trigger: bool = True


@dataclass
class ReplayResult:
    """Per-tick frame plus summary statistics."""

    frame: pd.DataFrame
    summary: Dict[str, Any] = field(default_factory=dict)


def _to_float(value: Optional[int]) -> float:
    return np.nan if value is None else value / PRICE_SCALE


def _timestamps(index: pd.Index) -> List[int]:
    if isinstance(index, pd.DatetimeIndex):
        return [int(ts.timestamp()) for ts in index]
    return [int(ts) for ts in index]


class StopReplay:
    """
    Replays prices through a fresh engine.

    The series index is either a DatetimeIndex or integer unix seconds.
    """

    def __init__(self, config: Optional[ReplayConfig] = None):
        self.cfg = config or ReplayConfig()

    def run(self, prices: pd.Series, order_id: str = "replay") -> ReplayResult:
        """
        Replay a price series.

        Args:
            prices: Prices in quote units, indexed by time
            order_id: Identifier for the simulated order

        Returns:
            ReplayResult with one frame row per processed tick
        """
        prices = prices.dropna()
        if prices.empty:
            raise ValueError("Price series is empty")

        timestamps = _timestamps(prices.index)
        if any(b < a for a, b in zip(timestamps, timestamps[1:])):
            raise ValueError("Price series index must be sorted ascending")

        clock = ManualClock(timestamps[0])
        feed = PaperPriceFeed(self.cfg.feed_id, decimals=self.cfg.feed_decimals, clock=clock)
        engine = TrailingStopEngine(clock=clock)

        raw = feed.set_price(prices.iloc[0])
        first_price = rescale_to_canonical(raw, self.cfg.feed_decimals)
        initial_stop = self.cfg.initial_stop_price or compute_stop_price(
            first_price, self.cfg.trailing_distance_bps, self.cfg.order_type
        )

        engine.configure(order_id, OrderParams(
            oracle=feed,
            initial_stop_price=initial_stop,
            trailing_distance_bps=self.cfg.trailing_distance_bps,
            order_type=self.cfg.order_type,
            update_frequency_sec=self.cfg.update_frequency_sec,
            max_slippage_bps=self.cfg.max_slippage_bps,
            max_price_deviation_bps=self.cfg.max_price_deviation_bps,
            twap_window_sec=self.cfg.twap_window_sec,
        ))

        rows: List[Dict[str, Any]] = []
        check = engine.is_triggered(order_id)
        rows.append({
            "timestamp": timestamps[0],
            "price": float(prices.iloc[0]),
            "twap": _to_float(check.twap),
            "stop_price": _to_float(initial_stop),
            "status": "configured",
            "triggered": check.triggered,
        })

        for i in range(1, len(prices)):
            if rows[-1]["triggered"] and self.cfg.stop_on_trigger:
                break

            clock.set(timestamps[i])
            feed.set_price(prices.iloc[i])

            # Triggered orders are not re-trailed
            check = engine.is_triggered(order_id)
            twap = check.twap
            if check.triggered:
                status = "triggered"
            else:
                twap = None
                try:
                    twap = engine.update(order_id).twap
                    status = "updated"
                except RateLimitedError:
                    status = "rate_limited"
                except PriceFeedError as e:
                    status = e.code or type(e).__name__

            rows.append({
                "timestamp": timestamps[i],
                "price": float(prices.iloc[i]),
                "twap": _to_float(twap),
                "stop_price": _to_float(engine.get_config(order_id).current_stop_price),
                "status": status,
                "triggered": check.triggered,
            })

        frame = pd.DataFrame(rows, index=prices.index[: len(rows)])
        summary = self._summarize(frame)

        logger.info(
            f"Replay {order_id}: {summary['ticks']} ticks, {summary['updates']} updates, "
            f"triggered={summary['triggered']}"
        )
        return ReplayResult(frame=frame, summary=summary)

    def _summarize(self, frame: pd.DataFrame) -> Dict[str, Any]:
        status = frame["status"]
        gap_bps = np.abs(frame["price"].values - frame["stop_price"].values) / frame["price"].values * 10000

        triggered_rows = frame[frame["triggered"]]
        trigger_at = triggered_rows.index[0] if not triggered_rows.empty else None

        return {
            "ticks": int(len(frame)),
            "updates": int((status == "updated").sum()),
            "rate_limited": int((status == "rate_limited").sum()),
            "rejected": int((~status.isin(["configured", "updated", "rate_limited", "triggered"])).sum()),
            "triggered": trigger_at is not None,
            "trigger_at": trigger_at,
            "trigger_price": float(triggered_rows["price"].iloc[0]) if trigger_at is not None else None,
            "final_stop": float(frame["stop_price"].iloc[-1]),
            "mean_gap_bps": float(np.mean(gap_bps)),
            "min_gap_bps": float(np.min(gap_bps)),
        }


__all__ = ["ManualClock", "ReplayConfig", "ReplayResult", "StopReplay"]
