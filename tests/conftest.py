"""
TRAILGUARD Test Configuration
=============================

Pytest fixtures and configuration for TRAILGUARD tests.
"""

import pytest
import pandas as pd
import numpy as np

from shared.trailguard_core.registry import EngineRegistry
from shared.trailguard_core.trailing_stop_engine import OrderParams, OrderType, TrailingStopEngine
from trailguard_prime.core.replay import ManualClock
from trailguard_prime.plugins.feeds.paper_feed import PaperPriceFeed

E18 = 10 ** 18
T0 = 1_700_000_000


@pytest.fixture
def clock():
    """Manual clock starting at T0."""
    return ManualClock(T0)


@pytest.fixture
def feed(clock):
    """ETH/USD paper feed (8 decimals) at 2000."""
    feed = PaperPriceFeed("ETH/USD", decimals=8, clock=clock)
    feed.set_price(2000)
    return feed


@pytest.fixture
def registry(feed):
    """Registry with admin, one operator, one router and the ETH/USD feed."""
    registry = EngineRegistry(admin="admin", operators=["ops"], routers=["router-1"])
    registry.register_feed("admin", feed)
    return registry


@pytest.fixture
def engine(registry, clock):
    """Engine driven by the manual clock."""
    return TrailingStopEngine(registry=registry, clock=clock)


@pytest.fixture
def make_params(feed):
    """Factory for order params with SELL defaults."""

    def _make(**overrides) -> OrderParams:
        values = dict(
            oracle=feed,
            initial_stop_price=1960 * E18,
            trailing_distance_bps=200,
            order_type=OrderType.SELL,
        )
        values.update(overrides)
        return OrderParams(**values)

    return _make


@pytest.fixture
def sample_prices():
    """Random walk around 2000, one row per minute."""
    np.random.seed(42)
    dates = pd.date_range(start="2024-01-01", periods=120, freq="min")
    returns = np.random.normal(0.0, 0.001, 120)
    prices = 2000.0 * np.cumprod(1 + returns)
    return pd.Series(prices, index=dates)


@pytest.fixture
def crash_prices():
    """Rally to 2100, then a gap down to 2050 that holds."""
    dates = pd.date_range(start="2024-01-01", periods=30, freq="min")
    up = np.linspace(2000.0, 2100.0, 20)
    gap = np.full(10, 2050.0)
    return pd.Series(np.concatenate([up, gap]), index=dates)
