"""
Tests for TWAP Calculator
=========================

Tests robust and plain TWAP paths, outlier filtering and volatility
metrics.
"""

import pytest

from shared.trailguard_core.exceptions import InvalidPriceHistoryError, StaleOracleError
from shared.trailguard_core.price_history import PriceSample
from shared.trailguard_core.twap_calculator import (
    TWAPCalculator,
    TWAPMetrics,
    deviation_bps,
    median,
)

E18 = 10 ** 18
NOW = 1_700_000_000


@pytest.fixture
def calc():
    return TWAPCalculator()


def samples(*pairs):
    """(price, age) pairs -> samples ordered oldest first."""
    return [PriceSample(price * E18, NOW - age) for price, age in pairs]


class TestHelpers:
    """Tests for median and deviation."""

    def test_median_odd(self):
        assert median([3, 1, 2]) == 2

    def test_median_even_floors(self):
        assert median([1, 2]) == 1
        assert median([2000, 2100]) == 2050

    def test_median_empty(self):
        with pytest.raises(ValueError):
            median([])

    def test_deviation_bps(self):
        assert deviation_bps(2100, 2000) == 500
        assert deviation_bps(1900, 2000) == 500


class TestEdgeCases:
    """Tests for empty and single-sample histories."""

    def test_single_sample_returned_verbatim(self, calc):
        history = [PriceSample(1234 * E18, NOW - 5000)]
        assert calc.compute(history, 900, NOW) == 1234 * E18

    def test_empty_history_uses_fallback(self, calc):
        assert calc.compute([], 900, NOW, fallback=lambda: 42) == 42

    def test_empty_history_without_fallback(self, calc):
        with pytest.raises(InvalidPriceHistoryError):
            calc.compute([], 900, NOW)

    def test_failing_fallback(self, calc):
        def fallback():
            raise StaleOracleError("stale")

        with pytest.raises(InvalidPriceHistoryError):
            calc.compute([], 900, NOW, fallback=fallback)

    def test_nothing_in_window_returns_latest(self, calc):
        history = samples((1000, 5000), (1100, 4000))
        assert calc.compute(history, 900, NOW) == 1100 * E18


class TestRobustPath:
    """Tests for the median blend used with fresh samples."""

    def test_flat_prices(self, calc):
        history = samples((2000, 240), (2000, 120), (2000, 0))
        assert calc.compute(history, 900, NOW) == 2000 * E18

    def test_outlier_excluded(self, calc):
        history = samples((2000, 400), (2000, 300), (3000, 200), (2000, 100), (2000, 0))
        assert calc.compute(history, 900, NOW) == 2000 * E18
        assert calc.get_statistics()["outliers_removed"] == 1

    def test_two_sample_blend(self, calc):
        history = samples((2000, 61), (2100, 0))
        weighted = (2000 * E18 * 62 + 2100 * E18 * 1) // 63
        assert calc.compute(history, 900, NOW) == (2050 * E18 + weighted) // 2

    def test_filter_outliers(self, calc):
        assert calc.filter_outliers([100, 100, 100, 200]) == [100, 100, 100]


class TestPlainPath:
    """Tests for the weighted average used without fresh samples."""

    def test_weighted_average(self, calc):
        history = [PriceSample(1000, NOW - 300), PriceSample(2000, NOW - 200)]
        assert calc.compute(history, 900, NOW) == (1000 * 301 + 2000 * 201) // 502
        assert calc.get_statistics()["plain"] == 1

    def test_older_samples_weigh_more(self, calc):
        # Weight is (now - ts) + 1, so the older 1000 dominates
        history = [PriceSample(1000, NOW - 300), PriceSample(2000, NOW - 200)]
        assert calc.compute(history, 900, NOW) < 1500

    def test_adaptive_window_narrows_input(self, calc):
        history = [
            PriceSample(1000, NOW - 800),
            PriceSample(2000, NOW - 250),
            PriceSample(2000, NOW - 200),
        ]
        assert calc.compute(history, 900, NOW, adaptive_window=300) == 2000


class TestMetrics:
    """Tests for volatility metrics and adaptive window."""

    def test_needs_three_samples(self, calc):
        metrics = TWAPMetrics()
        assert not calc.update_metrics(samples((2000, 60), (2100, 0)), 900, metrics, NOW)
        assert metrics.adaptive_window_sec == 0

    def test_metrics_computed(self, calc):
        metrics = TWAPMetrics()
        history = samples((2000, 120), (2100, 60), (2200, 0))
        assert calc.update_metrics(history, 900, metrics, NOW)
        assert metrics.volatility_bps == (909 + 454 + 0) // 3
        assert metrics.price_range == 200 * E18
        assert metrics.adaptive_window_sec == 1350
        assert metrics.last_update_at == NOW
        assert metrics.sample_count == 3

    def test_metrics_not_due(self, calc):
        metrics = TWAPMetrics(last_update_at=NOW - 10)
        history = samples((2000, 120), (2100, 60), (2200, 0))
        assert not calc.update_metrics(history, 900, metrics, NOW)

    def test_metrics_due_every_tenth_sample(self, calc):
        metrics = TWAPMetrics(last_update_at=NOW - 10)
        history = samples(*[(2000, 10 - i) for i in range(10)])
        assert calc.update_metrics(history, 900, metrics, NOW)

    @pytest.mark.parametrize(
        "volatility,base,expected",
        [
            (100, 900, 900),
            (300, 900, 1350),
            (600, 900, 1800),
            (600, 2000, 3600),
            (0, 200, 300),
        ],
    )
    def test_adaptive_window(self, volatility, base, expected):
        assert TWAPCalculator.adaptive_window(volatility, base) == expected
