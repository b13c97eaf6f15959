"""
Tests for Amount Converter
==========================

Tests decimal scaling, fill amounts, implied price and overflow checks.
"""

import pytest

from shared.trailguard_core.amount_converter import AmountConverter
from shared.trailguard_core.constants import MAX_UINT256
from shared.trailguard_core.exceptions import (
    AmountOverflowError,
    InvalidAmountError,
    InvalidDecimalsError,
)

E18 = 10 ** 18


@pytest.fixture
def conv():
    return AmountConverter()


class TestScaling:
    """Tests for native <-> 18-decimal scaling."""

    def test_normalize_usdc(self, conv):
        assert conv.normalize_to_18(2000 * 10 ** 6, 6) == 2000 * E18

    def test_convert_back_to_usdc(self, conv):
        assert conv.convert_from_18(2000 * E18, 6) == 2000 * 10 ** 6

    @pytest.mark.parametrize("decimals", range(19))
    def test_round_trip_loses_nothing_at_native_precision(self, conv, decimals):
        for amount in (0, 1, 123_456_789, MAX_UINT256 // 10 ** (18 - decimals)):
            assert conv.convert_from_18(conv.normalize_to_18(amount, decimals), decimals) == amount

    @pytest.mark.parametrize("decimals", range(18))
    def test_normalize_overflows_just_past_the_limit(self, conv, decimals):
        limit = MAX_UINT256 // 10 ** (18 - decimals)
        with pytest.raises(AmountOverflowError):
            conv.normalize_to_18(limit + 1, decimals)

    def test_convert_truncates_sub_unit_dust(self, conv):
        assert conv.convert_from_18(10 ** 12 - 1, 6) == 0

    @pytest.mark.parametrize("decimals", [19, 20, 36])
    def test_more_than_18_decimals_rejected(self, conv, decimals):
        with pytest.raises(InvalidDecimalsError):
            conv.normalize_to_18(5 * 10 ** decimals, decimals)
        with pytest.raises(InvalidDecimalsError):
            conv.convert_from_18(5 * E18, decimals)
        with pytest.raises(InvalidDecimalsError):
            conv.compute_taking_amount(E18, 2000 * E18, maker_decimals=18, taker_decimals=decimals)

    def test_negative_decimals_rejected(self, conv):
        with pytest.raises(InvalidDecimalsError):
            conv.normalize_to_18(1, -1)

    def test_negative_amount_rejected(self, conv):
        with pytest.raises(InvalidAmountError):
            conv.normalize_to_18(-1, 6)


class TestFillAmounts:
    """Tests for making/taking amounts at a price."""

    def test_taking_amount_weth_to_usdc(self, conv):
        taking = conv.compute_taking_amount(E18, 2000 * E18, maker_decimals=18, taker_decimals=6)
        assert taking == 2000 * 10 ** 6

    def test_making_amount_usdc_to_weth(self, conv):
        making = conv.compute_making_amount(
            2000 * 10 ** 6, 2000 * E18, maker_decimals=18, taker_decimals=6
        )
        assert making == E18

    def test_non_positive_price(self, conv):
        with pytest.raises(InvalidAmountError):
            conv.compute_taking_amount(E18, 0, 18, 6)

    def test_normalize_price(self, conv):
        assert conv.normalize_price(2000 * 10 ** 6, E18, 6, 18) == 2000 * E18

    def test_normalize_price_zero_making(self, conv):
        with pytest.raises(InvalidAmountError):
            conv.normalize_price(2000 * 10 ** 6, 0, 6, 18)


class TestSlippage:
    """Tests for slippage in basis points."""

    def test_symmetric_distance(self, conv):
        assert conv.slippage_bps(2000 * E18, 1980 * E18) == 100
        assert conv.slippage_bps(2000 * E18, 2020 * E18) == 100

    def test_zero_expected_rejected(self, conv):
        with pytest.raises(InvalidAmountError):
            conv.slippage_bps(0, 1)


class TestOverflow:
    """Tests for the integer width bound."""

    def test_mul_div_keeps_wide_intermediate(self, conv):
        big = 2 ** 200
        assert conv.mul_div(big, big, big) == big

    def test_mul_div_overflow(self, conv):
        with pytest.raises(AmountOverflowError):
            conv.mul_div(2 ** 200, 2 ** 100, 1)

    def test_small_width(self):
        conv = AmountConverter(max_value=10 ** 20)
        with pytest.raises(AmountOverflowError):
            conv.normalize_to_18(1000, 0)

    def test_division_by_zero(self, conv):
        with pytest.raises(InvalidAmountError):
            conv.mul_div(1, 1, 0)
