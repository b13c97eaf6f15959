"""
TRAILGUARD v1.0 - Amount Converter
===================================

Decimal-safe conversion between each asset's native precision and the
canonical 18-decimal price space.

All products go through mul_div, which keeps the full-width intermediate
and checks only the final result against the integer width, so nothing
is truncated early.

Formulas:
    making = from18(to18(taking, taker_dec) * 1e18 / price, maker_dec)
    taking = from18(to18(making, maker_dec) * price / 1e18, taker_dec)
    implied_price = to18(taking, taker_dec) * 1e18 / to18(making, maker_dec)
    slippage_bps = |expected - actual| * 10000 / expected

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import logging

from .constants import (
    BPS_DENOMINATOR,
    CANONICAL_DECIMALS,
    MAX_TOKEN_DECIMALS,
    MAX_UINT256,
    PRICE_SCALE,
)
from .exceptions import AmountOverflowError, InvalidAmountError, InvalidDecimalsError

logger = logging.getLogger("TRAILGUARD_Amounts")


class AmountConverter:
    """
    Fixed-point amount math with overflow checks.

    Example:
        conv = AmountConverter()

        # 1 WETH (18 dec) at 2000 USDC (6 dec) -> 2000 * 10**6
        taking = conv.compute_taking_amount(
            10**18, 2000 * 10**18, maker_decimals=18, taker_decimals=6
        )
    """

    def __init__(self, max_value: int = MAX_UINT256):
        self.max_value = max_value

    # ==================== Primitives ====================

    def _check(self, value: int, context: str) -> int:
        if value > self.max_value:
            logger.warning(f"Overflow in {context}: result exceeds integer width")
            raise AmountOverflowError(
                f"Overflow in {context}",
                details={"context": context},
            )
        return value

    @staticmethod
    def _check_decimals(decimals: int) -> None:
        if not 0 <= decimals <= MAX_TOKEN_DECIMALS:
            raise InvalidDecimalsError(
                f"Decimals must be in [0, {MAX_TOKEN_DECIMALS}]: {decimals}",
                field="decimals",
                value=decimals,
            )

    @staticmethod
    def _check_amount(amount: int, name: str) -> None:
        if amount < 0:
            raise InvalidAmountError(f"{name} must be non-negative: {amount}")

    def mul_div(self, a: int, b: int, denominator: int) -> int:
        """floor(a * b / denominator) with a full-width intermediate."""
        if denominator == 0:
            raise InvalidAmountError("Division by zero in amount computation")
        return self._check(a * b // denominator, "mul_div")

    # ==================== Decimal scaling ====================

    def normalize_to_18(self, amount: int, decimals: int) -> int:
        """Scale an amount from native decimals to 18 decimals."""
        self._check_decimals(decimals)
        self._check_amount(amount, "amount")
        return self._check(
            amount * 10 ** (CANONICAL_DECIMALS - decimals), "normalize_to_18"
        )

    def convert_from_18(self, amount18: int, decimals: int) -> int:
        """Scale an 18-decimal amount back to native decimals."""
        self._check_decimals(decimals)
        self._check_amount(amount18, "amount18")
        return amount18 // 10 ** (CANONICAL_DECIMALS - decimals)

    # ==================== Fill amounts ====================

    def compute_making_amount(
        self,
        taking_amount: int,
        price: int,
        maker_decimals: int,
        taker_decimals: int,
    ) -> int:
        """Maker asset owed for a given taker amount at price (taker per maker)."""
        if price <= 0:
            raise InvalidAmountError(f"Price must be positive: {price}")

        taking18 = self.normalize_to_18(taking_amount, taker_decimals)
        making18 = self.mul_div(taking18, PRICE_SCALE, price)
        return self.convert_from_18(making18, maker_decimals)

    def compute_taking_amount(
        self,
        making_amount: int,
        price: int,
        maker_decimals: int,
        taker_decimals: int,
    ) -> int:
        """Taker asset owed for a given maker amount at price (taker per maker)."""
        if price <= 0:
            raise InvalidAmountError(f"Price must be positive: {price}")

        making18 = self.normalize_to_18(making_amount, maker_decimals)
        taking18 = self.mul_div(making18, price, PRICE_SCALE)
        return self.convert_from_18(taking18, taker_decimals)

    def normalize_price(
        self,
        taking_amount: int,
        making_amount: int,
        taker_decimals: int,
        maker_decimals: int,
    ) -> int:
        """Implied 18-decimal price (taker per maker) of a proposed fill."""
        making18 = self.normalize_to_18(making_amount, maker_decimals)
        if making18 == 0:
            raise InvalidAmountError("Making amount must be positive")

        taking18 = self.normalize_to_18(taking_amount, taker_decimals)
        return self.mul_div(taking18, PRICE_SCALE, making18)

    @staticmethod
    def slippage_bps(expected_price: int, actual_price: int) -> int:
        """Relative distance of actual from expected, in basis points."""
        if expected_price <= 0:
            raise InvalidAmountError(f"Expected price must be positive: {expected_price}")
        return abs(expected_price - actual_price) * BPS_DENOMINATOR // expected_price


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "AmountConverter",
]
