"""
TRAILGUARD v1.0 - Centralized Exception Hierarchy
==================================================

Provides structured exception types for the trailing-stop engine and
the services composed around it.

Exception Categories:
    - ConfigurationInvalidError: Order parameters rejected at configure time
    - OrderError: Order lifecycle failures (not configured, rate limited, ...)
    - PriceFeedError: Oracle and price history failures
    - SettlementError: Trigger, slippage and amount failures
    - AmountOverflowError: Fixed-point arithmetic exceeded the integer width
    - UnauthorizedError: Caller lacks the required role

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

from typing import Any, Dict, Optional


class TrailGuardError(Exception):
    """
    Base exception for all TRAILGUARD errors.

    Attributes:
        message: Human-readable error description
        code: Optional error code for programmatic handling
        details: Optional dict with additional context
        recoverable: Whether a later attempt may succeed
    """

    # Default recoverability - subclasses can override
    recoverable: bool = True

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationInvalidError(TrailGuardError):
    """Order configuration rejected."""

    recoverable: bool = False

    def __init__(self, message: str, field: str = "unknown", value: Any = None, **kwargs):
        kwargs.setdefault("code", "CONFIGURATION_INVALID")
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class InvalidOracleError(ConfigurationInvalidError):
    """Missing or unusable oracle handle."""

    pass


class InvalidStopPriceError(ConfigurationInvalidError):
    """Initial stop price must be positive."""

    pass


class InvalidTrailingDistanceError(ConfigurationInvalidError):
    """Trailing distance outside allowed range."""

    pass


class InvalidOrderTypeError(ConfigurationInvalidError):
    """Order type is neither SELL nor BUY."""

    pass


class InvalidSlippageError(ConfigurationInvalidError):
    """Maximum slippage outside allowed range."""

    pass


class InvalidDeviationError(ConfigurationInvalidError):
    """Maximum price deviation outside allowed range."""

    pass


class InvalidTwapWindowError(ConfigurationInvalidError):
    """TWAP window outside allowed range."""

    pass


class InvalidUpdateFrequencyError(ConfigurationInvalidError):
    """Update frequency must be non-negative."""

    pass


class InvalidDecimalsError(ConfigurationInvalidError):
    """Token decimals outside [0, 18]."""

    pass


# =============================================================================
# ORDER LIFECYCLE ERRORS
# =============================================================================


class OrderError(TrailGuardError):
    """Base exception for order lifecycle errors."""

    pass


class NotConfiguredError(OrderError):
    """Order has no trailing-stop configuration."""

    recoverable: bool = False

    def __init__(self, order_id: str, **kwargs):
        kwargs.setdefault("code", "NOT_CONFIGURED")
        super().__init__(f"Order not configured: {order_id}", **kwargs)
        self.order_id = order_id


class RateLimitedError(OrderError):
    """Update attempted before the update frequency elapsed."""

    def __init__(
        self,
        message: str,
        last_update_at: int = 0,
        next_allowed_at: int = 0,
        **kwargs,
    ):
        kwargs.setdefault("code", "RATE_LIMITED")
        super().__init__(message, **kwargs)
        self.last_update_at = last_update_at
        self.next_allowed_at = next_allowed_at


class SettlementInProgressError(OrderError):
    """A settlement for this order is already in flight."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "SETTLEMENT_IN_PROGRESS")
        super().__init__(message, **kwargs)


# =============================================================================
# PRICE FEED ERRORS
# =============================================================================


class PriceFeedError(TrailGuardError):
    """Base exception for oracle and price data errors."""

    pass


class StaleOracleError(PriceFeedError):
    """Feed reading is older than the heartbeat."""

    def __init__(self, message: str, age_sec: int = 0, heartbeat_sec: int = 0, **kwargs):
        kwargs.setdefault("code", "STALE_ORACLE")
        super().__init__(message, **kwargs)
        self.age_sec = age_sec
        self.heartbeat_sec = heartbeat_sec


class InvalidOraclePriceError(PriceFeedError):
    """Feed returned a non-positive price."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "INVALID_ORACLE_PRICE")
        super().__init__(message, **kwargs)


class OracleUnavailableError(PriceFeedError):
    """Feed could not be read."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "ORACLE_UNAVAILABLE")
        super().__init__(message, **kwargs)


class InvalidPriceHistoryError(PriceFeedError):
    """No history and no direct price to fall back on."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "INVALID_PRICE_HISTORY")
        super().__init__(message, **kwargs)


class PriceDeviationTooHighError(PriceFeedError):
    """Spot price deviates from TWAP beyond tolerance (possible manipulation)."""

    def __init__(
        self,
        message: str,
        price: int = 0,
        twap: int = 0,
        deviation_bps: int = 0,
        max_deviation_bps: int = 0,
        **kwargs,
    ):
        kwargs.setdefault("code", "PRICE_DEVIATION_TOO_HIGH")
        super().__init__(message, **kwargs)
        self.price = price
        self.twap = twap
        self.deviation_bps = deviation_bps
        self.max_deviation_bps = max_deviation_bps


# =============================================================================
# SETTLEMENT ERRORS
# =============================================================================


class SettlementError(TrailGuardError):
    """Base exception for settlement errors."""

    pass


class NotTriggeredError(SettlementError):
    """Stop price has not been crossed."""

    def __init__(self, message: str, price: int = 0, stop_price: int = 0, **kwargs):
        kwargs.setdefault("code", "NOT_TRIGGERED")
        super().__init__(message, **kwargs)
        self.price = price
        self.stop_price = stop_price


class SlippageExceededError(SettlementError):
    """Implied fill price too far from the validated price."""

    def __init__(
        self,
        message: str,
        slippage_bps: int = 0,
        max_slippage_bps: int = 0,
        **kwargs,
    ):
        kwargs.setdefault("code", "SLIPPAGE_EXCEEDED")
        super().__init__(message, **kwargs)
        self.slippage_bps = slippage_bps
        self.max_slippage_bps = max_slippage_bps


class InvalidAmountError(SettlementError):
    """Amount is zero, negative or otherwise unusable."""

    recoverable: bool = False

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "INVALID_AMOUNT")
        super().__init__(message, **kwargs)


# =============================================================================
# ARITHMETIC ERRORS
# =============================================================================


class AmountOverflowError(TrailGuardError):
    """Fixed-point result does not fit the 256-bit word."""

    recoverable: bool = False

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("code", "OVERFLOW")
        super().__init__(message, **kwargs)


# =============================================================================
# AUTHORIZATION ERRORS
# =============================================================================


class UnauthorizedError(TrailGuardError):
    """Caller is not allowed to perform this operation."""

    recoverable: bool = False

    def __init__(self, message: str, caller: Optional[str] = None, **kwargs):
        kwargs.setdefault("code", "UNAUTHORIZED")
        super().__init__(message, **kwargs)
        self.caller = caller


class RouterNotAllowedError(UnauthorizedError):
    """Swap router is not on the allow-list."""

    def __init__(self, message: str, router: Optional[str] = None, **kwargs):
        kwargs.setdefault("code", "ROUTER_NOT_ALLOWED")
        super().__init__(message, **kwargs)
        self.router = router


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================


def is_recoverable(error: Exception) -> bool:
    """
    Determine if an error is potentially recoverable.

    Recoverable errors may succeed on a later tick (fresh oracle data,
    rate limit elapsed, price crossing the stop).
    """
    if hasattr(error, "recoverable"):
        return error.recoverable

    return not isinstance(error, (SystemExit, KeyboardInterrupt, MemoryError))


def is_critical(error: Exception) -> bool:
    """
    Determine if an error needs operator attention.

    Critical errors are those that point at manipulation, a broken
    feed, or an arithmetic fault rather than ordinary market conditions.
    """
    critical_types = (
        PriceDeviationTooHighError,
        InvalidOraclePriceError,
        AmountOverflowError,
        UnauthorizedError,
    )
    return isinstance(error, critical_types)


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    # Base
    "TrailGuardError",
    # Configuration
    "ConfigurationInvalidError",
    "InvalidOracleError",
    "InvalidStopPriceError",
    "InvalidTrailingDistanceError",
    "InvalidOrderTypeError",
    "InvalidSlippageError",
    "InvalidDeviationError",
    "InvalidTwapWindowError",
    "InvalidUpdateFrequencyError",
    "InvalidDecimalsError",
    # Order
    "OrderError",
    "NotConfiguredError",
    "RateLimitedError",
    "SettlementInProgressError",
    # Price feed
    "PriceFeedError",
    "StaleOracleError",
    "InvalidOraclePriceError",
    "OracleUnavailableError",
    "InvalidPriceHistoryError",
    "PriceDeviationTooHighError",
    # Settlement
    "SettlementError",
    "NotTriggeredError",
    "SlippageExceededError",
    "InvalidAmountError",
    # Arithmetic
    "AmountOverflowError",
    # Authorization
    "UnauthorizedError",
    "RouterNotAllowedError",
    # Helpers
    "is_recoverable",
    "is_critical",
]
