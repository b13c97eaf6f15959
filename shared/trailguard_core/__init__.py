# TRAILGUARD Core - Trailing Stop Pricing Engine
"""
Pure, deterministic pricing logic for trailing-stop orders.

Modules:
    constants: Protocol bounds and fixed-point constants
    exceptions: Centralized exception hierarchy
    oracle_adapter: Feed reading, validation and 18-decimal rescaling
    registry: Injected global configuration (heartbeats, feeds, routers)
    price_history: Time-bounded per-order price samples
    twap_calculator: Robust TWAP and volatility metrics
    amount_converter: Decimal-safe amount and slippage math
    trailing_stop_engine: Order configuration, stop updates and settlement
"""

from .constants import (
    VERSION,
    SYSTEM_NAME,
    CANONICAL_DECIMALS,
    PRICE_SCALE,
    MAX_UINT256,
    BPS_DENOMINATOR,
    DEFAULT_ORACLE_HEARTBEAT_SEC,
)

from .exceptions import (
    TrailGuardError,
    ConfigurationInvalidError,
    NotConfiguredError,
    RateLimitedError,
    StaleOracleError,
    InvalidOraclePriceError,
    OracleUnavailableError,
    InvalidPriceHistoryError,
    PriceDeviationTooHighError,
    NotTriggeredError,
    SlippageExceededError,
    InvalidAmountError,
    AmountOverflowError,
    UnauthorizedError,
    SettlementInProgressError,
    RouterNotAllowedError,
    is_recoverable,
    is_critical,
)

from .oracle_adapter import (
    Clock,
    system_clock,
    FeedReading,
    PriceFeed,
    PriceOracleAdapter,
)

from .registry import EngineRegistry

from .price_history import (
    PriceSample,
    PriceHistoryStore,
)

from .twap_calculator import (
    TWAPMetrics,
    TWAPCalculator,
    median,
    deviation_bps,
)

from .amount_converter import AmountConverter

from .trailing_stop_engine import (
    OrderType,
    OrderParams,
    OrderConfig,
    UpdateResult,
    TriggerStatus,
    TriggerCheck,
    SettlementPlan,
    EngineEventType,
    EngineEvent,
    compute_stop_price,
    is_stop_crossed,
    TrailingStopEngine,
)

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",

    # Constants
    "VERSION",
    "SYSTEM_NAME",
    "CANONICAL_DECIMALS",
    "PRICE_SCALE",
    "MAX_UINT256",
    "BPS_DENOMINATOR",
    "DEFAULT_ORACLE_HEARTBEAT_SEC",

    # Exceptions
    "TrailGuardError",
    "ConfigurationInvalidError",
    "NotConfiguredError",
    "RateLimitedError",
    "StaleOracleError",
    "InvalidOraclePriceError",
    "OracleUnavailableError",
    "InvalidPriceHistoryError",
    "PriceDeviationTooHighError",
    "NotTriggeredError",
    "SlippageExceededError",
    "InvalidAmountError",
    "AmountOverflowError",
    "UnauthorizedError",
    "SettlementInProgressError",
    "RouterNotAllowedError",
    "is_recoverable",
    "is_critical",

    # Oracle
    "Clock",
    "system_clock",
    "FeedReading",
    "PriceFeed",
    "PriceOracleAdapter",

    # Registry
    "EngineRegistry",

    # History
    "PriceSample",
    "PriceHistoryStore",

    # TWAP
    "TWAPMetrics",
    "TWAPCalculator",
    "median",
    "deviation_bps",

    # Amounts
    "AmountConverter",

    # Engine
    "OrderType",
    "OrderParams",
    "OrderConfig",
    "UpdateResult",
    "TriggerStatus",
    "TriggerCheck",
    "SettlementPlan",
    "EngineEventType",
    "EngineEvent",
    "compute_stop_price",
    "is_stop_crossed",
    "TrailingStopEngine",
]
