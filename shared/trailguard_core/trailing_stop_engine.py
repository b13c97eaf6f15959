"""
TRAILGUARD v1.0 - Trailing Stop Engine
=======================================

Owns per-order trailing-stop configuration and the current stop price.

Order lifecycle:
    Unconfigured -> Configured -> (update)* -> Triggerable -> Settled/Removed

Stop price rule (applied on every successful update):
    trail    = price * trailing_distance_bps / 10000
    new_stop = price + sign * trail        (sign: SELL = -1, BUY = +1)

The stop price is overwritten on every update. It is not ratcheted, so
a market reversal between ticks can move it against the order.

Trigger rule:
    SELL triggers when price <= stop
    BUY  triggers when price >= stop

The engine is synchronous and deterministic for a given clock, feed and
history. Authorization checks are exposed here; custody and transfers
belong to the caller.

Author: TRAILGUARD Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .amount_converter import AmountConverter
from .constants import (
    BPS_DENOMINATOR,
    MAX_PRICE_DEVIATION_BPS,
    MAX_SLIPPAGE_BPS,
    MAX_TOKEN_DECIMALS,
    MAX_TRAILING_DISTANCE_BPS,
    MAX_TWAP_WINDOW_SEC,
    MIN_TRAILING_DISTANCE_BPS,
    MIN_TWAP_WINDOW_SEC,
)
from .exceptions import (
    InvalidAmountError,
    InvalidDecimalsError,
    InvalidDeviationError,
    InvalidOracleError,
    InvalidOrderTypeError,
    InvalidSlippageError,
    InvalidStopPriceError,
    InvalidTrailingDistanceError,
    InvalidTwapWindowError,
    InvalidUpdateFrequencyError,
    NotConfiguredError,
    NotTriggeredError,
    PriceDeviationTooHighError,
    PriceFeedError,
    RateLimitedError,
    SlippageExceededError,
    UnauthorizedError,
)
from .oracle_adapter import Clock, PriceFeed, PriceOracleAdapter, system_clock
from .price_history import PriceHistoryStore, PriceSample
from .registry import EngineRegistry
from .twap_calculator import TWAPCalculator, TWAPMetrics, deviation_bps

logger = logging.getLogger("TRAILGUARD_Engine")


class OrderType(Enum):
    """Order direction."""

    SELL = "SELL"
    BUY = "BUY"

    @property
    def sign(self) -> int:
        """-1 for SELL (stop below market), +1 for BUY (stop above market)."""
        return -1 if self is OrderType.SELL else 1


@dataclass
class OrderParams:
    """Caller-supplied trailing-stop parameters, given wholesale to configure."""

    oracle: PriceFeed
    initial_stop_price: int
    trailing_distance_bps: int
    order_type: OrderType
    update_frequency_sec: int = 60
    max_slippage_bps: int = 100
    max_price_deviation_bps: int = 500
    twap_window_sec: int = 900
    maker_decimals: int = 18
    taker_decimals: int = 18
    keeper: Optional[str] = None
    maker: Optional[str] = None


@dataclass
class OrderConfig:
    """Stored configuration and live state for one order."""

    order_id: str
    oracle: PriceFeed
    initial_stop_price: int
    current_stop_price: int
    trailing_distance_bps: int
    order_type: OrderType
    update_frequency_sec: int
    max_slippage_bps: int
    max_price_deviation_bps: int
    twap_window_sec: int
    maker_decimals: int
    taker_decimals: int
    configured_at: int
    last_update_at: int
    keeper: Optional[str] = None
    maker: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "order_id": self.order_id,
            "oracle": self.oracle.feed_id,
            "initial_stop_price": self.initial_stop_price,
            "current_stop_price": self.current_stop_price,
            "trailing_distance_bps": self.trailing_distance_bps,
            "order_type": self.order_type.value,
            "update_frequency_sec": self.update_frequency_sec,
            "max_slippage_bps": self.max_slippage_bps,
            "max_price_deviation_bps": self.max_price_deviation_bps,
            "twap_window_sec": self.twap_window_sec,
            "maker_decimals": self.maker_decimals,
            "taker_decimals": self.taker_decimals,
            "configured_at": self.configured_at,
            "last_update_at": self.last_update_at,
            "keeper": self.keeper,
            "maker": self.maker,
        }


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a successful stop-price update."""

    order_id: str
    old_stop_price: int
    new_stop_price: int
    price: int
    twap: int
    caller: Optional[str]
    timestamp: int


class TriggerStatus(Enum):
    """Outcome of a trigger check."""

    TRIGGERED = "TRIGGERED"
    NOT_TRIGGERED = "NOT_TRIGGERED"
    ORACLE_UNAVAILABLE = "ORACLE_UNAVAILABLE"
    NOT_CONFIGURED = "NOT_CONFIGURED"


@dataclass
class TriggerCheck:
    """Result of is_triggered; oracle failures stay distinguishable from 'no'."""

    order_id: str
    status: TriggerStatus
    current_price: Optional[int] = None
    twap: Optional[int] = None
    stop_price: Optional[int] = None
    error: Optional[Exception] = None

    @property
    def triggered(self) -> bool:
        return self.status == TriggerStatus.TRIGGERED

    def to_dict(self) -> dict:
        return {
            "order_id": self.order_id,
            "status": self.status.value,
            "triggered": self.triggered,
            "current_price": self.current_price,
            "twap": self.twap,
            "stop_price": self.stop_price,
            "error": str(self.error) if self.error else None,
        }


@dataclass(frozen=True)
class SettlementPlan:
    """Amounts an accepted settlement should move, derived from the validated price."""

    order_id: str
    making_amount: int
    taking_amount: int
    price: int
    twap: int
    expected_price: int
    slippage_bps: int
    stop_price: int
    counterparty: Optional[str] = None


class EngineEventType(Enum):
    """Observability signals emitted by the engine."""

    CONFIG_UPDATED = "CONFIG_UPDATED"
    STOP_PRICE_UPDATED = "STOP_PRICE_UPDATED"
    TRIGGERED = "TRIGGERED"
    HISTORY_SAMPLE_APPENDED = "HISTORY_SAMPLE_APPENDED"
    ORDER_REMOVED = "ORDER_REMOVED"


@dataclass
class EngineEvent:
    """A single engine observability signal."""

    event_type: EngineEventType
    order_id: str
    data: Dict[str, Any]
    timestamp: int


def compute_stop_price(price: int, trailing_distance_bps: int, order_type: OrderType) -> int:
    """Stop price trailing `price` by `trailing_distance_bps` (integer truncation)."""
    trail = price * trailing_distance_bps // BPS_DENOMINATOR
    return price + order_type.sign * trail


def is_stop_crossed(price: int, stop_price: int, order_type: OrderType) -> bool:
    """SELL: price <= stop. BUY: price >= stop."""
    return order_type.sign * (price - stop_price) >= 0


class TrailingStopEngine:
    """
    Trailing-stop pricing engine.

    Example:
        engine = TrailingStopEngine(registry=registry)

        engine.configure("order-1", OrderParams(
            oracle=eth_usd,
            initial_stop_price=1900 * 10**18,
            trailing_distance_bps=200,
            order_type=OrderType.SELL,
        ))

        # Periodic keeper tick
        result = engine.update("order-1", caller="keeper-1")

        # Settlement attempt
        plan = engine.prepare_settlement("order-1", making, taking)
    """

    def __init__(
        self,
        registry: Optional[EngineRegistry] = None,
        clock: Clock = system_clock,
        oracle: Optional[PriceOracleAdapter] = None,
        twap_calculator: Optional[TWAPCalculator] = None,
        converter: Optional[AmountConverter] = None,
        history: Optional[PriceHistoryStore] = None,
    ):
        self._registry = registry
        self._clock = clock
        self._oracle = oracle or PriceOracleAdapter(registry, clock)
        self._twap = twap_calculator or TWAPCalculator()
        self._converter = converter or AmountConverter()
        self._history = history or PriceHistoryStore()

        self._configs: Dict[str, OrderConfig] = {}
        self._metrics: Dict[str, TWAPMetrics] = {}

        self._listeners: List[Callable[[EngineEvent], None]] = []

        self._stats = {
            "configured": 0,
            "updates": 0,
            "updates_rejected": 0,
            "settlements_prepared": 0,
            "settlements_rejected": 0,
            "removed": 0,
        }

        logger.info("TrailingStopEngine initialized")

    # ==================== Events ====================

    def on_event(self, callback: Callable[[EngineEvent], None]) -> None:
        """Register a listener for engine events."""
        self._listeners.append(callback)

    def _emit(self, event_type: EngineEventType, order_id: str, now: int, **data: Any) -> None:
        event = EngineEvent(event_type=event_type, order_id=order_id, data=data, timestamp=now)
        for callback in self._listeners:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Event listener error on {event_type.value}: {e}")

    # ==================== Configuration ====================

    @staticmethod
    def validate_params(params: OrderParams) -> None:
        """
        Validate order parameters, raising on the first violation.

        Raises:
            ConfigurationInvalidError subclass naming the offending field
        """
        if params.oracle is None or not isinstance(params.oracle, PriceFeed):
            raise InvalidOracleError("Oracle feed handle is missing or invalid", field="oracle")

        if params.initial_stop_price <= 0:
            raise InvalidStopPriceError(
                f"Initial stop price must be positive: {params.initial_stop_price}",
                field="initial_stop_price",
                value=params.initial_stop_price,
            )

        if not MIN_TRAILING_DISTANCE_BPS <= params.trailing_distance_bps <= MAX_TRAILING_DISTANCE_BPS:
            raise InvalidTrailingDistanceError(
                f"Trailing distance must be in [{MIN_TRAILING_DISTANCE_BPS}, "
                f"{MAX_TRAILING_DISTANCE_BPS}] bps: {params.trailing_distance_bps}",
                field="trailing_distance_bps",
                value=params.trailing_distance_bps,
            )

        if not isinstance(params.order_type, OrderType):
            raise InvalidOrderTypeError(
                f"Order type must be SELL or BUY: {params.order_type!r}",
                field="order_type",
                value=params.order_type,
            )

        if not 0 <= params.max_slippage_bps <= MAX_SLIPPAGE_BPS:
            raise InvalidSlippageError(
                f"Max slippage must be in [0, {MAX_SLIPPAGE_BPS}] bps: {params.max_slippage_bps}",
                field="max_slippage_bps",
                value=params.max_slippage_bps,
            )

        if not 0 <= params.max_price_deviation_bps <= MAX_PRICE_DEVIATION_BPS:
            raise InvalidDeviationError(
                f"Max price deviation must be in [0, {MAX_PRICE_DEVIATION_BPS}] bps: "
                f"{params.max_price_deviation_bps}",
                field="max_price_deviation_bps",
                value=params.max_price_deviation_bps,
            )

        if not MIN_TWAP_WINDOW_SEC <= params.twap_window_sec <= MAX_TWAP_WINDOW_SEC:
            raise InvalidTwapWindowError(
                f"TWAP window must be in [{MIN_TWAP_WINDOW_SEC}, {MAX_TWAP_WINDOW_SEC}]s: "
                f"{params.twap_window_sec}",
                field="twap_window_sec",
                value=params.twap_window_sec,
            )

        if params.update_frequency_sec < 0:
            raise InvalidUpdateFrequencyError(
                f"Update frequency must be non-negative: {params.update_frequency_sec}",
                field="update_frequency_sec",
                value=params.update_frequency_sec,
            )

        for name in ("maker_decimals", "taker_decimals"):
            value = getattr(params, name)
            if not 0 <= value <= MAX_TOKEN_DECIMALS:
                raise InvalidDecimalsError(
                    f"{name} must be in [0, {MAX_TOKEN_DECIMALS}]: {value}",
                    field=name,
                    value=value,
                )

    def configure(self, order_id: str, params: OrderParams, caller: Optional[str] = None) -> OrderConfig:
        """
        Configure (or fully replace) an order's trailing stop.

        Re-configuring resets the stop to the new initial stop, the
        timestamps to now, the metrics, and reseeds history with one sample.

        Args:
            order_id: Order identifier
            params: Full parameter set
            caller: Identity making the change (checked on re-configure)

        Returns:
            Stored OrderConfig
        """
        existing = self._configs.get(order_id)
        if existing is not None:
            self.authorize_owner(existing, caller)

        self.validate_params(params)

        price = self._oracle.fetch(params.oracle)
        now = self._clock()

        self._history.seed(order_id, PriceSample(price=price, timestamp=now))
        self._metrics[order_id] = TWAPMetrics()

        cfg = OrderConfig(
            order_id=order_id,
            oracle=params.oracle,
            initial_stop_price=params.initial_stop_price,
            current_stop_price=params.initial_stop_price,
            trailing_distance_bps=params.trailing_distance_bps,
            order_type=params.order_type,
            update_frequency_sec=params.update_frequency_sec,
            max_slippage_bps=params.max_slippage_bps,
            max_price_deviation_bps=params.max_price_deviation_bps,
            twap_window_sec=params.twap_window_sec,
            maker_decimals=params.maker_decimals,
            taker_decimals=params.taker_decimals,
            configured_at=now,
            last_update_at=now,
            keeper=params.keeper,
            maker=params.maker,
        )
        self._configs[order_id] = cfg
        self._stats["configured"] += 1

        logger.info(
            f"Order configured: {order_id} {cfg.order_type.value} "
            f"stop={cfg.initial_stop_price} trail={cfg.trailing_distance_bps}bps "
            f"window={cfg.twap_window_sec}s oracle={cfg.oracle.feed_id}"
            + (" (replaced)" if existing else "")
        )

        self._emit(
            EngineEventType.CONFIG_UPDATED,
            order_id,
            now,
            oracle=cfg.oracle.feed_id,
            initial_stop=cfg.initial_stop_price,
            trailing_distance=cfg.trailing_distance_bps,
            order_type=cfg.order_type.value,
            twap_window=cfg.twap_window_sec,
            max_deviation=cfg.max_price_deviation_bps,
        )
        self._emit(
            EngineEventType.HISTORY_SAMPLE_APPENDED,
            order_id,
            now,
            price=price,
            timestamp=now,
        )

        return cfg

    # ==================== Authorization ====================

    def authorize_keeper(self, cfg: OrderConfig, caller: Optional[str]) -> None:
        """Keeper check point: open when no keeper is set."""
        if cfg.keeper is None:
            return
        if caller is not None and caller in (cfg.keeper, cfg.maker):
            return
        if self._registry is not None and self._registry.is_operator(caller):
            return
        raise UnauthorizedError(
            f"Caller {caller} is not the keeper of {cfg.order_id}",
            caller=caller,
        )

    def authorize_owner(self, cfg: OrderConfig, caller: Optional[str]) -> None:
        """Maker-or-operator check point: open when no maker is set."""
        if cfg.maker is None or caller == cfg.maker:
            return
        if self._registry is not None and self._registry.is_operator(caller):
            return
        raise UnauthorizedError(
            f"Caller {caller} does not own {cfg.order_id}",
            caller=caller,
        )

    # ==================== Update ====================

    def _require_config(self, order_id: str) -> OrderConfig:
        cfg = self._configs.get(order_id)
        if cfg is None:
            raise NotConfiguredError(order_id)
        return cfg

    def _twap_for(
        self,
        cfg: OrderConfig,
        now: int,
        history: Optional[List[PriceSample]] = None,
        metrics: Optional[TWAPMetrics] = None,
    ) -> int:
        if history is None:
            history = self._history.get(cfg.order_id)
        if metrics is None:
            metrics = self._metrics.get(cfg.order_id)

        adaptive = metrics.adaptive_window_sec if metrics else 0
        return self._twap.compute(
            history,
            cfg.twap_window_sec,
            now,
            adaptive_window=adaptive or None,
            fallback=lambda: self._oracle.fetch(cfg.oracle),
        )

    def check_deviation(self, cfg: OrderConfig, price: int, twap: int) -> int:
        """
        Validate spot price against TWAP.

        Returns:
            Deviation in basis points

        Raises:
            PriceDeviationTooHighError
        """
        if cfg.max_price_deviation_bps == 0:
            if price != twap:
                raise PriceDeviationTooHighError(
                    f"Price {price} differs from TWAP {twap} with zero tolerance",
                    price=price,
                    twap=twap,
                    deviation_bps=deviation_bps(price, twap),
                    max_deviation_bps=0,
                )
            return 0

        deviation = deviation_bps(price, twap)
        if deviation > cfg.max_price_deviation_bps:
            raise PriceDeviationTooHighError(
                f"Price deviates {deviation}bps from TWAP (max {cfg.max_price_deviation_bps}bps)",
                price=price,
                twap=twap,
                deviation_bps=deviation,
                max_deviation_bps=cfg.max_price_deviation_bps,
            )
        return deviation

    def update(self, order_id: str, caller: Optional[str] = None) -> UpdateResult:
        """
        Recompute the stop price from a freshly validated price.

        Any failure leaves the stop price unchanged.

        Raises:
            NotConfiguredError, UnauthorizedError, RateLimitedError,
            PriceFeedError subclasses, PriceDeviationTooHighError
        """
        cfg = self._require_config(order_id)
        self.authorize_keeper(cfg, caller)

        now = self._clock()
        next_allowed = cfg.last_update_at + cfg.update_frequency_sec
        if now < next_allowed:
            self._stats["updates_rejected"] += 1
            raise RateLimitedError(
                f"Order {order_id} updated {now - cfg.last_update_at}s ago "
                f"(frequency {cfg.update_frequency_sec}s)",
                last_update_at=cfg.last_update_at,
                next_allowed_at=next_allowed,
            )

        # Work on candidates so a rejected update leaves history and metrics untouched
        try:
            price = self._oracle.fetch(cfg.oracle)
            sample = PriceSample(price=price, timestamp=now)

            candidate = self._history.preview(order_id, sample, cfg.twap_window_sec, now)
            metrics = replace(self._metrics[order_id])
            self._twap.update_metrics(candidate, cfg.twap_window_sec, metrics, now)

            twap = self._twap_for(cfg, now, history=candidate, metrics=metrics)
            self.check_deviation(cfg, price, twap)
        except PriceFeedError as e:
            self._stats["updates_rejected"] += 1
            logger.warning(f"Update rejected for {order_id}: {e}")
            raise

        self._history.append(order_id, sample, cfg.twap_window_sec, now)
        self._metrics[order_id] = metrics
        self._emit(
            EngineEventType.HISTORY_SAMPLE_APPENDED, order_id, now, price=price, timestamp=now
        )

        old_stop = cfg.current_stop_price
        new_stop = compute_stop_price(price, cfg.trailing_distance_bps, cfg.order_type)

        cfg.current_stop_price = new_stop
        cfg.last_update_at = now
        self._stats["updates"] += 1

        logger.debug(
            f"Stop updated: {order_id} {old_stop} -> {new_stop} (price={price}, twap={twap})"
        )

        self._emit(
            EngineEventType.STOP_PRICE_UPDATED,
            order_id,
            now,
            old_stop=old_stop,
            new_stop=new_stop,
            current_price=price,
            twap=twap,
            caller=caller,
        )

        return UpdateResult(
            order_id=order_id,
            old_stop_price=old_stop,
            new_stop_price=new_stop,
            price=price,
            twap=twap,
            caller=caller,
            timestamp=now,
        )

    # ==================== Trigger ====================

    def evaluate_trigger(self, order_id: str, price: int) -> bool:
        """Check whether `price` crosses the order's current stop."""
        cfg = self._require_config(order_id)
        return is_stop_crossed(price, cfg.current_stop_price, cfg.order_type)

    def is_triggered(self, order_id: str) -> TriggerCheck:
        """
        Trigger status at the current oracle price.

        Never raises for configuration or oracle problems: those come
        back as NOT_CONFIGURED / ORACLE_UNAVAILABLE.
        """
        cfg = self._configs.get(order_id)
        if cfg is None:
            return TriggerCheck(order_id=order_id, status=TriggerStatus.NOT_CONFIGURED)

        now = self._clock()
        try:
            price = self._oracle.fetch(cfg.oracle)
            twap = self._twap_for(cfg, now)
        except PriceFeedError as e:
            return TriggerCheck(
                order_id=order_id,
                status=TriggerStatus.ORACLE_UNAVAILABLE,
                stop_price=cfg.current_stop_price,
                error=e,
            )

        crossed = is_stop_crossed(price, cfg.current_stop_price, cfg.order_type)
        return TriggerCheck(
            order_id=order_id,
            status=TriggerStatus.TRIGGERED if crossed else TriggerStatus.NOT_TRIGGERED,
            current_price=price,
            twap=twap,
            stop_price=cfg.current_stop_price,
        )

    # ==================== Settlement ====================

    def _validated_price(self, cfg: OrderConfig, now: int):
        price = self._oracle.fetch(cfg.oracle)
        twap = self._twap_for(cfg, now)
        self.check_deviation(cfg, price, twap)
        return price, twap

    def prepare_settlement(
        self,
        order_id: str,
        making_amount: int,
        taking_amount: int,
        counterparty: Optional[str] = None,
    ) -> SettlementPlan:
        """
        Validate a proposed fill and produce the amounts to transfer.

        The plan's taking amount is derived from the validated oracle price,
        not from the caller's proposal; the proposal only bounds slippage.

        Raises:
            NotConfiguredError, InvalidAmountError, PriceFeedError subclasses,
            PriceDeviationTooHighError, NotTriggeredError,
            SlippageExceededError, AmountOverflowError
        """
        cfg = self._require_config(order_id)

        if making_amount <= 0 or taking_amount <= 0:
            raise InvalidAmountError(
                f"Settlement amounts must be positive: making={making_amount}, taking={taking_amount}"
            )

        now = self._clock()

        try:
            price, twap = self._validated_price(cfg, now)

            if not is_stop_crossed(price, cfg.current_stop_price, cfg.order_type):
                raise NotTriggeredError(
                    f"Order {order_id} not triggered: price={price} stop={cfg.current_stop_price}",
                    price=price,
                    stop_price=cfg.current_stop_price,
                )

            expected_price = self._converter.normalize_price(
                taking_amount, making_amount, cfg.taker_decimals, cfg.maker_decimals
            )
            slippage = self._converter.slippage_bps(expected_price, price)

            if slippage > cfg.max_slippage_bps:
                raise SlippageExceededError(
                    f"Slippage {slippage}bps exceeds {cfg.max_slippage_bps}bps",
                    slippage_bps=slippage,
                    max_slippage_bps=cfg.max_slippage_bps,
                )

            settle_taking = self._converter.compute_taking_amount(
                making_amount, price, cfg.maker_decimals, cfg.taker_decimals
            )
        except Exception as e:
            self._stats["settlements_rejected"] += 1
            logger.warning(f"Settlement rejected for {order_id}: {e}")
            raise

        plan = SettlementPlan(
            order_id=order_id,
            making_amount=making_amount,
            taking_amount=settle_taking,
            price=price,
            twap=twap,
            expected_price=expected_price,
            slippage_bps=slippage,
            stop_price=cfg.current_stop_price,
            counterparty=counterparty,
        )
        self._stats["settlements_prepared"] += 1

        logger.info(
            f"Settlement prepared: {order_id} making={making_amount} "
            f"taking={settle_taking} price={price} slippage={slippage}bps"
        )

        self._emit(
            EngineEventType.TRIGGERED,
            order_id,
            now,
            counterparty=counterparty,
            settle_amount=settle_taking,
            stop_price=cfg.current_stop_price,
            twap=twap,
        )

        return plan

    def get_taking_amount(self, order_id: str, making_amount: int) -> int:
        """Taker amount for `making_amount` at the current validated price."""
        cfg = self._require_config(order_id)
        price, _ = self._validated_price(cfg, self._clock())
        return self._converter.compute_taking_amount(
            making_amount, price, cfg.maker_decimals, cfg.taker_decimals
        )

    def get_making_amount(self, order_id: str, taking_amount: int) -> int:
        """Maker amount for `taking_amount` at the current validated price."""
        cfg = self._require_config(order_id)
        price, _ = self._validated_price(cfg, self._clock())
        return self._converter.compute_making_amount(
            taking_amount, price, cfg.maker_decimals, cfg.taker_decimals
        )

    # ==================== Removal ====================

    def remove(self, order_id: str, caller: Optional[str] = None) -> None:
        """Drop an order's configuration, history and metrics."""
        cfg = self._require_config(order_id)
        self.authorize_owner(cfg, caller)

        del self._configs[order_id]
        self._metrics.pop(order_id, None)
        self._history.clear(order_id)
        self._stats["removed"] += 1

        logger.info(f"Order removed: {order_id} by {caller}")
        self._emit(EngineEventType.ORDER_REMOVED, order_id, self._clock(), caller=caller)

    # ==================== Accessors ====================

    def is_configured(self, order_id: str) -> bool:
        return order_id in self._configs

    def get_config(self, order_id: str) -> OrderConfig:
        return self._require_config(order_id)

    def get_history(self, order_id: str) -> List[PriceSample]:
        return self._history.get(order_id)

    def get_metrics(self, order_id: str) -> TWAPMetrics:
        self._require_config(order_id)
        return self._metrics[order_id]

    def list_orders(self) -> List[str]:
        return list(self._configs)

    @property
    def registry(self) -> Optional[EngineRegistry]:
        return self._registry

    def get_statistics(self) -> Dict[str, Any]:
        """Get engine statistics."""
        return {
            **self._stats,
            "active_orders": len(self._configs),
            "oracle": self._oracle.get_statistics(),
            "twap": self._twap.get_statistics(),
        }


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
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
