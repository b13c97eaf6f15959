"""
Order Routes

API endpoints for configuring, updating, checking and settling
trailing-stop orders.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from shared.trailguard_core.exceptions import (
    AmountOverflowError,
    ConfigurationInvalidError,
    InvalidAmountError,
    InvalidOracleError,
    InvalidOrderTypeError,
    NotConfiguredError,
    OrderError,
    PriceDeviationTooHighError,
    PriceFeedError,
    RateLimitedError,
    SettlementError,
    SettlementInProgressError,
    TrailGuardError,
    UnauthorizedError,
)
from shared.trailguard_core.trailing_stop_engine import OrderParams, OrderType
from trailguard_prime.api.dependencies import get_caller, get_coordinator, get_order_defaults
from trailguard_prime.api.orders.schemas import (
    ConfigureOrderRequest,
    ErrorDetail,
    ErrorResponse,
    MessageResponse,
    OrderResponse,
    SettlementResponse,
    SettleRequest,
    TriggerResponse,
    UpdateResponse,
)
from trailguard_prime.core.config_manager import OrderDefaults
from trailguard_prime.core.coordinator import OrderCoordinator


router = APIRouter()


# Checked in order; first match wins
_STATUS_MAP = (
    (NotConfiguredError, status.HTTP_404_NOT_FOUND),
    (ConfigurationInvalidError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (RateLimitedError, status.HTTP_429_TOO_MANY_REQUESTS),
    (SettlementInProgressError, status.HTTP_409_CONFLICT),
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
    (PriceDeviationTooHighError, status.HTTP_409_CONFLICT),
    (PriceFeedError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (InvalidAmountError, status.HTTP_400_BAD_REQUEST),
    (AmountOverflowError, status.HTTP_400_BAD_REQUEST),
    (SettlementError, status.HTTP_409_CONFLICT),
    (OrderError, status.HTTP_400_BAD_REQUEST),
)


def error_status(error: TrailGuardError) -> int:
    """HTTP status for an engine error."""
    if isinstance(error, UnauthorizedError) and error.caller is None:
        return status.HTTP_401_UNAUTHORIZED
    for error_type, code in _STATUS_MAP:
        if isinstance(error, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def error_responses(*codes: int) -> dict:
    return {code: {"model": ErrorResponse} for code in codes}


def to_http(error: TrailGuardError) -> HTTPException:
    return HTTPException(
        status_code=error_status(error),
        detail=ErrorDetail(code=error.code, message=error.message).model_dump(),
    )


def _order_response(cfg, coordinator: OrderCoordinator) -> OrderResponse:
    assets = coordinator.get_assets(cfg.order_id)
    return OrderResponse(
        **cfg.to_dict(),
        maker_asset=assets.maker_asset if assets else None,
        taker_asset=assets.taker_asset if assets else None,
    )


def _build_params(
    request: ConfigureOrderRequest,
    coordinator: OrderCoordinator,
    defaults: OrderDefaults,
) -> OrderParams:
    registry = coordinator.engine.registry
    feed = registry.get_feed(request.oracle) if registry is not None else None
    if feed is None:
        raise InvalidOracleError(
            f"Unknown oracle feed: {request.oracle}", field="oracle", value=request.oracle
        )

    try:
        order_type = OrderType(request.order_type.upper())
    except ValueError:
        raise InvalidOrderTypeError(
            f"Order type must be SELL or BUY: {request.order_type}",
            field="order_type",
            value=request.order_type,
        )

    def pick(value: Optional[int], default: int) -> int:
        return default if value is None else value

    return OrderParams(
        oracle=feed,
        initial_stop_price=request.initial_stop_price,
        trailing_distance_bps=pick(request.trailing_distance_bps, defaults.trailing_distance_bps),
        order_type=order_type,
        update_frequency_sec=pick(request.update_frequency_sec, defaults.update_frequency_sec),
        max_slippage_bps=pick(request.max_slippage_bps, defaults.max_slippage_bps),
        max_price_deviation_bps=pick(
            request.max_price_deviation_bps, defaults.max_price_deviation_bps
        ),
        twap_window_sec=pick(request.twap_window_sec, defaults.twap_window_sec),
        maker_decimals=request.maker_decimals,
        taker_decimals=request.taker_decimals,
        keeper=request.keeper,
        maker=request.maker,
    )


# ==================== Configuration ====================


@router.put(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Configure trailing stop",
    responses=error_responses(401, 403, 422),
)
async def configure_order(
    order_id: str,
    request: ConfigureOrderRequest,
    caller: Optional[str] = Depends(get_caller),
    coordinator: OrderCoordinator = Depends(get_coordinator),
    defaults: OrderDefaults = Depends(get_order_defaults),
) -> OrderResponse:
    """Configure or fully replace an order's trailing stop."""
    try:
        params = _build_params(request, coordinator, defaults)
        cfg = await coordinator.configure(
            order_id,
            params,
            caller=caller,
            maker_asset=request.maker_asset,
            taker_asset=request.taker_asset,
        )
    except TrailGuardError as e:
        raise to_http(e)

    return _order_response(cfg, coordinator)


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
    responses=error_responses(404),
)
async def get_order(
    order_id: str,
    coordinator: OrderCoordinator = Depends(get_coordinator),
) -> OrderResponse:
    try:
        cfg = coordinator.engine.get_config(order_id)
    except TrailGuardError as e:
        raise to_http(e)
    return _order_response(cfg, coordinator)


@router.delete(
    "/{order_id}",
    response_model=MessageResponse,
    summary="Remove order",
    responses=error_responses(401, 403, 404),
)
async def remove_order(
    order_id: str,
    caller: Optional[str] = Depends(get_caller),
    coordinator: OrderCoordinator = Depends(get_coordinator),
) -> MessageResponse:
    try:
        await coordinator.remove(order_id, caller=caller)
    except TrailGuardError as e:
        raise to_http(e)
    return MessageResponse(message=f"Order {order_id} removed")


# ==================== Updates ====================


@router.post(
    "/{order_id}/update",
    response_model=UpdateResponse,
    summary="Update stop price",
    responses=error_responses(404, 409, 429, 503),
)
async def update_order(
    order_id: str,
    caller: Optional[str] = Depends(get_caller),
    coordinator: OrderCoordinator = Depends(get_coordinator),
) -> UpdateResponse:
    """Recompute the stop price from the current validated price."""
    try:
        result = await coordinator.update(order_id, caller=caller)
    except TrailGuardError as e:
        raise to_http(e)
    return UpdateResponse.model_validate(result)


@router.get(
    "/{order_id}/trigger",
    response_model=TriggerResponse,
    summary="Check trigger",
)
async def check_trigger(
    order_id: str,
    coordinator: OrderCoordinator = Depends(get_coordinator),
) -> TriggerResponse:
    """Trigger status; oracle failures are reported in the body."""
    check = await coordinator.check(order_id)
    return TriggerResponse.model_validate(check.to_dict())


# ==================== Settlement ====================


@router.post(
    "/{order_id}/settle",
    response_model=SettlementResponse,
    summary="Settle triggered order",
    responses=error_responses(400, 403, 404, 409, 503),
)
async def settle_order(
    order_id: str,
    request: SettleRequest,
    coordinator: OrderCoordinator = Depends(get_coordinator),
) -> SettlementResponse:
    try:
        receipt = await coordinator.settle(
            order_id,
            request.making_amount,
            request.taking_amount,
            counterparty=request.counterparty,
            router=request.router,
        )
    except TrailGuardError as e:
        raise to_http(e)
    return SettlementResponse.model_validate(receipt.to_dict())
