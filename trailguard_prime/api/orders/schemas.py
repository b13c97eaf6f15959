"""
Order Schemas

Pydantic models for trailing-stop configuration, updates and settlement.
Prices and amounts are integers: prices carry 18 decimals, amounts are in
each token's smallest unit.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ConfigureOrderRequest(BaseModel):
    """Request to configure or replace an order's trailing stop."""

    oracle: str = Field(..., description="Registered feed id")
    initial_stop_price: int
    order_type: str = Field(..., description="SELL or BUY")
    trailing_distance_bps: Optional[int] = None
    update_frequency_sec: Optional[int] = None
    max_slippage_bps: Optional[int] = None
    max_price_deviation_bps: Optional[int] = None
    twap_window_sec: Optional[int] = None
    maker_decimals: int = 18
    taker_decimals: int = 18
    keeper: Optional[str] = None
    maker: Optional[str] = None
    maker_asset: Optional[str] = None
    taker_asset: Optional[str] = None


class OrderResponse(BaseModel):
    """Stored order configuration."""

    order_id: str
    oracle: str
    initial_stop_price: int
    current_stop_price: int
    trailing_distance_bps: int
    order_type: str
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
    maker_asset: Optional[str] = None
    taker_asset: Optional[str] = None


class UpdateResponse(BaseModel):
    """Result of a stop update."""

    order_id: str
    old_stop_price: int
    new_stop_price: int
    price: int
    twap: int
    caller: Optional[str] = None
    timestamp: int

    model_config = ConfigDict(from_attributes=True)


class TriggerResponse(BaseModel):
    """Trigger status at the current oracle price."""

    order_id: str
    status: str
    triggered: bool
    current_price: Optional[int] = None
    twap: Optional[int] = None
    stop_price: Optional[int] = None
    error: Optional[str] = None


class SettleRequest(BaseModel):
    """Proposed fill."""

    making_amount: int
    taking_amount: int
    counterparty: str
    router: Optional[str] = None


class SettlementResponse(BaseModel):
    """Executed fill."""

    order_id: str
    maker: str
    counterparty: str
    maker_asset: str
    taker_asset: str
    making_amount: int
    taking_amount: int
    price: int
    twap: int
    expected_price: int
    slippage_bps: int
    stop_price: int
    router: Optional[str] = None


class ErrorDetail(BaseModel):
    """Engine error code and message."""

    code: Optional[str] = None
    message: str


class ErrorResponse(BaseModel):
    """Error body returned for engine failures."""

    detail: ErrorDetail


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
