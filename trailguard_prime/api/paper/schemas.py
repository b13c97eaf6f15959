"""
Paper Schemas

Pydantic models for moving paper feed prices and funding paper accounts.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class FeedPriceRequest(BaseModel):
    """Human-readable price, e.g. 2050.25."""

    price: Decimal = Field(..., gt=0)


class FeedPriceResponse(BaseModel):
    feed_id: str
    raw_price: int
    decimals: int
    updated_at: int


class MintRequest(BaseModel):
    """Credit a paper account."""

    token: str = Field(..., min_length=1)
    account: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0, description="Amount in the token's smallest unit")


class BalanceResponse(BaseModel):
    token: str
    account: str
    balance: int
