"""
Paper Routes

Admin endpoints for driving a paper runtime: moving feed prices (which
restamps the reading) and minting balances on the paper ledger.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from shared.trailguard_core.exceptions import UnauthorizedError
from trailguard_prime.api.dependencies import get_caller, get_engine_runtime
from trailguard_prime.api.orders.routes import error_responses, to_http
from trailguard_prime.api.orders.schemas import ErrorDetail
from trailguard_prime.api.paper.schemas import (
    BalanceResponse,
    FeedPriceRequest,
    FeedPriceResponse,
    MintRequest,
)
from trailguard_prime.api.services.runtime import EngineRuntime
from trailguard_prime.plugins.feeds.paper_feed import PaperPriceFeed


router = APIRouter()


def _require_paper_admin(runtime: EngineRuntime, caller: Optional[str]) -> None:
    admin = runtime.registry.admin
    if caller != admin:
        raise to_http(UnauthorizedError(f"Caller {caller} may not drive the paper runtime", caller=caller))
    if not runtime.config.is_paper:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=ErrorDetail(code="PAPER_MODE_REQUIRED", message="Runtime is not in paper mode").model_dump(),
        )


@router.put(
    "/feeds/{feed_id:path}",
    response_model=FeedPriceResponse,
    summary="Set paper feed price",
    responses=error_responses(401, 403, 404, 409),
)
async def set_feed_price(
    feed_id: str,
    request: FeedPriceRequest,
    caller: Optional[str] = Depends(get_caller),
    runtime: EngineRuntime = Depends(get_engine_runtime),
) -> FeedPriceResponse:
    """Set a paper feed's price, stamped with the current clock."""
    _require_paper_admin(runtime, caller)

    feed = runtime.registry.get_feed(feed_id)
    if not isinstance(feed, PaperPriceFeed):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ErrorDetail(code="FEED_NOT_FOUND", message=f"No paper feed {feed_id}").model_dump(),
        )

    raw_price = feed.set_price(request.price)
    return FeedPriceResponse(
        feed_id=feed_id,
        raw_price=raw_price,
        decimals=feed.decimals(),
        updated_at=feed.updated_at,
    )


@router.post(
    "/balances",
    response_model=BalanceResponse,
    summary="Mint paper balance",
    responses=error_responses(401, 403, 409),
)
async def mint_balance(
    request: MintRequest,
    caller: Optional[str] = Depends(get_caller),
    runtime: EngineRuntime = Depends(get_engine_runtime),
) -> BalanceResponse:
    _require_paper_admin(runtime, caller)

    runtime.ledger.mint(request.token, request.account, request.amount)
    return BalanceResponse(
        token=request.token,
        account=request.account,
        balance=runtime.ledger.balance_of(request.token, request.account),
    )


@router.get(
    "/balances/{token}/{account}",
    response_model=BalanceResponse,
    summary="Get paper balance",
)
async def get_balance(
    token: str,
    account: str,
    runtime: EngineRuntime = Depends(get_engine_runtime),
) -> BalanceResponse:
    return BalanceResponse(
        token=token,
        account=account,
        balance=runtime.ledger.balance_of(token, account),
    )
