# backend/portfolio_tracker/routers/trades.py
"""
Trade management endpoints.

Trades record buys and sells of the tracked tickers. A trade is immutable:
to correct one, delete it and record it again.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from portfolio_tracker.database import get_db
from portfolio_tracker.dependencies import get_trade_store, get_tracked_tickers
from portfolio_tracker.middleware.rate_limit import limiter, RATE_LIMIT_DEFAULT, RATE_LIMIT_WRITE
from portfolio_tracker.models import Trade
from portfolio_tracker.schemas.trades import TradeCreate, TradeResponse
from portfolio_tracker.services.exceptions import UnknownTickerError
from portfolio_tracker.services.stores import TradeStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/trades",
    tags=["Trades"],
)


@router.post(
    "/",
    response_model=TradeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a trade",
    response_description="The stored trade"
)
@limiter.limit(RATE_LIMIT_WRITE)
def create_trade(
        request: Request,  # Required for rate limiting
        trade: TradeCreate,
        db: Annotated[Session, Depends(get_db)],
        store: Annotated[TradeStore, Depends(get_trade_store)],
        tickers: Annotated[list[str], Depends(get_tracked_tickers)],
) -> Trade:
    """
    Record a buy or sell.

    - **ticker**: One of the tracked tickers (e.g., IWDA.AMS)
    - **date**: Trade date, YYYY-MM-DD, not in the future
    - **trade_type**: BUY (default) or SELL
    - **amount**: Number of shares, positive
    - **price**: Price per share

    Raises **400** if the ticker is not tracked.
    """
    if trade.ticker not in tickers:
        raise UnknownTickerError(trade.ticker, tickers)

    return store.create(
        db,
        ticker=trade.ticker,
        trade_date=trade.date,
        trade_type=trade.trade_type,
        amount=trade.amount,
        price=trade.price,
    )


@router.get(
    "/",
    response_model=list[TradeResponse],
    summary="List trades",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def list_trades(
        request: Request,  # Required for rate limiting
        db: Annotated[Session, Depends(get_db)],
        store: Annotated[TradeStore, Depends(get_trade_store)],
        ticker: Annotated[str | None, Query(description="Only trades for this ticker")] = None,
) -> list[Trade]:
    """All trades ordered by date, oldest first."""
    if ticker is not None:
        ticker = ticker.strip().upper()
    return list(store.list_trades(db, ticker=ticker))


@router.get(
    "/{trade_id}",
    response_model=TradeResponse,
    summary="Get a trade",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def get_trade(
        request: Request,  # Required for rate limiting
        trade_id: int,
        db: Annotated[Session, Depends(get_db)],
        store: Annotated[TradeStore, Depends(get_trade_store)],
) -> Trade:
    """Raises **404** if the trade does not exist."""
    return store.get(db, trade_id)


@router.delete(
    "/{trade_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a trade",
)
@limiter.limit(RATE_LIMIT_WRITE)
def delete_trade(
        request: Request,  # Required for rate limiting
        trade_id: int,
        db: Annotated[Session, Depends(get_db)],
        store: Annotated[TradeStore, Depends(get_trade_store)],
) -> None:
    """
    Delete a trade permanently.

    Raises **404** if the trade does not exist.
    """
    store.delete(db, trade_id)
    return None
