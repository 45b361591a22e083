# backend/portfolio_tracker/routers/prices.py
"""
Price endpoints.

Key features:
- List stored daily closes
- Refresh: fetch closes missing since the last stored date for every
  tracked ticker
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from portfolio_tracker.database import get_db
from portfolio_tracker.dependencies import get_price_store, get_sync_service, get_tracked_tickers
from portfolio_tracker.middleware.rate_limit import limiter, RATE_LIMIT_DEFAULT, RATE_LIMIT_SYNC
from portfolio_tracker.models import DailyPrice
from portfolio_tracker.schemas.prices import PriceResponse, SyncResponse, TickerSyncResponse
from portfolio_tracker.services.market_data.sync_service import PriceSyncService, SyncResult
from portfolio_tracker.services.stores import PriceStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/prices",
    tags=["Prices"],
)


def to_sync_response(result: SyncResult) -> SyncResponse:
    return SyncResponse(
        provider=result.provider,
        sync_started=result.sync_started,
        sync_completed=result.sync_completed,
        rows_inserted=result.rows_inserted,
        tickers=[TickerSyncResponse.model_validate(r) for r in result.ticker_results],
        warnings=result.warnings,
    )


@router.get(
    "/",
    response_model=list[PriceResponse],
    summary="List stored prices",
)
@limiter.limit(RATE_LIMIT_DEFAULT)
def list_prices(
        request: Request,  # Required for rate limiting
        db: Annotated[Session, Depends(get_db)],
        store: Annotated[PriceStore, Depends(get_price_store)],
        ticker: Annotated[str | None, Query(description="Only prices for this ticker")] = None,
) -> list[DailyPrice]:
    """Stored daily closes ordered by date, oldest first."""
    if ticker is not None:
        ticker = ticker.strip().upper()
    return list(store.list_prices(db, ticker=ticker))


@router.post(
    "/refresh",
    response_model=SyncResponse,
    summary="Refresh prices",
    response_description="Rows inserted per ticker"
)
@limiter.limit(RATE_LIMIT_SYNC)
def refresh_prices(
        request: Request,  # Required for rate limiting
        db: Annotated[Session, Depends(get_db)],
        service: Annotated[PriceSyncService, Depends(get_sync_service)],
        tickers: Annotated[list[str], Depends(get_tracked_tickers)],
) -> SyncResponse:
    """
    Fetch the daily closes missing for every tracked ticker.

    Only dates after the newest stored close are inserted, so calling this
    twice in a row inserts nothing the second time.

    **Errors:**
    - 404: Provider does not know a ticker
    - 429: Provider rate limit hit (after retries)
    - 502/503: Provider returned garbage or is unreachable

    Tickers refreshed before an error keep their new prices.
    """
    result = service.sync_all(db, tickers)
    return to_sync_response(result)
