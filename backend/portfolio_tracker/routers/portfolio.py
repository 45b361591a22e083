# backend/portfolio_tracker/routers/portfolio.py
"""
Portfolio valuation endpoint.

Returns, for every tracked ticker, the value of the held position on each
day a close is stored:

    GET /portfolio/
    {"IWDA.AMS": [{"date": "2021-01-04", "amount_in_euros": "652.50"}, ...],
     "EMIM.AMS": []}
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from portfolio_tracker.database import get_db
from portfolio_tracker.dependencies import (
    get_sync_service,
    get_tracked_tickers,
    get_valuation_service,
)
from portfolio_tracker.middleware.rate_limit import limiter, RATE_LIMIT_PORTFOLIO
from portfolio_tracker.schemas.portfolio import PortfolioResponse, to_portfolio_response
from portfolio_tracker.services.market_data.sync_service import PriceSyncService
from portfolio_tracker.services.valuation.service import PortfolioValuationService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/portfolio",
    tags=["Portfolio"],
)


@router.get(
    "/",
    response_model=PortfolioResponse,
    summary="Portfolio value series",
    response_description="Per-ticker daily values"
)
@limiter.limit(RATE_LIMIT_PORTFOLIO)
def get_portfolio(
        request: Request,  # Required for rate limiting
        db: Annotated[Session, Depends(get_db)],
        valuation: Annotated[PortfolioValuationService, Depends(get_valuation_service)],
        sync: Annotated[PriceSyncService, Depends(get_sync_service)],
        tickers: Annotated[list[str], Depends(get_tracked_tickers)],
        refresh: Annotated[bool, Query(description="Refresh prices from the provider first")] = False,
) -> PortfolioResponse:
    """
    Value every tracked ticker on each priced day from its first trade on.

    Tickers without trades or prices map to an empty list. Set
    `refresh=true` to fetch missing prices before valuing; provider errors
    are then returned as they are by `POST /prices/refresh`.
    """
    if refresh:
        sync.sync_all(db, tickers)

    return to_portfolio_response(valuation.generate(db))
