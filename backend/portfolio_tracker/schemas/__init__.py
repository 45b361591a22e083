# backend/portfolio_tracker/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.

- errors: Error response formats
- trades: Trade create/response
- prices: Stored prices and refresh results
- portfolio: Per-ticker value series
- validators: Reusable validation functions
"""

from portfolio_tracker.schemas.errors import ErrorDetail, ValidationErrorDetail
from portfolio_tracker.schemas.portfolio import (
    PortfolioPointResponse,
    PortfolioResponse,
    to_portfolio_response,
)
from portfolio_tracker.schemas.prices import PriceResponse, SyncResponse, TickerSyncResponse
from portfolio_tracker.schemas.trades import TradeCreate, TradeResponse

__all__ = [
    "ErrorDetail",
    "ValidationErrorDetail",
    "PortfolioPointResponse",
    "PortfolioResponse",
    "to_portfolio_response",
    "PriceResponse",
    "SyncResponse",
    "TickerSyncResponse",
    "TradeCreate",
    "TradeResponse",
]
