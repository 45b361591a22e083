# backend/portfolio_tracker/routers/__init__.py
"""
API routers for the Portfolio Tracker.

- trades: Buy/sell records
- prices: Stored closes and the provider refresh
- portfolio: Per-ticker daily value series
"""

from portfolio_tracker.routers.portfolio import router as portfolio_router
from portfolio_tracker.routers.prices import router as prices_router
from portfolio_tracker.routers.trades import router as trades_router

__all__ = [
    "trades_router",
    "prices_router",
    "portfolio_router",
]
