# backend/portfolio_tracker/services/__init__.py
"""
Service layer for business logic.

Services have no knowledge of HTTP. They raise domain exceptions and
receive database sessions as parameters.

Architecture:
    services/
    ├── __init__.py       # This file - main exports
    ├── exceptions.py     # Domain exceptions
    ├── constants.py      # Business constants and limits
    ├── stores.py         # Trade and price queries
    ├── market_data/      # Providers and price sync
    └── valuation/        # Portfolio value series
"""

from portfolio_tracker.services.exceptions import (
    ServiceError,
    ValidationError,
    UnknownTickerError,
    NotFoundError,
    TradeNotFoundError,
    MarketDataError,
    ProviderUnavailableError,
    RateLimitError,
    TickerNotFoundError,
    ProviderResponseError,
)
from portfolio_tracker.services.market_data import PriceSyncService
from portfolio_tracker.services.stores import TradeStore, PriceStore
from portfolio_tracker.services.valuation import PortfolioValuationService

__all__ = [
    "PriceSyncService",
    "PortfolioValuationService",
    "TradeStore",
    "PriceStore",
    "ServiceError",
    "ValidationError",
    "UnknownTickerError",
    "NotFoundError",
    "TradeNotFoundError",
    "MarketDataError",
    "ProviderUnavailableError",
    "RateLimitError",
    "TickerNotFoundError",
    "ProviderResponseError",
]
