# backend/portfolio_tracker/services/market_data/__init__.py
"""
Market data services package.

This package contains:
- Abstract interface for daily close providers (base.py)
- Alpha Vantage implementation (alpha_vantage.py)
- Yahoo Finance implementation (yahoo.py)
- Incremental price sync (sync_service.py)

Architecture:
    MarketDataProvider (ABC)
    ├── AlphaVantageProvider (default)
    └── YahooFinanceProvider

    PriceSyncService
    └── Fills each ticker's price history up to today
"""

from portfolio_tracker.services.market_data.base import MarketDataProvider, OutputSize
from portfolio_tracker.services.market_data.alpha_vantage import AlphaVantageProvider
from portfolio_tracker.services.market_data.yahoo import YahooFinanceProvider
from portfolio_tracker.services.market_data.sync_service import (
    PriceSyncService,
    SyncResult,
    TickerSyncResult,
    choose_output_size,
)

__all__ = [
    "MarketDataProvider",
    "OutputSize",
    "AlphaVantageProvider",
    "YahooFinanceProvider",
    "PriceSyncService",
    "SyncResult",
    "TickerSyncResult",
    "choose_output_size",
]
