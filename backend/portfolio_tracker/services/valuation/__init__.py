# backend/portfolio_tracker/services/valuation/__init__.py
"""
Valuation Service Package.

Turns trades and daily closes into a per-ticker daily value series.

Architecture:
    valuation/
    ├── __init__.py     # This file - package exports
    ├── types.py        # TradeEvent, PriceObservation, PositionState, PortfolioPoint
    ├── builder.py      # ValuationBuilder (single ticker, pure)
    └── service.py      # PortfolioValuationService (loads data, fans out per ticker)

Data Flow:
    trades table  -> TradeEvent       ┐
                                      ├-> ValuationBuilder (per ticker) -> PortfolioPoint[]
    prices table  -> PriceObservation ┘
"""

from portfolio_tracker.services.valuation.builder import ValuationBuilder
from portfolio_tracker.services.valuation.service import PortfolioValuationService
from portfolio_tracker.services.valuation.types import (
    TradeEvent,
    PriceObservation,
    PositionState,
    PortfolioPoint,
    PortfolioSeries,
)

__all__ = [
    "PortfolioValuationService",
    "ValuationBuilder",
    "TradeEvent",
    "PriceObservation",
    "PositionState",
    "PortfolioPoint",
    "PortfolioSeries",
]
