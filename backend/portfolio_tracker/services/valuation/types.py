# backend/portfolio_tracker/services/valuation/types.py
"""
Data types for the valuation engine.

These are plain dataclasses, independent of SQLAlchemy, so the builder can
be fed from ORM rows, test fixtures or any other source.

Naming Conventions:
    - TradeEvent: a signed change in position on one date
    - PriceObservation: one daily close
    - PositionState: running share count while walking the calendar
    - PortfolioPoint: position x close on a priced day
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from portfolio_tracker.models import Trade, DailyPrice


@dataclass(frozen=True)
class TradeEvent:
    """
    Signed position change for one ticker.

    Attributes:
        ticker: Instrument identifier
        date: Trade date
        amount: Positive for buys, negative for sells
    """

    ticker: str
    date: date
    amount: int

    @classmethod
    def from_model(cls, trade: Trade) -> TradeEvent:
        return cls(ticker=trade.ticker, date=trade.date, amount=trade.signed_amount)


@dataclass(frozen=True)
class PriceObservation:
    """
    Daily close for one ticker.

    Attributes:
        ticker: Instrument identifier
        date: Trading date
        close: Closing price (Decimal, never float)
    """

    ticker: str
    date: date
    close: Decimal

    @classmethod
    def from_model(cls, price: DailyPrice) -> PriceObservation:
        return cls(ticker=price.ticker, date=price.date, close=Decimal(price.close_price))


@dataclass
class PositionState:
    """
    Running share count for one ticker.

    Mutated day by day as the builder walks the calendar.
    """

    ticker: str
    shares: int = 0

    def apply(self, delta: int) -> None:
        self.shares += delta


@dataclass(frozen=True)
class PortfolioPoint:
    """
    Value of one ticker's position on one priced day.

    Attributes:
        date: Priced day
        value: position x close on that day
    """

    date: date
    value: Decimal


@dataclass
class PortfolioSeries:
    """
    Valuation series for every tracked ticker.

    Attributes:
        series: ticker -> points in ascending date order. Every tracked
            ticker is present, possibly with an empty list.
    """

    series: dict[str, list[PortfolioPoint]] = field(default_factory=dict)

    def __getitem__(self, ticker: str) -> list[PortfolioPoint]:
        return self.series[ticker]

    @property
    def tickers(self) -> list[str]:
        return list(self.series)

    @property
    def total_points(self) -> int:
        return sum(len(points) for points in self.series.values())
