# backend/portfolio_tracker/schemas/portfolio.py
"""
Pydantic schemas for the portfolio value series.

Values are Decimals and serialize to JSON strings, so no precision is
lost on the way to the client:

    {"IWDA.AMS": [{"date": "2021-01-04", "amount_in_euros": "652.50"}]}
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from portfolio_tracker.services.valuation.types import PortfolioPoint, PortfolioSeries


class PortfolioPointResponse(BaseModel):
    """Value of one ticker's position on one priced day."""

    date: dt.date
    amount_in_euros: Decimal = Field(..., description="position x close")

    @classmethod
    def from_point(cls, point: PortfolioPoint) -> "PortfolioPointResponse":
        return cls(date=point.date, amount_in_euros=point.value)


PortfolioResponse = dict[str, list[PortfolioPointResponse]]


def to_portfolio_response(result: PortfolioSeries) -> PortfolioResponse:
    """Convert the service result to the wire shape, keeping ticker order."""
    return {
        ticker: [PortfolioPointResponse.from_point(p) for p in points]
        for ticker, points in result.series.items()
    }
