# backend/portfolio_tracker/schemas/prices.py
"""
Pydantic schemas for stored prices and the price refresh.
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class PriceResponse(BaseModel):
    """One stored daily close."""

    model_config = ConfigDict(from_attributes=True)

    ticker: str
    date: dt.date
    close_price: Decimal
    provider: str


class TickerSyncResponse(BaseModel):
    """Outcome of refreshing one ticker."""

    model_config = ConfigDict(from_attributes=True)

    ticker: str
    output_size: str = Field(..., description="'compact' or 'full' provider history")
    last_date_before: dt.date | None = None
    last_date_after: dt.date | None = None
    rows_inserted: int = 0
    warnings: list[str] = Field(default_factory=list)


class SyncResponse(BaseModel):
    """Outcome of refreshing every tracked ticker."""

    model_config = ConfigDict(from_attributes=True)

    provider: str
    sync_started: dt.datetime
    sync_completed: dt.datetime | None = None
    rows_inserted: int
    tickers: list[TickerSyncResponse] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
