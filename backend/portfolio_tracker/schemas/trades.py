# backend/portfolio_tracker/schemas/trades.py
"""
Pydantic schemas for Trade validation.

Validation layers:
- Field constraints: type, numeric limits
- Field validators: ticker normalization, no future dates
- Router: ticker must be one of the tracked tickers

IMPORTANT: Prices use Decimal. Never use float for money!
"""

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portfolio_tracker.models import TradeType
from portfolio_tracker.schemas.validators import validate_ticker


class TradeCreate(BaseModel):
    """Schema for recording a new trade."""

    ticker: str = Field(
        ...,
        description="Tracked instrument",
        examples=["IWDA.AMS", "EMIM.AMS"]
    )

    date: dt.date = Field(
        ...,
        description="Trade date (YYYY-MM-DD)",
        examples=["2021-01-04"]
    )

    trade_type: TradeType = Field(
        default=TradeType.BUY,
        description="BUY adds shares, SELL removes them",
    )

    amount: int = Field(
        ...,
        gt=0,
        description="Number of shares traded (positive; direction comes from trade_type)",
        examples=[10]
    )

    price: Decimal = Field(
        ...,
        gt=0,
        max_digits=18,
        decimal_places=8,
        description="Price per share paid or received",
        examples=["65.25"]
    )

    @field_validator('ticker')
    @classmethod
    def validate_and_normalize_ticker(cls, v: str) -> str:
        return validate_ticker(v)

    @field_validator('date')
    @classmethod
    def validate_date_not_in_future(cls, v: dt.date) -> dt.date:
        """Prevent recording trades that haven't happened yet."""
        if v > dt.date.today():
            raise ValueError(f"Trade date cannot be in the future (sent: {v})")
        return v


class TradeResponse(BaseModel):
    """Trade as stored."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    ticker: str
    date: dt.date
    trade_type: TradeType
    amount: int
    price: Decimal
    created_at: dt.datetime
