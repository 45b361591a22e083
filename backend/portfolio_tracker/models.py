# backend/portfolio_tracker/models.py
from __future__ import annotations

import enum
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Date, DateTime, Enum, Numeric, Integer, UniqueConstraint, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class TradeType(str, enum.Enum):
    BUY = "BUY"
    SELL = "SELL"


class Trade(Base):
    """
    A recorded change in held quantity of an instrument on a given date.

    Trades are never updated: a wrong trade is deleted and recorded again.
    `amount` is always positive; the direction comes from `trade_type`.
    """
    __tablename__ = "trades"
    __table_args__ = (
        # "All trades for ticker X in date order" drives portfolio generation
        Index('ix_trade_ticker_date', 'ticker', 'date'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    ticker: Mapped[str] = mapped_column(String, index=True)
    date: Mapped[date] = mapped_column(Date, index=True)  # No time component
    trade_type: Mapped[TradeType] = mapped_column(Enum(TradeType))
    amount: Mapped[int] = mapped_column(Integer)

    # Audit only, not used by valuation
    price: Mapped[Decimal] = mapped_column(Numeric(18, 8))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    @property
    def signed_amount(self) -> int:
        """Share delta applied to the running position."""
        return self.amount if self.trade_type == TradeType.BUY else -self.amount


class DailyPrice(Base):
    """
    Daily closing price of one instrument.

    Rows are append-only: the sync job only inserts dates newer than the
    last stored date for the ticker.
    """
    __tablename__ = "prices"
    __table_args__ = (
        UniqueConstraint('ticker', 'date', name='uq_price_ticker_date'),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    ticker: Mapped[str] = mapped_column(String, index=True)
    date: Mapped[date] = mapped_column(Date, index=True)
    close_price: Mapped[Decimal] = mapped_column(Numeric(18, 8))

    provider: Mapped[str] = mapped_column(String(50), default="alpha_vantage")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
