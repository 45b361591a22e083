# backend/portfolio_tracker/services/stores.py
"""
Trade and price persistence.

Thin query layer over the `trades` and `prices` tables. Every read returns
rows sorted ascending by date, which is the order the valuation builder
consumes them in.

Reads are retried with bounded exponential backoff on OperationalError
(dropped connection, locked SQLite file). The session is rolled back before
each new attempt, so reads must not run with unflushed changes pending.
Writes are not retried here; callers own their transactions.
"""

import logging
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from tenacity import (
    RetryCallState,
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from portfolio_tracker.models import Trade, TradeType, DailyPrice
from portfolio_tracker.services.constants import (
    STORE_RETRY_ATTEMPTS,
    STORE_RETRY_MIN_WAIT,
    STORE_RETRY_MAX_WAIT,
)
from portfolio_tracker.services.exceptions import TradeNotFoundError

logger = logging.getLogger(__name__)

_log_retry = before_sleep_log(logger, logging.WARNING)


def _rollback_before_retry(retry_state: RetryCallState) -> None:
    """
    Roll back the session passed to the failed read.

    A disconnect invalidates the session's transaction and PostgreSQL aborts
    it on any failed statement, so the next attempt needs a fresh one.
    """
    db = retry_state.kwargs.get("db")
    if db is None and len(retry_state.args) > 1:
        db = retry_state.args[1]
    if db is not None:
        db.rollback()
    _log_retry(retry_state)


_retry_reads = retry(
    stop=stop_after_attempt(STORE_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=STORE_RETRY_MIN_WAIT, min=STORE_RETRY_MIN_WAIT, max=STORE_RETRY_MAX_WAIT),
    retry=retry_if_exception_type(OperationalError),
    before_sleep=_rollback_before_retry,
    reraise=True,
)


class TradeStore:
    """Create, read and delete trades."""

    def create(
            self,
            db: Session,
            ticker: str,
            trade_date: date,
            trade_type: TradeType,
            amount: int,
            price: Decimal,
    ) -> Trade:
        trade = Trade(
            ticker=ticker,
            date=trade_date,
            trade_type=trade_type,
            amount=amount,
            price=price,
        )
        db.add(trade)
        db.commit()
        db.refresh(trade)

        logger.info(
            f"Recorded trade {trade.id}: {trade_type.value} {amount} {ticker} on {trade_date}"
        )
        return trade

    @_retry_reads
    def get(self, db: Session, trade_id: int) -> Trade:
        """
        Raises:
            TradeNotFoundError: If no trade has this id
        """
        trade = db.get(Trade, trade_id)
        if trade is None:
            raise TradeNotFoundError(trade_id)
        return trade

    @_retry_reads
    def list_trades(self, db: Session, ticker: str | None = None) -> Sequence[Trade]:
        """All trades ordered by date (then id, so same-day trades keep insertion order)."""
        query = select(Trade).order_by(Trade.date, Trade.id)
        if ticker is not None:
            query = query.where(Trade.ticker == ticker)
        return db.scalars(query).all()

    def delete(self, db: Session, trade_id: int) -> None:
        """
        Raises:
            TradeNotFoundError: If no trade has this id
        """
        trade = self.get(db, trade_id)
        db.delete(trade)
        db.commit()
        logger.info(f"Deleted trade {trade_id} ({trade.ticker} on {trade.date})")


class PriceStore:
    """Read daily closes and find where each ticker's history ends."""

    @_retry_reads
    def list_prices(self, db: Session, ticker: str | None = None) -> Sequence[DailyPrice]:
        """All prices ordered by date, optionally for one ticker."""
        query = select(DailyPrice).order_by(DailyPrice.date, DailyPrice.ticker)
        if ticker is not None:
            query = query.where(DailyPrice.ticker == ticker)
        return db.scalars(query).all()

    @_retry_reads
    def last_date(self, db: Session, ticker: str) -> date | None:
        """Newest stored price date for ticker, or None if nothing is stored."""
        return db.scalar(
            select(func.max(DailyPrice.date)).where(DailyPrice.ticker == ticker)
        )

    @_retry_reads
    def last_dates(self, db: Session) -> dict[str, date]:
        """Newest stored price date per ticker."""
        rows = db.execute(
            select(DailyPrice.ticker, func.max(DailyPrice.date)).group_by(DailyPrice.ticker)
        ).all()
        return {ticker: last for ticker, last in rows}
