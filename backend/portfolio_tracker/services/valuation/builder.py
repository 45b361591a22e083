# backend/portfolio_tracker/services/valuation/builder.py
"""
Valuation builder: turns one ticker's trades and daily closes into a
daily portfolio value series.

Algorithm (single pass over the calendar):
    1. start = first trade date, end = last price date
    2. Index closes by date and net trade deltas by date
    3. For each calendar day in [start, end]:
         position += net delta of that day's trades
         if a close exists that day: emit (day, position * close)

Days without a close (weekends, holidays, provider gaps) emit nothing but
the position carries forward, so a trade on a Saturday shows up in
Monday's value.

Complexity: O(D + T + P) where D = days in range, T = trades, P = prices.

Same-day trades:
    All trades dated on one day are summed before that day is valued.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from portfolio_tracker.services.exceptions import MixedTickerError
from portfolio_tracker.services.valuation.types import (
    PortfolioPoint,
    PositionState,
    PriceObservation,
    TradeEvent,
)
from portfolio_tracker.utils.date_utils import iter_calendar_days

logger = logging.getLogger(__name__)


class ValuationBuilder:
    """
    Builds the dense, gap-aware valuation series for a single ticker.

    Stateless: one instance can be shared across requests and threads.

    Example:
        builder = ValuationBuilder()
        points = builder.build(prices, trades)
        # [PortfolioPoint(date=2021-01-04, value=Decimal("100.00")), ...]
    """

    def build(
            self,
            prices: Iterable[PriceObservation],
            trades: Iterable[TradeEvent],
    ) -> list[PortfolioPoint]:
        """
        Value a ticker's running position on every priced day.

        Args:
            prices: Daily closes for one ticker. Expected ascending by date;
                sorted here if they are not.
            trades: Trades for the same ticker. Expected ascending by date;
                sorted here if they are not.

        Returns:
            Points in strictly ascending date order. Empty if either input is
            empty or the first trade comes after the last price.

        Raises:
            MixedTickerError: If the inputs cover more than one ticker
        """
        prices = self._sorted_by_date(prices, "prices")
        trades = self._sorted_by_date(trades, "trades")

        if not prices or not trades:
            return []

        tickers = {p.ticker for p in prices} | {t.ticker for t in trades}
        if len(tickers) > 1:
            raise MixedTickerError(tickers)

        start = trades[0].date
        end = prices[-1].date
        if start > end:
            logger.debug(
                f"{trades[0].ticker}: first trade {start} is after last price {end}, nothing to value"
            )
            return []

        close_by_date = self._index_closes(prices)
        delta_by_date = self._index_trade_deltas(trades)

        position = PositionState(ticker=trades[0].ticker)
        points: list[PortfolioPoint] = []

        for day in iter_calendar_days(start, end):
            position.apply(delta_by_date.get(day, 0))

            close = close_by_date.get(day)
            if close is not None:
                points.append(PortfolioPoint(date=day, value=Decimal(position.shares) * close))

        return points

    @staticmethod
    def _sorted_by_date(rows, label: str) -> list:
        """Return rows as a list in ascending date order (stable)."""
        rows = list(rows)
        if any(a.date > b.date for a, b in zip(rows, rows[1:])):
            logger.warning(f"Valuation {label} were not sorted by date; sorting")
            rows.sort(key=lambda row: row.date)
        return rows

    @staticmethod
    def _index_closes(prices: list[PriceObservation]) -> dict[date, Decimal]:
        """date -> close. If a date repeats, the last observation wins."""
        return {p.date: p.close for p in prices}

    @staticmethod
    def _index_trade_deltas(trades: list[TradeEvent]) -> dict[date, int]:
        """date -> net signed amount of all trades on that date."""
        deltas: dict[date, int] = defaultdict(int)
        for trade in trades:
            deltas[trade.date] += trade.amount
        return dict(deltas)
