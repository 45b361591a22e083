# backend/portfolio_tracker/services/valuation/service.py
"""
Portfolio valuation service.

Orchestrates portfolio generation:
1. Load all trades and all prices (2 queries)
2. Partition both by ticker
3. Run the ValuationBuilder once per tracked ticker

Each ticker's series stands alone; no cross-ticker total is computed.

Usage:
    from portfolio_tracker.services.valuation import PortfolioValuationService

    service = PortfolioValuationService(tickers=["IWDA.AMS", "EMIM.AMS"])
    result = service.generate(db)
    result["IWDA.AMS"]  # [PortfolioPoint(...), ...]
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence

from sqlalchemy.orm import Session

from portfolio_tracker.services.stores import PriceStore, TradeStore
from portfolio_tracker.services.valuation.builder import ValuationBuilder
from portfolio_tracker.services.valuation.types import (
    PortfolioSeries,
    PriceObservation,
    TradeEvent,
)

logger = logging.getLogger(__name__)


class PortfolioValuationService:
    """
    Fans the valuation builder out over the tracked tickers.

    Attributes:
        tickers: Tracked instruments, in output order
    """

    def __init__(
            self,
            tickers: Sequence[str],
            builder: ValuationBuilder | None = None,
            trade_store: TradeStore | None = None,
            price_store: PriceStore | None = None,
    ) -> None:
        self.tickers = list(tickers)
        self._builder = builder or ValuationBuilder()
        self._trade_store = trade_store or TradeStore()
        self._price_store = price_store or PriceStore()

    def generate(self, db: Session) -> PortfolioSeries:
        """Load trades and prices from the database and value every tracked ticker."""
        trades = [TradeEvent.from_model(t) for t in self._trade_store.list_trades(db)]
        prices = [PriceObservation.from_model(p) for p in self._price_store.list_prices(db)]

        logger.debug(f"Generating portfolio from {len(trades)} trades and {len(prices)} prices")
        return self.build_series(trades, prices)

    def build_series(
            self,
            trades: Iterable[TradeEvent],
            prices: Iterable[PriceObservation],
    ) -> PortfolioSeries:
        """
        Value every tracked ticker from in-memory trades and prices.

        Rows for tickers that are not tracked are ignored. A tracked ticker
        with no trades or no prices maps to an empty series.
        """
        trades_by_ticker = _partition(trades)
        prices_by_ticker = _partition(prices)

        ignored = (set(trades_by_ticker) | set(prices_by_ticker)) - set(self.tickers)
        if ignored:
            logger.warning(f"Ignoring rows for untracked tickers: {', '.join(sorted(ignored))}")

        result = PortfolioSeries()
        for ticker in self.tickers:
            points = self._builder.build(
                prices_by_ticker.get(ticker, []),
                trades_by_ticker.get(ticker, []),
            )
            result.series[ticker] = points
            logger.debug(f"{ticker}: {len(points)} portfolio points")

        logger.info(
            f"Generated portfolio for {len(self.tickers)} tickers "
            f"({result.total_points} points)"
        )
        return result


def _partition(rows):
    """Group rows by ticker, keeping their relative order."""
    grouped = defaultdict(list)
    for row in rows:
        grouped[row.ticker].append(row)
    return grouped
