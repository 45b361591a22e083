# backend/portfolio_tracker/services/market_data/sync_service.py
"""
Price Sync Service: fills the gap between the newest stored close and today.

For each tracked ticker:
1. Look up the newest stored price date
2. Ask the provider for a "compact" or "full" history depending on how old
   that date is
3. Parse the response, skipping malformed rows with a warning
4. Insert only rows newer than the stored date, in one transaction

Design Principles:
- Dependency Injection: provider and store injected via constructor
- No HTTP Knowledge: raises domain exceptions, not HTTPException
- Idempotent: a second run against the same provider data inserts nothing
- Fail Fast: a provider error aborts the refresh; tickers already synced
  stay committed

Usage:
    from portfolio_tracker.services.market_data import PriceSyncService

    service = PriceSyncService(provider=AlphaVantageProvider(api_key="..."))
    result = service.sync_all(db, ["IWDA.AMS", "EMIM.AMS"])
    print(f"Inserted {result.rows_inserted} prices")
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio_tracker.models import DailyPrice
from portfolio_tracker.services.constants import (
    COMPACT_HISTORY_DAYS,
    OUTPUT_SIZE_COMPACT,
    OUTPUT_SIZE_FULL,
    ZERO,
)
from portfolio_tracker.services.market_data.base import MarketDataProvider, OutputSize
from portfolio_tracker.services.stores import PriceStore
from portfolio_tracker.utils.date_utils import days_between, parse_iso_date

logger = logging.getLogger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class TickerSyncResult:
    """Result of syncing a single ticker."""

    ticker: str
    output_size: OutputSize
    last_date_before: date | None = None
    last_date_after: date | None = None
    rows_inserted: int = 0
    warnings: list[str] = field(default_factory=list)


@dataclass
class SyncResult:
    """Complete result of a refresh over all tracked tickers."""

    provider: str
    sync_started: datetime
    sync_completed: datetime | None = None
    ticker_results: list[TickerSyncResult] = field(default_factory=list)

    @property
    def rows_inserted(self) -> int:
        return sum(r.rows_inserted for r in self.ticker_results)

    @property
    def warnings(self) -> list[str]:
        return [w for r in self.ticker_results for w in r.warnings]


# =============================================================================
# SYNC SERVICE
# =============================================================================

def choose_output_size(last_date: date | None, today: date) -> OutputSize:
    """
    Pick the provider history size needed to reach back to last_date.

    "full" when nothing is stored yet or the newest close is more than
    COMPACT_HISTORY_DAYS calendar days old, "compact" otherwise.
    """
    if last_date is None:
        return OUTPUT_SIZE_FULL
    if days_between(last_date, today) > COMPACT_HISTORY_DAYS:
        return OUTPUT_SIZE_FULL
    return OUTPUT_SIZE_COMPACT


class PriceSyncService:
    """
    Incrementally stores daily closes for the tracked tickers.

    Attributes:
        _provider: Source of daily closes
        _price_store: Query layer over the prices table

    Example:
        service = PriceSyncService(provider=provider)
        result = service.sync_ticker(db, "IWDA.AMS")
        result.rows_inserted  # 0 on a second call the same day
    """

    def __init__(
            self,
            provider: MarketDataProvider,
            price_store: PriceStore | None = None,
    ) -> None:
        self._provider = provider
        self._price_store = price_store or PriceStore()

    @property
    def provider_name(self) -> str:
        return self._provider.name

    def sync_all(
            self,
            db: Session,
            tickers: Sequence[str],
            today: date | None = None,
    ) -> SyncResult:
        """
        Sync every ticker in order.

        Raises:
            MarketDataError: Provider failure on any ticker (after retries).
                Tickers processed before it keep their committed rows.
            SQLAlchemyError: Storage failure; the failing ticker is rolled back
        """
        result = SyncResult(
            provider=self._provider.name,
            sync_started=datetime.now(timezone.utc),
        )
        logger.info(f"Starting price refresh for {len(tickers)} tickers via {self._provider.name}")

        for ticker in tickers:
            result.ticker_results.append(self.sync_ticker(db, ticker, today=today))

        result.sync_completed = datetime.now(timezone.utc)
        logger.info(
            f"Price refresh complete: {result.rows_inserted} rows inserted, "
            f"{len(result.warnings)} warnings"
        )
        return result

    def sync_ticker(
            self,
            db: Session,
            ticker: str,
            today: date | None = None,
    ) -> TickerSyncResult:
        """
        Fetch and store the closes missing for one ticker.

        Args:
            db: Database session (committed or rolled back here)
            ticker: Tracked ticker
            today: Reference date for the output size choice (default: today)

        Returns:
            TickerSyncResult describing what was inserted
        """
        today = today or date.today()
        last_date = self._price_store.last_date(db, ticker)
        output_size = choose_output_size(last_date, today)

        result = TickerSyncResult(
            ticker=ticker,
            output_size=output_size,
            last_date_before=last_date,
            last_date_after=last_date,
        )

        logger.debug(f"{ticker}: last stored close {last_date}, requesting {output_size} history")
        raw = self._provider.get_daily_closes(ticker, output_size)

        rows = []
        for raw_date, raw_close in raw.items():
            parsed = self._parse_row(ticker, raw_date, raw_close, result.warnings)
            if parsed is None:
                continue
            day, close = parsed
            if last_date is not None and day <= last_date:
                continue
            rows.append(DailyPrice(
                ticker=ticker,
                date=day,
                close_price=close,
                provider=self._provider.name,
            ))

        if not rows:
            logger.info(f"{ticker}: already up to date")
            return result

        try:
            db.add_all(rows)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.error(f"{ticker}: storing {len(rows)} prices failed, rolled back")
            raise

        result.rows_inserted = len(rows)
        result.last_date_after = max(row.date for row in rows)
        logger.info(
            f"{ticker}: inserted {result.rows_inserted} prices "
            f"up to {result.last_date_after}"
        )
        return result

    @staticmethod
    def _parse_row(
            ticker: str,
            raw_date: str,
            raw_close: str,
            warnings: list[str],
    ) -> tuple[date, Decimal] | None:
        """Parse one provider entry, or record a warning and return None."""
        try:
            day = parse_iso_date(raw_date)
        except (TypeError, ValueError):
            warnings.append(f"{ticker}: skipped row with invalid date {raw_date!r}")
            logger.warning(warnings[-1])
            return None

        try:
            close = Decimal(str(raw_close).strip())
        except InvalidOperation:
            warnings.append(f"{ticker}: skipped {raw_date} with invalid close {raw_close!r}")
            logger.warning(warnings[-1])
            return None

        if not close.is_finite() or close <= ZERO:
            warnings.append(f"{ticker}: skipped {raw_date} with non-positive close {raw_close!r}")
            logger.warning(warnings[-1])
            return None

        return day, close
