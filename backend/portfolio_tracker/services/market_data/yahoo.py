# backend/portfolio_tracker/services/market_data/yahoo.py
"""
Yahoo Finance daily close provider.

Alternate provider (MARKET_DATA_PROVIDER=yahoo) built on the yfinance
library. Needs no API key, which makes it handy for local development.

Tickers are configured in Alpha Vantage notation ("IWDA.AMS"), so the
exchange suffix is translated to Yahoo's ("IWDA.AS") before the request.

Limitations:
- Rate limits exist but are not documented
- Suitable for personal use only
"""

import logging
import math
from decimal import Decimal, InvalidOperation
from typing import Any

import yfinance as yf

from portfolio_tracker.services.constants import PRICE_QUANTUM
from portfolio_tracker.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
    TickerNotFoundError,
)
from portfolio_tracker.services.market_data.base import MarketDataProvider, OutputSize

logger = logging.getLogger(__name__)


class YahooFinanceProvider(MarketDataProvider):
    """
    Yahoo Finance implementation of MarketDataProvider.

    Output size mapping:
        compact -> last 6 months (covers the ~100 trading days of a compact request)
        full    -> all available history
    """

    # Alpha Vantage exchange suffix -> Yahoo Finance suffix
    EXCHANGE_SUFFIXES: dict[str, str] = {
        ".AMS": ".AS",   # Euronext Amsterdam
        ".PAR": ".PA",   # Euronext Paris
        ".BRU": ".BR",   # Euronext Brussels
        ".LON": ".L",    # London
        ".DEX": ".DE",   # XETRA
        ".FRK": ".F",    # Frankfurt
        ".MIL": ".MI",   # Milan
        ".TRT": ".TO",   # Toronto
        ".TRV": ".V",    # TSX Venture
        ".SHH": ".SS",   # Shanghai
        ".SHZ": ".SZ",   # Shenzhen
        ".BSE": ".BO",   # Bombay
    }

    PERIODS: dict[str, str] = {
        "compact": "6mo",
        "full": "max",
    }

    def __init__(self, timeout: float = 10) -> None:
        self._timeout = timeout
        logger.info(f"YahooFinanceProvider initialized (timeout={timeout}s)")

    @property
    def name(self) -> str:
        return "yahoo"

    def _fetch_daily_closes(self, ticker: str, output_size: OutputSize) -> dict[str, str]:
        yahoo_symbol = self._build_yahoo_symbol(ticker)
        period = self.PERIODS[output_size]

        logger.debug(f"Fetching {period} daily history for {yahoo_symbol}")

        try:
            df = yf.Ticker(yahoo_symbol).history(
                period=period,
                interval="1d",
                auto_adjust=False,  # Raw closes, no dividend adjustment
                timeout=self._timeout,
            )
        except Exception as e:
            error_str = str(e).lower()
            if "rate limit" in error_str or "too many requests" in error_str:
                raise RateLimitError(provider=self.name)
            if "not found" in error_str or "delisted" in error_str:
                raise TickerNotFoundError(ticker=ticker, provider=self.name)
            logger.error(f"Yahoo Finance error for {yahoo_symbol}: {e}")
            raise ProviderUnavailableError(provider=self.name, reason=str(e))

        if df is None or df.empty:
            raise TickerNotFoundError(ticker=ticker, provider=self.name)

        closes: dict[str, str] = {}
        for idx, row in df.iterrows():
            price_date = idx.date() if hasattr(idx, "date") else idx
            closes[price_date.isoformat()] = self._to_price_string(row.get("Close"))

        logger.debug(f"Fetched {len(closes)} closes for {yahoo_symbol}")
        return closes

    def _build_yahoo_symbol(self, ticker: str) -> str:
        """Translate "IWDA.AMS" to "IWDA.AS"; symbols without a known suffix pass through."""
        for av_suffix, yahoo_suffix in self.EXCHANGE_SUFFIXES.items():
            if ticker.endswith(av_suffix):
                return ticker[: -len(av_suffix)] + yahoo_suffix
        return ticker

    @staticmethod
    def _to_price_string(value: Any) -> str:
        """Render a float close as a decimal string; NaN/None become ''."""
        if value is None:
            return ""
        try:
            if math.isnan(float(value)):
                return ""
            return str(Decimal(str(value)).quantize(PRICE_QUANTUM))
        except (TypeError, ValueError, InvalidOperation):
            return ""
