# backend/portfolio_tracker/services/market_data/alpha_vantage.py
"""
Alpha Vantage daily close provider.

Uses the TIME_SERIES_DAILY function:

    GET https://www.alphavantage.co/query
        ?function=TIME_SERIES_DAILY&symbol=IWDA.AMS&outputsize=compact&apikey=...

Response (abridged):

    {
        "Meta Data": {...},
        "Time Series (Daily)": {
            "2021-01-05": {"1. open": "...", "4. close": "66.1200", ...},
            ...
        }
    }

Alpha Vantage reports most failures with HTTP 200 and a message key:
- "Error Message": invalid call, usually an unknown symbol
- "Note" / "Information": call frequency exceeded, or premium-only request

Limitations:
- Free tier allows 5 requests per minute and 25 per day
- "compact" returns the latest 100 data points, "full" 20+ years
"""

import logging
from typing import Any

import httpx

from portfolio_tracker.services.exceptions import (
    ProviderUnavailableError,
    ProviderResponseError,
    RateLimitError,
    TickerNotFoundError,
)
from portfolio_tracker.services.market_data.base import MarketDataProvider, OutputSize

logger = logging.getLogger(__name__)

TIME_SERIES_KEY = "Time Series (Daily)"
CLOSE_KEY = "4. close"

_RATE_LIMIT_MARKERS = ("call frequency", "rate limit", "requests per")


class AlphaVantageProvider(MarketDataProvider):
    """
    Alpha Vantage implementation of MarketDataProvider.

    Configuration:
        api_key: Alpha Vantage API key
        base_url: Query endpoint (overridable for tests and proxies)
        timeout: Request timeout in seconds
        client: Pre-built httpx.Client (tests inject one with a MockTransport)

    Example:
        provider = AlphaVantageProvider(api_key="demo")
        closes = provider.get_daily_closes("IBM", "compact")
        closes["2024-01-05"]  # "159.1600"
    """

    def __init__(
            self,
            api_key: str,
            base_url: str = "https://www.alphavantage.co/query",
            timeout: float = 30.0,
            client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ValueError("Alpha Vantage API key is required")
        self._api_key = api_key
        self._base_url = base_url
        self._client = client or httpx.Client(timeout=timeout)
        logger.info(f"AlphaVantageProvider initialized (timeout={timeout}s)")

    @property
    def name(self) -> str:
        return "alpha_vantage"

    def close(self) -> None:
        self._client.close()

    def _fetch_daily_closes(self, ticker: str, output_size: OutputSize) -> dict[str, str]:
        params = {
            "function": "TIME_SERIES_DAILY",
            "symbol": ticker,
            "outputsize": output_size,
            "apikey": self._api_key,
        }

        logger.debug(f"Requesting {output_size} daily series for {ticker}")

        try:
            response = self._client.get(self._base_url, params=params)
        except httpx.TimeoutException as e:
            raise ProviderUnavailableError(provider=self.name, reason=f"timeout: {e}")
        except httpx.TransportError as e:
            raise ProviderUnavailableError(provider=self.name, reason=str(e))

        if response.status_code == 429:
            raise RateLimitError(provider=self.name, retry_after=_retry_after(response))
        if response.status_code >= 500:
            raise ProviderUnavailableError(
                provider=self.name,
                reason=f"HTTP {response.status_code}",
            )
        if response.status_code >= 400:
            raise ProviderResponseError(
                provider=self.name,
                reason=f"HTTP {response.status_code}",
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderResponseError(provider=self.name, reason=f"invalid JSON: {e}")

        return self._parse_payload(ticker, payload)

    def _parse_payload(self, ticker: str, payload: Any) -> dict[str, str]:
        """Extract {date: close} from a TIME_SERIES_DAILY payload."""
        if not isinstance(payload, dict):
            raise ProviderResponseError(provider=self.name, reason="payload is not an object")

        if "Error Message" in payload:
            logger.warning(f"Alpha Vantage rejected {ticker}: {payload['Error Message']}")
            raise TickerNotFoundError(ticker=ticker, provider=self.name)

        notice = payload.get("Note") or payload.get("Information")
        if notice and TIME_SERIES_KEY not in payload:
            if any(marker in str(notice).lower() for marker in _RATE_LIMIT_MARKERS):
                raise RateLimitError(provider=self.name)
            raise ProviderResponseError(provider=self.name, reason=str(notice))

        series = payload.get(TIME_SERIES_KEY)
        if not isinstance(series, dict):
            raise ProviderResponseError(
                provider=self.name,
                reason=f"missing '{TIME_SERIES_KEY}'",
            )

        closes: dict[str, str] = {}
        for day, values in series.items():
            # Malformed entries are passed through empty; the sync service
            # skips them with a warning.
            close = values.get(CLOSE_KEY) if isinstance(values, dict) else None
            closes[str(day)] = "" if close is None else str(close)

        logger.debug(f"Alpha Vantage returned {len(closes)} closes for {ticker}")
        return closes


def _retry_after(response: httpx.Response) -> int | None:
    value = response.headers.get("Retry-After")
    if value and value.isdigit():
        return int(value)
    return None
