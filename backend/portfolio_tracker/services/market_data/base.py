# backend/portfolio_tracker/services/market_data/base.py
"""
Abstract interface for daily close price providers.

Every provider answers one question: "what are the daily closes for this
ticker?", returned as a mapping of YYYY-MM-DD strings to close price strings.
Parsing, de-duplication and storage are the sync service's job, so a
provider stays a thin adapter over its API.

Design Principles:
- Services depend on MarketDataProvider, not on a concrete API
- Retry logic for transient failures implemented once in the base class
- Mock implementations for testing
"""

import logging
from abc import ABC, abstractmethod
from typing import TypeVar, Callable, Any, Literal

from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from portfolio_tracker.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')

OutputSize = Literal["compact", "full"]


class MarketDataProvider(ABC):
    """
    Abstract base class for daily close price providers.

    Retry Behavior:
        `get_daily_closes` runs `_fetch_daily_closes` through
        `_execute_with_retry`, which retries with exponential backoff.
        Subclasses can tune it with class attributes:

        - MAX_RETRY_ATTEMPTS: Total attempts (default: 3)
        - RETRY_MIN_WAIT: Minimum wait in seconds (default: 1)
        - RETRY_MAX_WAIT: Maximum wait in seconds (default: 10)
        - RETRY_MULTIPLIER: Exponential multiplier (default: 1)

    Retryable Exceptions:
        - ProviderUnavailableError: Network issues, timeouts, server errors
        - RateLimitError: API rate limit exceeded

    Non-Retryable Exceptions:
        - TickerNotFoundError: The ticker doesn't exist
        - ProviderResponseError: Payload we cannot interpret
    """

    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_MIN_WAIT: float = 1
    RETRY_MAX_WAIT: float = 10
    RETRY_MULTIPLIER: float = 1

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Unique identifier for this provider.

        Stored on every price row as data lineage.
        """
        pass

    def get_daily_closes(self, ticker: str, output_size: OutputSize) -> dict[str, str]:
        """
        Fetch daily closes for one ticker.

        Args:
            ticker: Trading symbol as configured (e.g., "IWDA.AMS")
            output_size: "compact" for recent history only, "full" for all
                available history. A hint: providers may return more.

        Returns:
            Mapping of date string (YYYY-MM-DD) to close price string.
            Entries are not validated; callers must parse defensively.

        Raises:
            TickerNotFoundError: Ticker unknown to the provider
            ProviderUnavailableError: Network or server error (after retries)
            RateLimitError: Rate limit exceeded (after retries)
            ProviderResponseError: Unexpected payload
        """
        return self._execute_with_retry(
            self._fetch_daily_closes,
            ticker.strip().upper(),
            output_size,
        )

    @abstractmethod
    def _fetch_daily_closes(self, ticker: str, output_size: OutputSize) -> dict[str, str]:
        """Single attempt at fetching daily closes (called by the retry wrapper)."""
        pass

    def _execute_with_retry(
            self,
            func: Callable[..., T],
            *args: Any,
            **kwargs: Any,
    ) -> T:
        """
        Execute a function with retry logic for transient failures.

        Returns:
            Return value of func

        Raises:
            The last exception if all retries fail
        """

        @retry(
            stop=stop_after_attempt(self.MAX_RETRY_ATTEMPTS),
            wait=wait_exponential(
                multiplier=self.RETRY_MULTIPLIER,
                min=self.RETRY_MIN_WAIT,
                max=self.RETRY_MAX_WAIT,
            ),
            retry=retry_if_exception_type((ProviderUnavailableError, RateLimitError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        def _inner() -> T:
            return func(*args, **kwargs)

        return _inner()

    def close(self) -> None:
        """Release network resources. Default implementation holds none."""
        return None
