# backend/portfolio_tracker/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
Global handlers in main.py map them to HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   ├── UnknownTickerError
    │   └── MixedTickerError
    ├── NotFoundError
    │   └── TradeNotFoundError
    └── MarketDataError
        ├── ProviderUnavailableError   (retryable)
        ├── RateLimitError             (retryable)
        ├── TickerNotFoundError
        └── ProviderResponseError
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails outside of Pydantic.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class UnknownTickerError(ValidationError):
    """Raised when a trade references a ticker that is not tracked."""

    def __init__(self, ticker: str, tracked: list[str]) -> None:
        self.ticker = ticker
        self.tracked = tracked
        super().__init__(
            f"Ticker '{ticker}' is not tracked. Tracked tickers: {', '.join(tracked)}",
            field="ticker",
        )


class MixedTickerError(ValidationError):
    """Raised when the valuation builder receives rows for more than one ticker."""

    def __init__(self, tickers: set[str]) -> None:
        self.tickers = tickers
        super().__init__(
            f"Valuation input must cover a single ticker, got: {', '.join(sorted(tickers))}"
        )


# =============================================================================
# NOT FOUND ERRORS
# =============================================================================


class NotFoundError(ServiceError):
    """
    Base exception for resource not found errors.

    Attributes:
        resource_type: Type of resource (e.g., "Trade")
        resource_id: Identifier of the resource
    """

    def __init__(
            self,
            message: str,
            resource_type: str | None = None,
            resource_id: int | str | None = None,
    ) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(message)


class TradeNotFoundError(NotFoundError):
    def __init__(self, trade_id: int) -> None:
        self.trade_id = trade_id
        super().__init__(
            f"Trade with id {trade_id} not found",
            resource_type="Trade",
            resource_id=trade_id,
        )


# =============================================================================
# MARKET DATA PROVIDER ERRORS
# =============================================================================


class MarketDataError(ServiceError):
    """
    Base exception for market data provider failures.

    Attributes:
        provider: Name of the provider that failed
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(MarketDataError):
    """
    Raised when a provider cannot be reached or answers with a server error.

    Examples:
    - Network timeout
    - Server errors (500, 502, 503)

    This is a retryable error.
    """

    def __init__(self, provider: str, reason: str) -> None:
        message = f"Provider '{provider}' is unavailable: {reason}"
        super().__init__(message, provider=provider)
        self.reason = reason


class RateLimitError(MarketDataError):
    """
    Raised when the provider's rate limit has been exceeded.

    This is a retryable error (with backoff).

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by API)
    """

    def __init__(self, provider: str, retry_after: int | None = None) -> None:
        message = f"Rate limit exceeded for provider '{provider}'"
        if retry_after:
            message += f" (retry after {retry_after}s)"
        super().__init__(message, provider=provider)
        self.retry_after = retry_after


class TickerNotFoundError(MarketDataError):
    """
    Raised when the provider does not know the ticker symbol.

    This is NOT a retryable error.
    """

    def __init__(self, ticker: str, provider: str) -> None:
        message = f"Ticker '{ticker}' not found by {provider}"
        super().__init__(message, provider=provider)
        self.ticker = ticker


class ProviderResponseError(MarketDataError):
    """
    Raised when the provider answers with a payload we cannot interpret
    (missing time series, unexpected schema, invalid JSON).

    This is NOT a retryable error.
    """

    def __init__(self, provider: str, reason: str) -> None:
        message = f"Unexpected response from provider '{provider}': {reason}"
        super().__init__(message, provider=provider)
        self.reason = reason


__all__ = [
    "ServiceError",
    "ValidationError",
    "UnknownTickerError",
    "MixedTickerError",
    "NotFoundError",
    "TradeNotFoundError",
    "MarketDataError",
    "ProviderUnavailableError",
    "RateLimitError",
    "TickerNotFoundError",
    "ProviderResponseError",
]
