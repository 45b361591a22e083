# backend/portfolio_tracker/utils/context.py
"""
Request-scoped correlation ID storage.

Uses contextvars so the value follows a request through sync endpoints
running on the threadpool as well as async middleware.

Usage:
    from portfolio_tracker.utils.context import get_correlation_id

    logger.info("refreshing prices", extra={"correlation_id": get_correlation_id()})
"""

from contextvars import ContextVar

_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> str | None:
    """Return the correlation ID of the current request, or None outside a request."""
    return _correlation_id_var.get()


def set_correlation_id(correlation_id: str) -> None:
    """Bind a correlation ID to the current request. Called by middleware."""
    _correlation_id_var.set(correlation_id)


def clear_correlation_id() -> None:
    _correlation_id_var.set(None)
