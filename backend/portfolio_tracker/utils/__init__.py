# backend/portfolio_tracker/utils/__init__.py
"""
Cross-cutting utilities for the Portfolio Tracker.

- logging: Logging setup with correlation ID support
- context: Request context (correlation ID)
- date_utils: Calendar iteration and YYYY-MM-DD parsing

Usage:
    from portfolio_tracker.utils import setup_logging
    from portfolio_tracker.utils.date_utils import iter_calendar_days
"""

from portfolio_tracker.utils.context import (
    get_correlation_id,
    set_correlation_id,
    clear_correlation_id,
)
from portfolio_tracker.utils.logging import setup_logging

__all__ = [
    "setup_logging",
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
]
