# backend/portfolio_tracker/schemas/validators.py
"""
Reusable validation functions for Pydantic schemas.
"""

import re

# 1-20 chars, alphanumeric plus dots, optional exchange suffix (IWDA.AMS)
TICKER_PATTERN = re.compile(r'^[A-Z0-9][A-Z0-9.\-]{0,19}$')
TICKER_MAX_LENGTH = 20


def validate_ticker(value: str) -> str:
    """
    Validate and normalize a ticker symbol.

    Returns:
        Normalized ticker (uppercase, trimmed)

    Raises:
        ValueError: If ticker format is invalid
    """
    if not value or not value.strip():
        raise ValueError("Ticker cannot be empty")

    normalized = value.strip().upper()

    if len(normalized) > TICKER_MAX_LENGTH:
        raise ValueError(f"Ticker cannot exceed {TICKER_MAX_LENGTH} characters")

    if not TICKER_PATTERN.match(normalized):
        raise ValueError(
            f"Invalid ticker format: '{normalized}'. "
            "Ticker must be alphanumeric and may include dots (.) or dashes (-)"
        )

    return normalized
