# backend/portfolio_tracker/services/constants.py
"""
Centralized constants for the Portfolio Tracker services.

Usage:
    from portfolio_tracker.services.constants import (
        COMPACT_HISTORY_DAYS,
        RATE_LIMIT_SYNC,
    )
"""

from decimal import Decimal


# =============================================================================
# PRICE SYNC SETTINGS
# =============================================================================

# A "compact" provider request returns roughly the last 100 trading days.
# If the newest stored close is older than this many calendar days, the
# compact window may not reach back to it and a "full" request is made.
COMPACT_HISTORY_DAYS: int = 100

OUTPUT_SIZE_COMPACT: str = "compact"
OUTPUT_SIZE_FULL: str = "full"


# =============================================================================
# STORE RETRY SETTINGS
# =============================================================================

# Bounded retry for transient database errors on reads
STORE_RETRY_ATTEMPTS: int = 3
STORE_RETRY_MIN_WAIT: float = 0.1
STORE_RETRY_MAX_WAIT: float = 2.0


# =============================================================================
# DECIMAL HELPERS
# =============================================================================

ZERO: Decimal = Decimal("0")

# Storage precision of prices (Numeric(18, 8))
PRICE_QUANTUM: Decimal = Decimal("0.00000001")


# =============================================================================
# RATE LIMITING CONSTANTS
# =============================================================================
# Format follows slowapi/limits syntax: "100/minute", "10/hour", etc.

# Read endpoints
RATE_LIMIT_DEFAULT: str = "100/minute"

# Trade create/delete
RATE_LIMIT_WRITE: str = "30/minute"

# Price refresh hits the external provider (Alpha Vantage free tier: 5/minute)
RATE_LIMIT_SYNC: str = "5/minute"

# Portfolio generation reads every trade and price
RATE_LIMIT_PORTFOLIO: str = "30/minute"

# Monitoring tools poll frequently
RATE_LIMIT_HEALTH: str = "300/minute"
