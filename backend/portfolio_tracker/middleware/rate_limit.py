# backend/portfolio_tracker/middleware/rate_limit.py
"""
Rate limiting middleware for API protection.

Uses slowapi, keyed by client IP. The price refresh endpoint gets the
tightest limit because every call spends external provider quota
(Alpha Vantage's free tier allows 5 requests per minute).

Limits live in portfolio_tracker/services/constants.py. Set
RATE_LIMIT_ENABLED=false to switch limiting off (tests do).

Usage:
    @router.post("/refresh")
    @limiter.limit(RATE_LIMIT_SYNC)
    def refresh(request: Request):
        ...
"""

import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from portfolio_tracker.config import settings
from portfolio_tracker.services.constants import (
    RATE_LIMIT_DEFAULT,
    RATE_LIMIT_WRITE,
    RATE_LIMIT_SYNC,
    RATE_LIMIT_PORTFOLIO,
    RATE_LIMIT_HEALTH,
)

logger = logging.getLogger(__name__)

# Seconds suggested to clients in the Retry-After header
DEFAULT_RETRY_AFTER = 60


def _get_client_ip(request: Request) -> str:
    """
    Extract the client IP address.

    X-Forwarded-For and X-Real-IP are honoured only when the immediate
    peer is a trusted proxy, so clients cannot spoof their own key.
    """
    peer = get_remote_address(request)
    if settings.trust_proxy_headers or peer in settings.trusted_proxy_ips:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            # First entry is the original client
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

    return peer


# In-memory storage: suitable for a single-instance deployment
limiter = Limiter(
    key_func=_get_client_ip,
    default_limits=[RATE_LIMIT_DEFAULT],
    enabled=settings.rate_limit_enabled,
)


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Return a 429 in the same ErrorDetail shape as every other API error."""
    limit_info = str(exc.detail) if exc.detail else "Rate limit exceeded"

    logger.warning(f"Rate limit exceeded for {_get_client_ip(request)}: {limit_info}")

    return JSONResponse(
        status_code=429,
        content={
            "error": "RateLimitError",
            "message": f"Too many requests. {limit_info}",
            "details": {"retry_after": DEFAULT_RETRY_AFTER},
        },
        headers={"Retry-After": str(DEFAULT_RETRY_AFTER)},
    )


__all__ = [
    "limiter",
    "rate_limit_exceeded_handler",
    "SlowAPIMiddleware",
    "RATE_LIMIT_DEFAULT",
    "RATE_LIMIT_WRITE",
    "RATE_LIMIT_SYNC",
    "RATE_LIMIT_PORTFOLIO",
    "RATE_LIMIT_HEALTH",
]
