# backend/portfolio_tracker/main.py
"""
FastAPI application entry point.

This file:
- Configures application-wide logging
- Creates the FastAPI application
- Registers global exception handlers
- Registers all routers
- Defines global endpoints (root, health checks)

Run with:
    uvicorn portfolio_tracker.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio_tracker.config import settings
from portfolio_tracker.database import get_db, check_database_health
from portfolio_tracker.dependencies import close_services
from portfolio_tracker.middleware import (
    CorrelationIdMiddleware,
    limiter,
    rate_limit_exceeded_handler,
    SlowAPIMiddleware,
    RATE_LIMIT_HEALTH,
)
from portfolio_tracker.routers import (
    trades_router,
    prices_router,
    portfolio_router,
)
from portfolio_tracker.schemas.errors import ErrorDetail, ValidationErrorDetail
from portfolio_tracker.services.exceptions import (
    ServiceError,
    ValidationError,
    UnknownTickerError,
    NotFoundError,
    TradeNotFoundError,
    MarketDataError,
    ProviderUnavailableError,
    RateLimitError,
    TickerNotFoundError,
    ProviderResponseError,
)
from portfolio_tracker.utils import setup_logging

logger = logging.getLogger(__name__)

# =============================================================================
# LOGGING SETUP (must be before app creation)
# =============================================================================

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"Starting {settings.app_name} ({settings.environment}) "
        f"tracking {', '.join(settings.tickers)} via {settings.market_data_provider}"
    )
    yield
    close_services()


# =============================================================================
# APPLICATION SETUP
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Daily valuation of a small ETF portfolio from trades and closing prices",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Middleware order matters: last added = first executed
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(CorrelationIdMiddleware)


# =============================================================================
# GLOBAL EXCEPTION HANDLERS
# =============================================================================
# Services raise domain exceptions; these handlers turn them into
# ErrorDetail responses. The most specific handler in the MRO wins.
# =============================================================================

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


def _error_response(status_code: int, error: str, message: str, details: dict | None = None,
                    headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorDetail(error=error, message=message, details=details).model_dump(),
        headers=headers,
    )


@app.exception_handler(TradeNotFoundError)
async def trade_not_found_handler(request: Request, exc: TradeNotFoundError) -> JSONResponse:
    """Handle trade not found errors (404)."""
    logger.warning(f"Trade not found: {exc.trade_id}")
    return _error_response(404, "TradeNotFoundError", str(exc), {"trade_id": exc.trade_id})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    logger.warning(f"Not found: {exc}")
    return _error_response(
        404, "NotFoundError", str(exc),
        {"resource_type": exc.resource_type, "resource_id": exc.resource_id},
    )


@app.exception_handler(UnknownTickerError)
async def unknown_ticker_handler(request: Request, exc: UnknownTickerError) -> JSONResponse:
    """Handle trades for tickers outside the tracked set (400)."""
    logger.warning(f"Rejected trade for untracked ticker: {exc.ticker}")
    return _error_response(
        400, "UnknownTickerError", str(exc),
        {"ticker": exc.ticker, "tracked_tickers": exc.tracked},
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle validation errors (400)."""
    logger.warning(f"Validation error: {exc}")
    return _error_response(
        400, "ValidationError", str(exc),
        {"field": exc.field} if exc.field else None,
    )


@app.exception_handler(TickerNotFoundError)
async def ticker_not_found_handler(request: Request, exc: TickerNotFoundError) -> JSONResponse:
    """Handle ticker not found on market data provider (404)."""
    logger.warning(f"Ticker not found on provider: {exc.ticker}")
    return _error_response(
        404, "TickerNotFoundError", str(exc),
        {"ticker": exc.ticker, "provider": exc.provider},
    )


@app.exception_handler(ProviderUnavailableError)
async def provider_unavailable_handler(request: Request, exc: ProviderUnavailableError) -> JSONResponse:
    """Handle market data provider unavailable (503)."""
    logger.error(f"Provider unavailable: {exc}")
    return _error_response(503, "ProviderUnavailableError", str(exc), {"provider": exc.provider})


@app.exception_handler(RateLimitError)
async def rate_limit_handler(request: Request, exc: RateLimitError) -> JSONResponse:
    """Handle provider rate limit exceeded (429)."""
    logger.warning(f"Rate limit exceeded: {exc}")
    headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
    return _error_response(
        429, "RateLimitError", str(exc),
        {"retry_after": exc.retry_after} if exc.retry_after else None,
        headers=headers,
    )


@app.exception_handler(ProviderResponseError)
async def provider_response_handler(request: Request, exc: ProviderResponseError) -> JSONResponse:
    """Handle payloads the provider should not have sent (502)."""
    logger.error(f"Bad provider response: {exc}")
    return _error_response(502, "ProviderResponseError", str(exc), {"provider": exc.provider})


@app.exception_handler(MarketDataError)
async def market_data_error_handler(request: Request, exc: MarketDataError) -> JSONResponse:
    """Handle generic market data errors (502)."""
    logger.error(f"Market data error: {exc}")
    return _error_response(502, "MarketDataError", str(exc))


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Handle generic service errors (500)."""
    logger.error(f"Service error: {exc}")
    return _error_response(500, "ServiceError", str(exc))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database failures (500). Driver details stay in the log."""
    logger.exception("Database error", exc_info=exc)
    return _error_response(500, "DatabaseError", "An internal database error occurred")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Convert FastAPI's 422 body to the ValidationErrorDetail format."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=422,
        content=ValidationErrorDetail(details=errors).model_dump(),
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(trades_router)  # /trades/*
app.include_router(prices_router)  # /prices/*
app.include_router(portfolio_router)  # /portfolio/*


# =============================================================================
# GLOBAL ENDPOINTS
# =============================================================================

@app.get("/", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def root(request: Request):
    """API root - returns basic application info."""
    return {
        "message": f"Welcome to {settings.app_name}!",
        "tickers": settings.tickers,
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def health_check(request: Request, db: Annotated[Session, Depends(get_db)]):
    """
    Health of the service and its dependencies.

    - 200: Database reachable (provider configuration is informational)
    - 503: Database unreachable
    """
    database = check_database_health(db)
    checks = {
        "database": {**database, "critical": True},
        "market_data": {
            "status": "configured",
            "critical": False,
            "provider": settings.market_data_provider,
        },
    }

    if database["status"] != "healthy":
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "checks": checks},
        )

    return {"status": "healthy", "checks": checks}


@app.get("/health/live", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def liveness_check(request: Request):
    """Liveness probe: succeeds whenever the process is up."""
    return {"status": "alive"}


@app.get("/health/ready", tags=["Health"])
@limiter.limit(RATE_LIMIT_HEALTH)
def readiness_check(request: Request, db: Annotated[Session, Depends(get_db)]):
    """Readiness probe: 503 until the database answers."""
    if check_database_health(db)["status"] != "healthy":
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "error": "Database unavailable"},
        )
    return {"status": "ready"}
