# backend/portfolio_tracker/dependencies.py
"""
Dependency injection module for FastAPI services.

Services are stateless apart from the provider's HTTP client, so one
instance of each is shared across all requests. Instances are created
lazily on first use to avoid import-time side effects.

Usage in routers:
    from portfolio_tracker.dependencies import get_sync_service, get_tracked_tickers

    @router.post("/refresh")
    def refresh(
        service: Annotated[PriceSyncService, Depends(get_sync_service)],
        tickers: Annotated[list[str], Depends(get_tracked_tickers)],
    ):
        ...

Tests replace any of these with `app.dependency_overrides`.
"""

import logging
from functools import lru_cache

from portfolio_tracker.config import settings
from portfolio_tracker.services.market_data.alpha_vantage import AlphaVantageProvider
from portfolio_tracker.services.market_data.base import MarketDataProvider
from portfolio_tracker.services.market_data.sync_service import PriceSyncService
from portfolio_tracker.services.market_data.yahoo import YahooFinanceProvider
from portfolio_tracker.services.stores import PriceStore, TradeStore
from portfolio_tracker.services.valuation.service import PortfolioValuationService

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

def get_tracked_tickers() -> list[str]:
    """Tickers the portfolio tracks, in output order."""
    return list(settings.tickers)


# =============================================================================
# SINGLETON SERVICE INSTANCES
# =============================================================================
# Order matters: define dependencies before dependents
# 1. get_market_data_provider (no deps)
# 2. get_trade_store / get_price_store (no deps)
# 3. get_sync_service (provider, price store)
# 4. get_valuation_service (stores)


@lru_cache(maxsize=1)
def get_market_data_provider() -> MarketDataProvider:
    """
    Get the singleton market data provider selected by MARKET_DATA_PROVIDER.

    Sharing one provider keeps one HTTP connection pool for all refreshes.
    """
    if settings.market_data_provider == "yahoo":
        logger.debug("Initializing singleton YahooFinanceProvider")
        return YahooFinanceProvider(timeout=int(settings.provider_timeout_seconds))

    logger.debug("Initializing singleton AlphaVantageProvider")
    return AlphaVantageProvider(
        api_key=settings.alpha_vantage_api_key or "",
        base_url=settings.alpha_vantage_base_url,
        timeout=settings.provider_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_trade_store() -> TradeStore:
    return TradeStore()


@lru_cache(maxsize=1)
def get_price_store() -> PriceStore:
    return PriceStore()


@lru_cache(maxsize=1)
def get_sync_service() -> PriceSyncService:
    """Get the singleton PriceSyncService instance."""
    logger.debug("Initializing singleton PriceSyncService")
    return PriceSyncService(
        provider=get_market_data_provider(),
        price_store=get_price_store(),
    )


@lru_cache(maxsize=1)
def get_valuation_service() -> PortfolioValuationService:
    """Get the singleton PortfolioValuationService for the configured tickers."""
    logger.debug("Initializing singleton PortfolioValuationService")
    return PortfolioValuationService(
        tickers=get_tracked_tickers(),
        trade_store=get_trade_store(),
        price_store=get_price_store(),
    )


# =============================================================================
# CACHE MANAGEMENT
# =============================================================================

def close_services() -> None:
    """Release provider resources and drop all singletons."""
    if get_market_data_provider.cache_info().currsize:
        get_market_data_provider().close()
    clear_service_caches()


def clear_service_caches() -> None:
    """
    Clear all service caches.

    Useful for testing or when you need to reset state.
    """
    get_market_data_provider.cache_clear()
    get_trade_store.cache_clear()
    get_price_store.cache_clear()
    get_sync_service.cache_clear()
    get_valuation_service.cache_clear()
    logger.info("Cleared all service singleton caches")
