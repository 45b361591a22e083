# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database session fixtures (in-memory SQLite)
- Mock market data provider
- Sample data factories
- An API client wired to the test database and mock provider
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import date
from decimal import Decimal
from typing import Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from portfolio_tracker.models import Base, DailyPrice, Trade, TradeType
from portfolio_tracker.services.exceptions import TickerNotFoundError
from portfolio_tracker.services.market_data.base import MarketDataProvider, OutputSize
from portfolio_tracker.services.market_data.sync_service import PriceSyncService
from portfolio_tracker.services.valuation.service import PortfolioValuationService

TICKERS = ["IWDA.AMS", "EMIM.AMS"]


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def db(db_engine) -> Iterator[Session]:
    """Create a database session for testing."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# =============================================================================
# MOCK MARKET DATA PROVIDER
# =============================================================================

class MockMarketDataProvider(MarketDataProvider):
    """
    Mock implementation of MarketDataProvider for testing.

    Serves configured closes per ticker, raises configured errors, and
    records every call. Retries run without waiting.
    """

    RETRY_MIN_WAIT = 0
    RETRY_MAX_WAIT = 0

    def __init__(self):
        self._closes: dict[str, dict[str, str]] = {}
        self._errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return "mock"

    def set_closes(self, ticker: str, closes: dict[str, str]) -> None:
        """Configure the raw date -> close mapping returned for a ticker."""
        self._closes[ticker.upper()] = dict(closes)

    def add_error(self, ticker: str, error: Exception) -> None:
        """Configure an error raised on every call for a ticker."""
        self._errors[ticker.upper()] = error

    def reset(self) -> None:
        self._closes.clear()
        self._errors.clear()
        self.calls.clear()

    def _fetch_daily_closes(self, ticker: str, output_size: OutputSize) -> dict[str, str]:
        self.calls.append((ticker, output_size))

        if ticker in self._errors:
            raise self._errors[ticker]

        if ticker in self._closes:
            return dict(self._closes[ticker])

        raise TickerNotFoundError(ticker=ticker, provider=self.name)


@pytest.fixture
def mock_provider() -> MockMarketDataProvider:
    """Fresh mock provider instance."""
    return MockMarketDataProvider()


@pytest.fixture
def sync_service(mock_provider) -> PriceSyncService:
    return PriceSyncService(provider=mock_provider)


@pytest.fixture
def valuation_service() -> PortfolioValuationService:
    return PortfolioValuationService(tickers=TICKERS)


# =============================================================================
# SAMPLE DATA FACTORIES
# =============================================================================

def add_trade(
        db: Session,
        ticker: str,
        trade_date: date,
        amount: int,
        trade_type: TradeType = TradeType.BUY,
        price: str = "10.00",
) -> Trade:
    trade = Trade(
        ticker=ticker,
        date=trade_date,
        trade_type=trade_type,
        amount=amount,
        price=Decimal(price),
    )
    db.add(trade)
    db.commit()
    return trade


def add_prices(db: Session, ticker: str, closes: dict[date, str], provider: str = "mock") -> None:
    db.add_all(
        DailyPrice(ticker=ticker, date=day, close_price=Decimal(close), provider=provider)
        for day, close in closes.items()
    )
    db.commit()


# =============================================================================
# API CLIENT
# =============================================================================

@pytest.fixture
def client(db, mock_provider, sync_service, valuation_service):
    """
    TestClient with the database, provider and ticker set overridden.

    Each test gets a fresh in-memory database and a fresh mock provider.
    """
    from fastapi.testclient import TestClient

    from portfolio_tracker.database import get_db
    from portfolio_tracker.dependencies import (
        get_sync_service,
        get_tracked_tickers,
        get_valuation_service,
    )
    from portfolio_tracker.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sync_service] = lambda: sync_service
    app.dependency_overrides[get_valuation_service] = lambda: valuation_service
    app.dependency_overrides[get_tracked_tickers] = lambda: list(TICKERS)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
