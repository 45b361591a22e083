# backend/tests/services/test_stores.py
"""
Tests for TradeStore and PriceStore.
"""

import sqlite3
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from portfolio_tracker.models import Base, Trade, TradeType
from portfolio_tracker.services.exceptions import TradeNotFoundError
from portfolio_tracker.services.stores import PriceStore, TradeStore
from tests.conftest import add_prices, add_trade


@pytest.fixture
def trade_store() -> TradeStore:
    return TradeStore()


@pytest.fixture
def price_store() -> PriceStore:
    return PriceStore()


class TestTradeStore:

    def test_create_persists_trade(self, db, trade_store):
        trade = trade_store.create(
            db,
            ticker="IWDA.AMS",
            trade_date=date(2021, 1, 4),
            trade_type=TradeType.BUY,
            amount=10,
            price=Decimal("65.25"),
        )

        assert trade.id is not None
        assert trade.created_at is not None
        assert db.get(Trade, trade.id).amount == 10

    def test_signed_amount(self, db):
        buy = add_trade(db, "IWDA.AMS", date(2021, 1, 4), 10)
        sell = add_trade(db, "IWDA.AMS", date(2021, 1, 5), 3, trade_type=TradeType.SELL)

        assert buy.signed_amount == 10
        assert sell.signed_amount == -3

    def test_list_ordered_by_date(self, db, trade_store):
        add_trade(db, "IWDA.AMS", date(2021, 1, 6), 1)
        add_trade(db, "EMIM.AMS", date(2021, 1, 4), 2)
        add_trade(db, "IWDA.AMS", date(2021, 1, 5), 3)

        trades = trade_store.list_trades(db)

        assert [t.date for t in trades] == [date(2021, 1, 4), date(2021, 1, 5), date(2021, 1, 6)]

    def test_list_filters_by_ticker(self, db, trade_store):
        add_trade(db, "IWDA.AMS", date(2021, 1, 4), 1)
        add_trade(db, "EMIM.AMS", date(2021, 1, 4), 2)

        trades = trade_store.list_trades(db, ticker="EMIM.AMS")

        assert [t.ticker for t in trades] == ["EMIM.AMS"]

    def test_get_missing_raises(self, db, trade_store):
        with pytest.raises(TradeNotFoundError) as exc_info:
            trade_store.get(db, 999)

        assert exc_info.value.trade_id == 999

    def test_delete(self, db, trade_store):
        trade = add_trade(db, "IWDA.AMS", date(2021, 1, 4), 1)

        trade_store.delete(db, trade.id)

        assert trade_store.list_trades(db) == []

    def test_delete_missing_raises(self, db, trade_store):
        with pytest.raises(TradeNotFoundError):
            trade_store.delete(db, 42)


class TestPriceStore:

    def test_list_ordered_by_date(self, db, price_store):
        add_prices(db, "IWDA.AMS", {date(2021, 1, 6): "12", date(2021, 1, 4): "10"})

        prices = price_store.list_prices(db)

        assert [p.date for p in prices] == [date(2021, 1, 4), date(2021, 1, 6)]

    def test_last_date_none_when_empty(self, db, price_store):
        assert price_store.last_date(db, "IWDA.AMS") is None

    def test_last_date_per_ticker(self, db, price_store):
        add_prices(db, "IWDA.AMS", {date(2021, 1, 4): "10", date(2021, 1, 8): "11"})
        add_prices(db, "EMIM.AMS", {date(2021, 1, 5): "20"})

        assert price_store.last_date(db, "IWDA.AMS") == date(2021, 1, 8)
        assert price_store.last_dates(db) == {
            "IWDA.AMS": date(2021, 1, 8),
            "EMIM.AMS": date(2021, 1, 5),
        }

    def test_eight_place_close_round_trips_on_sqlite(self, db, price_store):
        add_prices(db, "IWDA.AMS", {date(2021, 1, 4): "1234567.12345678"})
        db.expire_all()

        [price] = price_store.list_prices(db)

        assert price.close_price == Decimal("1234567.12345678")


class TestReadRetry:
    """Reads recover from a dropped connection on a real session."""

    @pytest.fixture
    def file_engine(self, tmp_path):
        engine = create_engine(f"sqlite:///{tmp_path / 'tracker.db'}")
        Base.metadata.create_all(engine)
        yield engine
        engine.dispose()

    @pytest.fixture
    def file_db(self, file_engine):
        session = sessionmaker(bind=file_engine)()
        try:
            yield session
        finally:
            session.close()

    @staticmethod
    def _drop_connection(engine, statement_fragment: str, failures: int) -> dict:
        """Fail matching statements as a disconnect, `failures` times."""
        seen = {"attempts": 0}

        @event.listens_for(engine, "do_execute")
        def fail_statement(cursor, statement, parameters, context):
            if statement_fragment in statement:
                seen["attempts"] += 1
                if seen["attempts"] <= failures:
                    raise sqlite3.OperationalError("disk I/O error")

        @event.listens_for(engine, "handle_error")
        def mark_disconnect(context):
            if isinstance(context.original_exception, sqlite3.OperationalError):
                context.is_disconnect = True

        return seen

    def test_read_recovers_after_disconnect(self, file_engine, file_db, price_store):
        add_prices(file_db, "IWDA.AMS", {date(2021, 1, 4): "10", date(2021, 1, 8): "11"})
        seen = self._drop_connection(file_engine, "max(", failures=1)

        assert price_store.last_date(file_db, "IWDA.AMS") == date(2021, 1, 8)
        assert seen["attempts"] == 2

    def test_session_usable_after_recovered_read(self, file_engine, file_db, trade_store):
        add_trade(file_db, "IWDA.AMS", date(2021, 1, 4), 5)
        self._drop_connection(file_engine, "FROM trades", failures=1)

        trades = trade_store.list_trades(file_db)
        trade_store.create(
            file_db,
            ticker="IWDA.AMS",
            trade_date=date(2021, 1, 5),
            trade_type=TradeType.SELL,
            amount=2,
            price=Decimal("11"),
        )

        assert [t.amount for t in trades] == [5]
        assert len(trade_store.list_trades(file_db)) == 2

    def test_read_gives_up_after_bounded_attempts(self, file_engine, file_db, price_store):
        seen = self._drop_connection(file_engine, "max(", failures=10)

        with pytest.raises(OperationalError):
            price_store.last_date(file_db, "IWDA.AMS")

        assert seen["attempts"] == 3
