# backend/tests/services/test_yahoo_provider.py
"""
Tests for the YahooFinanceProvider.

This module tests:
- Alpha Vantage -> Yahoo suffix translation
- Output size -> history period mapping
- DataFrame -> {date: close} conversion
- Error classification

Note: These tests mock the yfinance library to avoid actual API calls.
"""

from unittest.mock import MagicMock, patch

import numpy as np
import pandas as pd
import pytest

from portfolio_tracker.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
    TickerNotFoundError,
)
from portfolio_tracker.services.market_data.yahoo import YahooFinanceProvider


@pytest.fixture
def provider() -> YahooFinanceProvider:
    provider = YahooFinanceProvider()
    provider.RETRY_MIN_WAIT = 0
    provider.RETRY_MAX_WAIT = 0
    return provider


@pytest.fixture
def sample_dataframe() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "Open": [65.0, 65.5, 66.0],
            "Close": [65.12, np.nan, 66.5],
            "Volume": [1000, 1200, 900],
        },
        index=pd.DatetimeIndex(["2021-01-04", "2021-01-05", "2021-01-06"], name="Date"),
    )


def _mock_ticker(mock_yf, history=None, side_effect=None) -> MagicMock:
    mock_ticker = MagicMock()
    if side_effect is not None:
        mock_ticker.history.side_effect = side_effect
    else:
        mock_ticker.history.return_value = history
    mock_yf.Ticker.return_value = mock_ticker
    return mock_ticker


class TestYahooProviderInit:

    def test_provider_name(self):
        assert YahooFinanceProvider().name == "yahoo"

    def test_default_timeout(self):
        assert YahooFinanceProvider()._timeout == 10


class TestSymbolTranslation:

    @pytest.mark.parametrize("ticker,expected", [
        ("IWDA.AMS", "IWDA.AS"),
        ("EMIM.AMS", "EMIM.AS"),
        ("VUSA.LON", "VUSA.L"),
        ("SAP.DEX", "SAP.DE"),
        ("AAPL", "AAPL"),
        ("BRK.B", "BRK.B"),
    ])
    def test_build_yahoo_symbol(self, provider, ticker, expected):
        assert provider._build_yahoo_symbol(ticker) == expected


class TestGetDailyCloses:

    @patch('portfolio_tracker.services.market_data.yahoo.yf')
    def test_successful_fetch(self, mock_yf, provider, sample_dataframe):
        _mock_ticker(mock_yf, history=sample_dataframe)

        closes = provider.get_daily_closes("IWDA.AMS", "compact")

        mock_yf.Ticker.assert_called_once_with("IWDA.AS")
        assert closes == {
            "2021-01-04": "65.12000000",
            "2021-01-05": "",
            "2021-01-06": "66.50000000",
        }

    @pytest.mark.parametrize("output_size,period", [("compact", "6mo"), ("full", "max")])
    @patch('portfolio_tracker.services.market_data.yahoo.yf')
    def test_output_size_maps_to_period(self, mock_yf, provider, sample_dataframe, output_size, period):
        mock_ticker = _mock_ticker(mock_yf, history=sample_dataframe)

        provider.get_daily_closes("IWDA.AMS", output_size)

        kwargs = mock_ticker.history.call_args.kwargs
        assert kwargs["period"] == period
        assert kwargs["interval"] == "1d"
        assert kwargs["auto_adjust"] is False

    @patch('portfolio_tracker.services.market_data.yahoo.yf')
    def test_empty_dataframe_is_unknown_ticker(self, mock_yf, provider):
        _mock_ticker(mock_yf, history=pd.DataFrame())

        with pytest.raises(TickerNotFoundError) as exc_info:
            provider.get_daily_closes("NOPE.AMS", "full")

        assert exc_info.value.ticker == "NOPE.AMS"

    @patch('portfolio_tracker.services.market_data.yahoo.yf')
    def test_rate_limit_classified_and_retried(self, mock_yf, provider):
        mock_ticker = _mock_ticker(mock_yf, side_effect=Exception("Too Many Requests. Rate limited."))

        with pytest.raises(RateLimitError):
            provider.get_daily_closes("IWDA.AMS", "compact")

        assert mock_ticker.history.call_count == provider.MAX_RETRY_ATTEMPTS

    @patch('portfolio_tracker.services.market_data.yahoo.yf')
    def test_delisted_classified_as_not_found(self, mock_yf, provider):
        mock_ticker = _mock_ticker(mock_yf, side_effect=Exception("IWDA.AS: possibly delisted"))

        with pytest.raises(TickerNotFoundError):
            provider.get_daily_closes("IWDA.AMS", "compact")

        assert mock_ticker.history.call_count == 1

    @patch('portfolio_tracker.services.market_data.yahoo.yf')
    def test_other_errors_are_unavailable(self, mock_yf, provider):
        _mock_ticker(mock_yf, side_effect=ConnectionError("connection reset"))

        with pytest.raises(ProviderUnavailableError):
            provider.get_daily_closes("IWDA.AMS", "compact")

    @patch('portfolio_tracker.services.market_data.yahoo.yf')
    def test_recovers_after_transient_failure(self, mock_yf, provider, sample_dataframe):
        _mock_ticker(mock_yf, side_effect=[ConnectionError("reset"), sample_dataframe])

        closes = provider.get_daily_closes("IWDA.AMS", "compact")

        assert len(closes) == 3


class TestPriceString:

    @pytest.mark.parametrize("value,expected", [
        (65.12, "65.12000000"),
        (None, ""),
        (float("nan"), ""),
        (float("inf"), ""),
        ("garbage", ""),
    ])
    def test_to_price_string(self, value, expected):
        assert YahooFinanceProvider._to_price_string(value) == expected
