# backend/tests/services/test_alpha_vantage_provider.py
"""
Tests for the AlphaVantageProvider.

HTTP is served by httpx.MockTransport, so no request leaves the process.
"""

import json

import httpx
import pytest

from portfolio_tracker.services.exceptions import (
    ProviderResponseError,
    ProviderUnavailableError,
    RateLimitError,
    TickerNotFoundError,
)
from portfolio_tracker.services.market_data.alpha_vantage import AlphaVantageProvider

BASE_URL = "https://av.test/query"

DAILY_PAYLOAD = {
    "Meta Data": {"2. Symbol": "IWDA.AMS"},
    "Time Series (Daily)": {
        "2021-01-05": {"1. open": "65.5000", "4. close": "66.1200"},
        "2021-01-04": {"1. open": "65.0000", "4. close": "65.3400"},
    },
}


def make_provider(handler) -> AlphaVantageProvider:
    provider = AlphaVantageProvider(
        api_key="test-key",
        base_url=BASE_URL,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    provider.RETRY_MIN_WAIT = 0
    provider.RETRY_MAX_WAIT = 0
    return provider


def json_handler(payload, status_code=200, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json=payload)
    return handler


class TestInit:

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            AlphaVantageProvider(api_key="")

    def test_name(self):
        assert make_provider(json_handler({})).name == "alpha_vantage"


class TestSuccessfulFetch:

    def test_returns_close_per_date(self):
        provider = make_provider(json_handler(DAILY_PAYLOAD))

        closes = provider.get_daily_closes("IWDA.AMS", "compact")

        assert closes == {"2021-01-05": "66.1200", "2021-01-04": "65.3400"}

    def test_request_parameters(self):
        calls = []
        provider = make_provider(json_handler(DAILY_PAYLOAD, calls=calls))

        provider.get_daily_closes(" iwda.ams ", "full")

        params = calls[0].url.params
        assert params["function"] == "TIME_SERIES_DAILY"
        assert params["symbol"] == "IWDA.AMS"
        assert params["outputsize"] == "full"
        assert params["apikey"] == "test-key"

    def test_malformed_entry_passed_through_empty(self):
        payload = {"Time Series (Daily)": {
            "2021-01-04": {"4. close": "65.34"},
            "2021-01-05": {"1. open": "65.00"},
            "2021-01-06": "oops",
        }}
        provider = make_provider(json_handler(payload))

        closes = provider.get_daily_closes("IWDA.AMS", "compact")

        assert closes == {"2021-01-04": "65.34", "2021-01-05": "", "2021-01-06": ""}


class TestErrorMapping:

    def test_error_message_is_unknown_ticker(self):
        calls = []
        payload = {"Error Message": "Invalid API call. Please retry or visit the documentation"}
        provider = make_provider(json_handler(payload, calls=calls))

        with pytest.raises(TickerNotFoundError):
            provider.get_daily_closes("NOPE.AMS", "compact")

        assert len(calls) == 1

    def test_call_frequency_note_is_rate_limit(self):
        calls = []
        payload = {"Note": "Thank you for using Alpha Vantage! Our standard API call frequency is 5 calls per minute."}
        provider = make_provider(json_handler(payload, calls=calls))

        with pytest.raises(RateLimitError):
            provider.get_daily_closes("IWDA.AMS", "compact")

        assert len(calls) == provider.MAX_RETRY_ATTEMPTS

    def test_premium_information_is_response_error(self):
        payload = {"Information": "This is a premium endpoint."}
        provider = make_provider(json_handler(payload))

        with pytest.raises(ProviderResponseError):
            provider.get_daily_closes("IWDA.AMS", "full")

    def test_missing_time_series_is_response_error(self):
        provider = make_provider(json_handler({"Meta Data": {}}))

        with pytest.raises(ProviderResponseError):
            provider.get_daily_closes("IWDA.AMS", "compact")

    def test_http_429_is_rate_limit_with_retry_after(self):
        def handler(request):
            return httpx.Response(429, headers={"Retry-After": "30"}, json={})

        provider = make_provider(handler)

        with pytest.raises(RateLimitError) as exc_info:
            provider.get_daily_closes("IWDA.AMS", "compact")

        assert exc_info.value.retry_after == 30

    def test_http_500_is_unavailable(self):
        provider = make_provider(json_handler({}, status_code=503))

        with pytest.raises(ProviderUnavailableError):
            provider.get_daily_closes("IWDA.AMS", "compact")

    def test_http_404_is_response_error(self):
        provider = make_provider(json_handler({}, status_code=404))

        with pytest.raises(ProviderResponseError):
            provider.get_daily_closes("IWDA.AMS", "compact")

    def test_invalid_json_is_response_error(self):
        provider = make_provider(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(ProviderResponseError):
            provider.get_daily_closes("IWDA.AMS", "compact")

    def test_network_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        provider = make_provider(handler)

        with pytest.raises(ProviderUnavailableError):
            provider.get_daily_closes("IWDA.AMS", "compact")

    def test_timeout_retried_then_succeeds(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ReadTimeout("read timed out", request=request)
            return httpx.Response(200, content=json.dumps(DAILY_PAYLOAD))

        provider = make_provider(handler)

        assert len(provider.get_daily_closes("IWDA.AMS", "compact")) == 2
        assert len(attempts) == 2
