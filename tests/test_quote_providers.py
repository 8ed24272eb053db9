"""Tests for quote provider routing, caching and the HTTP providers."""

import json
from datetime import datetime
from unittest.mock import MagicMock

import pytest
import requests

from app.exceptions import QuoteProviderError
from app.schemas.alert import Quote
from app.services.quote_providers import (
    BaseQuoteProvider,
    CoinGeckoProvider,
    FinnhubProvider,
    QuoteManager,
)


class StaticProvider(BaseQuoteProvider):
    """Provider answering from a dict; symbols in ``errors`` raise."""

    def __init__(self, name, asset_types, prices, errors=()):
        super().__init__(api_key="", base_url="http://example.invalid")
        self.name = name
        self.asset_types = asset_types
        self.prices = prices
        self.errors = set(errors)
        self.requested = []

    def get_quote(self, symbol):
        self.requested.append(symbol)
        if symbol in self.errors:
            raise requests.ConnectionError(f"{self.name} unreachable")
        if symbol not in self.prices:
            return None
        return Quote(symbol=symbol, price=self.prices[symbol], as_of=datetime(2026, 3, 2))


@pytest.fixture()
def stocks():
    return StaticProvider("Stocks", ("stock", "future"), {"AAPL": 190.0, "ES": 5100.0})


@pytest.fixture()
def crypto():
    return StaticProvider("Crypto", ("crypto",), {"BTC": 64000.0, "PEPE": 0.00001})


def test_routes_by_asset_type(stocks, crypto):
    manager = QuoteManager([stocks, crypto])

    quotes = manager.get_quotes(["AAPL", "BTC", "ES", "PEPE"], {"ES": "future", "PEPE": "crypto"})

    assert {symbol: quote.price for symbol, quote in quotes.items()} == {
        "AAPL": 190.0,
        "BTC": 64000.0,
        "ES": 5100.0,
        "PEPE": 0.00001,
    }
    assert sorted(stocks.requested) == ["AAPL", "ES"]
    assert sorted(crypto.requested) == ["BTC", "PEPE"]


def test_known_crypto_symbols_route_without_asset_type(stocks, crypto):
    manager = QuoteManager([stocks, crypto])

    assert manager.resolve_asset_type("eth") == "crypto"
    assert manager.resolve_asset_type("AAPL") == "stock"
    assert manager.provider_for("BTC") is crypto
    assert manager.provider_for("AAPL") is stocks


def test_missing_symbols_are_absent(stocks, crypto):
    quotes = QuoteManager([stocks, crypto]).get_quotes(["AAPL", "XYZ"])

    assert list(quotes) == ["AAPL"]


def test_partial_errors_are_tolerated(crypto):
    stocks = StaticProvider("Stocks", ("stock",), {"AAPL": 190.0}, errors={"MSFT"})

    quotes = QuoteManager([stocks, crypto]).get_quotes(["AAPL", "MSFT"])

    assert list(quotes) == ["AAPL"]


def test_all_symbols_failing_raises():
    stocks = StaticProvider("Stocks", ("stock",), {}, errors={"AAPL", "MSFT"})

    with pytest.raises(QuoteProviderError):
        QuoteManager([stocks]).get_quotes(["AAPL", "MSFT"])


def test_symbol_without_provider_is_absent(stocks):
    assert QuoteManager([stocks]).get_quotes(["BTC"]) == {}


def test_redis_cache_hit_skips_provider(stocks):
    redis = MagicMock()
    cached = Quote("AAPL", 188.0, datetime(2026, 3, 2, 14, 59))
    redis.get.return_value = json.dumps(cached.to_cache())

    quotes = QuoteManager([stocks], redis=redis).get_quotes(["AAPL"])

    assert quotes["AAPL"] == cached
    assert stocks.requested == []
    redis.get.assert_called_once_with("quote:AAPL")


def test_redis_cache_miss_stores_quote(stocks):
    redis = MagicMock()
    redis.get.return_value = None

    QuoteManager([stocks], redis=redis, cache_ttl=30).get_quotes(["AAPL"])

    key, ttl, payload = redis.setex.call_args.args
    assert (key, ttl) == ("quote:AAPL", 30)
    assert json.loads(payload)["price"] == 190.0


def test_redis_errors_do_not_break_lookup(stocks):
    redis = MagicMock()
    redis.get.side_effect = ConnectionError("redis down")
    redis.setex.side_effect = ConnectionError("redis down")

    quotes = QuoteManager([stocks], redis=redis).get_quotes(["AAPL"])

    assert quotes["AAPL"].price == 190.0


def _http_session(payload):
    session = MagicMock()
    session.get.return_value.json.return_value = payload
    return session


def test_finnhub_quote():
    session = _http_session({"c": 101.5, "pc": 100.0, "dp": 1.5})
    provider = FinnhubProvider("key", "https://finnhub.io/api/v1/", session=session)

    quote = provider.get_quote("AAPL")

    assert (quote.symbol, quote.price, quote.previous_close, quote.change_percent) == (
        "AAPL", 101.5, 100.0, 1.5,
    )
    url = session.get.call_args.args[0]
    assert url == "https://finnhub.io/api/v1/quote"
    assert session.get.call_args.kwargs["params"] == {"symbol": "AAPL", "token": "key"}
    assert provider.supports("future") and not provider.supports("crypto")


def test_finnhub_zero_price_means_no_quote():
    provider = FinnhubProvider("key", "https://finnhub.io/api/v1", session=_http_session({"c": 0, "pc": 0}))

    assert provider.get_quote("NOPE") is None


def test_coingecko_quote_for_common_coin():
    session = _http_session({"bitcoin": {"usd": 64000.0, "usd_24h_change": -2.1}})
    provider = CoinGeckoProvider("", "https://api.coingecko.com/api/v3", session=session)

    quote = provider.get_quote("btc")

    assert (quote.symbol, quote.price, quote.previous_close, quote.change_percent) == (
        "BTC", 64000.0, None, -2.1,
    )
    assert session.get.call_args.kwargs["params"]["ids"] == "bitcoin"


def test_coingecko_searches_unknown_symbols_once():
    session = MagicMock()
    session.get.return_value.json.return_value = {
        "coins": [{"id": "pepe-token", "symbol": "PEPE"}],
    }
    provider = CoinGeckoProvider("demo-key", "https://api.coingecko.com/api/v3", session=session)

    assert provider.get_coin_id("pepe") == "pepe-token"
    assert provider.get_coin_id("PEPE") == "pepe-token"
    assert session.get.call_count == 1
    assert session.get.call_args.kwargs["headers"]["x-cg-demo-api-key"] == "demo-key"
