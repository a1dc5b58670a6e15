"""Tests for the ccxt price source against a canned exchange."""

from datetime import date
from decimal import Decimal

import pytest

from coin_backtester.data.price_source import CcxtPriceSource
from coin_backtester.exceptions import PriceSourceError
from tests.conftest import FakeExchange, make_candles

TODAY = date(2014, 1, 4)


@pytest.fixture
def no_retry_wait(monkeypatch):
    """Skip tenacity's backoff sleeps."""
    monkeypatch.setattr(CcxtPriceSource._fetch_ohlcv.retry, "sleep", lambda seconds: None)


def make_source(exchange: FakeExchange, limit: int | None = None) -> CcxtPriceSource:
    return CcxtPriceSource(exchange_id="binance", quote_currency="usdt", exchange=exchange, limit=limit)


class TestCcxtPriceSource:

    def test_fetches_closed_candles(self):
        exchange = FakeExchange(make_candles([100, 101, 102, 103]))

        prices = make_source(exchange).get_historical_prices("btc", today=TODAY)

        assert [p.date for p in prices] == [date(2014, 1, 1), date(2014, 1, 2), date(2014, 1, 3)]
        assert [p.price for p in prices] == [Decimal("100"), Decimal("101"), Decimal("102")]
        assert exchange.fetch_calls[0]["symbol"] == "BTC/USDT"
        assert exchange.fetch_calls[0]["timeframe"] == "1d"

    def test_from_date_is_inclusive(self):
        exchange = FakeExchange(make_candles([100, 101, 102, 103]))

        prices = make_source(exchange).get_historical_prices(
            "BTC", from_date=date(2014, 1, 2), today=TODAY,
        )

        assert [p.date for p in prices] == [date(2014, 1, 2), date(2014, 1, 3)]

    def test_from_date_accepts_iso_string(self):
        exchange = FakeExchange(make_candles([100, 101, 102, 103]))

        prices = make_source(exchange).get_historical_prices(
            "BTC", from_date="2014-01-03", today=TODAY,
        )

        assert [p.price for p in prices] == [Decimal("102")]

    def test_nothing_to_fetch_from_today(self):
        exchange = FakeExchange(make_candles([100, 101, 102, 103]))

        assert make_source(exchange).get_historical_prices("BTC", from_date=TODAY, today=TODAY) == []
        assert exchange.fetch_calls == []

    def test_paginates_with_limit(self):
        exchange = FakeExchange(make_candles([100, 101, 102, 103]))

        prices = make_source(exchange, limit=2).get_historical_prices("BTC", today=TODAY)

        assert len(prices) == 3
        assert len(exchange.fetch_calls) == 2

    def test_unknown_market_raises(self):
        exchange = FakeExchange(make_candles([100]), markets=("BTC/USDT",))

        with pytest.raises(PriceSourceError, match="ETH/USDT"):
            make_source(exchange).get_historical_prices("ETH", today=TODAY)

    def test_retries_network_errors(self, no_retry_wait):
        exchange = FakeExchange(make_candles([100, 101, 102, 103]), failures=1)

        prices = make_source(exchange).get_historical_prices("BTC", today=TODAY)

        assert len(prices) == 3
        assert len(exchange.fetch_calls) == 2

    def test_gives_up_after_three_attempts(self, no_retry_wait):
        exchange = FakeExchange(make_candles([100, 101, 102, 103]), failures=5)

        with pytest.raises(PriceSourceError):
            make_source(exchange).get_historical_prices("BTC", today=TODAY)
        assert len(exchange.fetch_calls) == 3

    def test_unsupported_exchange_id(self):
        source = CcxtPriceSource(exchange_id="not_an_exchange")

        with pytest.raises(PriceSourceError):
            source.exchange
