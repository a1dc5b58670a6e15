"""Tests for fetch-and-append price history updates."""

from datetime import date
from decimal import Decimal

import pytest

from coin_backtester.data.price_cache import PriceCache
from coin_backtester.data.price_source import CcxtPriceSource
from coin_backtester.data.updater import update_price_history
from tests.conftest import FakeExchange, make_candles, make_history


@pytest.fixture
def cache(tmp_path) -> PriceCache:
    return PriceCache(data_dir=tmp_path)


@pytest.fixture
def exchange() -> FakeExchange:
    return FakeExchange(make_candles([100, 101, 102, 103]), markets=("TEST/USDT",))


@pytest.fixture
def source(exchange) -> CcxtPriceSource:
    return CcxtPriceSource(quote_currency="USDT", exchange=exchange)


class TestUpdatePriceHistory:

    def test_appends_newer_prices(self, coin, cache, source, exchange):
        cache.save(coin.symbol, make_history([100, 101]))

        added = update_price_history(coin, cache=cache, source=source)

        assert [p.date for p in added] == [date(2014, 1, 3), date(2014, 1, 4)]
        assert exchange.fetch_calls[0]["since"] is not None
        stored = cache.load(coin.symbol)
        assert len(stored) == 4
        assert stored.ending_price == Decimal("103")

    def test_refreshes_coin_history(self, coin, cache, source):
        cache.save(coin.symbol, make_history([100, 101]))

        update_price_history(coin, cache=cache, source=source)

        assert len(coin.get_price_history(cache=cache)) == 4

    def test_fetches_everything_without_cache(self, coin, cache, source):
        added = update_price_history(coin, cache=cache, source=source)

        assert len(added) == 4
        assert cache.exists(coin.symbol)

    def test_up_to_date_history_is_untouched(self, coin, cache, source):
        history = make_history([100, 101, 102, 103])
        cache.save(coin.symbol, history)

        assert update_price_history(coin, cache=cache, source=source) == []
        assert cache.load(coin.symbol) == history
