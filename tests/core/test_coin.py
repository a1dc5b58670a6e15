"""Tests for Coin price history resolution."""

from datetime import date
from decimal import Decimal

import pytest

from coin_backtester.core.coin import COINS, Coin
from coin_backtester.data.price_cache import PriceCache
from coin_backtester.data.price_source import CcxtPriceSource
from coin_backtester.exceptions import PriceSourceError
from tests.conftest import FakeExchange, make_candles, make_history


class TestCoin:

    def test_registry(self):
        assert COINS["BITCOIN"].symbol == "BTC"
        assert COINS["ETHEREUM"].symbol == "ETH"

    def test_loads_from_cache(self, tmp_path):
        cache = PriceCache(tmp_path)
        cache.save("BTC", make_history([100, 200]))
        coin = Coin(name="Bitcoin", symbol="BTC")

        history = coin.get_price_history(cache=cache)

        assert history.ending_price == Decimal("200")

    def test_fetches_and_stores_when_not_cached(self, tmp_path):
        cache = PriceCache(tmp_path)
        exchange = FakeExchange(make_candles([100, 110, 120], start=date(2020, 1, 1)))
        source = CcxtPriceSource(exchange=exchange)
        coin = Coin(name="Bitcoin", symbol="BTC")

        history = coin.get_price_history(cache=cache, source=source)

        assert len(history) == 3
        assert cache.exists("BTC")
        assert cache.load("BTC") == history

    def test_memoizes_history(self, tmp_path):
        cache = PriceCache(tmp_path)
        cache.save("BTC", make_history([100, 200]))
        coin = Coin(name="Bitcoin", symbol="BTC")

        first = coin.get_price_history(cache=cache)
        cache.get_path("BTC").unlink()

        assert coin.get_price_history(cache=cache) is first

    def test_empty_source_raises(self, tmp_path):
        source = CcxtPriceSource(exchange=FakeExchange([]))
        coin = Coin(name="Bitcoin", symbol="BTC")
        with pytest.raises(PriceSourceError):
            coin.get_price_history(cache=PriceCache(tmp_path), source=source)

    def test_pinned_history_is_used(self, coin):
        history = make_history([1, 2, 3])
        coin.set_price_history(history)
        assert coin.get_price_history() is history

    def test_memo_not_part_of_equality(self, coin):
        other = Coin(name=coin.name, symbol=coin.symbol)
        coin.set_price_history(make_history([1]))
        assert coin == other
