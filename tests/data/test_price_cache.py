"""Tests for the CSV price cache."""

from datetime import date
from decimal import Decimal

import pytest

from coin_backtester.core.price_history import HistoricalPrice
from coin_backtester.data.price_cache import PriceCache
from coin_backtester.exceptions import PriceHistoryLoadError
from tests.conftest import make_history


@pytest.fixture
def cache(tmp_path) -> PriceCache:
    return PriceCache(data_dir=tmp_path / "priceHistories")


class TestPriceCache:

    def test_path_uses_uppercase_symbol(self, cache):
        assert cache.get_path("btc").name == "BTC.csv"

    def test_save_and_load(self, cache):
        history = make_history([100, 101.5, 99])
        cache.save("BTC", history)

        assert cache.exists("BTC")
        assert cache.load("BTC") == history

    def test_csv_layout(self, cache):
        path = cache.save("BTC", make_history([100, 101.5]))

        lines = path.read_text().splitlines()
        assert lines == ["date,closingPrice", "2014-01-01,100", "2014-01-02,101.5"]

    def test_load_missing_file_raises(self, cache):
        assert not cache.exists("BTC")
        with pytest.raises(PriceHistoryLoadError):
            cache.load("BTC")

    @pytest.mark.parametrize(
        "content",
        [
            "",
            "date,closingPrice\n",
            "date,price\n2014-01-01,100\n",
            "date,closingPrice\n2014-01-01,abc\n",
            "date,closingPrice\nyesterday,100\n",
            "date,closingPrice\n2014-01-02,100\n2014-01-01,101\n",
        ],
        ids=["empty", "header-only", "wrong-header", "bad-price", "bad-date", "unsorted"],
    )
    def test_load_malformed_file_raises(self, cache, content):
        path = cache.get_path("BTC")
        path.parent.mkdir(parents=True)
        path.write_text(content)

        with pytest.raises(PriceHistoryLoadError):
            cache.load("BTC")

    def test_append_creates_file(self, cache):
        merged = cache.append("BTC", make_history([100, 101]).prices)

        assert len(merged) == 2
        assert cache.load("BTC") == merged

    def test_append_keeps_stored_prices(self, cache):
        cache.save("BTC", make_history([100, 101]))

        merged = cache.append(
            "BTC",
            [
                HistoricalPrice(date=date(2014, 1, 2), price=999),
                HistoricalPrice(date=date(2014, 1, 3), price=102),
            ],
        )

        assert [p.price for p in merged] == [Decimal("100"), Decimal("101"), Decimal("102")]
        assert cache.load("BTC").end_date == date(2014, 1, 3)
