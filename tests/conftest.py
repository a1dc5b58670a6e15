"""Shared test fixtures and helpers for coin backtester tests."""

from datetime import date, datetime, time, timedelta, timezone

import ccxt
import pytest

from coin_backtester.core.coin import Coin
from coin_backtester.core.exchange import EXCHANGES, Exchange
from coin_backtester.core.price_history import PriceHistory

START_DATE = date(2014, 1, 1)


def make_prices(values: list, start: date = START_DATE) -> list[dict]:
    """One {date, price} row per value on consecutive days."""
    return [
        {"date": start + timedelta(days=i), "price": value}
        for i, value in enumerate(values)
    ]


def make_history(values: list, start: date = START_DATE) -> PriceHistory:
    return PriceHistory(make_prices(values, start))


def make_candles(closes: list, start: date = START_DATE) -> list[list]:
    """Daily OHLCV rows [timestamp_ms, open, high, low, close, volume]."""
    rows = []
    for i, close in enumerate(closes):
        day = datetime.combine(start + timedelta(days=i), time(), tzinfo=timezone.utc)
        rows.append([int(day.timestamp() * 1000), close, close, close, close, 1.0])
    return rows


class FakeExchange:
    """Stands in for a ccxt exchange, serving canned daily candles."""

    def __init__(
        self,
        candles: list[list],
        markets: tuple[str, ...] = ("BTC/USDT",),
        failures: int = 0,
    ) -> None:
        self.candles = candles
        self.markets = markets
        self.failures = failures
        self.fetch_calls: list[dict] = []

    def load_markets(self) -> dict:
        return {market: {"symbol": market} for market in self.markets}

    def fetch_ohlcv(self, symbol, timeframe="1d", since=None, limit=None):
        self.fetch_calls.append({"symbol": symbol, "timeframe": timeframe, "since": since})
        if self.failures:
            self.failures -= 1
            raise ccxt.NetworkError("connection reset")
        rows = [c for c in self.candles if since is None or c[0] >= since]
        return rows[:limit] if limit else rows


@pytest.fixture
def coin() -> Coin:
    return Coin(name="Testcoin", symbol="TEST")


@pytest.fixture
def free_exchange() -> Exchange:
    return EXCHANGES["free"]


@pytest.fixture
def coinbase_pro() -> Exchange:
    return EXCHANGES["coinbase_pro"]


@pytest.fixture
def naive_example_history() -> PriceHistory:
    return make_history([768, 847, 750, 742])


@pytest.fixture
def grid_history() -> PriceHistory:
    return make_history([500, 1000, 1400, 500, 400, 600, 1200, 250, 200, 2000])
