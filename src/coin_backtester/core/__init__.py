"""Core domain types: prices, exchanges, coins."""

from coin_backtester.core.coin import COINS, Coin
from coin_backtester.core.exchange import (
    EXCHANGES,
    Exchange,
    Trade,
    TradeExecution,
    TradeType,
)
from coin_backtester.core.numbers import round_price, to_decimal
from coin_backtester.core.price_history import HistoricalPrice, PriceHistory

__all__ = [
    "COINS",
    "Coin",
    "EXCHANGES",
    "Exchange",
    "HistoricalPrice",
    "PriceHistory",
    "Trade",
    "TradeExecution",
    "TradeType",
    "round_price",
    "to_decimal",
]
