"""
NaiveGridStrategy — Trades whenever the price moves a fixed percentage from the last trade.

Naive because it can keep buying all the way down and then sell after only a
small recovery.
"""

from decimal import Decimal
from typing import Any

from coin_backtester.core.coin import Coin
from coin_backtester.core.exchange import Exchange
from coin_backtester.core.price_history import PriceHistory
from coin_backtester.engine.models import TradeSequence
from coin_backtester.strategies.grid import (
    BUY_THRESHOLD,
    HUNDRED,
    SELL_THRESHOLD,
    TRADE_PERCENTAGE,
    GridStrategy,
)


class NaiveGridStrategy(GridStrategy):
    """
    Grid strategy whose reference price is the last executed trade price.

    Args:
        buy_threshold: Percentage drop in price that triggers a buy
        sell_threshold: Percentage rise in price that triggers a sell
        trade_percentage: Percentage of held cash or coins traded each time
    """

    PARAMETERS = (BUY_THRESHOLD, SELL_THRESHOLD, TRADE_PERCENTAGE)

    trade_percentage: Decimal

    def __init__(
        self,
        buy_threshold: Any,
        sell_threshold: Any,
        trade_percentage: Any,
        has_paper_hands: bool = False,
        coin: Coin | None = None,
    ) -> None:
        super().__init__(
            has_paper_hands=has_paper_hands,
            coin=coin,
            buy_threshold=buy_threshold,
            sell_threshold=sell_threshold,
            trade_percentage=trade_percentage,
        )

    @property
    def buy_fraction(self) -> Decimal:
        return self.trade_percentage / HUNDRED

    @property
    def sell_fraction(self) -> Decimal:
        return self.trade_percentage / HUNDRED

    def get_trades(
        self,
        price_history: PriceHistory,
        coin_amount: Decimal,
        cash_amount: Decimal,
        exchange: Exchange,
    ) -> TradeSequence:
        trades = []
        buy_price = self.get_buy_price(price_history.starting_price)
        sell_price = self.get_sell_price(price_history.starting_price)

        for historical_price in price_history:
            execution = self.get_trade(
                historical_price, buy_price, sell_price, coin_amount, cash_amount, exchange,
            )
            if execution is None:
                continue

            trades.append(execution.trade)
            coin_amount = execution.new_coin_amount
            cash_amount = execution.new_cash_amount

            buy_price = self.get_buy_price(execution.trade.price)
            sell_price = self.get_sell_price(execution.trade.price)

        return TradeSequence(
            trades=trades,
            ending_coin_amount=coin_amount,
            ending_cash_amount=cash_amount,
        )
