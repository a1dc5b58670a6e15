"""
OptimisticGridStrategy — Keeps buying dips while holding out for the last sell target.
"""

from decimal import Decimal
from typing import Any

from coin_backtester.core.coin import Coin
from coin_backtester.core.exchange import Exchange, TradeType
from coin_backtester.core.numbers import round_price
from coin_backtester.core.price_history import PriceHistory
from coin_backtester.engine.models import TradeSequence
from coin_backtester.strategies.grid import GridStrategy


class OptimisticGridStrategy(GridStrategy):
    """
    Grid strategy whose reference price only resets on a sell.

    After a buy only the buy price moves, down to ``trade price *
    buy_threshold / 100``; the sell price stays anchored to the last sell.
    """

    def __init__(
        self,
        buy_threshold: Any,
        sell_threshold: Any,
        buy_percentage: Any,
        sell_percentage: Any,
        has_paper_hands: bool = False,
        coin: Coin | None = None,
    ) -> None:
        super().__init__(
            has_paper_hands=has_paper_hands,
            coin=coin,
            buy_threshold=buy_threshold,
            sell_threshold=sell_threshold,
            buy_percentage=buy_percentage,
            sell_percentage=sell_percentage,
        )

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

            trade = execution.trade
            trades.append(trade)
            coin_amount = execution.new_coin_amount
            cash_amount = execution.new_cash_amount

            if trade.type == TradeType.SELL:
                buy_price = self.get_buy_price(trade.price)
                sell_price = self.get_sell_price(trade.price)
            else:
                buy_price = round_price(trade.price * self.buy_threshold_fraction)

        return TradeSequence(
            trades=trades,
            ending_coin_amount=coin_amount,
            ending_cash_amount=cash_amount,
        )
