"""BuyAndHodlStrategy — Spends all cash on the first day, then holds."""

from decimal import Decimal

from coin_backtester.core.exchange import Exchange
from coin_backtester.core.price_history import PriceHistory
from coin_backtester.engine.models import TradeSequence
from coin_backtester.engine.strategy import Strategy


class BuyAndHodlStrategy(Strategy):
    """One up-front buy of all cash at the first price. No trade without cash."""

    def get_trades(
        self,
        price_history: PriceHistory,
        coin_amount: Decimal,
        cash_amount: Decimal,
        exchange: Exchange,
    ) -> TradeSequence:
        if cash_amount == 0:
            return TradeSequence(
                trades=[],
                ending_coin_amount=coin_amount,
                ending_cash_amount=cash_amount,
            )

        execution = exchange.buy(
            amount=cash_amount,
            historical_price=price_history.prices[0],
            initial_coin_amount=coin_amount,
            initial_cash_amount=cash_amount,
        )
        return TradeSequence(
            trades=[execution.trade],
            ending_coin_amount=execution.new_coin_amount,
            ending_cash_amount=execution.new_cash_amount,
        )
