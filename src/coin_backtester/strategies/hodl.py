"""HodlStrategy — Never trades. Baseline for comparisons."""

from decimal import Decimal

from coin_backtester.core.exchange import Exchange
from coin_backtester.core.price_history import PriceHistory
from coin_backtester.engine.models import TradeSequence
from coin_backtester.engine.strategy import Strategy


class HodlStrategy(Strategy):
    """Holds the starting coins and cash untouched."""

    def get_trades(
        self,
        price_history: PriceHistory,
        coin_amount: Decimal,
        cash_amount: Decimal,
        exchange: Exchange,
    ) -> TradeSequence:
        return TradeSequence(
            trades=[],
            ending_coin_amount=coin_amount,
            ending_cash_amount=cash_amount,
        )
