"""
GridStrategy — Shared trigger logic for threshold-based grid strategies.

Buy when the price falls to the buy price, sell when it rises to the sell
price. Paper hands reverses both rules. At most one trade per day, with the
buy rule checked first.
"""

from decimal import Decimal
from typing import Any

from coin_backtester.core.coin import Coin
from coin_backtester.core.exchange import Exchange, TradeExecution
from coin_backtester.core.numbers import round_price
from coin_backtester.core.price_history import HistoricalPrice
from coin_backtester.engine.models import PERCENT, Parameter
from coin_backtester.engine.strategy import Strategy

HUNDRED = Decimal("100")

BUY_THRESHOLD = Parameter("buy_threshold", minimum=0, maximum=100, symbol=PERCENT)
SELL_THRESHOLD = Parameter("sell_threshold", minimum=0, symbol=PERCENT)
BUY_PERCENTAGE = Parameter("buy_percentage", minimum=0, maximum=100, symbol=PERCENT)
SELL_PERCENTAGE = Parameter("sell_percentage", minimum=0, maximum=100, symbol=PERCENT)
TRADE_PERCENTAGE = Parameter("trade_percentage", minimum=0, maximum=100, symbol=PERCENT)


# =============================================================================
# Trigger rules
# =============================================================================


def get_buy_price(reference_price: Decimal, buy_threshold_fraction: Decimal) -> Decimal:
    return round_price(reference_price * (1 - buy_threshold_fraction))


def get_sell_price(reference_price: Decimal, sell_threshold_fraction: Decimal) -> Decimal:
    return round_price(reference_price * (1 + sell_threshold_fraction))


def should_buy(
    price: Decimal,
    buy_price: Decimal,
    sell_price: Decimal,
    cash_amount: Decimal,
    has_paper_hands: bool = False,
) -> bool:
    if cash_amount == 0:
        return False
    if has_paper_hands:
        return price >= sell_price
    return price <= buy_price


def should_sell(
    price: Decimal,
    buy_price: Decimal,
    sell_price: Decimal,
    coin_amount: Decimal,
    has_paper_hands: bool = False,
) -> bool:
    if coin_amount == 0:
        return False
    if has_paper_hands:
        return price <= buy_price
    return price >= sell_price


def execute_grid_trade(
    historical_price: HistoricalPrice,
    buy_price: Decimal,
    sell_price: Decimal,
    coin_amount: Decimal,
    cash_amount: Decimal,
    exchange: Exchange,
    buy_fraction: Decimal,
    sell_fraction: Decimal,
    has_paper_hands: bool = False,
) -> TradeExecution | None:
    """
    Trade at most once on the given day.

    Returns:
        The executed trade with new holdings, or None when no rule fires
    """
    price = historical_price.price

    if should_buy(price, buy_price, sell_price, cash_amount, has_paper_hands):
        return exchange.buy(
            amount=buy_fraction * cash_amount,
            historical_price=historical_price,
            initial_coin_amount=coin_amount,
            initial_cash_amount=cash_amount,
        )
    if should_sell(price, buy_price, sell_price, coin_amount, has_paper_hands):
        return exchange.sell(
            amount=sell_fraction * coin_amount,
            historical_price=historical_price,
            initial_coin_amount=coin_amount,
            initial_cash_amount=cash_amount,
        )
    return None


# =============================================================================
# Base strategy
# =============================================================================


class GridStrategy(Strategy):
    """
    Base for grid strategies. Variants differ in how the reference price moves.

    Args:
        has_paper_hands: Buy high and sell low instead
        coin: Coin to trade (default: Bitcoin)
        **parameter_values: A value for every declared parameter
    """

    PARAMETERS = (BUY_THRESHOLD, SELL_THRESHOLD, BUY_PERCENTAGE, SELL_PERCENTAGE)

    buy_threshold: Decimal
    sell_threshold: Decimal
    buy_percentage: Decimal
    sell_percentage: Decimal

    def __init__(
        self,
        has_paper_hands: bool = False,
        coin: Coin | None = None,
        **parameter_values: Any,
    ) -> None:
        super().__init__(coin=coin)
        self.has_paper_hands = has_paper_hands
        self._init_parameters(**parameter_values)

    @property
    def buy_threshold_fraction(self) -> Decimal:
        return self.buy_threshold / HUNDRED

    @property
    def sell_threshold_fraction(self) -> Decimal:
        return self.sell_threshold / HUNDRED

    @property
    def buy_fraction(self) -> Decimal:
        """Fraction of held cash spent per buy."""
        return self.buy_percentage / HUNDRED

    @property
    def sell_fraction(self) -> Decimal:
        """Fraction of held coins sold per sell."""
        return self.sell_percentage / HUNDRED

    def get_buy_price(self, reference_price: Decimal) -> Decimal:
        return get_buy_price(reference_price, self.buy_threshold_fraction)

    def get_sell_price(self, reference_price: Decimal) -> Decimal:
        return get_sell_price(reference_price, self.sell_threshold_fraction)

    def get_trade(
        self,
        historical_price: HistoricalPrice,
        buy_price: Decimal,
        sell_price: Decimal,
        coin_amount: Decimal,
        cash_amount: Decimal,
        exchange: Exchange,
    ) -> TradeExecution | None:
        return execute_grid_trade(
            historical_price=historical_price,
            buy_price=buy_price,
            sell_price=sell_price,
            coin_amount=coin_amount,
            cash_amount=cash_amount,
            exchange=exchange,
            buy_fraction=self.buy_fraction,
            sell_fraction=self.sell_fraction,
            has_paper_hands=self.has_paper_hands,
        )
