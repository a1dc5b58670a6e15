"""
CostBasisGridStrategy — Trades on moves relative to the running cost basis.

The cost basis is the average acquisition price of the coins still held,
after sold amounts are consumed first-in first-out. Repeated trades on the
same side double that side's threshold multiplier until an opposing trade
resets it, so a falling (or rising) market cannot trigger a trade every day.
"""

from collections import deque
from collections.abc import Iterable
from datetime import timedelta
from decimal import Decimal
from typing import Any

from coin_backtester.core.coin import Coin
from coin_backtester.core.exchange import Exchange, Trade, TradeType
from coin_backtester.core.numbers import round_price
from coin_backtester.core.price_history import PriceHistory
from coin_backtester.engine.models import DOLLARS, Parameter, TradeSequence
from coin_backtester.exceptions import InvalidParameterError, ParameterRangeError
from coin_backtester.strategies.grid import GridStrategy

COST_BASIS = Parameter("cost_basis", minimum=0, symbol=DOLLARS)


def calculate_cost_basis(trades: Iterable[Trade], fallback: Decimal) -> Decimal:
    """
    Weighted average price of the lots left after FIFO-consuming every sell.

    Args:
        trades: Trades in chronological order, starting with the seed buy
        fallback: Returned when no coins remain

    Returns:
        Cost basis per coin
    """
    lots: deque[list[Decimal]] = deque()

    for trade in trades:
        if trade.type == TradeType.BUY:
            if trade.amount > 0:
                lots.append([trade.amount, trade.price])
            continue

        remaining = trade.amount
        while remaining > 0 and lots:
            lot = lots[0]
            if lot[0] <= remaining:
                remaining -= lot[0]
                lots.popleft()
            else:
                lot[0] -= remaining
                remaining = Decimal("0")

    held = sum((amount for amount, _ in lots), Decimal("0"))
    if held == 0:
        return fallback
    return sum((amount * price for amount, price in lots), Decimal("0")) / held


def next_multipliers(
    trade_type: TradeType,
    previous_type: TradeType | None,
    buy_multiplier: int,
    sell_multiplier: int,
) -> tuple[int, int]:
    """Double the multiplier of a repeated side and reset the other side."""
    if trade_type == TradeType.BUY:
        if previous_type in (None, TradeType.BUY):
            buy_multiplier *= 2
        sell_multiplier = 1
    else:
        if previous_type in (None, TradeType.SELL):
            sell_multiplier *= 2
        buy_multiplier = 1
    return buy_multiplier, sell_multiplier


class CostBasisGridStrategy(GridStrategy):
    """
    Grid strategy anchored to the cost basis of held coins.

    Args:
        cost_basis: Acquisition price of the starting coins
            (default: the first price of the history, also used for 0)
    """

    def __init__(
        self,
        buy_threshold: Any,
        sell_threshold: Any,
        buy_percentage: Any,
        sell_percentage: Any,
        cost_basis: Any | None = None,
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

        # Zero means no seed, same as None
        self.cost_basis: Decimal | None = None
        if cost_basis is not None:
            try:
                self.cost_basis = self.validate_parameter(cost_basis, COST_BASIS) or None
            except ParameterRangeError as e:
                raise InvalidParameterError(str(e)) from e

    def _get_buy_price(self, cost_basis: Decimal, multiplier: int) -> Decimal:
        return round_price(cost_basis * (1 - self.buy_threshold_fraction) / multiplier)

    def _get_sell_price(self, cost_basis: Decimal, multiplier: int) -> Decimal:
        return round_price(cost_basis * (1 + self.sell_threshold_fraction) * multiplier)

    def get_trades(
        self,
        price_history: PriceHistory,
        coin_amount: Decimal,
        cash_amount: Decimal,
        exchange: Exchange,
    ) -> TradeSequence:
        trades: list[Trade] = []
        cost_basis = (
            self.cost_basis if self.cost_basis is not None else price_history.starting_price
        )
        original_buy = Trade(
            type=TradeType.BUY,
            amount=coin_amount,
            price=cost_basis,
            date=price_history.start_date - timedelta(days=1),
        )

        buy_multiplier, sell_multiplier = 1, 1
        previous_type: TradeType | None = None
        buy_price = self._get_buy_price(cost_basis, buy_multiplier)
        sell_price = self._get_sell_price(cost_basis, sell_multiplier)

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

            cost_basis = calculate_cost_basis([original_buy, *trades], fallback=trade.price)
            buy_multiplier, sell_multiplier = next_multipliers(
                trade.type, previous_type, buy_multiplier, sell_multiplier,
            )
            buy_price = self._get_buy_price(cost_basis, buy_multiplier)
            sell_price = self._get_sell_price(cost_basis, sell_multiplier)
            previous_type = trade.type

        return TradeSequence(
            trades=trades,
            ending_coin_amount=coin_amount,
            ending_cash_amount=cash_amount,
        )
