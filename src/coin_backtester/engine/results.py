"""
BacktestResults — Outcome of replaying one strategy over a price history.

Values are measured in cash at the first and last price of the history.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from coin_backtester.core.coin import Coin
from coin_backtester.core.exchange import EXCHANGES, Exchange, Trade, TradeType
from coin_backtester.core.numbers import to_decimal
from coin_backtester.core.price_history import PriceHistory

ZERO = Decimal("0")


@dataclass
class BacktestResults:
    """
    Holdings before and after a backtest plus the trades in between.

    Ending amounts left as None default to the starting amounts; an explicit
    zero is kept.
    """

    coin: Coin
    starting_coin_amount: Decimal
    starting_cash_amount: Decimal
    price_history: PriceHistory
    ending_coin_amount: Decimal | None = None
    ending_cash_amount: Decimal | None = None
    trades: list[Trade] = field(default_factory=list)
    exchange: Exchange = field(default_factory=lambda: EXCHANGES["free"])

    def __post_init__(self) -> None:
        self.starting_coin_amount = to_decimal(self.starting_coin_amount)
        self.starting_cash_amount = to_decimal(self.starting_cash_amount)
        if self.ending_coin_amount is None:
            self.ending_coin_amount = self.starting_coin_amount
        if self.ending_cash_amount is None:
            self.ending_cash_amount = self.starting_cash_amount
        self.ending_coin_amount = to_decimal(self.ending_coin_amount)
        self.ending_cash_amount = to_decimal(self.ending_cash_amount)

    # =========================================================================
    # Value metrics
    # =========================================================================

    @property
    def starting_value(self) -> Decimal:
        return (
            self.starting_cash_amount
            + self.starting_coin_amount * self.price_history.starting_price
        )

    @property
    def ending_value(self) -> Decimal:
        return (
            self.ending_cash_amount
            + self.ending_coin_amount * self.price_history.ending_price
        )

    @property
    def profit(self) -> Decimal:
        return self.ending_value - self.starting_value

    @property
    def percentage_yield_fraction(self) -> Decimal:
        """Profit relative to starting value (0.1 == 10 %). Zero for a zero start."""
        if self.starting_value == 0:
            return ZERO
        return self.profit / self.starting_value

    @property
    def percentage_yield(self) -> Decimal:
        return self.percentage_yield_fraction * 100

    @property
    def multiplier(self) -> Decimal:
        return 1 + self.percentage_yield_fraction

    @property
    def is_profitable(self) -> bool:
        return self.profit > 0

    # =========================================================================
    # Trade metrics
    # =========================================================================

    @property
    def buys(self) -> list[Trade]:
        return [t for t in self.trades if t.type == TradeType.BUY]

    @property
    def sells(self) -> list[Trade]:
        return [t for t in self.trades if t.type == TradeType.SELL]

    @property
    def days_traded(self) -> int:
        return (self.price_history.end_date - self.price_history.start_date).days

    # =========================================================================
    # Baselines
    # =========================================================================

    @property
    def hodl_comparison(self) -> "BacktestResults":
        """Same starting holdings, never traded."""
        return BacktestResults(
            coin=self.coin,
            starting_coin_amount=self.starting_coin_amount,
            starting_cash_amount=self.starting_cash_amount,
            price_history=self.price_history,
            exchange=self.exchange,
        )

    @property
    def buy_and_hodl_comparison(self) -> "BacktestResults":
        """Same starting holdings with all cash spent on the first day."""
        from coin_backtester.strategies.buy_and_hodl import BuyAndHodlStrategy

        sequence = BuyAndHodlStrategy(coin=self.coin).get_trades(
            price_history=self.price_history,
            coin_amount=self.starting_coin_amount,
            cash_amount=self.starting_cash_amount,
            exchange=self.exchange,
        )
        return BacktestResults(
            coin=self.coin,
            starting_coin_amount=self.starting_coin_amount,
            starting_cash_amount=self.starting_cash_amount,
            price_history=self.price_history,
            ending_coin_amount=sequence.ending_coin_amount,
            ending_cash_amount=sequence.ending_cash_amount,
            trades=sequence.trades,
            exchange=self.exchange,
        )

    @property
    def does_beat_hodling(self) -> bool:
        return self.ending_value > self.hodl_comparison.ending_value

    @property
    def does_beat_buying_and_hodling(self) -> bool:
        return self.ending_value > self.buy_and_hodl_comparison.ending_value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (without the price series)."""
        return {
            "coin": self.coin.symbol,
            "exchange": self.exchange.name,
            "start_date": self.price_history.start_date.isoformat(),
            "end_date": self.price_history.end_date.isoformat(),
            "days_traded": self.days_traded,
            "starting_coin_amount": float(self.starting_coin_amount),
            "starting_cash_amount": float(self.starting_cash_amount),
            "ending_coin_amount": float(self.ending_coin_amount),
            "ending_cash_amount": float(self.ending_cash_amount),
            "starting_value": round(float(self.starting_value), 2),
            "ending_value": round(float(self.ending_value), 2),
            "profit": round(float(self.profit), 2),
            "percentage_yield": round(float(self.percentage_yield), 4),
            "multiplier": round(float(self.multiplier), 4),
            "total_trades": len(self.trades),
            "buys": len(self.buys),
            "sells": len(self.sells),
            "does_beat_hodling": self.does_beat_hodling,
            "trades": [t.to_dict() for t in self.trades],
        }
