"""
Exchange — Trade execution model with a flat percentage fee.

Buys charge the fee on top of the spent cash; sells deduct it from the
proceeds. No rounding is applied to amounts.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from coin_backtester.core.numbers import to_decimal
from coin_backtester.core.price_history import HistoricalPrice

HUNDRED = Decimal("100")


class TradeType(str, Enum):
    """Side of an executed trade."""

    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class Trade:
    """A single executed trade. Amount is in coin units."""

    type: TradeType
    amount: Decimal
    price: Decimal
    date: date

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "amount": str(self.amount),
            "price": str(self.price),
            "date": self.date.isoformat(),
        }


@dataclass(frozen=True)
class TradeExecution:
    """Trade plus the holdings that result from it."""

    trade: Trade
    new_coin_amount: Decimal
    new_cash_amount: Decimal


@dataclass(frozen=True)
class Exchange:
    """Named exchange charging ``trading_fee_percentage`` (0-100) per trade."""

    name: str
    trading_fee_percentage: Decimal = Decimal("0")

    def __post_init__(self) -> None:
        fee = to_decimal(self.trading_fee_percentage)
        if fee < 0 or fee > HUNDRED:
            raise ValueError(f"Trading fee must be within 0-100, got {fee}")
        object.__setattr__(self, "trading_fee_percentage", fee)

    @property
    def fee_fraction(self) -> Decimal:
        return self.trading_fee_percentage / HUNDRED

    def buy(
        self,
        amount: Decimal,
        historical_price: HistoricalPrice,
        initial_coin_amount: Decimal,
        initial_cash_amount: Decimal,
    ) -> TradeExecution:
        """
        Spend ``amount`` of cash on coins at the day's price.

        If the fee would push the total past the available cash, the fee is
        carved out of the amount and recomputed on the reduced amount.
        """
        amount = to_decimal(amount)
        initial_cash_amount = to_decimal(initial_cash_amount)

        fee = amount * self.fee_fraction
        if amount + fee > initial_cash_amount:
            amount -= fee
            fee = amount * self.fee_fraction

        coins_purchased = amount / historical_price.price
        trade = Trade(
            type=TradeType.BUY,
            amount=coins_purchased,
            price=historical_price.price,
            date=historical_price.date,
        )
        return TradeExecution(
            trade=trade,
            new_coin_amount=to_decimal(initial_coin_amount) + coins_purchased,
            new_cash_amount=initial_cash_amount - (amount + fee),
        )

    def sell(
        self,
        amount: Decimal,
        historical_price: HistoricalPrice,
        initial_coin_amount: Decimal,
        initial_cash_amount: Decimal,
    ) -> TradeExecution:
        """Sell ``amount`` coins at the day's price, paying the fee from the proceeds."""
        amount = to_decimal(amount)

        cash_received = amount * historical_price.price
        fee = cash_received * self.fee_fraction
        trade = Trade(
            type=TradeType.SELL,
            amount=amount,
            price=historical_price.price,
            date=historical_price.date,
        )
        return TradeExecution(
            trade=trade,
            new_coin_amount=to_decimal(initial_coin_amount) - amount,
            new_cash_amount=to_decimal(initial_cash_amount) + cash_received - fee,
        )


EXCHANGES: dict[str, Exchange] = {
    "coinbase_pro": Exchange(name="Coinbase Pro", trading_fee_percentage=Decimal("0.5")),
    "free": Exchange(name="Free", trading_fee_percentage=Decimal("0")),
}
