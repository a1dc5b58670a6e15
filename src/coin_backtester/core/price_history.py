"""
PriceHistory — Ordered daily closing prices for a coin.

One price per UTC calendar day, strictly ascending. Instances never change
after construction; range queries return new histories.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

import pandas as pd

from coin_backtester.core.numbers import to_decimal
from coin_backtester.exceptions import (
    DateOutOfRangeError,
    EmptyHistoryError,
    UnsortedHistoryError,
)


def to_utc_date(value: Any) -> date:
    """Coerce a date, datetime or ISO string to a UTC calendar date."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = f"{text[:-1]}+00:00"
        # Naive timestamps are taken as UTC
        return to_utc_date(datetime.fromisoformat(text))
    raise TypeError(f"Cannot interpret {value!r} as a date")


@dataclass(frozen=True)
class HistoricalPrice:
    """Closing price of a coin on a given day."""

    date: date
    price: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", to_utc_date(self.date))
        price = to_decimal(self.price)
        if not price > 0:
            raise ValueError(f"Price must be positive, got {price} on {self.date}")
        object.__setattr__(self, "price", price)

    @classmethod
    def coerce(cls, value: Any) -> "HistoricalPrice":
        """Build from a HistoricalPrice, a {date, price} mapping or a (date, price) pair."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(date=value["date"], price=value["price"])
        date_value, price = value
        return cls(date=date_value, price=price)


class PriceHistory:
    """
    Non-empty, strictly date-ascending sequence of historical prices.

    Usage:
        history = PriceHistory([{"date": "2014-02-01", "price": 768}, ...])
        window = history.for_range(start_date=date(2014, 2, 1))
    """

    def __init__(self, prices: Iterable[Any]) -> None:
        coerced = tuple(HistoricalPrice.coerce(p) for p in prices)
        if not coerced:
            raise EmptyHistoryError("Price history is empty")

        for previous, current in zip(coerced, coerced[1:]):
            if current.date <= previous.date:
                raise UnsortedHistoryError(
                    f"Price history dates must be strictly ascending: "
                    f"{current.date} follows {previous.date}"
                )

        self._prices = coerced
        self._index_by_date = {p.date: i for i, p in enumerate(coerced)}

    @property
    def prices(self) -> tuple[HistoricalPrice, ...]:
        return self._prices

    @property
    def starting_price(self) -> Decimal:
        return self._prices[0].price

    @property
    def ending_price(self) -> Decimal:
        return self._prices[-1].price

    @property
    def start_date(self) -> date:
        return self._prices[0].date

    @property
    def end_date(self) -> date:
        return self._prices[-1].date

    def __len__(self) -> int:
        return len(self._prices)

    def __iter__(self) -> Iterator[HistoricalPrice]:
        return iter(self._prices)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PriceHistory):
            return NotImplemented
        return self._prices == other._prices

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"PriceHistory({len(self)} prices, {self.start_date} -> {self.end_date})"
        )

    def for_range(
        self,
        start_date: Any | None = None,
        end_date: Any | None = None,
    ) -> "PriceHistory":
        """
        Return the inclusive slice between two dates present in the history.

        Args:
            start_date: First day of the slice (default: first day of the history)
            end_date: Last day of the slice (default: last day of the history)

        Raises:
            DateOutOfRangeError: If either boundary has no exact price.
        """
        start = self.start_date if start_date is None else to_utc_date(start_date)
        end = self.end_date if end_date is None else to_utc_date(end_date)

        start_index = self._index_by_date.get(start)
        end_index = self._index_by_date.get(end)

        if start_index is None or end_index is None:
            boundary = f"start date {start}" if start_index is None else f"end date {end}"
            raise DateOutOfRangeError(
                f"No historical price found for {boundary}. "
                f"Supported price range is {self.start_date} - {self.end_date}."
            )
        if start_index > end_index:
            raise DateOutOfRangeError(
                f"Start date {start} is after end date {end}"
            )

        return PriceHistory(self._prices[start_index:end_index + 1])

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular form with ISO date strings and closing prices."""
        return pd.DataFrame(
            {
                "date": [p.date.isoformat() for p in self._prices],
                "closingPrice": [str(p.price) for p in self._prices],
            }
        )

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        date_column: str = "date",
        price_column: str = "closingPrice",
    ) -> "PriceHistory":
        """Build from rows of (date, closing price)."""
        missing = {date_column, price_column} - set(df.columns)
        if missing:
            raise ValueError(f"Missing columns: {missing}")
        return cls(
            HistoricalPrice(date=row_date, price=row_price)
            for row_date, row_price in zip(df[date_column], df[price_column])
        )
