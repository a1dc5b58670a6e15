"""Decimal helpers shared by the exchange model and the strategies."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any

PRICE_PRECISION = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Coerce an int, float, str or Decimal to Decimal without binary float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise TypeError(f"Expected a number, got {type(value).__name__}")
    return Decimal(str(value))


def round_price(price: Decimal) -> Decimal:
    """Round a trigger price to cents."""
    return price.quantize(PRICE_PRECISION, rounding=ROUND_HALF_UP)
