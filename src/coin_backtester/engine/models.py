"""
Strategy parameter models.

Defines the data structures shared by strategies and the sweep engine:
- Parameter declarations with bounds and a display unit
- Requested sweep ranges
- The trade sequence produced by one simulation
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from coin_backtester.core.exchange import Trade, TradeType
from coin_backtester.core.numbers import to_decimal
from coin_backtester.engine.sweep import range_values
from coin_backtester.exceptions import ParameterRangeError


# =============================================================================
# Parameters
# =============================================================================


class SymbolPosition(str, Enum):
    """Where a parameter's unit symbol is rendered relative to its value."""

    PREFIX = "prefix"
    SUFFIX = "suffix"


@dataclass(frozen=True)
class ParameterSymbol:
    """Unit symbol of a parameter, e.g. "%" as a suffix or "$" as a prefix."""

    symbol: str
    position: SymbolPosition = SymbolPosition.SUFFIX

    def format(self, value: Any) -> str:
        if self.position == SymbolPosition.PREFIX:
            return f"{self.symbol}{value}"
        return f"{value}{self.symbol}"


PERCENT = ParameterSymbol("%", SymbolPosition.SUFFIX)
DOLLARS = ParameterSymbol("$", SymbolPosition.PREFIX)


@dataclass(frozen=True)
class Parameter:
    """A tunable strategy parameter. ``maximum=None`` means unbounded above."""

    name: str
    minimum: Decimal
    maximum: Decimal | None = None
    symbol: ParameterSymbol = PERCENT

    def __post_init__(self) -> None:
        object.__setattr__(self, "minimum", to_decimal(self.minimum))
        if self.maximum is not None:
            object.__setattr__(self, "maximum", to_decimal(self.maximum))

    def contains(self, value: Decimal) -> bool:
        if value < self.minimum:
            return False
        return self.maximum is None or value <= self.maximum

    @property
    def bounds(self) -> str:
        upper = "inf" if self.maximum is None else str(self.maximum)
        return f"[{self.minimum}, {upper}]"


@dataclass(frozen=True)
class ParameterRange:
    """Inclusive sweep range for one parameter."""

    minimum: Decimal
    maximum: Decimal
    step: Decimal

    def __post_init__(self) -> None:
        for name in ("minimum", "maximum", "step"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))

    @classmethod
    def coerce(cls, value: Any) -> "ParameterRange":
        """Build from a ParameterRange, a {minimum, maximum, step} mapping or a triple."""
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            return cls(
                minimum=value["minimum"],
                maximum=value["maximum"],
                step=value["step"],
            )
        minimum, maximum, step = value
        return cls(minimum=minimum, maximum=maximum, step=step)

    def validate(self, name: str = "parameter") -> None:
        if self.step <= 0:
            raise ParameterRangeError(
                f"Invalid range for {name}: step must be positive, got {self.step}"
            )
        if self.minimum > self.maximum:
            raise ParameterRangeError(
                f"Invalid range for {name}: minimum {self.minimum} "
                f"is greater than maximum {self.maximum}"
            )

    def values(self) -> list[Decimal]:
        """Inclusive arithmetic sequence minimum, minimum + step, ... <= maximum."""
        return range_values(self)

    def to_dict(self) -> dict[str, str]:
        return {
            "minimum": str(self.minimum),
            "maximum": str(self.maximum),
            "step": str(self.step),
        }


# =============================================================================
# Simulation output
# =============================================================================


@dataclass
class TradeSequence:
    """Trades made by one simulation and the holdings left afterwards."""

    trades: list[Trade] = field(default_factory=list)
    ending_coin_amount: Decimal = Decimal("0")
    ending_cash_amount: Decimal = Decimal("0")

    @property
    def buys(self) -> list[Trade]:
        return [t for t in self.trades if t.type == TradeType.BUY]

    @property
    def sells(self) -> list[Trade]:
        return [t for t in self.trades if t.type == TradeType.SELL]
