"""
Strategy — Base class for trading rules that can be backtested and swept.

A concrete strategy declares its tunable parameters in ``PARAMETERS`` and
implements ``get_trades``. Backtests never mutate the strategy; sweeps run
each parameter combination on an independent copy from ``with_parameters``.
"""

import copy
from abc import ABC, abstractmethod
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, TypeVar

from coin_backtester.config import settings
from coin_backtester.core.coin import COINS, Coin
from coin_backtester.core.exchange import Exchange
from coin_backtester.core.numbers import to_decimal
from coin_backtester.core.price_history import PriceHistory
from coin_backtester.engine.models import Parameter, ParameterRange, TradeSequence
from coin_backtester.engine.optimization import OptimizationResults, StrategyOptimizer
from coin_backtester.engine.results import BacktestResults
from coin_backtester.exceptions import InvalidParameterError, ParameterRangeError
from coin_backtester.logging import get_logger

logger = get_logger(__name__)

StrategyT = TypeVar("StrategyT", bound="Strategy")


class Strategy(ABC):
    """Trading rule replayed over a price history."""

    PARAMETERS: tuple[Parameter, ...] = ()

    def __init__(self, coin: Coin | None = None) -> None:
        self.coin = coin if coin is not None else COINS["BITCOIN"]

    def __repr__(self) -> str:
        values = ", ".join(f"{k}={v}" for k, v in self.parameter_values.items())
        return f"{self.__class__.__name__}({values})"

    # =========================================================================
    # Parameters
    # =========================================================================

    @property
    def parameters(self) -> tuple[Parameter, ...]:
        return self.PARAMETERS

    @property
    def parameter_values(self) -> dict[str, Decimal]:
        return {p.name: getattr(self, p.name) for p in self.PARAMETERS}

    def get_parameter(self, name: str) -> Parameter:
        for parameter in self.PARAMETERS:
            if parameter.name == name:
                return parameter
        raise ParameterRangeError(
            f"Unknown parameter {name} for {self.__class__.__name__}"
        )

    @staticmethod
    def validate_parameter(value: Any, parameter: Parameter) -> Decimal:
        """
        Coerce ``value`` to Decimal and check it lies within the parameter bounds.

        Raises:
            ParameterRangeError: If the value is not numeric or out of bounds.
        """
        try:
            value = to_decimal(value)
        except (TypeError, ArithmeticError) as e:
            raise ParameterRangeError(
                f"Invalid {parameter.name} {value!r}: not a number"
            ) from e

        if not value.is_finite() or not parameter.contains(value):
            raise ParameterRangeError(
                f"Invalid {parameter.name} {value}. "
                f"Must be within {parameter.bounds}"
            )
        return value

    def _init_parameters(self, **values: Any) -> None:
        """Validate and assign every declared parameter at construction."""
        declared = {p.name for p in self.PARAMETERS}
        unknown = sorted(set(values) - declared)
        if unknown:
            raise InvalidParameterError(
                f"Unknown parameters for {self.__class__.__name__}: {', '.join(unknown)}"
            )

        for parameter in self.PARAMETERS:
            try:
                value = self.validate_parameter(values.get(parameter.name), parameter)
            except ParameterRangeError as e:
                raise InvalidParameterError(str(e)) from e
            setattr(self, parameter.name, value)

    def with_parameters(self: StrategyT, **values: Any) -> StrategyT:
        """Return an independent copy configured with the given parameter values."""
        configured = copy.copy(self)
        for name, value in values.items():
            parameter = self.get_parameter(name)
            setattr(configured, name, self.validate_parameter(value, parameter))
        return configured

    def validate_parameter_ranges(
        self,
        parameter_ranges: Mapping[str, Any],
    ) -> dict[str, ParameterRange]:
        """
        Check a sweep request against the declared parameters.

        Returns the ranges coerced to ParameterRange, in declared order.

        Raises:
            ParameterRangeError: On a missing, unknown or out-of-bounds range.
        """
        declared = [p.name for p in self.PARAMETERS]

        unknown = [name for name in parameter_ranges if name not in declared]
        if unknown:
            raise ParameterRangeError(
                f"Unknown parameters for {self.__class__.__name__}: {', '.join(unknown)}"
            )

        ranges: dict[str, ParameterRange] = {}
        for parameter in self.PARAMETERS:
            if parameter.name not in parameter_ranges:
                raise ParameterRangeError(f"Missing range for parameter {parameter.name}")

            try:
                requested = ParameterRange.coerce(parameter_ranges[parameter.name])
            except (TypeError, ValueError, KeyError, ArithmeticError) as e:
                raise ParameterRangeError(
                    f"Invalid range for parameter {parameter.name}: {e}"
                ) from e

            requested.validate(parameter.name)
            if not (
                parameter.contains(requested.minimum)
                and parameter.contains(requested.maximum)
            ):
                raise ParameterRangeError(
                    f"Range [{requested.minimum}, {requested.maximum}] for "
                    f"{parameter.name} exceeds its bounds {parameter.bounds}"
                )
            ranges[parameter.name] = requested

        return ranges

    # =========================================================================
    # Backtesting
    # =========================================================================

    def get_price_history(
        self,
        price_history: PriceHistory | list | None = None,
        start_date: Any | None = None,
        end_date: Any | None = None,
    ) -> PriceHistory:
        """Resolve the history to trade over, narrowed to the given dates."""
        if price_history is not None:
            if not isinstance(price_history, PriceHistory):
                price_history = PriceHistory(price_history)
        else:
            price_history = self.coin.get_price_history()

        if start_date is not None or end_date is not None:
            price_history = price_history.for_range(start_date, end_date)

        return price_history

    def backtest(
        self,
        coin_amount: Any,
        cash_amount: Any,
        exchange: Exchange,
        start_date: Any | None = None,
        end_date: Any | None = None,
        price_history: PriceHistory | list | None = None,
    ) -> BacktestResults:
        """
        Replay the strategy day by day and report the outcome.

        Args:
            coin_amount: Coins held before the first day
            cash_amount: Cash held before the first day
            exchange: Fee model applied to every trade
            start_date: First trading day (default: start of the history)
            end_date: Last trading day (default: end of the history)
            price_history: History to use instead of the coin's own

        Returns:
            BacktestResults with the trades and ending holdings
        """
        coin_amount = to_decimal(coin_amount)
        cash_amount = to_decimal(cash_amount)
        history = self.get_price_history(price_history, start_date, end_date)

        sequence = self.get_trades(
            price_history=history,
            coin_amount=coin_amount,
            cash_amount=cash_amount,
            exchange=exchange,
        )

        results = BacktestResults(
            coin=self.coin,
            starting_coin_amount=coin_amount,
            starting_cash_amount=cash_amount,
            price_history=history,
            ending_coin_amount=sequence.ending_coin_amount,
            ending_cash_amount=sequence.ending_cash_amount,
            trades=sequence.trades,
            exchange=exchange,
        )

        logger.debug(
            "Backtest completed",
            strategy=self.__class__.__name__,
            trades=len(results.trades),
            profit=str(results.profit),
        )
        return results

    @abstractmethod
    def get_trades(
        self,
        price_history: PriceHistory,
        coin_amount: Decimal,
        cash_amount: Decimal,
        exchange: Exchange,
    ) -> TradeSequence:
        """Simulate trading over ``price_history`` without mutating it or self."""

    # =========================================================================
    # Optimization
    # =========================================================================

    def optimize(
        self,
        parameter_ranges: Mapping[str, Any],
        coin_amount: Any,
        cash_amount: Any,
        exchange: Exchange,
        start_date: Any | None = None,
        end_date: Any | None = None,
        price_history: PriceHistory | list | None = None,
        max_workers: int | None = None,
    ) -> OptimizationResults:
        """
        Backtest every combination of the requested parameter ranges.

        Args:
            parameter_ranges: name -> ParameterRange (or {minimum, maximum, step})
                for every declared parameter
            max_workers: Process count for parallel backtests
                (default: settings.max_workers, None = sequential)

        Returns:
            OptimizationResults ranked by profit

        Raises:
            ParameterRangeError: If the ranges do not match the declared parameters.
        """
        ranges = self.validate_parameter_ranges(parameter_ranges)
        history = self.get_price_history(price_history, start_date, end_date)

        optimizer = StrategyOptimizer(
            max_workers=max_workers if max_workers is not None else settings.max_workers,
        )
        return optimizer.run(
            strategy=self,
            parameter_ranges=ranges,
            price_history=history,
            coin_amount=to_decimal(coin_amount),
            cash_amount=to_decimal(cash_amount),
            exchange=exchange,
        )
