"""
Parameter sweep results and the optimizer that produces them.

StrategyOptimizer backtests one independently configured strategy copy per
parameter combination, sequentially or on a ProcessPoolExecutor, and folds
the records into OptimizationResults in generation order.
"""

from __future__ import annotations

import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any

import numpy as np
import pandas as pd

from coin_backtester.core.exchange import Exchange
from coin_backtester.core.price_history import PriceHistory
from coin_backtester.engine.models import Parameter, ParameterRange
from coin_backtester.engine.results import BacktestResults
from coin_backtester.engine.sweep import generate_combinations
from coin_backtester.exceptions import UnsupportedProjectionError
from coin_backtester.logging import get_logger, log_context

if TYPE_CHECKING:
    from coin_backtester.engine.strategy import Strategy

logger = get_logger(__name__)


# =============================================================================
# Data Models
# =============================================================================


class ProjectionType(str, Enum):
    """Chart kinds a two-parameter sweep can be projected onto."""

    CONTOUR = "contour"
    SURFACE = "surface"
    SCATTER = "scatter"


@dataclass(frozen=True)
class GridProjection:
    """Unique x values, unique y values and a profit grid with one row per x."""

    x: list[float]
    y: list[float]
    z: list[list[float]]


@dataclass(frozen=True)
class ScatterProjection:
    """One (x, y, profit) point per backtested combination."""

    x: list[float]
    y: list[float]
    z: list[float]


@dataclass
class ParameterBacktestResults:
    """Backtest of a single parameter combination."""

    parameter_values: dict[str, Decimal]
    backtest_results: BacktestResults

    @property
    def profit(self) -> Decimal:
        return self.backtest_results.profit

    def to_dict(self) -> dict[str, Any]:
        return {
            **{name: float(value) for name, value in self.parameter_values.items()},
            "profit": round(float(self.profit), 2),
            "percentage_yield": round(float(self.backtest_results.percentage_yield), 4),
            "total_trades": len(self.backtest_results.trades),
        }


@dataclass
class OptimizationResults:
    """Results of a full sweep. ``all`` is ranked by profit, best first."""

    unsorted: list[ParameterBacktestResults]
    parameters: tuple[Parameter, ...]
    parameter_ranges: dict[str, ParameterRange]
    all: list[ParameterBacktestResults] = field(init=False)

    def __post_init__(self) -> None:
        # sorted() is stable, so ties keep generation order
        self.all = sorted(self.unsorted, key=lambda r: r.profit, reverse=True)

    @property
    def best(self) -> ParameterBacktestResults:
        return self.all[0]

    @property
    def worst(self) -> ParameterBacktestResults:
        return self.all[-1]

    def top_n(self, n: int = 5) -> list[ParameterBacktestResults]:
        """Get the N most profitable combinations."""
        return self.all[:n]

    def param_impact(self) -> dict[str, float]:
        """Absolute correlation between each parameter and profit."""
        if len(self.unsorted) < 2:
            return {}

        profits = np.array([float(r.profit) for r in self.unsorted])
        impact: dict[str, float] = {}

        for parameter in self.parameters:
            values = np.array(
                [float(r.parameter_values[parameter.name]) for r in self.unsorted]
            )
            if values.std() > 0 and profits.std() > 0:
                corr = np.corrcoef(values, profits)[0, 1]
                impact[parameter.name] = round(abs(float(corr)), 4)
            else:
                impact[parameter.name] = 0.0

        return impact

    def to_dataframe(self) -> pd.DataFrame:
        """One row per combination in generation order."""
        return pd.DataFrame([r.to_dict() for r in self.unsorted])

    # =========================================================================
    # Projections
    # =========================================================================

    @property
    def swept_parameters(self) -> list[Parameter]:
        """Parameters whose requested range holds more than one value."""
        return [
            p for p in self.parameters
            if p.name in self.parameter_ranges
            and len(self.parameter_ranges[p.name].values()) > 1
        ]

    def _projection_parameters(self) -> tuple[Parameter, Parameter]:
        swept = self.swept_parameters
        if len(swept) != 2:
            raise UnsupportedProjectionError(
                f"Projections need exactly 2 swept parameters, got {len(swept)}"
            )
        return swept[0], swept[1]

    def _column(self, name: str) -> list[float]:
        return [float(r.parameter_values[name]) for r in self.unsorted]

    def get_grid_projection(self) -> GridProjection:
        """Profit grid for contour and surface charts."""
        first, second = self._projection_parameters()
        df = pd.DataFrame(
            {
                "x": self._column(first.name),
                "y": self._column(second.name),
                "profit": [float(r.profit) for r in self.unsorted],
            }
        )
        x_values = list(dict.fromkeys(df["x"]))
        y_values = list(dict.fromkeys(df["y"]))
        grid = df.pivot(index="x", columns="y", values="profit").reindex(
            index=x_values, columns=y_values,
        )
        return GridProjection(x=x_values, y=y_values, z=grid.to_numpy().tolist())

    def get_scatter_projection(self) -> ScatterProjection:
        """Flat point list for 3D scatter charts."""
        first, second = self._projection_parameters()
        return ScatterProjection(
            x=self._column(first.name),
            y=self._column(second.name),
            z=[float(r.profit) for r in self.unsorted],
        )

    def get_plot_data(
        self, kind: ProjectionType | str,
    ) -> GridProjection | ScatterProjection:
        """Projection for a chart kind ("contour", "surface" or "scatter")."""
        try:
            projection_type = ProjectionType(kind)
        except ValueError as e:
            raise UnsupportedProjectionError(f"Unknown projection kind {kind!r}") from e

        if projection_type == ProjectionType.SCATTER:
            return self.get_scatter_projection()
        return self.get_grid_projection()


# =============================================================================
# Standalone trial runner (picklable for ProcessPoolExecutor)
# =============================================================================


def _run_single_trial(
    strategy: Strategy,
    parameter_values: dict[str, Decimal],
    price_history: PriceHistory,
    coin_amount: Decimal,
    cash_amount: Decimal,
    exchange: Exchange,
) -> BacktestResults:
    """Backtest one parameter combination on its own strategy copy."""
    return strategy.with_parameters(**parameter_values).backtest(
        coin_amount=coin_amount,
        cash_amount=cash_amount,
        exchange=exchange,
        price_history=price_history,
    )


# =============================================================================
# Optimizer
# =============================================================================


class StrategyOptimizer:
    """Exhaustive grid search over strategy parameters."""

    def __init__(self, max_workers: int | None = None) -> None:
        self.max_workers = max_workers

    def run(
        self,
        strategy: Strategy,
        parameter_ranges: dict[str, ParameterRange],
        price_history: PriceHistory,
        coin_amount: Decimal,
        cash_amount: Decimal,
        exchange: Exchange,
    ) -> OptimizationResults:
        """Backtest every combination. The first failing backtest aborts the sweep."""
        start_time = time.perf_counter()
        combinations = list(generate_combinations(parameter_ranges))
        trial_args = (price_history, coin_amount, cash_amount, exchange)

        with log_context(strategy=strategy.__class__.__name__):
            logger.info(
                "Starting optimization",
                combinations=len(combinations),
                parameters=list(parameter_ranges),
                max_workers=self.max_workers,
            )

            if self.max_workers and self.max_workers > 1 and len(combinations) > 1:
                backtests = self._run_trials_parallel(strategy, combinations, trial_args)
            else:
                backtests = self._run_trials_sequential(strategy, combinations, trial_args)

            results = OptimizationResults(
                unsorted=[
                    ParameterBacktestResults(parameter_values=combo, backtest_results=bt)
                    for combo, bt in zip(combinations, backtests)
                ],
                parameters=strategy.parameters,
                parameter_ranges=dict(parameter_ranges),
            )

            logger.info(
                "Optimization complete",
                total_trials=len(results.all),
                best_profit=str(results.best.profit),
                best_parameters={k: str(v) for k, v in results.best.parameter_values.items()},
                duration_s=round(time.perf_counter() - start_time, 2),
            )

        return results

    def _run_trials_sequential(
        self,
        strategy: Strategy,
        combinations: list[dict[str, Decimal]],
        trial_args: tuple,
    ) -> list[BacktestResults]:
        """Run trials sequentially."""
        return [_run_single_trial(strategy, combo, *trial_args) for combo in combinations]

    def _run_trials_parallel(
        self,
        strategy: Strategy,
        combinations: list[dict[str, Decimal]],
        trial_args: tuple,
    ) -> list[BacktestResults]:
        """Run trials on a ProcessPoolExecutor, reassembled in generation order."""
        logger.info(
            "Running parallel trials",
            total=len(combinations),
            workers=self.max_workers,
        )

        price_history, _, _, exchange = trial_args
        results_map: dict[int, BacktestResults] = {}

        with ProcessPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_idx = {
                executor.submit(_run_single_trial, strategy, combo, *trial_args): idx
                for idx, combo in enumerate(combinations)
            }

            for future in as_completed(future_to_idx):
                idx = future_to_idx[future]
                try:
                    result = future.result()
                except Exception as e:
                    logger.error("Trial failed", trial_idx=idx, error=str(e))
                    for pending in future_to_idx:
                        pending.cancel()
                    raise

                # Workers return pickled copies; share the parent's objects instead
                result.price_history = price_history
                result.coin = strategy.coin
                result.exchange = exchange
                results_map[idx] = result

        return [results_map[idx] for idx in range(len(combinations))]
