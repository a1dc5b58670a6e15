"""Backtesting engine — strategy base, results, sweeps and optimization."""

from coin_backtester.engine.models import (
    DOLLARS,
    PERCENT,
    Parameter,
    ParameterRange,
    ParameterSymbol,
    SymbolPosition,
    TradeSequence,
)
from coin_backtester.engine.sweep import generate_combinations
from coin_backtester.engine.results import BacktestResults
from coin_backtester.engine.optimization import (
    GridProjection,
    OptimizationResults,
    ParameterBacktestResults,
    ProjectionType,
    ScatterProjection,
    StrategyOptimizer,
)
from coin_backtester.engine.strategy import Strategy

__all__ = [
    "DOLLARS",
    "PERCENT",
    "Parameter",
    "ParameterRange",
    "ParameterSymbol",
    "SymbolPosition",
    "TradeSequence",
    "generate_combinations",
    "BacktestResults",
    "GridProjection",
    "OptimizationResults",
    "ParameterBacktestResults",
    "ProjectionType",
    "ScatterProjection",
    "StrategyOptimizer",
    "Strategy",
]
