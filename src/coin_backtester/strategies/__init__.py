"""Concrete trading strategies."""

from coin_backtester.strategies.buy_and_hodl import BuyAndHodlStrategy
from coin_backtester.strategies.cost_basis_grid import CostBasisGridStrategy
from coin_backtester.strategies.grid import GridStrategy
from coin_backtester.strategies.hodl import HodlStrategy
from coin_backtester.strategies.naive_grid import NaiveGridStrategy
from coin_backtester.strategies.optimistic_grid import OptimisticGridStrategy

__all__ = [
    "BuyAndHodlStrategy",
    "CostBasisGridStrategy",
    "GridStrategy",
    "HodlStrategy",
    "NaiveGridStrategy",
    "OptimisticGridStrategy",
]
