"""
Coin Backtester — Strategy evaluation engine for daily coin price histories.

Provides:
- Immutable price histories with exact-date range slicing
- Fee-aware exchange model with Decimal arithmetic
- Hodl, buy-and-hodl and grid trading strategies (naive, optimistic, cost basis)
- Backtest results with hodl / buy-and-hodl comparisons
- Cartesian parameter sweeps ranked by profit, with chart-ready projections
- CSV price cache and ccxt-backed daily price source
"""

__version__ = "1.0.0"
