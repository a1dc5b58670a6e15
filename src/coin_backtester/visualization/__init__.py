"""Plotly charts for optimization results."""

from coin_backtester.visualization.charts import OptimizationChartGenerator

__all__ = ["OptimizationChartGenerator"]
