"""
OptimizationChartGenerator — Plotly charts for two-parameter sweeps.

Generates:
- Contour and surface plots of profit over the parameter grid
- 3D scatter of every backtested combination
- Standalone HTML files for any of the above
"""

from pathlib import Path

import plotly.graph_objects as go

from coin_backtester.engine.models import Parameter, SymbolPosition
from coin_backtester.engine.optimization import (
    OptimizationResults,
    ProjectionType,
    ScatterProjection,
)
from coin_backtester.logging import get_logger

logger = get_logger(__name__)


def axis_title(parameter: Parameter) -> str:
    """Parameter name with its unit, e.g. "buy_threshold (%)"."""
    return f"{parameter.name} ({parameter.symbol.symbol})"


def hover_template(first: Parameter, second: Parameter) -> str:
    """Hover text showing both parameter values with their units and the profit."""
    lines = []
    for parameter, variable in ((first, "x"), (second, "y")):
        value = f"%{{{variable}:,}}"
        if parameter.symbol.position == SymbolPosition.PREFIX:
            value = f"{parameter.symbol.symbol}{value}"
        else:
            value = f"{value}{parameter.symbol.symbol}"
        lines.append(f"{parameter.name}: {value}")
    lines.append("profit: $%{z:,.2f}")
    return "<br>".join(lines) + "<extra></extra>"


class OptimizationChartGenerator:
    """Builds interactive plotly figures from optimization results."""

    def figure(
        self,
        results: OptimizationResults,
        kind: ProjectionType | str = ProjectionType.CONTOUR,
    ) -> go.Figure:
        """
        Build a figure for the given projection kind.

        Raises:
            UnsupportedProjectionError: Unknown kind or not exactly two swept parameters.
        """
        projection = results.get_plot_data(kind)
        first, second = results.swept_parameters
        template = hover_template(first, second)

        if isinstance(projection, ScatterProjection):
            trace = go.Scatter3d(
                x=projection.x,
                y=projection.y,
                z=projection.z,
                mode="markers",
                marker=dict(color=projection.z, colorscale="Viridis", size=4),
                hovertemplate=template,
            )
        elif ProjectionType(kind) == ProjectionType.SURFACE:
            trace = go.Surface(
                x=projection.y,
                y=projection.x,
                z=projection.z,
                colorscale="Viridis",
                hovertemplate=hover_template(second, first),
            )
        else:
            trace = go.Contour(
                x=projection.y,
                y=projection.x,
                z=projection.z,
                colorscale="Viridis",
                colorbar=dict(title="Profit ($)"),
                hovertemplate=hover_template(second, first),
            )

        fig = go.Figure(trace)
        fig.update_layout(
            title=f"Profit by {first.name} and {second.name}",
            height=600,
            template="plotly_white",
        )

        if isinstance(trace, go.Contour):
            # Rows of z follow the first parameter, so it runs along the y axis
            fig.update_layout(
                xaxis_title=axis_title(second),
                yaxis_title=axis_title(first),
            )
        elif isinstance(trace, go.Surface):
            fig.update_layout(
                scene=dict(
                    xaxis_title=axis_title(second),
                    yaxis_title=axis_title(first),
                    zaxis_title="Profit ($)",
                )
            )
        else:
            fig.update_layout(
                scene=dict(
                    xaxis_title=axis_title(first),
                    yaxis_title=axis_title(second),
                    zaxis_title="Profit ($)",
                )
            )

        return fig

    def to_html(
        self,
        results: OptimizationResults,
        kind: ProjectionType | str = ProjectionType.CONTOUR,
    ) -> str:
        """Chart as an embeddable HTML fragment."""
        return self.figure(results, kind).to_html(full_html=False, include_plotlyjs="cdn")

    def write_html(
        self,
        results: OptimizationResults,
        path: Path | str = "plot.html",
        kind: ProjectionType | str = ProjectionType.CONTOUR,
    ) -> Path:
        """Write the chart as a standalone HTML page."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.figure(results, kind).write_html(str(path), include_plotlyjs="cdn")

        logger.info("Chart written", path=str(path), kind=ProjectionType(kind).value)
        return path
