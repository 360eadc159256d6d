"""Plotly figures for the dashboard views."""

from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from tradedash.analytics.risk import ReferenceMetricTable
from tradedash.domain.models import CASH_KEY, Valuation

ALLOCATION_COLORS = [
    "rgba(255, 99, 132, 0.8)",
    "rgba(54, 162, 235, 0.8)",
    "rgba(255, 206, 86, 0.8)",
    "rgba(75, 192, 192, 0.8)",
    "rgba(153, 102, 255, 0.8)",
    "rgba(255, 159, 64, 0.8)",
]

RISK_COLORS = {
    "volatility": "rgba(255, 99, 132, 0.7)",
    "drawdown": "rgba(255, 159, 64, 0.7)",
    "var": "rgba(153, 102, 255, 0.7)",
}


def price_chart(frame: pd.DataFrame, symbol: str, timeframe: str) -> go.Figure:
    """Line chart of a price history frame indexed by timestamp."""
    data = frame.reset_index().rename(columns={"index": "timestamp"})
    figure = px.line(
        data,
        x="timestamp",
        y="price",
        title=f"{symbol} Price Chart ({timeframe})",
        labels={"price": f"{symbol} Price", "timestamp": ""},
    )
    figure.update_traces(line_color="rgb(75, 192, 192)", fill="tozeroy")
    figure.update_layout(showlegend=False, hovermode="x unified")
    figure.update_yaxes(tickprefix="$", tickformat=",.2f")
    return figure


def allocation_chart(valuation: Valuation) -> go.Figure:
    """Donut of cash and position values."""
    labels = [CASH_KEY, *valuation.position_values]
    values = [
        valuation.total_value - valuation.invested_value,
        *valuation.position_values.values(),
    ]
    colors = [ALLOCATION_COLORS[index % len(ALLOCATION_COLORS)] for index in range(len(labels))]
    figure = go.Figure(
        go.Pie(
            labels=labels,
            values=values,
            hole=0.5,
            marker={"colors": colors},
            texttemplate="%{label}: $%{value:,.2f} (%{percent:.1%})",
        )
    )
    figure.update_layout(title="Portfolio Allocation", legend={"x": 1.0, "y": 0.5})
    return figure


def risk_chart(table: ReferenceMetricTable) -> go.Figure:
    """Bar chart of a static reference metric table."""
    data = pd.DataFrame({"symbol": list(table.values), "value": list(table.values.values())})
    figure = px.bar(data, x="symbol", y="value", title=table.title)
    figure.update_traces(marker_color=RISK_COLORS.get(table.kind.value, "rgba(0, 0, 0, 0.7)"))
    figure.update_yaxes(tickformat=".0%", rangemode="tozero")
    return figure


@dataclass
class ViewCharts:
    """Figures owned by one view instance; dropped on view switch."""

    figures: dict[str, go.Figure] = field(default_factory=dict)

    def set(self, slot: str, figure: go.Figure) -> go.Figure:
        self.figures[slot] = figure
        return figure

    def get(self, slot: str) -> go.Figure | None:
        return self.figures.get(slot)

    def reset(self) -> None:
        self.figures.clear()
