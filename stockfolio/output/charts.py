"""Plotly chart builders for portfolio performance and composition.

Each builder returns a ``go.Figure``; :func:`write_chart_html` saves one as a
standalone HTML file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import plotly.graph_objects as go

from stockfolio.engine.rebalance import RebalancePlan, TradeAction
from stockfolio.engine.timeline import PerformanceSeries
from stockfolio.engine.valuation import Distribution

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Color palette (dark theme)
# ---------------------------------------------------------------------------

COLORS = {
    "bg": "#0f1117",
    "card": "#1a1d26",
    "text": "#e0e0e0",
    "muted": "#888888",
    "green": "#00d97e",
    "red": "#e63946",
    "yellow": "#ffd166",
    "blue": "#4ea8de",
    "grid": "#2a2d36",
}

HOLDING_COLORS = [
    "#4ea8de", "#00d97e", "#ffd166", "#b388ff",
    "#f77f00", "#2ec4b6", "#ff6b9d", "#a8d8ea",
]

_ACTION_COLORS = {
    TradeAction.BUY: COLORS["green"],
    TradeAction.SELL: COLORS["red"],
    TradeAction.HOLD: COLORS["muted"],
}


def _dark_layout(**overrides: Any) -> dict[str, Any]:
    """Standard dark-theme Plotly layout."""
    layout = {
        "paper_bgcolor": COLORS["bg"],
        "plot_bgcolor": COLORS["card"],
        "font": {"color": COLORS["text"], "family": "Inter, sans-serif"},
        "margin": {"l": 50, "r": 30, "t": 50, "b": 50},
        "xaxis": {"gridcolor": COLORS["grid"], "zerolinecolor": COLORS["grid"]},
        "yaxis": {"gridcolor": COLORS["grid"], "zerolinecolor": COLORS["grid"]},
    }
    layout.update(overrides)
    return layout


# ---------------------------------------------------------------------------
# Performance over time
# ---------------------------------------------------------------------------

def build_performance_chart(series: PerformanceSeries, title: str | None = None) -> go.Figure:
    """Bar per bucket, labelled as in the text chart."""
    fig = go.Figure(go.Bar(
        x=[p.label for p in series.points],
        y=series.values,
        customdata=[p.sampled_on.isoformat() for p in series.points],
        marker_color=COLORS["blue"],
        hovertemplate="<b>%{x}</b><br>Sampled %{customdata}<br>$%{y:,.2f}<extra></extra>",
    ))
    fig.update_layout(**_dark_layout(
        title=title or f"Performance of {series.portfolio} from {series.start} to {series.end}",
        yaxis_title="Portfolio value ($)",
        xaxis={"type": "category", "gridcolor": COLORS["grid"]},
        showlegend=False,
    ))
    return fig


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------

def build_distribution_chart(dist: Distribution, title: str | None = None) -> go.Figure:
    """Donut of holding values on the distribution date."""
    tickers = sorted(dist.values)
    fig = go.Figure(go.Pie(
        labels=tickers,
        values=[dist.values[t] for t in tickers],
        hole=0.45,
        marker={"colors": [HOLDING_COLORS[i % len(HOLDING_COLORS)] for i in range(len(tickers))]},
        hovertemplate="<b>%{label}</b><br>$%{value:,.2f} (%{percent})<extra></extra>",
        sort=False,
    ))
    fig.update_layout(**_dark_layout(
        title=title or f"{dist.portfolio} on {dist.as_of}: ${dist.total:,.2f}",
    ))
    return fig


def build_rebalance_chart(plan: RebalancePlan) -> go.Figure:
    """Current vs target value per holding, colored by trade direction."""
    tickers = [t.ticker for t in plan.trades]
    fig = go.Figure()
    fig.add_trace(go.Bar(
        name="Current",
        x=tickers,
        y=[t.current_value for t in plan.trades],
        marker_color=COLORS["muted"],
    ))
    fig.add_trace(go.Bar(
        name="Target",
        x=tickers,
        y=[t.target_value for t in plan.trades],
        marker_color=[_ACTION_COLORS[t.action] for t in plan.trades],
        text=[f"{t.action.value} {t.shares:.2f}" for t in plan.trades],
        textposition="auto",
    ))
    fig.update_layout(**_dark_layout(
        title=f"Rebalance {plan.portfolio} on {plan.as_of}",
        barmode="group",
        yaxis_title="Value ($)",
    ))
    return fig


def write_chart_html(fig: go.Figure, path: str | Path) -> Path:
    """Save *fig* as a standalone HTML file and return its path."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(str(path), include_plotlyjs="cdn")
    logger.info("Chart written to %s", path)
    return path
