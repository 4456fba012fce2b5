"""Output generation: terminal text and Plotly charts."""

from stockfolio.output.charts import (
    build_distribution_chart,
    build_performance_chart,
    build_rebalance_chart,
    write_chart_html,
)
from stockfolio.output.text import (
    render_distribution,
    render_holdings,
    render_performance,
    render_rebalance,
)

__all__ = [
    "build_performance_chart",
    "build_distribution_chart",
    "build_rebalance_chart",
    "write_chart_html",
    "render_performance",
    "render_distribution",
    "render_holdings",
    "render_rebalance",
]
