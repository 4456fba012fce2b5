"""Plain-text renderings for the terminal."""

from __future__ import annotations

from stockfolio.config.defaults import CHART_DEFAULTS
from stockfolio.engine.rebalance import RebalancePlan
from stockfolio.engine.timeline import PerformanceSeries
from stockfolio.engine.valuation import Distribution
from stockfolio.portfolio.aggregate import PortfolioAggregate

BAR_CHAR = "*"


def render_performance(
    series: PerformanceSeries,
    bar_width: int = CHART_DEFAULTS["bar_width"],
) -> str:
    """Star chart, one row per bucket, with the scale underneath.

    Example::

        Performance of portfolio growth from 2020-01-02 to 2024-06-03

        Jan 2020: *
        Mar 2020: ****
        ...

        Scale: * = $250 (base $10,000)
    """
    scale = series.scale(bar_width)
    width = max((len(p.label) for p in series.points), default=0)

    lines = [
        f"Performance of portfolio {series.portfolio} from {series.start} to {series.end}",
        "",
    ]
    for point in series.points:
        bars = BAR_CHAR * scale.bar_length(point.value)
        lines.append(f"{point.label:<{width}}: {bars}")
    lines.append("")
    lines.append(f"Scale: {BAR_CHAR} = ${scale.unit:,} (base ${scale.base:,})")
    return "\n".join(lines)


def render_holdings(portfolio: PortfolioAggregate) -> str:
    if portfolio.is_empty:
        return f"Portfolio {portfolio.name} has no holdings."
    lines = [f"Portfolio {portfolio.name}", ""]
    lines.append(f"{'Ticker':<8} {'Shares':>12}  Transactions")
    for ledger in portfolio:
        entries = ", ".join(f"{d}:{q:+g}" for d, q in ledger.to_records())
        lines.append(f"{ledger.ticker:<8} {ledger.total_shares:>12,.4f}  {entries}")
    return "\n".join(lines)


def render_distribution(dist: Distribution) -> str:
    weights = dist.weights()
    lines = [f"Distribution of {dist.portfolio} on {dist.as_of}", ""]
    for ticker in sorted(dist.values):
        lines.append(f"{ticker:<8} ${dist.values[ticker]:>14,.2f}  {weights[ticker]:6.2f}%")
    lines.append(f"{'Total':<8} ${dist.total:>14,.2f}")
    return "\n".join(lines)


def render_rebalance(plan: RebalancePlan) -> str:
    lines = [
        f"Rebalance {plan.portfolio} on {plan.as_of} (total ${plan.total_value:,.2f})",
        "",
        f"{'Ticker':<8} {'Action':<6} {'Shares':>12} {'Price':>10} {'Current':>14} {'Target':>14}",
    ]
    for t in plan.trades:
        lines.append(
            f"{t.ticker:<8} {t.action.value:<6} {t.shares:>12,.4f} {t.price:>10,.2f} "
            f"{t.current_value:>14,.2f} {t.target_value:>14,.2f} ({t.target_pct}%)"
        )
    return "\n".join(lines)
