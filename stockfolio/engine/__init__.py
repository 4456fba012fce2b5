"""Valuation engine: indicators, point-in-time values, series, rebalancing."""

from stockfolio.engine.rebalance import (
    RebalancePlan,
    RebalanceSolver,
    RebalanceTrade,
    TradeAction,
    validate_allocation,
)
from stockfolio.engine.timeline import (
    Granularity,
    PerformanceSeries,
    backfilled_value,
    performance_series,
)
from stockfolio.engine.valuation import (
    Distribution,
    crossover_dates,
    distribution,
    holding_value,
    holding_value_or_zero,
    instrument_performance,
    moving_average,
    portfolio_value,
)

__all__ = [
    "Distribution",
    "Granularity",
    "PerformanceSeries",
    "RebalancePlan",
    "RebalanceSolver",
    "RebalanceTrade",
    "TradeAction",
    "backfilled_value",
    "crossover_dates",
    "distribution",
    "holding_value",
    "holding_value_or_zero",
    "instrument_performance",
    "moving_average",
    "performance_series",
    "portfolio_value",
    "validate_allocation",
]
