"""Time-bucketed portfolio performance series for charting.

The bucket size is chosen from the span of the requested range:

  ≥ 5 years        → yearly
  > 30 months      → every two months
  ≥ 5 months       → monthly
  < 30 days        → daily
  otherwise        → every five days

(a month is 30 days and a year 365 days for this purpose).  Each bucket
boundary is valued with :func:`backfilled_value`, which steps back one day
at a time while the portfolio is worth exactly 0 so that weekends and
holidays show the most recent prior value instead of an empty bar.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum

import pandas as pd

from stockfolio.config.defaults import CHART_DEFAULTS, DAYS_PER_MONTH, DAYS_PER_YEAR
from stockfolio.engine.valuation import portfolio_value
from stockfolio.market.catalog import PriceCatalog
from stockfolio.portfolio.aggregate import PortfolioAggregate

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


class Granularity(Enum):
    YEARLY = "yearly"
    BIMONTHLY = "bimonthly"
    MONTHLY = "monthly"
    FIVE_DAY = "five_day"
    DAILY = "daily"


_STEPS = {
    Granularity.YEARLY: pd.DateOffset(years=1),
    Granularity.BIMONTHLY: pd.DateOffset(months=2),
    Granularity.MONTHLY: pd.DateOffset(months=1),
    Granularity.FIVE_DAY: pd.DateOffset(days=5),
    Granularity.DAILY: pd.DateOffset(days=1),
}

_LABEL_FORMATS = {
    Granularity.YEARLY: "%Y",
    Granularity.BIMONTHLY: "%b %Y",
    Granularity.MONTHLY: "%b %Y",
    Granularity.FIVE_DAY: "%d %b %Y",
    Granularity.DAILY: "%d %b %Y",
}


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SeriesPoint:
    label: str
    sampled_on: date
    value: float


@dataclass(frozen=True)
class ChartScale:
    """Linear bar scale: one step per *unit* above *base*."""

    base: int
    top: int
    unit: int

    def bar_length(self, value: float) -> int:
        """Number of marks for *value*; any invested value gets at least one."""
        if value <= 0:
            return 0
        return max(1, int(value - self.base) // self.unit)


@dataclass(frozen=True)
class PerformanceSeries:
    portfolio: str
    start: date
    end: date
    granularity: Granularity
    points: list[SeriesPoint] = field(default_factory=list)

    @property
    def values(self) -> list[float]:
        return [p.value for p in self.points]

    def scale(self, bar_width: int = CHART_DEFAULTS["bar_width"]) -> ChartScale:
        """Scale from the smallest nonzero to the largest sampled value."""
        nonzero = [int(v) for v in self.values if v != 0]
        base = min(nonzero) if nonzero else 0
        top = max((int(v) for v in self.values), default=0)
        unit = (top - base) // bar_width
        return ChartScale(base=base, top=top, unit=unit if unit > 0 else 1)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "label": [p.label for p in self.points],
                "date": [p.sampled_on for p in self.points],
                "value": self.values,
            }
        )


# ---------------------------------------------------------------------------
# Bucketing
# ---------------------------------------------------------------------------

def choose_granularity(
    start: date,
    end: date,
    max_years: int = CHART_DEFAULTS["max_years"],
) -> tuple[Granularity, int]:
    """Pick the bucket size for [start, end] and the number of buckets."""
    days = (end - start).days
    years = days / DAYS_PER_YEAR
    months = days / DAYS_PER_MONTH
    if days <= 0 or math.floor(years) > max_years:
        raise ValueError(
            f"Range {start}..{end} must span at least one day and at most {max_years} years"
        )

    if years >= 5:
        return Granularity.YEARLY, math.floor(years)
    if months > 30:
        return Granularity.BIMONTHLY, math.floor(months / 2)
    if months >= 5:
        return Granularity.MONTHLY, math.floor(months)
    if days < 30:
        return Granularity.DAILY, days
    return Granularity.FIVE_DAY, math.floor(days / 5)


def bucket_dates(start: date, end: date) -> tuple[Granularity, list[date]]:
    """Bucket boundaries: stepping from *start*, with the last one on *end*.

    The final bucket is sampled on *end* itself, the date it is labelled
    with, rather than on the next step boundary past the last full step.
    """
    granularity, count = choose_granularity(start, end)
    step = _STEPS[granularity]

    boundaries: list[date] = []
    current = pd.Timestamp(start)
    for _ in range(count - 1):
        boundaries.append(current.date())
        current = current + step
    boundaries.append(end)
    return granularity, boundaries


def backfilled_value(
    portfolio: PortfolioAggregate,
    catalog: PriceCatalog,
    on_date: date,
) -> float:
    """Portfolio value on *on_date*, or on the nearest earlier nonzero day.

    Walks back one day at a time and stops at the purchase date, where the
    portfolio is worth 0 by definition.
    """
    floor = portfolio.purchase_date()
    day = on_date
    while day > floor:
        value = portfolio_value(portfolio, catalog, day)
        if value != 0:
            return value
        day -= _ONE_DAY
    return 0.0


def performance_series(
    portfolio: PortfolioAggregate,
    catalog: PriceCatalog,
    start: date,
    end: date,
) -> PerformanceSeries:
    """Sample the portfolio's value at each bucket boundary in [start, end]."""
    granularity, boundaries = bucket_dates(start, end)
    fmt = _LABEL_FORMATS[granularity]
    points = [
        SeriesPoint(
            label=day.strftime(fmt),
            sampled_on=day,
            value=backfilled_value(portfolio, catalog, day),
        )
        for day in boundaries
    ]
    logger.debug(
        "%s: %d %s bucket(s) from %s to %s",
        portfolio.name, len(points), granularity.value, start, end,
    )
    return PerformanceSeries(
        portfolio=portfolio.name,
        start=start,
        end=end,
        granularity=granularity,
        points=points,
    )
