"""Point-in-time valuation over ledgers and a price catalog -- pure math, zero I/O.

Functions:
  moving_average          -- mean (high+low)/2 over the N calendar days before a date
  crossover_dates         -- dates whose close exceeds the trailing moving average
  instrument_performance  -- close(end) - open(start) for one ticker
  holding_value           -- close * position for one holding, strict
  holding_value_or_zero   -- same, but a missing close contributes 0
  portfolio_value         -- lenient whole-portfolio value at a date
  distribution            -- strict per-holding value breakdown at a date
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from stockfolio.errors import MissingPriceData
from stockfolio.market.catalog import PriceCatalog
from stockfolio.portfolio.aggregate import PortfolioAggregate
from stockfolio.portfolio.ledger import ShareLedger

logger = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Distribution:
    """Per-holding value breakdown of a portfolio on one date."""

    portfolio: str
    as_of: date
    values: dict[str, float] = field(default_factory=dict)
    """ticker → close × shares held."""
    total: float = 0.0

    def weights(self) -> dict[str, float]:
        """ticker → percentage of total value (0-100)."""
        if self.total == 0:
            return {t: 0.0 for t in self.values}
        return {t: v / self.total * 100 for t, v in self.values.items()}


# ---------------------------------------------------------------------------
# Single-instrument indicators
# ---------------------------------------------------------------------------

def moving_average(
    catalog: PriceCatalog,
    ticker: str,
    anchor: date,
    window: int,
) -> float:
    """Average of (high+low)/2 over the *window* calendar days before *anchor*.

    Days without a record are skipped rather than counted as zero; if none
    of the days has data the average is 0.
    """
    if window < 0:
        raise ValueError(f"window must be non-negative, got {window}")

    total = 0.0
    count = 0
    day = anchor
    for _ in range(window):
        day -= _ONE_DAY
        rec = catalog.get(ticker, day)
        if rec is None or rec.midpoint is None:
            continue
        total += rec.midpoint
        count += 1

    if count == 0:
        return 0.0
    return total / count


def crossover_dates(
    catalog: PriceCatalog,
    ticker: str,
    start: date,
    end: date,
    window: int,
) -> list[date]:
    """Dates in [start, end] whose close is above the trailing *window*-day average."""
    if start > end:
        raise ValueError(f"start {start} is after end {end}")

    crossovers: list[date] = []
    day = start
    while day <= end:
        rec = catalog.get(ticker, day)
        if rec is not None:
            if rec.close is None:
                raise MissingPriceData(ticker, day, "record has no closing price")
            average = moving_average(catalog, ticker, day, window)
            if rec.close > average:
                crossovers.append(day)
        day += _ONE_DAY

    logger.debug(
        "%s: %d crossover(s) between %s and %s (window=%d)",
        ticker, len(crossovers), start, end, window,
    )
    return crossovers


def instrument_performance(
    catalog: PriceCatalog,
    ticker: str,
    start: date,
    end: date,
) -> float:
    """Gain (positive) or loss (negative) from open on *start* to close on *end*."""
    opening = catalog.open(ticker, start)
    if opening is None:
        raise MissingPriceData(ticker, start, "no opening price")
    closing = catalog.close(ticker, end)
    if closing is None:
        raise MissingPriceData(ticker, end, "no closing price")
    return closing - opening


# ---------------------------------------------------------------------------
# Holding and portfolio values
# ---------------------------------------------------------------------------

def holding_value(ledger: ShareLedger, catalog: PriceCatalog, on_date: date) -> float:
    """close(on_date) × position(on_date); raises if the close is missing."""
    close = catalog.close(ledger.ticker, on_date)
    if close is None:
        raise MissingPriceData(ledger.ticker, on_date, "no closing price")
    return close * ledger.shares_as_of(on_date)


def holding_value_or_zero(ledger: ShareLedger, catalog: PriceCatalog, on_date: date) -> float:
    """Like :func:`holding_value`, but a missing close contributes 0."""
    close = catalog.close(ledger.ticker, on_date)
    if close is None:
        logger.debug("%s: no close on %s, valued at 0", ledger.ticker, on_date)
        return 0.0
    return close * ledger.shares_as_of(on_date)


def portfolio_value(
    portfolio: PortfolioAggregate,
    catalog: PriceCatalog,
    on_date: date,
) -> float:
    """Total value of *portfolio* at the close of *on_date*.

    Dates on or before the purchase date are worth 0 (not yet invested).
    A holding without a close on *on_date* contributes 0.
    """
    if on_date <= portfolio.purchase_date():
        return 0.0
    return sum(
        holding_value_or_zero(ledger, catalog, on_date)
        for ledger in portfolio.holdings.values()
    )


def distribution(
    portfolio: PortfolioAggregate,
    catalog: PriceCatalog,
    on_date: date,
) -> Distribution:
    """Value of each holding at the close of *on_date*, and their sum.

    The caller is expected to have checked ``is_valid_for_all(on_date)``;
    a holding without a close raises :class:`MissingPriceData`.
    """
    values = {
        ticker: holding_value(portfolio.holdings[ticker], catalog, on_date)
        for ticker in portfolio.tickers
    }
    return Distribution(
        portfolio=portfolio.name,
        as_of=on_date,
        values=values,
        total=sum(values.values()),
    )
