"""Percentage-target rebalancing.

Computes, for each holding, the signed share change that moves the
portfolio's value distribution on date D to a target percentage allocation,
and applies all of them at once to produce a new portfolio.

  current value = close(D) × total shares
  target value  = portfolio total × pct / 100
  delta value   = current − target   (> 0 sell, ≤ 0 buy)
  shares        = |delta value| / close(D)

Shares are fractional here; rounding to whole shares is left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Mapping

from stockfolio.errors import BackdatedTransaction, InvalidAllocation, MissingPriceData
from stockfolio.market.catalog import PriceCatalog
from stockfolio.portfolio.aggregate import PortfolioAggregate
from stockfolio.portfolio.ledger import EPSILON, ShareLedger

logger = logging.getLogger(__name__)


class TradeAction(Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


@dataclass(frozen=True)
class RebalanceTrade:
    """The share change for one ticker."""

    ticker: str
    action: TradeAction
    shares: float
    price: float
    current_value: float
    target_value: float
    target_pct: int

    @property
    def signed_shares(self) -> float:
        return -self.shares if self.action is TradeAction.SELL else self.shares


@dataclass(frozen=True)
class RebalancePlan:
    portfolio: str
    as_of: date
    total_value: float
    trades: list[RebalanceTrade] = field(default_factory=list)

    @property
    def active_trades(self) -> list[RebalanceTrade]:
        return [t for t in self.trades if t.action is not TradeAction.HOLD]


def validate_allocation(
    portfolio: PortfolioAggregate,
    targets: Mapping[str, int],
) -> dict[str, int]:
    """Check that *targets* covers exactly the held tickers with whole,
    non-negative percentages summing to 100.  Returns upper-cased targets.
    """
    normalized: dict[str, int] = {}
    for ticker, pct in targets.items():
        if isinstance(pct, bool) or int(pct) != pct:
            raise InvalidAllocation(f"Percentage for {ticker} must be a whole number, got {pct}")
        if pct < 0:
            raise InvalidAllocation(f"Percentage for {ticker} cannot be negative, got {pct}")
        normalized[ticker.upper()] = int(pct)

    held = set(portfolio.tickers)
    missing = held - set(normalized)
    extra = set(normalized) - held
    if missing or extra:
        raise InvalidAllocation(
            f"Targets must name every holding exactly: missing={sorted(missing)}, "
            f"unheld={sorted(extra)}"
        )

    total = sum(normalized.values())
    if total != 100:
        raise InvalidAllocation(f"Percentages must sum to 100, got {total}")
    return normalized


class RebalanceSolver:
    """Plans and applies percentage rebalancing against a price catalog.

    Usage::

        solver = RebalanceSolver(catalog)
        plan = solver.plan(portfolio, date(2024, 6, 3), {"AAPL": 60, "MSFT": 40})
        rebalanced = solver.apply(portfolio, date(2024, 6, 3), {"AAPL": 60, "MSFT": 40})
    """

    def __init__(self, catalog: PriceCatalog) -> None:
        self.catalog = catalog

    def plan(
        self,
        portfolio: PortfolioAggregate,
        on_date: date,
        targets: Mapping[str, int],
    ) -> RebalancePlan:
        """Compute the trades without touching the portfolio."""
        normalized = validate_allocation(portfolio, targets)
        self._check_date(portfolio, on_date)

        prices: dict[str, float] = {}
        current: dict[str, float] = {}
        for ticker in portfolio.tickers:
            close = self.catalog.close(ticker, on_date)
            if close is None or close <= 0:
                raise MissingPriceData(ticker, on_date, "no usable closing price")
            prices[ticker] = close
            current[ticker] = close * portfolio.holdings[ticker].total_shares
        total = sum(current.values())

        trades: list[RebalanceTrade] = []
        for ticker in portfolio.tickers:
            target_value = total * normalized[ticker] / 100
            delta_value = current[ticker] - target_value
            shares = abs(delta_value) / prices[ticker]
            if shares < EPSILON:
                action = TradeAction.HOLD
                shares = 0.0
            elif delta_value > 0:
                action = TradeAction.SELL
            else:
                action = TradeAction.BUY
            trades.append(
                RebalanceTrade(
                    ticker=ticker,
                    action=action,
                    shares=shares,
                    price=prices[ticker],
                    current_value=current[ticker],
                    target_value=target_value,
                    target_pct=normalized[ticker],
                )
            )

        return RebalancePlan(
            portfolio=portfolio.name,
            as_of=on_date,
            total_value=total,
            trades=trades,
        )

    def apply(
        self,
        portfolio: PortfolioAggregate,
        on_date: date,
        targets: Mapping[str, int],
    ) -> PortfolioAggregate:
        """Return a new portfolio with every planned trade applied on *on_date*."""
        plan = self.plan(portfolio, on_date, targets)
        return apply_plan(portfolio, plan)

    def _check_date(self, portfolio: PortfolioAggregate, on_date: date) -> None:
        if not portfolio.is_valid_for_all(on_date, self.catalog):
            missing = [t for t in portfolio.tickers if not self.catalog.has(t, on_date)]
            raise MissingPriceData(
                ", ".join(missing), on_date, "rebalance date not valid for all holdings",
            )
        if not portfolio.is_empty:
            latest = portfolio.latest_date()
            if on_date < latest:
                raise BackdatedTransaction(portfolio.name, on_date, latest)


def apply_plan(portfolio: PortfolioAggregate, plan: RebalancePlan) -> PortfolioAggregate:
    """Apply *plan* to *portfolio* all at once.

    Every ledger update is computed before the new portfolio is assembled,
    so a failure on any ticker leaves nothing half-applied.
    """
    updated: dict[str, ShareLedger] = dict(portfolio.holdings)
    for trade in plan.active_trades:
        ledger = updated[trade.ticker]
        if trade.action is TradeAction.SELL:
            updated[trade.ticker] = ledger.decrease(plan.as_of, trade.shares)
        else:
            updated[trade.ticker] = ledger.increase(plan.as_of, trade.shares)
        logger.info(
            "%s: %s %.4f %s @ %.2f on %s",
            portfolio.name, trade.action.value, trade.shares, trade.ticker,
            trade.price, plan.as_of,
        )
    return PortfolioAggregate(portfolio.name, updated)
