"""Chronological buy and sell rules over a portfolio.

Purchases may not precede the portfolio's creation date; sales may not
precede the holding's own last transaction.  A holding sold down to zero
shares is dropped from the portfolio.  Each function returns a new
:class:`PortfolioAggregate`; the input portfolio is never modified.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import Iterable

from stockfolio.errors import (
    BackdatedTransaction,
    InvalidQuantity,
    MissingPriceData,
    UnknownTicker,
)
from stockfolio.market.catalog import PriceCatalog
from stockfolio.portfolio.aggregate import PortfolioAggregate
from stockfolio.portfolio.ledger import EPSILON, ShareLedger

logger = logging.getLogger(__name__)


def _check_shares(shares: float, whole_shares: bool) -> None:
    if not (math.isfinite(shares) and shares > 0):
        raise InvalidQuantity(f"Share quantity must be positive and finite, got {shares}")
    if whole_shares and float(shares) != int(shares):
        raise InvalidQuantity(f"Fractional shares are not allowed, got {shares}")


def check_ticker_allowed(ticker: str, allowed_tickers: Iterable[str] | None) -> str:
    """Upper-case *ticker* and check it against the whitelist (empty = any)."""
    symbol = ticker.strip().upper()
    allowed = {t.upper() for t in allowed_tickers or ()}
    if allowed and symbol not in allowed:
        raise UnknownTicker(f"{symbol} is not a supported ticker ({', '.join(sorted(allowed))})")
    return symbol


def buy(
    portfolio: PortfolioAggregate,
    ticker: str,
    on_date: date,
    shares: float,
    catalog: PriceCatalog,
    *,
    whole_shares: bool = True,
    allowed_tickers: Iterable[str] | None = None,
) -> PortfolioAggregate:
    """Record a purchase of *shares* of *ticker* on *on_date*."""
    symbol = check_ticker_allowed(ticker, allowed_tickers)
    _check_shares(shares, whole_shares)

    if not catalog.has(symbol, on_date):
        raise MissingPriceData(symbol, on_date, "not a trading day for this ticker")
    if not portfolio.is_empty:
        created = portfolio.purchase_date()
        if on_date < created:
            raise BackdatedTransaction(symbol, on_date, created)

    existing = portfolio.ledger(symbol)
    if existing is not None:
        ledger = existing.increase(on_date, shares)
    else:
        ledger = ShareLedger.with_purchase(symbol, on_date, shares)

    logger.info("%s: bought %g %s on %s", portfolio.name, shares, symbol, on_date)
    return portfolio.with_added(ledger)


def sell(
    portfolio: PortfolioAggregate,
    ticker: str,
    on_date: date,
    shares: float,
    catalog: PriceCatalog,
    *,
    whole_shares: bool = True,
) -> PortfolioAggregate:
    """Record a sale of *shares* of *ticker* on *on_date*."""
    symbol = ticker.strip().upper()
    existing = portfolio.ledger(symbol)
    if existing is None:
        raise UnknownTicker(f"{symbol} is not held in portfolio {portfolio.name!r}")
    _check_shares(shares, whole_shares)

    if not catalog.has(symbol, on_date):
        raise MissingPriceData(symbol, on_date, "not a trading day for this ticker")
    last = existing.last_transaction_date()
    if last is not None and on_date < last:
        raise BackdatedTransaction(symbol, on_date, last)

    ledger = existing.decrease(on_date, shares)
    if abs(ledger.total_shares) < EPSILON:
        logger.info("%s: sold entire %s position on %s, removing", portfolio.name, symbol, on_date)
        return portfolio.with_removed(symbol)

    logger.info("%s: sold %g %s on %s", portfolio.name, shares, symbol, on_date)
    return portfolio.with_added(ledger)
