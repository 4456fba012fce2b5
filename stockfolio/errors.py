"""Error taxonomy for ledger, portfolio and valuation operations.

Every error is raised synchronously and aborts only the operation in
progress; values the caller already holds are never modified.
"""

from __future__ import annotations

from datetime import date


class StockfolioError(Exception):
    """Base class for all engine errors."""


class InsufficientShares(StockfolioError, ValueError):
    """A decrease would take a position below zero."""

    def __init__(self, ticker: str, on_date: date, held: float, requested: float) -> None:
        self.ticker = ticker
        self.on_date = on_date
        self.held = held
        self.requested = requested
        super().__init__(
            f"Cannot remove {requested:g} shares of {ticker} on {on_date}: "
            f"only {held:g} held"
        )


class InvalidQuantity(StockfolioError, ValueError):
    """A share quantity is zero, negative, or fractional where whole shares are required."""


class EmptyPortfolio(StockfolioError, LookupError):
    """A date query was made on a portfolio with no holdings."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Portfolio {name!r} has no holdings")


class MissingPriceData(StockfolioError, LookupError):
    """A required price record is absent from the catalog."""

    def __init__(self, ticker: str, on_date: date | None = None, detail: str = "") -> None:
        self.ticker = ticker
        self.on_date = on_date
        where = f" on {on_date}" if on_date is not None else ""
        msg = f"No price data for {ticker}{where}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class InvalidAllocation(StockfolioError, ValueError):
    """Target percentages are negative, do not sum to 100, or do not match holdings."""


class BackdatedTransaction(StockfolioError, ValueError):
    """A transaction is dated before the earliest date it may alter."""

    def __init__(self, ticker: str, on_date: date, bound: date) -> None:
        self.ticker = ticker
        self.on_date = on_date
        self.bound = bound
        super().__init__(
            f"Transaction for {ticker} on {on_date} precedes {bound}; "
            "past transactions cannot be altered"
        )


class UnknownTicker(StockfolioError, LookupError):
    """A ticker is not permitted or not held where one is required."""
