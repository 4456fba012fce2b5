"""Explicit registry of named portfolios.

A :class:`PortfolioRepository` is created by the caller and passed to
whatever needs it; there is no process-wide portfolio state.  An optional
:class:`PortfolioStore` persists portfolios as they are replaced.
"""

from __future__ import annotations

import logging
from typing import Protocol

from stockfolio.portfolio.aggregate import PortfolioAggregate

logger = logging.getLogger(__name__)


class PortfolioStore(Protocol):
    """Load/save hook for named portfolios."""

    def load(self, name: str) -> PortfolioAggregate | None: ...

    def save(self, portfolio: PortfolioAggregate) -> None: ...

    def delete(self, name: str) -> bool: ...

    def list_names(self) -> list[str]: ...


class PortfolioRepository:
    """Name → current :class:`PortfolioAggregate` value.

    Usage::

        repo = PortfolioRepository(store=SqlitePortfolioStore(db))
        portfolio = repo.get("growth")
        repo.put(buy(portfolio, "AAPL", day, 10, catalog))
    """

    def __init__(self, store: PortfolioStore | None = None) -> None:
        self._store = store
        self._portfolios: dict[str, PortfolioAggregate] = {}

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        if name in self._portfolios:
            return True
        return self._store is not None and name in self._store.list_names()

    def get(self, name: str) -> PortfolioAggregate:
        """Current value of portfolio *name*; loads through the store on a miss."""
        if name in self._portfolios:
            return self._portfolios[name]
        if self._store is not None:
            loaded = self._store.load(name)
            if loaded is not None:
                self._portfolios[name] = loaded
                return loaded
        raise KeyError(f"Portfolio {name!r} does not exist")

    def put(self, portfolio: PortfolioAggregate) -> None:
        """Make *portfolio* the current value under its name and persist it."""
        self._portfolios[portfolio.name] = portfolio
        if self._store is not None:
            self._store.save(portfolio)
        logger.debug("Stored portfolio %s (%d holdings)", portfolio.name, len(portfolio))

    def discard(self, name: str) -> bool:
        """Forget *name*. Returns True if anything was removed."""
        removed = self._portfolios.pop(name, None) is not None
        if self._store is not None:
            removed = self._store.delete(name) or removed
        return removed

    def names(self) -> list[str]:
        names = set(self._portfolios)
        if self._store is not None:
            names.update(self._store.list_names())
        return sorted(names)
