"""Named portfolio of share ledgers.

A :class:`PortfolioAggregate` owns one :class:`ShareLedger` per ticker.
Adding or removing a holding returns a new aggregate over a copied mapping;
ledgers themselves are immutable and are shared by reference.
"""

from __future__ import annotations

import logging
from datetime import date
from types import MappingProxyType
from typing import Iterator, Mapping

from stockfolio.errors import EmptyPortfolio, MissingPriceData
from stockfolio.market.catalog import PriceCatalog
from stockfolio.portfolio.ledger import ShareLedger

logger = logging.getLogger(__name__)


class PortfolioAggregate:
    """Immutable ``ticker -> ShareLedger`` collection with a name.

    Usage::

        portfolio = PortfolioAggregate("retirement")
        portfolio = portfolio.with_added(ShareLedger.with_purchase("AAPL", d, 10))
        portfolio.purchase_date()
    """

    __slots__ = ("_name", "_holdings")

    def __init__(
        self,
        name: str,
        holdings: Mapping[str, ShareLedger] | None = None,
    ) -> None:
        copied = dict(holdings or {})
        for key, ledger in copied.items():
            if key != ledger.ticker:
                raise ValueError(
                    f"Holding key {key!r} does not match ledger ticker {ledger.ticker!r}"
                )
        self._name = name
        self._holdings: Mapping[str, ShareLedger] = MappingProxyType(copied)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._name

    @property
    def holdings(self) -> Mapping[str, ShareLedger]:
        return self._holdings

    @property
    def tickers(self) -> list[str]:
        return sorted(self._holdings)

    @property
    def is_empty(self) -> bool:
        return not self._holdings

    def ledger(self, ticker: str) -> ShareLedger | None:
        return self._holdings.get(ticker.upper())

    def __contains__(self, ticker: object) -> bool:
        return isinstance(ticker, str) and ticker.upper() in self._holdings

    def __iter__(self) -> Iterator[ShareLedger]:
        return iter(self._holdings[t] for t in self.tickers)

    def __len__(self) -> int:
        return len(self._holdings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PortfolioAggregate):
            return NotImplemented
        return self._name == other._name and dict(self._holdings) == dict(other._holdings)

    def __hash__(self) -> int:
        return hash((self._name, tuple(sorted(self._holdings))))

    def __repr__(self) -> str:
        return f"PortfolioAggregate({self._name!r}, tickers={self.tickers})"

    # ------------------------------------------------------------------
    # Date queries
    # ------------------------------------------------------------------

    def purchase_date(self) -> date:
        """Earliest transaction date across all holdings."""
        firsts = [
            d for d in (ledger.first_transaction_date() for ledger in self._holdings.values())
            if d is not None
        ]
        if not firsts:
            raise EmptyPortfolio(self._name)
        return min(firsts)

    def latest_date(self) -> date:
        """Latest transaction date across all holdings."""
        lasts = [
            d for d in (ledger.last_transaction_date() for ledger in self._holdings.values())
            if d is not None
        ]
        if not lasts:
            raise EmptyPortfolio(self._name)
        return max(lasts)

    def is_valid_for_all(self, on_date: date, catalog: PriceCatalog) -> bool:
        """True if *catalog* has a record on *on_date* for every held ticker.

        Membership gates validity: a holding with zero shares still counts.
        """
        return all(catalog.has(ticker, on_date) for ticker in self._holdings)

    def shares_as_of(self, on_date: date) -> dict[str, float]:
        """Position per ticker at the end of *on_date*."""
        return {t: self._holdings[t].shares_as_of(on_date) for t in self.tickers}

    # ------------------------------------------------------------------
    # Copy-on-write updates
    # ------------------------------------------------------------------

    def with_added(self, ledger: ShareLedger) -> "PortfolioAggregate":
        """Return a new aggregate with *ledger* stored under its ticker."""
        holdings = dict(self._holdings)
        holdings[ledger.ticker] = ledger
        return PortfolioAggregate(self._name, holdings)

    def with_removed(self, holding: ShareLedger | str) -> "PortfolioAggregate":
        """Return a new aggregate without the given ticker.

        Removing a ticker that is not held is a no-op.
        """
        ticker = holding.ticker if isinstance(holding, ShareLedger) else holding.upper()
        if ticker not in self._holdings:
            logger.debug("%s: remove of unheld ticker %s ignored", self._name, ticker)
            return self
        holdings = dict(self._holdings)
        del holdings[ticker]
        return PortfolioAggregate(self._name, holdings)


class PortfolioBuilder:
    """Functional builder: every step returns a new builder.

    Usage::

        portfolio = (
            PortfolioBuilder("growth")
            .add(aapl_ledger, catalog)
            .add(msft_ledger, catalog)
            .build()
        )
    """

    __slots__ = ("_name", "_holdings")

    def __init__(self, name: str, holdings: Mapping[str, ShareLedger] | None = None) -> None:
        self._name = name
        self._holdings: Mapping[str, ShareLedger] = MappingProxyType(dict(holdings or {}))

    @property
    def tickers(self) -> list[str]:
        return sorted(self._holdings)

    def add(self, ledger: ShareLedger, catalog: PriceCatalog | None = None) -> "PortfolioBuilder":
        """Return a builder that also holds *ledger*.

        When *catalog* is given, the ticker must have price data in it.
        """
        if catalog is not None and ledger.ticker not in catalog:
            raise MissingPriceData(ledger.ticker, detail="ticker is not in the price catalog")
        holdings = dict(self._holdings)
        holdings[ledger.ticker] = ledger
        return PortfolioBuilder(self._name, holdings)

    def build(self) -> PortfolioAggregate:
        return PortfolioAggregate(self._name, self._holdings)
