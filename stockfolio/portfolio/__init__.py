"""Share ledgers, portfolios, trading rules and the portfolio registry.

Public API::

    from stockfolio.portfolio import (
        ShareLedger,
        PortfolioAggregate,
        PortfolioBuilder,
        PortfolioRepository,
        buy,
        sell,
    )
"""

from stockfolio.portfolio.aggregate import PortfolioAggregate, PortfolioBuilder
from stockfolio.portfolio.ledger import ShareLedger
from stockfolio.portfolio.repository import PortfolioRepository, PortfolioStore
from stockfolio.portfolio.trading import buy, check_ticker_allowed, sell

__all__ = [
    "ShareLedger",
    "PortfolioAggregate",
    "PortfolioBuilder",
    "PortfolioRepository",
    "PortfolioStore",
    "buy",
    "sell",
    "check_ticker_allowed",
]
