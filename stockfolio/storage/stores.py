"""Portfolio stores backing :class:`~stockfolio.portfolio.PortfolioRepository`."""

from __future__ import annotations

import logging
from pathlib import Path

from stockfolio.portfolio.aggregate import PortfolioAggregate
from stockfolio.storage import queries
from stockfolio.storage.database import Database
from stockfolio.storage.records import read_portfolio_csv, write_portfolio_csv

logger = logging.getLogger(__name__)


class SqlitePortfolioStore:
    """Portfolios kept in the ``portfolios``/``holdings``/``ledger_entries`` tables."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def load(self, name: str) -> PortfolioAggregate | None:
        return queries.load_portfolio(self.db, name)

    def save(self, portfolio: PortfolioAggregate) -> None:
        queries.save_portfolio(self.db, portfolio)

    def delete(self, name: str) -> bool:
        return queries.delete_portfolio(self.db, name)

    def list_names(self) -> list[str]:
        return [row["name"] for row in queries.list_portfolios(self.db)]


class CsvPortfolioStore:
    """One ``<name>.csv`` file per portfolio in *directory*."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser()

    def path_for(self, name: str) -> Path:
        return self.directory / f"{name}.csv"

    def load(self, name: str) -> PortfolioAggregate | None:
        path = self.path_for(name)
        if not path.exists():
            logger.debug("No portfolio file at %s", path)
            return None
        return read_portfolio_csv(path, name)

    def save(self, portfolio: PortfolioAggregate) -> None:
        write_portfolio_csv(portfolio, self.path_for(portfolio.name))

    def delete(self, name: str) -> bool:
        path = self.path_for(name)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Deleted portfolio file %s", path)
        return True

    def list_names(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.csv"))
