"""SQLite persistence, migrations and CSV portfolio files."""

from stockfolio.storage.database import Database
from stockfolio.storage.migrations import ensure_schema
from stockfolio.storage.stores import CsvPortfolioStore, SqlitePortfolioStore

__all__ = ["Database", "ensure_schema", "SqlitePortfolioStore", "CsvPortfolioStore"]
