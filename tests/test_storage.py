"""Tests for the SQLite storage layer."""

from __future__ import annotations

from datetime import date

import pytest

from stockfolio.errors import InsufficientShares
from stockfolio.market.catalog import PriceRecord
from stockfolio.portfolio.aggregate import PortfolioAggregate
from stockfolio.portfolio.ledger import ShareLedger
from stockfolio.storage import migrations
from stockfolio.storage.database import Database
from stockfolio.storage.migrations import ensure_schema
from stockfolio.storage.queries import (
    delete_portfolio,
    has_prices,
    list_portfolios,
    list_price_tickers,
    load_catalog,
    load_portfolio,
    load_price_records,
    portfolio_exists,
    save_portfolio,
    upsert_prices,
)


class TestDatabase:
    """Test Database connection and basic operations."""

    def test_connect_creates_file(self, tmp_path):
        db_path = tmp_path / "sub" / "test.db"
        assert not db_path.exists()
        db = Database(db_path)
        db.connect()
        assert db_path.exists()
        db.close()

    def test_context_manager(self, tmp_path):
        with Database(tmp_path / "test.db") as db:
            db.execute("SELECT 1")

    def test_schema_version_empty(self, tmp_path):
        db = Database(tmp_path / "test.db")
        assert db.schema_version() == 0
        db.close()

    def test_memory_database(self):
        db = Database(":memory:")
        assert db.is_memory
        assert db.fetchone("SELECT 1 AS one")["one"] == 1
        db.close()

    def test_transaction_rolls_back(self, test_db):
        with pytest.raises(RuntimeError):
            with test_db.transaction() as cur:
                cur.execute("INSERT INTO portfolios (name) VALUES ('tmp')")
                raise RuntimeError("boom")
        assert not portfolio_exists(test_db, "tmp")


class TestMigrations:
    """Test migration system."""

    def test_initial_migration(self, test_db):
        assert test_db.schema_version() >= 1

    def test_tables_exist(self, test_db):
        tables = {
            r["name"]
            for r in test_db.fetchall("SELECT name FROM sqlite_master WHERE type='table'")
        }
        assert {"_schema_version", "portfolios", "holdings", "ledger_entries", "prices"} <= tables

    def test_idempotent(self, test_db):
        version = test_db.schema_version()
        assert ensure_schema(test_db) == version

    def test_discovers_shipped_migrations(self):
        found = migrations.discover_migrations()
        assert found and found[0][0] == 1

    def test_failed_migration_wrapped(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            migrations, "discover_migrations",
            lambda: [(1, "001_bad.sql", "CREATE TABLE (;")],
        )
        db = Database(tmp_path / "bad.db")
        with pytest.raises(RuntimeError, match="001_bad.sql"):
            ensure_schema(db)
        db.close()


class TestPortfolioQueries:

    def test_save_and_load(self, test_db, sample_portfolio):
        save_portfolio(test_db, sample_portfolio)
        loaded = load_portfolio(test_db, "growth")
        assert loaded == sample_portfolio
        assert loaded.ledger("AAPL").shares_as_of(date(2024, 5, 22)) == 11

    def test_load_unknown(self, test_db):
        assert load_portfolio(test_db, "nope") is None

    def test_save_empty_portfolio(self, test_db):
        save_portfolio(test_db, PortfolioAggregate("empty"))
        loaded = load_portfolio(test_db, "empty")
        assert loaded is not None and loaded.is_empty

    def test_resave_replaces_holdings(self, test_db, sample_portfolio):
        save_portfolio(test_db, sample_portfolio)
        save_portfolio(test_db, sample_portfolio.with_removed("MSFT"))
        assert load_portfolio(test_db, "growth").tickers == ["AAPL"]

    def test_list_portfolios(self, test_db, sample_portfolio):
        save_portfolio(test_db, sample_portfolio)
        save_portfolio(test_db, PortfolioAggregate("another"))
        rows = list_portfolios(test_db)
        assert [r["name"] for r in rows] == ["another", "growth"]
        assert rows[1]["holdings"] == 2

    def test_delete(self, test_db, sample_portfolio):
        save_portfolio(test_db, sample_portfolio)
        assert delete_portfolio(test_db, "growth") is True
        assert delete_portfolio(test_db, "growth") is False
        assert test_db.fetchone("SELECT COUNT(*) AS n FROM ledger_entries")["n"] == 0

    def test_memory_db(self, memory_db):
        ledger = ShareLedger("AAPL", {date(2024, 5, 21): 5, date(2024, 5, 22): -2})
        save_portfolio(memory_db, PortfolioAggregate("m", {"AAPL": ledger}))
        assert load_portfolio(memory_db, "m").ledger("AAPL") == ledger

    def test_stored_total_mismatch_uses_ledger(self, test_db, sample_portfolio, caplog):
        save_portfolio(test_db, sample_portfolio)
        test_db.execute("UPDATE holdings SET total_shares = 999 WHERE ticker = 'AAPL'")
        test_db.conn.commit()
        with caplog.at_level("WARNING"):
            loaded = load_portfolio(test_db, "growth")
        assert loaded.ledger("AAPL").total_shares == 21
        assert "disagrees" in caplog.text

    def test_corrupt_ledger_rejected(self, test_db, sample_portfolio):
        save_portfolio(test_db, sample_portfolio)
        test_db.execute(
            "UPDATE ledger_entries SET delta = -50 WHERE ticker = 'AAPL' AND trade_date = '2024-05-22'"
        )
        test_db.conn.commit()
        with pytest.raises(InsufficientShares):
            load_portfolio(test_db, "growth")


class TestPriceQueries:

    def test_upsert_and_load(self, test_db, aapl_records):
        assert upsert_prices(test_db, "aapl", aapl_records, "test") == len(aapl_records)
        loaded = load_price_records(test_db, "AAPL")
        assert loaded == aapl_records

    def test_upsert_overwrites(self, test_db):
        day = date(2024, 5, 21)
        upsert_prices(test_db, "AAPL", [PriceRecord(day, 1.0, 1.0, 1.0, 1.0)], "a")
        upsert_prices(test_db, "AAPL", [PriceRecord(day, 2.0, 2.0, 2.0, 2.0)], "b")
        loaded = load_price_records(test_db, "AAPL")
        assert len(loaded) == 1 and loaded[0].close == 2.0

    def test_empty_upsert(self, test_db):
        assert upsert_prices(test_db, "AAPL", [], "test") == 0

    def test_date_filter(self, test_db, aapl_records):
        upsert_prices(test_db, "AAPL", aapl_records, "test")
        loaded = load_price_records(
            test_db, "AAPL", start=date(2024, 5, 20), end=date(2024, 5, 24),
        )
        assert [r.date.day for r in loaded] == [20, 21, 22, 23, 24]

    def test_missing_values_survive(self, test_db):
        rec = PriceRecord(date(2024, 5, 21), None, 2.0, 1.0, None, 0)
        upsert_prices(test_db, "AAPL", [rec], "test")
        assert load_price_records(test_db, "AAPL") == [rec]

    def test_summary_and_catalog(self, test_db, aapl_records, msft_records):
        upsert_prices(test_db, "AAPL", aapl_records, "test")
        upsert_prices(test_db, "MSFT", msft_records, "test")
        summary = list_price_tickers(test_db)
        assert [r["ticker"] for r in summary] == ["AAPL", "MSFT"]
        assert summary[0]["first_date"] == "2024-05-01"
        assert has_prices(test_db, "msft")
        assert not has_prices(test_db, "GOOG")

        catalog = load_catalog(test_db, ["AAPL", "MSFT"])
        assert catalog.close("AAPL", date(2024, 5, 21)) == 115
        assert catalog.close("MSFT", date(2024, 5, 21)) == 50
