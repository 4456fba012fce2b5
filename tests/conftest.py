"""Shared test fixtures for Stockfolio.

Provides reusable fixtures for database, config, price catalogs and sample
portfolios across all test modules.
"""

from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import yaml

from stockfolio.config.schema import StockfolioConfig
from stockfolio.market.catalog import PriceCatalog, PriceRecord
from stockfolio.portfolio.aggregate import PortfolioAggregate
from stockfolio.portfolio.ledger import ShareLedger
from stockfolio.storage.database import Database
from stockfolio.storage.migrations import ensure_schema

MAY_21 = date(2024, 5, 21)
MAY_22 = date(2024, 5, 22)
MAY_23 = date(2024, 5, 23)


def weekdays(start: date, end: date) -> list[date]:
    days = []
    day = start
    while day <= end:
        if day.weekday() < 5:
            days.append(day)
        day += timedelta(days=1)
    return days


def ramp_records(start: date, end: date, base: float = 100.0) -> list[PriceRecord]:
    """Weekday records whose prices rise by 1 per trading day.

    Day i: open=base+i, close=base+1+i, high=base+2+i, low=base-1+i.
    """
    return [
        PriceRecord(
            date=day,
            open=base + i,
            high=base + 2 + i,
            low=base - 1 + i,
            close=base + 1 + i,
            volume=1_000 + i,
        )
        for i, day in enumerate(weekdays(start, end))
    ]


def flat_records(start: date, end: date, price: float) -> list[PriceRecord]:
    """Weekday records with every field equal to *price*."""
    return [
        PriceRecord(date=day, open=price, high=price, low=price, close=price, volume=500)
        for day in weekdays(start, end)
    ]


# ---------------------------------------------------------------------------
# Core infrastructure
# ---------------------------------------------------------------------------

@pytest.fixture
def test_config(tmp_path: Path) -> StockfolioConfig:
    """Minimal config with temp paths and network sources disabled."""
    return StockfolioConfig(
        database={"path": str(tmp_path / "test.db")},
        data_sources={
            "alphavantage": {"enabled": False},
            "yfinance": {"enabled": False},
        },
        charts={"output_dir": str(tmp_path / "charts")},
        portfolios={"csv_dir": str(tmp_path / "portfolios")},
    )


@pytest.fixture
def config_file(tmp_path: Path, test_config: StockfolioConfig) -> Path:
    """test_config written out as YAML for the CLI."""
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(test_config.model_dump()))
    return path


@pytest.fixture
def test_db(tmp_path: Path) -> Database:
    """Database with schema applied, using temp file."""
    db = Database(tmp_path / "test.db")
    ensure_schema(db)
    yield db
    db.close()


@pytest.fixture
def memory_db() -> Database:
    """In-memory database for fast unit tests."""
    db = Database(":memory:")
    # The migration runner reads files; apply the SQL directly.
    migration_path = Path(__file__).parent.parent / "stockfolio" / "migrations" / "001_initial.sql"
    db.executescript(migration_path.read_text())
    yield db
    db.close()


# ---------------------------------------------------------------------------
# Price catalogs (deterministic)
# ---------------------------------------------------------------------------

@pytest.fixture
def aapl_records() -> list[PriceRecord]:
    """AAPL weekdays 2024-05-01..2024-06-28, rising by 1 per day from 100."""
    return ramp_records(date(2024, 5, 1), date(2024, 6, 28), base=100.0)


@pytest.fixture
def msft_records() -> list[PriceRecord]:
    """MSFT weekdays 2024-05-01..2024-06-28, flat at 50."""
    return flat_records(date(2024, 5, 1), date(2024, 6, 28), price=50.0)


@pytest.fixture
def catalog(aapl_records, msft_records) -> PriceCatalog:
    return (
        PriceCatalog()
        .with_records("AAPL", aapl_records)
        .with_records("MSFT", msft_records)
    )


@pytest.fixture
def random_walk_frame() -> pd.DataFrame:
    """120-bar OHLCV random walk indexed by business day (seed=42)."""
    np.random.seed(42)
    n = 120
    close = 100 * np.cumprod(1 + np.random.normal(0.0005, 0.01, n))
    open_ = close * (1 + np.random.normal(0, 0.003, n))
    high = np.maximum(open_, close) * 1.01
    low = np.minimum(open_, close) * 0.99
    volume = np.random.randint(500_000, 2_000_000, n)
    index = pd.bdate_range("2024-01-02", periods=n, name="date")
    return pd.DataFrame(
        {"open": open_, "high": high, "low": low, "close": close, "volume": volume},
        index=index,
    )


# ---------------------------------------------------------------------------
# Portfolios
# ---------------------------------------------------------------------------

@pytest.fixture
def aapl_ledger() -> ShareLedger:
    """+5 on 05-21, +6 on 05-22, +10 on 05-23."""
    return ShareLedger("AAPL", {MAY_21: 5, MAY_22: 6, MAY_23: 10})


@pytest.fixture
def sample_portfolio(aapl_ledger) -> PortfolioAggregate:
    """AAPL ledger above plus 10 MSFT bought on 05-21."""
    return PortfolioAggregate(
        "growth",
        {
            "AAPL": aapl_ledger,
            "MSFT": ShareLedger.with_purchase("MSFT", MAY_21, 10),
        },
    )
