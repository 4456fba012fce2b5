"""Named query functions for database operations."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable

from stockfolio.market.catalog import PriceCatalog, PriceRecord, parse_date
from stockfolio.portfolio.aggregate import PortfolioAggregate
from stockfolio.portfolio.ledger import ShareLedger
from stockfolio.storage.database import Database

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Portfolios
# ---------------------------------------------------------------------------

def save_portfolio(db: Database, portfolio: PortfolioAggregate) -> None:
    """Replace the stored holdings and ledger entries of *portfolio*.

    The whole write happens in one transaction, so a failure leaves the
    previously stored version intact.
    """
    with db.transaction() as cur:
        cur.execute(
            """INSERT INTO portfolios (name) VALUES (?)
            ON CONFLICT(name) DO UPDATE SET updated_at=datetime('now')""",
            (portfolio.name,),
        )
        cur.execute("DELETE FROM ledger_entries WHERE portfolio = ?", (portfolio.name,))
        cur.execute("DELETE FROM holdings WHERE portfolio = ?", (portfolio.name,))
        for ledger in portfolio:
            cur.execute(
                "INSERT INTO holdings (portfolio, ticker, total_shares) VALUES (?, ?, ?)",
                (portfolio.name, ledger.ticker, ledger.total_shares),
            )
            cur.executemany(
                """INSERT INTO ledger_entries (portfolio, ticker, trade_date, delta)
                VALUES (?, ?, ?, ?)""",
                [
                    (portfolio.name, ledger.ticker, on_date.isoformat(), delta)
                    for on_date, delta in ledger.to_records()
                ],
            )
    logger.info("Saved portfolio %s (%d holdings)", portfolio.name, len(portfolio))


def portfolio_exists(db: Database, name: str) -> bool:
    row = db.fetchone("SELECT 1 FROM portfolios WHERE name = ?", (name,))
    return row is not None


def load_portfolio(db: Database, name: str) -> PortfolioAggregate | None:
    """Rehydrate portfolio *name*, or None if it was never saved."""
    if not portfolio_exists(db, name):
        return None

    rows = db.fetchall(
        """SELECT h.ticker, h.total_shares, e.trade_date, e.delta
        FROM holdings h
        LEFT JOIN ledger_entries e
            ON e.portfolio = h.portfolio AND e.ticker = h.ticker
        WHERE h.portfolio = ?
        ORDER BY h.ticker, e.trade_date""",
        (name,),
    )

    pairs: dict[str, list[tuple[date, float]]] = {}
    stored_totals: dict[str, float] = {}
    for row in rows:
        ticker = row["ticker"]
        stored_totals[ticker] = row["total_shares"]
        entries = pairs.setdefault(ticker, [])
        if row["trade_date"] is not None:
            entries.append((parse_date(row["trade_date"]), row["delta"]))

    holdings = {}
    for ticker, entries in pairs.items():
        ledger = ShareLedger.from_deltas(ticker, entries)
        if abs(ledger.total_shares - stored_totals[ticker]) > 1e-6:
            logger.warning(
                "%s/%s: stored total %g disagrees with ledger total %g; using ledger",
                name, ticker, stored_totals[ticker], ledger.total_shares,
            )
        holdings[ledger.ticker] = ledger
    return PortfolioAggregate(name, holdings)


def list_portfolios(db: Database) -> list[dict[str, Any]]:
    """All stored portfolios with holding counts, by name."""
    rows = db.fetchall(
        """SELECT p.name, p.created_at, p.updated_at, COUNT(h.ticker) AS holdings
        FROM portfolios p
        LEFT JOIN holdings h ON h.portfolio = p.name
        GROUP BY p.name
        ORDER BY p.name"""
    )
    return [dict(r) for r in rows]


def delete_portfolio(db: Database, name: str) -> bool:
    """Delete a portfolio and its ledgers. Returns True if a row was deleted."""
    with db.transaction() as cur:
        cur.execute("DELETE FROM ledger_entries WHERE portfolio = ?", (name,))
        cur.execute("DELETE FROM holdings WHERE portfolio = ?", (name,))
        cur.execute("DELETE FROM portfolios WHERE name = ?", (name,))
        deleted = cur.rowcount > 0
    if deleted:
        logger.info("Deleted portfolio %s", name)
    return deleted


# ---------------------------------------------------------------------------
# Prices
# ---------------------------------------------------------------------------

def upsert_prices(
    db: Database,
    ticker: str,
    records: Iterable[PriceRecord],
    source: str,
) -> int:
    """Insert or update daily price records. Returns the number written."""
    rows = [
        (
            ticker.upper(), r.date.isoformat(), r.open, r.high, r.low, r.close,
            int(r.volume), source,
        )
        for r in records
    ]
    if not rows:
        return 0
    with db.transaction() as cur:
        cur.executemany(
            """INSERT INTO prices (ticker, price_date, open, high, low, close, volume, source)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(ticker, price_date) DO UPDATE SET
                open=excluded.open, high=excluded.high, low=excluded.low,
                close=excluded.close, volume=excluded.volume,
                source=excluded.source, fetched_at=datetime('now')""",
            rows,
        )
    logger.debug("Stored %d price record(s) for %s from %s", len(rows), ticker, source)
    return len(rows)


def load_price_records(
    db: Database,
    ticker: str,
    *,
    start: date | None = None,
    end: date | None = None,
) -> list[PriceRecord]:
    """Cached records for *ticker*, ascending, optionally limited to [start, end]."""
    sql = "SELECT * FROM prices WHERE ticker = ?"
    params: list[Any] = [ticker.upper()]
    if start is not None:
        sql += " AND price_date >= ?"
        params.append(start.isoformat())
    if end is not None:
        sql += " AND price_date <= ?"
        params.append(end.isoformat())
    sql += " ORDER BY price_date"

    return [
        PriceRecord(
            date=parse_date(r["price_date"]),
            open=r["open"],
            high=r["high"],
            low=r["low"],
            close=r["close"],
            volume=r["volume"] or 0,
        )
        for r in db.fetchall(sql, tuple(params))
    ]


def list_price_tickers(db: Database) -> list[dict[str, Any]]:
    """Tickers with cached prices and the span each covers."""
    rows = db.fetchall(
        """SELECT ticker, COUNT(*) AS records,
            MIN(price_date) AS first_date, MAX(price_date) AS last_date,
            MAX(fetched_at) AS fetched_at
        FROM prices
        GROUP BY ticker
        ORDER BY ticker"""
    )
    return [dict(r) for r in rows]


def has_prices(db: Database, ticker: str) -> bool:
    row = db.fetchone("SELECT 1 FROM prices WHERE ticker = ? LIMIT 1", (ticker.upper(),))
    return row is not None


def load_catalog(db: Database, tickers: Iterable[str]) -> PriceCatalog:
    """Build a :class:`PriceCatalog` from the cached prices of *tickers*."""
    catalog = PriceCatalog()
    for ticker in tickers:
        catalog = catalog.with_records(ticker, load_price_records(db, ticker))
    return catalog
