"""Cache-backed price ingestion.

Prices are fetched from the configured primary source, falling back to the
other enabled source, and cached in the ``prices`` table.  Catalogs for the
engine are always built from the cache.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from stockfolio.config.schema import StockfolioConfig
from stockfolio.data.adapters import alphavantage_adapter, yfinance_adapter
from stockfolio.market.catalog import PriceCatalog, PriceRecord
from stockfolio.storage import queries
from stockfolio.storage.database import Database

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], "list[PriceRecord] | None"]


def _fetchers(config: StockfolioConfig) -> list[tuple[str, Fetcher]]:
    """Enabled sources in priority order, primary first."""
    sources = config.data_sources
    available: dict[str, Fetcher] = {}
    if sources.alphavantage.enabled:
        available[alphavantage_adapter.SOURCE] = (
            lambda s: alphavantage_adapter.fetch_daily_prices(s, sources.alphavantage)
        )
    if sources.yfinance.enabled:
        available[yfinance_adapter.SOURCE] = (
            lambda s: yfinance_adapter.fetch_daily_prices(s, sources.yfinance)
        )

    ordered = sorted(available.items(), key=lambda item: item[0] != sources.primary)
    return ordered


def fetch_prices(symbol: str, config: StockfolioConfig) -> tuple[str, list[PriceRecord]] | None:
    """Fetch *symbol* from the first source that returns data."""
    for source, fetch in _fetchers(config):
        records = fetch(symbol)
        if records:
            return source, records
        logger.info("%s returned no data for %s", source, symbol)
    return None


def ingest_ticker(
    db: Database,
    symbol: str,
    config: StockfolioConfig,
    *,
    refresh: bool = False,
) -> int:
    """Make sure *symbol* has cached prices. Returns the number of records written.

    Already-cached tickers are left alone unless *refresh* is set.
    """
    symbol = symbol.strip().upper()
    if not refresh and queries.has_prices(db, symbol):
        logger.debug("Using cached prices for %s", symbol)
        return 0

    fetched = fetch_prices(symbol, config)
    if fetched is None:
        logger.warning("No price data available for %s from any source", symbol)
        return 0

    source, records = fetched
    written = queries.upsert_prices(db, symbol, records, source)
    logger.info("Cached %d price record(s) for %s from %s", written, symbol, source)
    return written


def build_catalog(
    db: Database,
    tickers: Iterable[str],
    config: StockfolioConfig | None = None,
) -> PriceCatalog:
    """Catalog of cached prices for *tickers*.

    With a *config*, tickers missing from the cache are fetched first.
    """
    symbols = sorted({t.strip().upper() for t in tickers})
    if config is not None:
        for symbol in symbols:
            ingest_ticker(db, symbol, config)
    return queries.load_catalog(db, symbols)
