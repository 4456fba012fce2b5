"""yfinance data adapter for daily price history."""

from __future__ import annotations

import logging

import pandas as pd
import yfinance as yf

from stockfolio.config.schema import YFinanceConfig
from stockfolio.market.catalog import PriceRecord, records_from_frame

logger = logging.getLogger(__name__)

SOURCE = "yfinance"

_COLUMN_MAP = {
    "Open": "open",
    "High": "high",
    "Low": "low",
    "Close": "close",
    "Volume": "volume",
}


def normalize_history(history: pd.DataFrame) -> pd.DataFrame:
    """Lower-case OHLCV columns and a tz-naive date index."""
    df = history.rename(columns=_COLUMN_MAP)
    df = df[[c for c in _COLUMN_MAP.values() if c in df.columns]]
    index = pd.DatetimeIndex(df.index)
    if index.tz is not None:
        index = index.tz_localize(None)
    df.index = index.normalize()
    return df


def fetch_daily_prices(
    symbol: str,
    config: YFinanceConfig | None = None,
) -> list[PriceRecord] | None:
    """Fetch unadjusted daily history for *symbol*, or None on failure."""
    period = (config or YFinanceConfig()).period
    try:
        history = yf.Ticker(symbol).history(period=period, auto_adjust=False)
    except Exception as e:
        logger.error("yfinance fetch failed for %s: %s", symbol, e)
        return None

    if history is None or history.empty:
        logger.warning("No yfinance data found for %s", symbol)
        return None

    try:
        records = records_from_frame(normalize_history(history))
    except ValueError as e:
        logger.error("yfinance returned unexpected columns for %s: %s", symbol, e)
        return None

    logger.info("yfinance: %d daily record(s) for %s", len(records), symbol)
    return records
