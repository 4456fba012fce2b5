"""AlphaVantage daily price adapter.

Requests ``TIME_SERIES_DAILY`` as CSV (``timestamp,open,high,low,close,volume``)
and returns normalized :class:`PriceRecord` lists.  Requires a free API key
(https://www.alphavantage.co/support/#api-key).

Rate-limit and error responses come back as JSON with HTTP 200; they are
detected by the missing CSV header and treated as a failed fetch.
"""

from __future__ import annotations

import io
import logging

import pandas as pd
import requests

from stockfolio.config.defaults import ALPHAVANTAGE_DEFAULTS
from stockfolio.config.schema import AlphaVantageConfig
from stockfolio.market.catalog import PriceRecord, records_from_frame

logger = logging.getLogger(__name__)

SOURCE = "alphavantage"

_EXPECTED_HEADER = "timestamp"


def parse_daily_csv(text: str) -> pd.DataFrame | None:
    """Parse an AlphaVantage daily CSV body into a normalized OHLCV frame.

    Returns None when the body is not a price CSV (e.g. a JSON notice).
    """
    if not text or not text.lstrip().startswith(_EXPECTED_HEADER):
        return None

    df = pd.read_csv(io.StringIO(text))
    df.columns = [c.strip().lower() for c in df.columns]
    df = df.rename(columns={"timestamp": "date"})
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df = df.dropna(subset=["date"]).sort_values("date")
    return df.set_index("date")


def fetch_daily_prices(
    symbol: str,
    config: AlphaVantageConfig,
) -> list[PriceRecord] | None:
    """Fetch the full daily history for *symbol*.

    Returns None if the key is missing, the request fails, or the body is
    not a price CSV.
    """
    if not config.api_key:
        logger.warning("AlphaVantage API key not configured; cannot fetch %s", symbol)
        return None

    params = {
        "function": ALPHAVANTAGE_DEFAULTS["function"],
        "symbol": symbol,
        "outputsize": config.output_size,
        "datatype": "csv",
        "apikey": config.api_key,
    }

    try:
        resp = requests.get(config.base_url, params=params, timeout=config.timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        logger.error("AlphaVantage request failed for %s: %s", symbol, e)
        return None

    try:
        frame = parse_daily_csv(resp.text)
    except (ValueError, KeyError, pd.errors.ParserError) as e:
        logger.error("AlphaVantage returned unparseable data for %s: %s", symbol, e)
        return None

    if frame is None:
        logger.error(
            "AlphaVantage returned no price data for %s: %s",
            symbol, resp.text.strip()[:200],
        )
        return None

    records = records_from_frame(frame)
    logger.info("AlphaVantage: %d daily record(s) for %s", len(records), symbol)
    return records
