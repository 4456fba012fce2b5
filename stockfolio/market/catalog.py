"""In-memory OHLCV price catalog.

The catalog is the only view of market data the engine sees: a lookup from
``(ticker, date)`` to a :class:`PriceRecord`.  Absence of a record is a
defined "no data" state and never means a price of zero.  A catalog is
immutable once built; :meth:`PriceCatalog.with_records` returns a new one.
"""

from __future__ import annotations

import datetime as dt
import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import pandas as pd

logger = logging.getLogger(__name__)

_FRAME_COLUMNS = ("open", "high", "low", "close", "volume")


def parse_date(value: str | dt.date | dt.datetime | pd.Timestamp) -> dt.date:
    """Coerce an ISO string, datetime or Timestamp to a plain ``date``."""
    if isinstance(value, pd.Timestamp):
        return value.date()
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(str(value).strip())


def _clean(value: Any) -> float | None:
    if value is None:
        return None
    try:
        f = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(f) else f


@dataclass(frozen=True)
class PriceRecord:
    """One trading day of price data for one ticker."""

    date: dt.date
    open: float | None
    high: float | None
    low: float | None
    close: float | None
    volume: int = 0

    @property
    def midpoint(self) -> float | None:
        """``(high + low) / 2``, or None if either side is missing."""
        if self.high is None or self.low is None:
            return None
        return (self.high + self.low) / 2


class PriceCatalog:
    """Immutable ``ticker -> date -> PriceRecord`` lookup.

    Usage::

        catalog = PriceCatalog.from_frame("AAPL", frame)
        rec = catalog.get("AAPL", date(2024, 5, 21))
        if rec is not None:
            ...
    """

    def __init__(
        self,
        series: Mapping[str, Mapping[dt.date, PriceRecord]] | None = None,
    ) -> None:
        self._series: dict[str, dict[dt.date, PriceRecord]] = {
            ticker.upper(): dict(records) for ticker, records in (series or {}).items()
        }

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_records(
        cls,
        ticker: str,
        records: Iterable[PriceRecord],
    ) -> "PriceCatalog":
        return cls({ticker: {r.date: r for r in records}})

    @classmethod
    def from_frame(cls, ticker: str, frame: pd.DataFrame) -> "PriceCatalog":
        """Build a single-ticker catalog from a normalized OHLCV frame."""
        return cls({ticker: {r.date: r for r in records_from_frame(frame)}})

    def with_records(self, ticker: str, records: Iterable[PriceRecord]) -> "PriceCatalog":
        """Return a new catalog with *ticker*'s series replaced by *records*."""
        series = dict(self._series)
        series[ticker.upper()] = {r.date: r for r in records}
        return PriceCatalog(series)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def tickers(self) -> list[str]:
        return sorted(self._series)

    def __contains__(self, ticker: object) -> bool:
        return isinstance(ticker, str) and ticker.upper() in self._series

    def __len__(self) -> int:
        return len(self._series)

    def get(self, ticker: str, day: dt.date) -> PriceRecord | None:
        records = self._series.get(ticker.upper())
        if records is None:
            return None
        return records.get(day)

    def has(self, ticker: str, day: dt.date) -> bool:
        return self.get(ticker, day) is not None

    def close(self, ticker: str, day: dt.date) -> float | None:
        rec = self.get(ticker, day)
        return rec.close if rec is not None else None

    def open(self, ticker: str, day: dt.date) -> float | None:
        rec = self.get(ticker, day)
        return rec.open if rec is not None else None

    def dates(self, ticker: str) -> list[dt.date]:
        """All dates with a record for *ticker*, ascending."""
        return sorted(self._series.get(ticker.upper(), {}))

    def date_range(self, ticker: str) -> tuple[dt.date, dt.date] | None:
        dates = self.dates(ticker)
        if not dates:
            return None
        return dates[0], dates[-1]

    def __repr__(self) -> str:
        sizes = ", ".join(f"{t}={len(r)}" for t, r in sorted(self._series.items()))
        return f"PriceCatalog({sizes})"


def records_from_frame(frame: pd.DataFrame) -> list[PriceRecord]:
    """Convert a normalized OHLCV frame to records.

    The frame is indexed by date (or carries a ``date`` column) and has
    lower-case ``open/high/low/close/volume`` columns.  Rows without a
    parseable date are skipped.
    """
    if frame is None or frame.empty:
        return []

    df = frame
    if "date" in df.columns:
        df = df.set_index("date")

    missing = [c for c in _FRAME_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Price frame is missing columns: {missing}")

    records: list[PriceRecord] = []
    for idx, row in df.iterrows():
        try:
            day = parse_date(idx)
        except (TypeError, ValueError):
            logger.debug("Skipping row with unparseable date: %r", idx)
            continue
        volume = _clean(row["volume"])
        records.append(
            PriceRecord(
                date=day,
                open=_clean(row["open"]),
                high=_clean(row["high"]),
                low=_clean(row["low"]),
                close=_clean(row["close"]),
                volume=int(volume) if volume is not None else 0,
            )
        )
    return records
