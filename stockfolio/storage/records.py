"""CSV portfolio files, one row per holding.

Row layout::

    ticker,numShares,shareDates
    AAPL,15.0,2024-05-21,5.0,2024-05-22,10.0

``numShares`` is the cumulative count at save time and is informational
only: the trailing date/delta pairs are authoritative and may appear in
any order.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Sequence

from stockfolio.errors import InsufficientShares, InvalidQuantity
from stockfolio.market.catalog import parse_date
from stockfolio.portfolio.aggregate import PortfolioAggregate
from stockfolio.portfolio.ledger import ShareLedger

logger = logging.getLogger(__name__)

HEADER = ["ticker", "numShares", "shareDates"]


class RecordFormatError(ValueError):
    """A portfolio CSV row could not be parsed."""


def ledger_to_row(ledger: ShareLedger) -> list[str]:
    row = [ledger.ticker, repr(float(ledger.total_shares))]
    for on_date, delta in ledger.to_records():
        row.extend([on_date.isoformat(), repr(float(delta))])
    return row


def ledger_from_row(row: Sequence[str], *, source: str = "<row>") -> ShareLedger:
    """Parse one CSV row back into a ledger.

    Trailing empty cells are ignored.  A dangling date without a delta, or
    deltas that take the position below zero, raise :class:`RecordFormatError`.
    """
    cells = [c.strip() for c in row]
    while cells and not cells[-1]:
        cells.pop()
    if len(cells) < 2:
        raise RecordFormatError(f"{source}: expected ticker and share count, got {list(row)}")

    ticker = cells[0]
    try:
        stored_total = float(cells[1])
    except ValueError as e:
        raise RecordFormatError(f"{source}: bad share count {cells[1]!r}") from e

    rest = cells[2:]
    if len(rest) % 2:
        raise RecordFormatError(f"{source}: {ticker} has a date without a share delta")

    pairs = []
    for i in range(0, len(rest), 2):
        try:
            pairs.append((parse_date(rest[i]), float(rest[i + 1])))
        except ValueError as e:
            raise RecordFormatError(
                f"{source}: {ticker} has a bad date/delta pair {rest[i]!r}, {rest[i + 1]!r}"
            ) from e

    try:
        ledger = ShareLedger.from_deltas(ticker, pairs)
    except (InsufficientShares, InvalidQuantity) as e:
        raise RecordFormatError(f"{source}: {e}") from e
    if abs(ledger.total_shares - stored_total) > 1e-6:
        logger.warning(
            "%s: %s numShares %g disagrees with ledger total %g; using ledger",
            source, ledger.ticker, stored_total, ledger.total_shares,
        )
    return ledger


def write_portfolio_csv(portfolio: PortfolioAggregate, path: str | Path) -> Path:
    """Write *portfolio* to *path*, creating parent directories."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(HEADER)
        for ledger in portfolio:
            writer.writerow(ledger_to_row(ledger))
    logger.info("Wrote portfolio %s to %s", portfolio.name, path)
    return path


def read_portfolio_csv(path: str | Path, name: str | None = None) -> PortfolioAggregate:
    """Read a portfolio CSV; the portfolio is named after the file by default."""
    path = Path(path).expanduser()
    holdings: dict[str, ShareLedger] = {}
    with open(path, newline="") as f:
        reader = csv.reader(f)
        header = next(reader, None)
        if header is None:
            raise RecordFormatError(f"{path}: empty file")
        if [h.strip() for h in header[:3]] != HEADER:
            raise RecordFormatError(f"{path}: unexpected header {header}")
        for line_no, row in enumerate(reader, start=2):
            if not any(cell.strip() for cell in row):
                continue
            ledger = ledger_from_row(row, source=f"{path}:{line_no}")
            if ledger.ticker in holdings:
                raise RecordFormatError(f"{path}:{line_no}: duplicate holding {ledger.ticker}")
            holdings[ledger.ticker] = ledger
    return PortfolioAggregate(name or path.stem, holdings)
