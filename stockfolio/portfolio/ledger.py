"""Per-instrument share ledger.

A :class:`ShareLedger` records signed share-count deltas keyed by date and
answers "how many shares were held as of date D".  Ledgers are immutable:
:meth:`ShareLedger.increase` and :meth:`ShareLedger.decrease` return a new
ledger and leave the original untouched.

Usage::

    ledger = ShareLedger.with_purchase("AAPL", date(2024, 5, 21), 5)
    ledger = ledger.increase(date(2024, 5, 22), 6)
    ledger.shares_as_of(date(2024, 5, 22))   # 11.0
"""

from __future__ import annotations

import bisect
import logging
import math
from datetime import date
from types import MappingProxyType
from typing import Iterable, Mapping

from stockfolio.errors import InsufficientShares, InvalidQuantity

logger = logging.getLogger(__name__)

# Float slack when checking that a position stays non-negative
EPSILON = 1e-9


class ShareLedger:
    """Immutable record of share deltas for one ticker."""

    __slots__ = ("_ticker", "_deltas", "_dates", "_total")

    def __init__(self, ticker: str, deltas: Mapping[date, float] | None = None) -> None:
        ordered = dict(sorted((deltas or {}).items()))
        self._ticker = ticker.upper()
        self._deltas: Mapping[date, float] = MappingProxyType(
            {d: float(q) for d, q in ordered.items()}
        )
        self._dates: tuple[date, ...] = tuple(self._deltas)
        self._total = sum(self._deltas.values())

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls, ticker: str) -> "ShareLedger":
        return cls(ticker)

    @classmethod
    def with_purchase(cls, ticker: str, on_date: date, qty: float) -> "ShareLedger":
        """Fresh ledger holding a single purchase."""
        return cls(ticker).increase(on_date, qty)

    @classmethod
    def from_deltas(
        cls,
        ticker: str,
        pairs: Iterable[tuple[date, float]],
    ) -> "ShareLedger":
        """Rehydrate a ledger from persisted ``(date, delta)`` pairs.

        A repeated date overwrites the earlier delta for that date.  Raises
        :class:`InsufficientShares` if the deltas, applied in date order,
        ever take the position below zero.
        """
        deltas: dict[date, float] = {}
        for on_date, qty in pairs:
            if on_date in deltas:
                logger.debug("%s: duplicate ledger date %s overwritten", ticker, on_date)
            deltas[on_date] = float(qty)

        ledger = cls(ticker, deltas)
        position = 0.0
        for on_date, delta in ledger._deltas.items():
            if not math.isfinite(delta):
                raise InvalidQuantity(f"{ledger.ticker} has a non-finite delta on {on_date}")
            if position + delta < -EPSILON:
                raise InsufficientShares(ledger.ticker, on_date, position, -delta)
            position += delta
        return ledger

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def ticker(self) -> str:
        return self._ticker

    @property
    def deltas(self) -> Mapping[date, float]:
        """Read-only ``date -> signed delta`` mapping in chronological order."""
        return self._deltas

    @property
    def total_shares(self) -> float:
        """Sum of all deltas: the position after the last transaction."""
        return self._total

    def __len__(self) -> int:
        return len(self._dates)

    def __bool__(self) -> bool:
        return True

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShareLedger):
            return NotImplemented
        return self._ticker == other._ticker and dict(self._deltas) == dict(other._deltas)

    def __hash__(self) -> int:
        return hash((self._ticker, tuple(self._deltas.items())))

    def __repr__(self) -> str:
        return f"ShareLedger({self._ticker!r}, entries={len(self)}, total={self._total:g})"

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def shares_as_of(self, on_date: date) -> float:
        """Position held at the end of *on_date* (deltas dated on or before it)."""
        cut = bisect.bisect_right(self._dates, on_date)
        return float(sum(self._deltas[d] for d in self._dates[:cut]))

    def first_transaction_date(self) -> date | None:
        return self._dates[0] if self._dates else None

    def last_transaction_date(self) -> date | None:
        return self._dates[-1] if self._dates else None

    def to_records(self) -> list[tuple[date, float]]:
        """``(date, delta)`` pairs sorted by date; inverse of :meth:`from_deltas`."""
        return list(self._deltas.items())

    # ------------------------------------------------------------------
    # Transformations
    # ------------------------------------------------------------------

    def increase(self, on_date: date, qty: float) -> "ShareLedger":
        """Return a new ledger with *qty* shares added on *on_date*."""
        _check_quantity(qty)
        return self._with_delta(on_date, qty)

    def decrease(self, on_date: date, qty: float) -> "ShareLedger":
        """Return a new ledger with *qty* shares removed on *on_date*.

        Raises :class:`InsufficientShares` if the position on *on_date*, or
        at any later recorded date, would become negative.
        """
        _check_quantity(qty)
        updated = self._with_delta(on_date, -qty)

        held = self.shares_as_of(on_date)
        if held - qty < -EPSILON:
            raise InsufficientShares(self._ticker, on_date, held, qty)

        for later in updated._dates:
            if later <= on_date:
                continue
            position = updated.shares_as_of(later)
            if position < -EPSILON:
                raise InsufficientShares(
                    self._ticker, later, self.shares_as_of(later), qty,
                )
        return updated

    def _with_delta(self, on_date: date, delta: float) -> "ShareLedger":
        deltas = dict(self._deltas)
        deltas[on_date] = deltas.get(on_date, 0.0) + delta
        return ShareLedger(self._ticker, deltas)


def _check_quantity(qty: float) -> None:
    if not (math.isfinite(qty) and qty > 0):
        raise InvalidQuantity(f"Share quantity must be positive and finite, got {qty}")
