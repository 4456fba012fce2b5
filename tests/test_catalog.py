"""Tests for the in-memory price catalog."""

from __future__ import annotations

from datetime import date, datetime

import numpy as np
import pandas as pd
import pytest

from stockfolio.market.catalog import PriceCatalog, PriceRecord, parse_date, records_from_frame

D21 = date(2024, 5, 21)


class TestParseDate:

    @pytest.mark.parametrize(
        "value",
        ["2024-05-21", " 2024-05-21 ", D21, datetime(2024, 5, 21, 16, 0), pd.Timestamp("2024-05-21")],
    )
    def test_accepted_forms(self, value):
        assert parse_date(value) == D21

    def test_bad_string(self):
        with pytest.raises(ValueError):
            parse_date("May 21")


class TestPriceRecord:

    def test_midpoint(self):
        assert PriceRecord(D21, 1.0, 12.0, 8.0, 10.0).midpoint == 10.0

    def test_midpoint_missing(self):
        assert PriceRecord(D21, 1.0, None, 8.0, 10.0).midpoint is None


class TestLookups:

    def test_absent_is_none(self, catalog):
        assert catalog.get("AAPL", date(2024, 5, 25)) is None
        assert catalog.get("ZZZ", D21) is None
        assert catalog.close("AAPL", date(2024, 5, 25)) is None
        assert not catalog.has("AAPL", date(2024, 5, 25))

    def test_case_insensitive(self, catalog):
        assert catalog.close("aapl", D21) == 115
        assert "aapl" in catalog

    def test_dates_and_range(self, catalog):
        dates = catalog.dates("MSFT")
        assert dates == sorted(dates)
        assert catalog.date_range("MSFT") == (date(2024, 5, 1), date(2024, 6, 28))
        assert catalog.date_range("ZZZ") is None

    def test_tickers(self, catalog):
        assert catalog.tickers == ["AAPL", "MSFT"]
        assert len(catalog) == 2


class TestImmutability:

    def test_with_records_returns_new(self, catalog):
        updated = catalog.with_records("GOOG", [PriceRecord(D21, 1.0, 1.0, 1.0, 1.0)])
        assert "GOOG" in updated
        assert "GOOG" not in catalog

    def test_with_records_replaces_series(self, catalog):
        updated = catalog.with_records("AAPL", [PriceRecord(D21, 1.0, 1.0, 1.0, 1.0)])
        assert updated.dates("AAPL") == [D21]
        assert len(catalog.dates("AAPL")) > 1


class TestFrames:

    def test_from_frame(self, random_walk_frame):
        catalog = PriceCatalog.from_frame("SPY", random_walk_frame)
        assert len(catalog.dates("SPY")) == 120
        first = catalog.get("SPY", date(2024, 1, 2))
        assert first.close == pytest.approx(random_walk_frame["close"].iloc[0])
        assert isinstance(first.volume, int)

    def test_date_column(self, random_walk_frame):
        frame = random_walk_frame.reset_index()
        assert len(records_from_frame(frame)) == 120

    def test_nan_becomes_none(self, random_walk_frame):
        frame = random_walk_frame.copy()
        frame.iloc[0, frame.columns.get_loc("close")] = np.nan
        records = records_from_frame(frame)
        assert records[0].close is None

    def test_missing_columns(self, random_walk_frame):
        with pytest.raises(ValueError, match="missing columns"):
            records_from_frame(random_walk_frame.drop(columns=["volume"]))

    def test_empty_frame(self):
        assert records_from_frame(pd.DataFrame()) == []
