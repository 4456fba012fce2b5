"""Tests for indicators and point-in-time valuation."""

from __future__ import annotations

from datetime import date

import pytest

from stockfolio.engine.valuation import (
    crossover_dates,
    distribution,
    holding_value,
    holding_value_or_zero,
    instrument_performance,
    moving_average,
    portfolio_value,
)
from stockfolio.errors import EmptyPortfolio, MissingPriceData
from stockfolio.market.catalog import PriceCatalog, PriceRecord
from stockfolio.portfolio.aggregate import PortfolioAggregate
from stockfolio.portfolio.ledger import ShareLedger


def _rec(day: date, high: float, low: float, close: float | None = None) -> PriceRecord:
    return PriceRecord(date=day, open=low, high=high, low=low, close=close if close is not None else high)


class TestMovingAverage:

    def test_divides_by_days_with_data(self):
        # 10-day window before 06-11 covers 06-01..06-10; only three have data.
        catalog = PriceCatalog.from_records("AAPL", [
            _rec(date(2024, 6, 3), high=12, low=8),     # mid 10
            _rec(date(2024, 6, 5), high=22, low=18),    # mid 20
            _rec(date(2024, 6, 10), high=33, low=27),   # mid 30
        ])
        assert moving_average(catalog, "AAPL", date(2024, 6, 11), 10) == pytest.approx(20.0)

    def test_anchor_day_excluded(self):
        catalog = PriceCatalog.from_records("AAPL", [
            _rec(date(2024, 6, 10), high=10, low=10),
            _rec(date(2024, 6, 11), high=1000, low=1000),
        ])
        assert moving_average(catalog, "AAPL", date(2024, 6, 11), 5) == pytest.approx(10.0)

    def test_no_data_is_zero(self, catalog):
        assert moving_average(catalog, "AAPL", date(2020, 1, 10), 5) == 0.0

    def test_unknown_ticker_is_zero(self, catalog):
        assert moving_average(catalog, "ZZZ", date(2024, 5, 21), 5) == 0.0

    def test_zero_window(self, catalog):
        assert moving_average(catalog, "AAPL", date(2024, 5, 21), 0) == 0.0

    def test_negative_window_rejected(self, catalog):
        with pytest.raises(ValueError):
            moving_average(catalog, "AAPL", date(2024, 5, 21), -1)

    def test_ramp_average(self, catalog):
        # Prior 5 calendar days of 05-22: 05-17 (i=12), 05-20 (13), 05-21 (14).
        # Midpoint is 100.5 + i.
        expected = (112.5 + 113.5 + 114.5) / 3
        assert moving_average(catalog, "AAPL", date(2024, 5, 22), 5) == pytest.approx(expected)


class TestCrossover:

    def test_rising_series_crosses_every_day(self, catalog):
        days = crossover_dates(catalog, "AAPL", date(2024, 5, 1), date(2024, 5, 10), 5)
        assert len(days) == 8
        assert days[0] == date(2024, 5, 1)
        assert all(d.weekday() < 5 for d in days)

    def test_flat_series_only_crosses_without_history(self, catalog):
        days = crossover_dates(catalog, "MSFT", date(2024, 5, 1), date(2024, 5, 10), 5)
        assert days == [date(2024, 5, 1)]

    def test_start_after_end_rejected(self, catalog):
        with pytest.raises(ValueError):
            crossover_dates(catalog, "AAPL", date(2024, 5, 10), date(2024, 5, 1), 5)

    def test_missing_close_raises(self):
        catalog = PriceCatalog.from_records("AAPL", [
            PriceRecord(date(2024, 5, 1), 1.0, 2.0, 0.5, None),
        ])
        with pytest.raises(MissingPriceData):
            crossover_dates(catalog, "AAPL", date(2024, 5, 1), date(2024, 5, 2), 5)


class TestInstrumentPerformance:

    def test_gain(self, catalog):
        # open 05-01 = 100, close 05-03 = 103
        assert instrument_performance(catalog, "AAPL", date(2024, 5, 1), date(2024, 5, 3)) == 3

    def test_flat(self, catalog):
        assert instrument_performance(catalog, "MSFT", date(2024, 5, 1), date(2024, 5, 31)) == 0

    def test_missing_start_raises(self, catalog):
        with pytest.raises(MissingPriceData):
            instrument_performance(catalog, "AAPL", date(2024, 5, 4), date(2024, 5, 10))

    def test_missing_end_raises(self, catalog):
        with pytest.raises(MissingPriceData):
            instrument_performance(catalog, "AAPL", date(2024, 5, 1), date(2024, 5, 5))


class TestHoldingValue:

    def test_strict_value(self, aapl_ledger, catalog):
        # 11 shares at close 116
        assert holding_value(aapl_ledger, catalog, date(2024, 5, 22)) == pytest.approx(1276)

    def test_strict_missing_close_raises(self, aapl_ledger, catalog):
        with pytest.raises(MissingPriceData):
            holding_value(aapl_ledger, catalog, date(2024, 5, 25))

    def test_lenient_missing_close_is_zero(self, aapl_ledger, catalog):
        assert holding_value_or_zero(aapl_ledger, catalog, date(2024, 5, 25)) == 0.0


class TestPortfolioValue:

    def test_zero_on_purchase_date(self, sample_portfolio, catalog):
        assert portfolio_value(sample_portfolio, catalog, date(2024, 5, 21)) == 0.0

    def test_zero_before_purchase_date(self, sample_portfolio, catalog):
        assert portfolio_value(sample_portfolio, catalog, date(2024, 5, 1)) == 0.0

    def test_value_after_purchase(self, sample_portfolio, catalog):
        # AAPL 11 x 116 + MSFT 10 x 50
        assert portfolio_value(sample_portfolio, catalog, date(2024, 5, 22)) == pytest.approx(1776)

    def test_weekend_is_zero(self, sample_portfolio, catalog):
        assert portfolio_value(sample_portfolio, catalog, date(2024, 5, 25)) == 0.0

    def test_partial_data_counts_available_holdings(self, sample_portfolio, aapl_records):
        only_aapl = PriceCatalog.from_records("AAPL", aapl_records)
        assert portfolio_value(sample_portfolio, only_aapl, date(2024, 5, 22)) == pytest.approx(1276)

    def test_empty_portfolio_raises(self, catalog):
        with pytest.raises(EmptyPortfolio):
            portfolio_value(PortfolioAggregate("empty"), catalog, date(2024, 5, 22))


class TestDistribution:

    def test_values_and_total(self, sample_portfolio, catalog):
        dist = distribution(sample_portfolio, catalog, date(2024, 5, 23))
        assert dist.values == {"AAPL": pytest.approx(2457), "MSFT": pytest.approx(500)}
        assert dist.total == pytest.approx(2957)

    def test_weights_sum_to_100(self, sample_portfolio, catalog):
        weights = distribution(sample_portfolio, catalog, date(2024, 5, 23)).weights()
        assert sum(weights.values()) == pytest.approx(100)

    def test_zero_total_weights(self, catalog):
        sold = PortfolioAggregate("p", {"MSFT": ShareLedger("MSFT", {date(2024, 5, 21): 5, date(2024, 5, 22): -5})})
        dist = distribution(sold, catalog, date(2024, 5, 23))
        assert dist.total == 0
        assert dist.weights() == {"MSFT": 0.0}

    def test_missing_close_raises(self, sample_portfolio, catalog):
        with pytest.raises(MissingPriceData):
            distribution(sample_portfolio, catalog, date(2024, 5, 25))
