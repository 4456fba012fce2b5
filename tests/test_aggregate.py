"""Tests for PortfolioAggregate and PortfolioBuilder."""

from __future__ import annotations

from datetime import date

import pytest

from stockfolio.errors import EmptyPortfolio, MissingPriceData
from stockfolio.market.catalog import PriceCatalog, PriceRecord
from stockfolio.portfolio.aggregate import PortfolioAggregate, PortfolioBuilder
from stockfolio.portfolio.ledger import ShareLedger

D20 = date(2024, 5, 20)
D21 = date(2024, 5, 21)
D23 = date(2024, 5, 23)
D25 = date(2024, 5, 25)


class TestDates:

    def test_purchase_and_latest_dates(self, sample_portfolio):
        assert sample_portfolio.purchase_date() == D21
        assert sample_portfolio.latest_date() == D23

    def test_empty_portfolio_raises(self):
        empty = PortfolioAggregate("empty")
        with pytest.raises(EmptyPortfolio):
            empty.purchase_date()
        with pytest.raises(EmptyPortfolio):
            empty.latest_date()

    def test_shares_as_of(self, sample_portfolio):
        assert sample_portfolio.shares_as_of(D21) == {"AAPL": 5, "MSFT": 10}
        assert sample_portfolio.shares_as_of(D20) == {"AAPL": 0, "MSFT": 0}


class TestValidity:

    def test_valid_on_trading_day(self, sample_portfolio, catalog):
        assert sample_portfolio.is_valid_for_all(D21, catalog)

    def test_invalid_on_weekend(self, sample_portfolio, catalog):
        assert not sample_portfolio.is_valid_for_all(D25, catalog)

    def test_invalid_when_one_ticker_missing(self, sample_portfolio, aapl_records):
        only_aapl = PriceCatalog.from_records("AAPL", aapl_records)
        assert not sample_portfolio.is_valid_for_all(D21, only_aapl)

    def test_zero_share_holding_still_gates(self, catalog):
        sold_out = ShareLedger("GOOG", {D21: 5, D23: -5})
        portfolio = PortfolioAggregate("p", {"GOOG": sold_out})
        assert not portfolio.is_valid_for_all(D21, catalog)

    def test_empty_portfolio_is_valid(self, catalog):
        assert PortfolioAggregate("empty").is_valid_for_all(D25, catalog)


class TestCopyOnWrite:

    def test_with_added_replaces_ledger(self, sample_portfolio):
        new_ledger = ShareLedger.with_purchase("AAPL", D21, 1)
        updated = sample_portfolio.with_added(new_ledger)
        assert updated.ledger("AAPL") is new_ledger
        assert sample_portfolio.ledger("AAPL").total_shares == 21

    def test_with_removed(self, sample_portfolio):
        updated = sample_portfolio.with_removed("msft")
        assert updated.tickers == ["AAPL"]
        assert "MSFT" in sample_portfolio

    def test_removing_absent_ticker_is_noop(self, sample_portfolio):
        assert sample_portfolio.with_removed("GOOG") is sample_portfolio

    def test_holdings_are_read_only(self, sample_portfolio):
        with pytest.raises(TypeError):
            sample_portfolio.holdings["GOOG"] = ShareLedger.empty("GOOG")  # type: ignore[index]

    def test_key_must_match_ticker(self):
        with pytest.raises(ValueError, match="does not match"):
            PortfolioAggregate("bad", {"MSFT": ShareLedger.empty("AAPL")})


class TestBuilder:

    def test_each_step_returns_new_builder(self, catalog):
        base = PortfolioBuilder("p")
        with_aapl = base.add(ShareLedger.with_purchase("AAPL", D21, 1), catalog)
        assert base.tickers == []
        assert with_aapl.tickers == ["AAPL"]

    def test_build(self, catalog):
        portfolio = (
            PortfolioBuilder("p")
            .add(ShareLedger.with_purchase("AAPL", D21, 1), catalog)
            .add(ShareLedger.with_purchase("MSFT", D21, 2), catalog)
            .build()
        )
        assert portfolio.tickers == ["AAPL", "MSFT"]

    def test_add_unknown_ticker_raises(self, catalog):
        with pytest.raises(MissingPriceData):
            PortfolioBuilder("p").add(ShareLedger.with_purchase("ZZZ", D21, 1), catalog)

    def test_add_without_catalog_skips_check(self):
        builder = PortfolioBuilder("p").add(ShareLedger.with_purchase("ZZZ", D21, 1))
        assert builder.tickers == ["ZZZ"]

    def test_single_record_catalog(self):
        catalog = PriceCatalog.from_records(
            "ZZZ", [PriceRecord(D21, 1.0, 1.0, 1.0, 1.0)]
        )
        portfolio = PortfolioBuilder("p").add(ShareLedger.with_purchase("ZZZ", D21, 1), catalog).build()
        assert "zzz" in portfolio
