"""Read-only daily price data keyed by ticker and date."""

from stockfolio.market.catalog import PriceCatalog, PriceRecord, parse_date

__all__ = ["PriceCatalog", "PriceRecord", "parse_date"]
