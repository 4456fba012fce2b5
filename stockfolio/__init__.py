"""Stockfolio -- share ledgers and point-in-time portfolio valuation."""

__version__ = "0.1.0"
