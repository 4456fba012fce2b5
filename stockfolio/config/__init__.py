"""Configuration loading, validation, and defaults."""

from stockfolio.config.loader import load_config
from stockfolio.config.schema import StockfolioConfig

__all__ = ["load_config", "StockfolioConfig"]
