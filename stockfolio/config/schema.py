"""Pydantic models for config.yaml validation."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from stockfolio.config.defaults import (
    ALPHAVANTAGE_DEFAULTS,
    CHART_DEFAULTS,
    DEFAULT_TICKERS,
    YFINANCE_DEFAULTS,
)


# ---------------------------------------------------------------------------
# Data Source Configs
# ---------------------------------------------------------------------------

class AlphaVantageConfig(BaseModel):
    enabled: bool = True
    api_key: str = ""
    base_url: str = ALPHAVANTAGE_DEFAULTS["base_url"]
    output_size: str = ALPHAVANTAGE_DEFAULTS["output_size"]
    timeout: float = ALPHAVANTAGE_DEFAULTS["timeout"]


class YFinanceConfig(BaseModel):
    enabled: bool = True
    period: str = YFINANCE_DEFAULTS["period"]


class DataSourcesConfig(BaseModel):
    primary: Literal["alphavantage", "yfinance"] = "alphavantage"
    alphavantage: AlphaVantageConfig = Field(default_factory=AlphaVantageConfig)
    yfinance: YFinanceConfig = Field(default_factory=YFinanceConfig)


# ---------------------------------------------------------------------------
# Trading Config
# ---------------------------------------------------------------------------

class TradingConfig(BaseModel):
    whole_shares: bool = True
    allowed_tickers: list[str] = Field(default_factory=lambda: list(DEFAULT_TICKERS))

    @field_validator("allowed_tickers")
    @classmethod
    def upper_case_tickers(cls, v: list[str]) -> list[str]:
        return [t.strip().upper() for t in v if t and t.strip()]


# ---------------------------------------------------------------------------
# Output Configs
# ---------------------------------------------------------------------------

class ChartsConfig(BaseModel):
    bar_width: int = CHART_DEFAULTS["bar_width"]
    output_dir: str = "~/.stockfolio/charts"

    @field_validator("bar_width")
    @classmethod
    def bar_width_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"bar_width must be positive, got {v}")
        return v


class PortfoliosConfig(BaseModel):
    csv_dir: str = "~/.stockfolio/portfolios"


# ---------------------------------------------------------------------------
# Database Config
# ---------------------------------------------------------------------------

class DatabaseConfig(BaseModel):
    path: str = "~/.stockfolio/stockfolio.db"


# ---------------------------------------------------------------------------
# Top-Level Config
# ---------------------------------------------------------------------------

class StockfolioConfig(BaseModel):
    """Root configuration model for the Stockfolio application."""

    version: int = 1
    data_sources: DataSourcesConfig = Field(default_factory=DataSourcesConfig)
    trading: TradingConfig = Field(default_factory=TradingConfig)
    charts: ChartsConfig = Field(default_factory=ChartsConfig)
    portfolios: PortfoliosConfig = Field(default_factory=PortfoliosConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)

    @model_validator(mode="before")
    @classmethod
    def coerce_none_to_defaults(cls, data: Any) -> Any:
        """YAML parses empty keys as None. Coerce to proper defaults."""
        if isinstance(data, dict):
            for key in ("data_sources", "trading", "charts", "portfolios", "database"):
                if key in data and data[key] is None:
                    data[key] = {}
            trading = data.get("trading")
            if isinstance(trading, dict) and trading.get("allowed_tickers", []) is None:
                trading["allowed_tickers"] = []
        return data
