"""Default values for data sources, trading rules and charting.

An empty ticker whitelist in config.yaml lifts the trading restriction.
"""

# ---------------------------------------------------------------------------
# Data sources
# ---------------------------------------------------------------------------
ALPHAVANTAGE_DEFAULTS = {
    "base_url": "https://www.alphavantage.co/query",
    "function": "TIME_SERIES_DAILY",
    "output_size": "full",
    "timeout": 15.0,
}

YFINANCE_DEFAULTS = {
    "period": "max",
}

# ---------------------------------------------------------------------------
# Trading rules
# ---------------------------------------------------------------------------
DEFAULT_TICKERS = ["GME", "MSFT", "AAPL", "AMZN", "GOOG", "INTC"]

# ---------------------------------------------------------------------------
# Performance series
# ---------------------------------------------------------------------------
CHART_DEFAULTS = {
    "bar_width": 20,      # number of scale steps between min and max value
    "max_years": 30,      # longest range a performance series may span
}

# Span thresholds for choosing the bucket granularity (days per unit)
DAYS_PER_YEAR = 365
DAYS_PER_MONTH = 30
