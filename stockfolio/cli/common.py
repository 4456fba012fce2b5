"""Helpers shared by the CLI command modules."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Generator

import click

from stockfolio.config.schema import StockfolioConfig
from stockfolio.storage.database import Database

DATE = click.DateTime(formats=["%Y-%m-%d"])


def as_date(value) -> date:
    """click.DateTime yields datetimes; the engine works on dates."""
    return value.date()


def fail(message: str) -> None:
    """Print *message* to stderr and exit with status 1."""
    click.echo(message, err=True)
    raise SystemExit(1)


@contextmanager
def open_database(config: StockfolioConfig) -> Generator[Database, None, None]:
    """Open the configured database with the schema applied."""
    from stockfolio.config.loader import resolve_path
    from stockfolio.storage.migrations import ensure_schema

    with Database(resolve_path(config.database.path)) as db:
        ensure_schema(db)
        yield db


def chart_path(config: StockfolioConfig, html_path: str, name: str, kind: str) -> Path:
    """Explicit *html_path*, or the default chart file for *name* and *kind*."""
    from stockfolio.config.loader import resolve_path

    if html_path:
        return Path(html_path)
    return resolve_path(config.charts.output_dir) / f"{name}-{kind}.html"


def parse_targets(pairs: tuple[str, ...]) -> dict[str, int]:
    """``("AAPL=60", "MSFT=40")`` -> ``{"AAPL": 60, "MSFT": 40}``."""
    targets: dict[str, int] = {}
    for pair in pairs:
        ticker, sep, pct = pair.partition("=")
        if not sep or not ticker.strip():
            raise click.BadParameter(f"expected TICKER=PERCENT, got {pair!r}")
        try:
            targets[ticker.strip().upper()] = int(pct)
        except ValueError:
            raise click.BadParameter(f"percentage for {ticker} must be a whole number") from None
    return targets
