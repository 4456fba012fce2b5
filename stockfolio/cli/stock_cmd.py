"""Single-stock analysis CLI commands: moving-average, crossover, performance."""

from __future__ import annotations

import click

from stockfolio.cli.common import DATE, as_date, fail, open_database


@click.group("stock")
def stock_group() -> None:
    """Analyze a single stock."""
    pass


def _catalog_for(ctx: click.Context, ticker: str):
    from stockfolio.config.loader import load_config
    from stockfolio.data.ingest import build_catalog

    config = load_config(ctx.obj.get("config_path"))
    with open_database(config) as db:
        catalog = build_catalog(db, [ticker], config)
    if catalog.date_range(ticker) is None:
        fail(f"No price data available for {ticker.upper()}.")
    return catalog


@stock_group.command("moving-average")
@click.argument("ticker")
@click.argument("day", type=DATE)
@click.option("--window", "-w", type=int, default=30, show_default=True,
              help="Number of calendar days before DAY to average")
@click.pass_context
def stock_moving_average(ctx: click.Context, ticker: str, day, window: int) -> None:
    """Average (high+low)/2 of TICKER over the WINDOW days before DAY."""
    from stockfolio.engine.valuation import moving_average

    catalog = _catalog_for(ctx, ticker)
    try:
        value = moving_average(catalog, ticker, as_date(day), window)
    except ValueError as e:
        fail(str(e))
    click.echo(f"{window}-day moving average of {ticker.upper()} before "
               f"{as_date(day)}: ${value:,.2f}")


@stock_group.command("crossover")
@click.argument("ticker")
@click.argument("start", type=DATE)
@click.argument("end", type=DATE)
@click.option("--window", "-w", type=int, default=30, show_default=True,
              help="Moving-average window in calendar days")
@click.pass_context
def stock_crossover(ctx: click.Context, ticker: str, start, end, window: int) -> None:
    """List days in [START, END] when TICKER closed above its moving average."""
    from stockfolio.engine.valuation import crossover_dates
    from stockfolio.errors import StockfolioError

    catalog = _catalog_for(ctx, ticker)
    try:
        days = crossover_dates(catalog, ticker, as_date(start), as_date(end), window)
    except (StockfolioError, ValueError) as e:
        fail(str(e))

    if not days:
        click.echo(f"No {window}-day crossovers for {ticker.upper()} in that range.")
        return
    click.echo(f"{window}-day crossovers for {ticker.upper()}:")
    for d in days:
        click.echo(f"  {d.isoformat()}")
    click.echo(f"\nTotal: {len(days)} day(s)")


@stock_group.command("performance")
@click.argument("ticker")
@click.argument("start", type=DATE)
@click.argument("end", type=DATE)
@click.pass_context
def stock_performance(ctx: click.Context, ticker: str, start, end) -> None:
    """Gain or loss of one TICKER share from open on START to close on END."""
    from stockfolio.engine.valuation import instrument_performance
    from stockfolio.errors import StockfolioError

    catalog = _catalog_for(ctx, ticker)
    try:
        change = instrument_performance(catalog, ticker, as_date(start), as_date(end))
    except StockfolioError as e:
        fail(str(e))

    verb = "gained" if change >= 0 else "lost"
    click.echo(f"{ticker.upper()} {verb} ${abs(change):,.2f} per share "
               f"from {as_date(start)} to {as_date(end)}")
