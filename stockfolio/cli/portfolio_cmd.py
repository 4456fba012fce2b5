"""Portfolio CLI commands.

create, list, show, buy, sell, value, distribution, rebalance, chart,
export, import, delete.
"""

from __future__ import annotations

from pathlib import Path

import click

from stockfolio.cli.common import (
    DATE,
    as_date,
    chart_path,
    fail,
    open_database,
    parse_targets,
)


@click.group("portfolio")
def portfolio_group() -> None:
    """Build, trade, value and rebalance portfolios."""
    pass


def _load(ctx: click.Context):
    from stockfolio.config.loader import load_config

    return load_config(ctx.obj.get("config_path"))


def _repository(db):
    from stockfolio.portfolio.repository import PortfolioRepository
    from stockfolio.storage.stores import SqlitePortfolioStore

    return PortfolioRepository(store=SqlitePortfolioStore(db))


def _get(repo, name: str):
    try:
        return repo.get(name)
    except KeyError:
        fail(f"Portfolio {name!r} does not exist.")


@portfolio_group.command("create")
@click.argument("name")
@click.pass_context
def portfolio_create(ctx: click.Context, name: str) -> None:
    """Create an empty portfolio NAME."""
    from stockfolio.portfolio.aggregate import PortfolioAggregate

    config = _load(ctx)
    with open_database(config) as db:
        repo = _repository(db)
        if name in repo:
            fail(f"Portfolio {name!r} already exists.")
        repo.put(PortfolioAggregate(name))
    click.echo(f"Created portfolio {name}.")


@portfolio_group.command("list")
@click.pass_context
def portfolio_list(ctx: click.Context) -> None:
    """List stored portfolios."""
    from stockfolio.storage.queries import list_portfolios

    config = _load(ctx)
    with open_database(config) as db:
        rows = list_portfolios(db)

    if not rows:
        click.echo("No portfolios. Create one with: stockfolio portfolio create NAME")
        return
    click.echo(f"{'Name':<20} {'Holdings':>8}  {'Updated'}")
    click.echo("-" * 50)
    for r in rows:
        click.echo(f"{r['name']:<20} {r['holdings']:>8}  {r['updated_at']}")


@portfolio_group.command("show")
@click.argument("name")
@click.pass_context
def portfolio_show(ctx: click.Context, name: str) -> None:
    """Show holdings and transactions of portfolio NAME."""
    from stockfolio.output.text import render_holdings

    config = _load(ctx)
    with open_database(config) as db:
        portfolio = _get(_repository(db), name)
    click.echo(render_holdings(portfolio))


@portfolio_group.command("buy")
@click.argument("name")
@click.argument("ticker")
@click.argument("day", type=DATE)
@click.argument("shares", type=float)
@click.pass_context
def portfolio_buy(ctx: click.Context, name: str, ticker: str, day, shares: float) -> None:
    """Buy SHARES of TICKER on DAY in portfolio NAME."""
    from stockfolio.data.ingest import build_catalog
    from stockfolio.errors import StockfolioError
    from stockfolio.portfolio.trading import buy, check_ticker_allowed

    config = _load(ctx)
    try:
        symbol = check_ticker_allowed(ticker, config.trading.allowed_tickers)
    except StockfolioError as e:
        fail(str(e))

    with open_database(config) as db:
        repo = _repository(db)
        portfolio = _get(repo, name)
        catalog = build_catalog(db, [symbol], config)
        try:
            updated = buy(
                portfolio, symbol, as_date(day), shares, catalog,
                whole_shares=config.trading.whole_shares,
                allowed_tickers=config.trading.allowed_tickers,
            )
        except StockfolioError as e:
            fail(str(e))
        repo.put(updated)

    click.echo(f"Bought {shares:g} {symbol} on {as_date(day)} in {name}.")


@portfolio_group.command("sell")
@click.argument("name")
@click.argument("ticker")
@click.argument("day", type=DATE)
@click.argument("shares", type=float)
@click.pass_context
def portfolio_sell(ctx: click.Context, name: str, ticker: str, day, shares: float) -> None:
    """Sell SHARES of TICKER on DAY from portfolio NAME."""
    from stockfolio.data.ingest import build_catalog
    from stockfolio.errors import StockfolioError
    from stockfolio.portfolio.trading import sell

    config = _load(ctx)
    symbol = ticker.upper().strip()
    with open_database(config) as db:
        repo = _repository(db)
        portfolio = _get(repo, name)
        catalog = build_catalog(db, [symbol], config)
        try:
            updated = sell(
                portfolio, symbol, as_date(day), shares, catalog,
                whole_shares=config.trading.whole_shares,
            )
        except StockfolioError as e:
            fail(str(e))
        repo.put(updated)

    click.echo(f"Sold {shares:g} {symbol} on {as_date(day)} from {name}.")
    if symbol not in updated:
        click.echo(f"  {symbol} position closed.")


@portfolio_group.command("value")
@click.argument("name")
@click.argument("day", type=DATE)
@click.pass_context
def portfolio_value_cmd(ctx: click.Context, name: str, day) -> None:
    """Total value of portfolio NAME at the close of DAY."""
    from stockfolio.data.ingest import build_catalog
    from stockfolio.engine.valuation import portfolio_value
    from stockfolio.errors import StockfolioError

    config = _load(ctx)
    with open_database(config) as db:
        portfolio = _get(_repository(db), name)
        catalog = build_catalog(db, portfolio.tickers, config)

    on_date = as_date(day)
    try:
        value = portfolio_value(portfolio, catalog, on_date)
    except StockfolioError as e:
        fail(str(e))
    click.echo(f"Value of {name} on {on_date}: ${value:,.2f}")


@portfolio_group.command("distribution")
@click.argument("name")
@click.argument("day", type=DATE)
@click.option("--html", "html_path", is_flag=False, flag_value="", default=None,
              metavar="[PATH]",
              help="Also write a Plotly donut chart (default: <output_dir>/NAME-distribution.html)")
@click.pass_context
def portfolio_distribution(ctx: click.Context, name: str, day, html_path: str | None) -> None:
    """Per-holding value breakdown of NAME on DAY."""
    from stockfolio.data.ingest import build_catalog
    from stockfolio.engine.valuation import distribution
    from stockfolio.errors import StockfolioError
    from stockfolio.output.charts import build_distribution_chart, write_chart_html
    from stockfolio.output.text import render_distribution

    config = _load(ctx)
    with open_database(config) as db:
        portfolio = _get(_repository(db), name)
        catalog = build_catalog(db, portfolio.tickers, config)

    on_date = as_date(day)
    if not portfolio.is_valid_for_all(on_date, catalog):
        fail(f"{on_date} is not a trading day for every holding of {name}.")
    try:
        dist = distribution(portfolio, catalog, on_date)
    except StockfolioError as e:
        fail(str(e))

    click.echo(render_distribution(dist))
    if html_path is not None:
        target = chart_path(config, html_path, name, "distribution")
        path = write_chart_html(build_distribution_chart(dist), target)
        click.echo(f"\nChart: {path}")


@portfolio_group.command("rebalance")
@click.argument("name")
@click.argument("day", type=DATE)
@click.argument("targets", nargs=-1, required=True)
@click.option("--dry-run", is_flag=True, help="Show the trades without applying them")
@click.option("--html", "html_path", is_flag=False, flag_value="", default=None,
              metavar="[PATH]",
              help="Also write a current-vs-target chart (default: <output_dir>/NAME-rebalance.html)")
@click.pass_context
def portfolio_rebalance(
    ctx: click.Context, name: str, day, targets: tuple[str, ...], dry_run: bool,
    html_path: str | None,
) -> None:
    """Rebalance NAME on DAY to TARGETS given as TICKER=PERCENT pairs."""
    from stockfolio.data.ingest import build_catalog
    from stockfolio.engine.rebalance import RebalanceSolver, apply_plan
    from stockfolio.errors import StockfolioError
    from stockfolio.output.charts import build_rebalance_chart, write_chart_html
    from stockfolio.output.text import render_rebalance

    allocation = parse_targets(targets)
    config = _load(ctx)
    with open_database(config) as db:
        repo = _repository(db)
        portfolio = _get(repo, name)
        catalog = build_catalog(db, portfolio.tickers, config)
        try:
            plan = RebalanceSolver(catalog).plan(portfolio, as_date(day), allocation)
        except StockfolioError as e:
            fail(str(e))

        click.echo(render_rebalance(plan))
        if html_path is not None:
            target = chart_path(config, html_path, name, "rebalance")
            path = write_chart_html(build_rebalance_chart(plan), target)
            click.echo(f"\nChart: {path}")
        if dry_run:
            click.echo("\n[Dry run] No changes written.")
            return
        repo.put(apply_plan(portfolio, plan))

    click.echo(f"\nApplied {len(plan.active_trades)} trade(s) to {name}.")


@portfolio_group.command("chart")
@click.argument("name")
@click.argument("start", type=DATE)
@click.argument("end", type=DATE)
@click.option("--html", "html_path", is_flag=False, flag_value="", default=None,
              metavar="[PATH]",
              help="Also write a Plotly bar chart (default: <output_dir>/NAME-performance.html)")
@click.pass_context
def portfolio_chart(ctx: click.Context, name: str, start, end, html_path: str | None) -> None:
    """Performance of NAME from START to END as a bar chart."""
    from stockfolio.data.ingest import build_catalog
    from stockfolio.engine.timeline import performance_series
    from stockfolio.errors import StockfolioError
    from stockfolio.output.charts import build_performance_chart, write_chart_html
    from stockfolio.output.text import render_performance

    config = _load(ctx)
    with open_database(config) as db:
        portfolio = _get(_repository(db), name)
        catalog = build_catalog(db, portfolio.tickers, config)

    try:
        series = performance_series(portfolio, catalog, as_date(start), as_date(end))
    except (StockfolioError, ValueError) as e:
        fail(str(e))

    click.echo(render_performance(series, config.charts.bar_width))
    if html_path is not None:
        target = chart_path(config, html_path, name, "performance")
        path = write_chart_html(build_performance_chart(series), target)
        click.echo(f"\nChart: {path}")


@portfolio_group.command("export")
@click.argument("name")
@click.argument("path", type=click.Path(), required=False)
@click.pass_context
def portfolio_export(ctx: click.Context, name: str, path: str | None) -> None:
    """Write NAME to a CSV file (default: <csv_dir>/<NAME>.csv)."""
    from stockfolio.config.loader import resolve_path
    from stockfolio.storage.records import write_portfolio_csv

    config = _load(ctx)
    with open_database(config) as db:
        portfolio = _get(_repository(db), name)

    target = Path(path) if path else resolve_path(config.portfolios.csv_dir) / f"{name}.csv"
    written = write_portfolio_csv(portfolio, target)
    click.echo(f"Exported {name} to {written}")


@portfolio_group.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", default=None, help="Portfolio name (default: file name)")
@click.option("--replace", is_flag=True, help="Overwrite an existing portfolio")
@click.pass_context
def portfolio_import(ctx: click.Context, path: str, name: str | None, replace: bool) -> None:
    """Load a portfolio from a CSV file."""
    from stockfolio.storage.records import RecordFormatError, read_portfolio_csv

    config = _load(ctx)
    try:
        portfolio = read_portfolio_csv(path, name)
    except RecordFormatError as e:
        fail(f"Could not read {path}: {e}")

    with open_database(config) as db:
        repo = _repository(db)
        if portfolio.name in repo and not replace:
            fail(f"Portfolio {portfolio.name!r} already exists (use --replace).")
        repo.put(portfolio)

    click.echo(f"Imported {portfolio.name} with {len(portfolio)} holding(s).")


@portfolio_group.command("delete")
@click.argument("name")
@click.confirmation_option(prompt="Delete this portfolio?")
@click.pass_context
def portfolio_delete(ctx: click.Context, name: str) -> None:
    """Delete portfolio NAME."""
    config = _load(ctx)
    with open_database(config) as db:
        removed = _repository(db).discard(name)
    if not removed:
        fail(f"Portfolio {name!r} does not exist.")
    click.echo(f"Deleted portfolio {name}.")
