"""Top-level CLI entry point for Stockfolio."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from stockfolio import __version__


@click.group()
@click.version_option(version=__version__, prog_name="stockfolio")
@click.option(
    "--config",
    type=click.Path(),
    default=None,
    envvar="STOCKFOLIO_CONFIG",
    help="Path to config.yaml",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Stockfolio -- stock portfolio tracking, valuation and rebalancing."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


# Register sub-commands
from stockfolio.cli.config_cmd import config_group  # noqa: E402
from stockfolio.cli.portfolio_cmd import portfolio_group  # noqa: E402
from stockfolio.cli.prices_cmd import prices_group  # noqa: E402
from stockfolio.cli.stock_cmd import stock_group  # noqa: E402

cli.add_command(config_group, "config")
cli.add_command(portfolio_group, "portfolio")
cli.add_command(prices_group, "prices")
cli.add_command(stock_group, "stock")


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Initialize Stockfolio: create directories, database, and example config."""
    from stockfolio.config.loader import load_config, resolve_path
    from stockfolio.storage.database import Database
    from stockfolio.storage.migrations import ensure_schema

    config = load_config(ctx.obj.get("config_path"))

    stockfolio_dir = Path("~/.stockfolio").expanduser()
    stockfolio_dir.mkdir(parents=True, exist_ok=True)

    for dir_path in (
        resolve_path(config.charts.output_dir),
        resolve_path(config.portfolios.csv_dir),
    ):
        dir_path.mkdir(parents=True, exist_ok=True)
        click.echo(f"  Created {dir_path}")

    db_path = resolve_path(config.database.path)
    click.echo(f"  Database: {db_path}")
    with Database(db_path) as db:
        version = ensure_schema(db)
        click.echo(f"  Schema version: {version}")

    user_config = stockfolio_dir / "config.yaml"
    if not user_config.exists():
        example = Path(__file__).parent.parent.parent / "config.yaml.example"
        if example.exists():
            import shutil
            shutil.copy2(example, user_config)
            click.echo(f"  Copied example config to {user_config}")

    click.echo("\nStockfolio initialized successfully.")
    click.echo("Next steps:")
    click.echo(f"  1. Edit {user_config} to add your AlphaVantage API key")
    click.echo("  2. Run: stockfolio prices fetch AAPL      (to cache prices)")
    click.echo("  3. Run: stockfolio portfolio create main  (to start a portfolio)")
