"""Price cache CLI commands: fetch, show."""

from __future__ import annotations

import click

from stockfolio.cli.common import DATE, as_date, fail, open_database


@click.group("prices")
def prices_group() -> None:
    """Fetch and inspect cached daily prices."""
    pass


@prices_group.command("fetch")
@click.argument("symbols", nargs=-1, required=True)
@click.option("--refresh", is_flag=True, help="Re-download even if prices are cached")
@click.pass_context
def prices_fetch(ctx: click.Context, symbols: tuple[str, ...], refresh: bool) -> None:
    """Download daily prices for SYMBOLS into the cache."""
    from stockfolio.config.loader import load_config
    from stockfolio.data.ingest import ingest_ticker
    from stockfolio.storage.queries import has_prices

    config = load_config(ctx.obj.get("config_path"))
    failed = []
    with open_database(config) as db:
        for symbol in symbols:
            symbol = symbol.upper().strip()
            written = ingest_ticker(db, symbol, config, refresh=refresh)
            if written:
                click.echo(f"  {symbol}: {written} records")
            elif has_prices(db, symbol):
                click.echo(f"  {symbol}: cached")
            else:
                click.echo(f"  {symbol}: no data", err=True)
                failed.append(symbol)

    if failed:
        fail(f"Could not fetch prices for: {', '.join(failed)}")


@prices_group.command("show")
@click.argument("symbol", required=False)
@click.option("--start", type=DATE, default=None, help="First date (YYYY-MM-DD)")
@click.option("--end", type=DATE, default=None, help="Last date (YYYY-MM-DD)")
@click.option("--limit", type=int, default=20, show_default=True, help="Most recent N rows")
@click.pass_context
def prices_show(ctx: click.Context, symbol: str | None, start, end, limit: int) -> None:
    """Show cached prices for SYMBOL, or a summary of all cached tickers."""
    from stockfolio.config.loader import load_config
    from stockfolio.storage.queries import list_price_tickers, load_price_records

    config = load_config(ctx.obj.get("config_path"))
    with open_database(config) as db:
        if symbol is None:
            rows = list_price_tickers(db)
            if not rows:
                click.echo("No prices cached.")
                return
            click.echo(f"{'Ticker':<8} {'Records':>8}  {'First':<10}  {'Last':<10}")
            click.echo("-" * 44)
            for r in rows:
                click.echo(
                    f"{r['ticker']:<8} {r['records']:>8}  {r['first_date']:<10}  {r['last_date']:<10}"
                )
            return

        records = load_price_records(
            db, symbol,
            start=as_date(start) if start else None,
            end=as_date(end) if end else None,
        )

    if not records:
        fail(f"No cached prices for {symbol.upper()}.")

    click.echo(f"{'Date':<10} {'Open':>10} {'High':>10} {'Low':>10} {'Close':>10} {'Volume':>12}")
    click.echo("-" * 67)
    for r in records[-limit:]:
        cells = [f"{v:>10.2f}" if v is not None else f"{'-':>10}"
                 for v in (r.open, r.high, r.low, r.close)]
        click.echo(f"{r.date.isoformat():<10} {' '.join(cells)} {r.volume:>12,}")
