"""Config CLI commands: show, validate."""

from __future__ import annotations

import click


@click.group("config")
def config_group() -> None:
    """Manage configuration."""
    pass


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the resolved configuration."""
    import json

    from stockfolio.config.loader import load_config

    config = load_config(ctx.obj.get("config_path"))
    dumped = config.model_dump()
    if dumped["data_sources"]["alphavantage"]["api_key"]:
        dumped["data_sources"]["alphavantage"]["api_key"] = "****"
    click.echo(json.dumps(dumped, indent=2, default=str))


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate config.yaml against the schema."""
    from stockfolio.config.loader import load_config

    try:
        config = load_config(ctx.obj.get("config_path"))
        sources = config.data_sources
        click.echo("Config is valid.")
        click.echo(f"  Version: {config.version}")
        click.echo(f"  Primary source: {sources.primary}")
        click.echo(f"  Data sources: alphavantage={sources.alphavantage.enabled}, "
                   f"yfinance={sources.yfinance.enabled}")
        allowed = ", ".join(config.trading.allowed_tickers) or "any"
        click.echo(f"  Allowed tickers: {allowed}")
        click.echo(f"  Database: {config.database.path}")
    except Exception as e:
        click.echo(f"Config validation failed: {e}", err=True)
        raise SystemExit(1) from None
