"""Show effective configuration."""

import click
from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from . import cli
from .shared import console, mask_secret


@cli.command()
def config():
    """Show the effective settings (environment and .env)."""
    from tagger.config import TaggerSettings

    try:
        settings = TaggerSettings()
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red]\n{escape(str(e))}")
        raise click.exceptions.Exit(1)

    table = Table(title="Tagger settings")
    table.add_column("Setting", style="bold")
    table.add_column("Value")
    table.add_column("Env var", style="dim")

    prefix = TaggerSettings.model_config.get("env_prefix", "")
    for name in TaggerSettings.model_fields:
        value = getattr(settings, name)
        shown = mask_secret(value) if name == "telegram_bot_token" else str(value)
        table.add_row(name, shown, f"{prefix}{name}".upper())

    console.print(table)
