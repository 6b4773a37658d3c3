"""Start command."""

import asyncio
import click

from . import cli
from .shared import console


@cli.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def start(debug):
    """Start the Telegram bot."""
    from tagger.config import load_settings
    from tagger.main import run

    settings = load_settings(debug=True) if debug else load_settings()
    console.print("[bold blue]Starting Tagger...[/bold blue]")
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        pass
