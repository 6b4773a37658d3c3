"""Tagger CLI: command line interface."""

import click
from tagger import __version__


@click.group()
@click.version_option(version=__version__, prog_name="tagger")
def cli():
    """Tagger: mention every known member of a Telegram group."""


# Import all command modules (registers commands onto cli group)
from . import cmd_start  # noqa: E402, F401
from . import cmd_config  # noqa: E402, F401
