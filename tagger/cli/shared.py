"""Shared utilities for Tagger CLI commands."""

from rich.console import Console

console = Console()


def mask_secret(value: str | None) -> str:
    """Show only the tail of a secret, e.g. a bot token."""
    if not value:
        return "[dim]not set[/dim]"
    if len(value) <= 8:
        return "****"
    return f"****{value[-4:]}"
