"""Tagger: Telegram bot that mentions every known member of a group."""

__version__ = "0.1.0"
