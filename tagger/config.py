"""Tagger configuration management."""

import logging
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger("tagger.config")


class TaggerSettings(BaseSettings):
    """Settings loaded from environment variables or .env file."""

    # Telegram
    telegram_bot_token: Optional[str] = Field(default=None, description="Telegram bot token")
    concurrent_updates: int = Field(default=256, ge=1, description="Updates processed in parallel")

    # Command
    command: str = Field(default="all", pattern=r"^[a-z0-9_]{1,32}$", description="Trigger command without slash")
    deny_policy: Literal["reply", "silent"] = Field(
        default="reply", description="What non-admins get back: a denial reply or nothing"
    )
    sync_administrators: bool = Field(default=True, description="Add group admins to the roster before tagging")
    hide_mentions: bool = Field(default=True, description="Wrap the mention list in a spoiler")
    rate_limit_max: int = Field(default=3, ge=1, description="Tag-all commands allowed per window per group")
    rate_limit_window: int = Field(default=60, ge=1, description="Rate limit window in seconds")

    # Transport
    max_message_length: int = Field(default=4096, ge=64, le=4096, description="Message text limit")
    transport_timeout: float = Field(default=10.0, gt=0, description="Seconds to wait for a Telegram call")

    # Logging
    log_file: str = Field(default="~/tagger.log", description="Log file path (empty to disable)")
    debug: bool = Field(default=False, description="Debug logging")

    model_config = {"env_prefix": "TAGGER_", "env_file": ".env", "extra": "ignore"}


def load_settings(**overrides) -> TaggerSettings:
    """Load settings from environment."""
    settings = TaggerSettings(**overrides)

    if not settings.telegram_bot_token:
        logger.warning("No Telegram bot token configured. Set TAGGER_TELEGRAM_BOT_TOKEN in the environment or .env.")

    return settings
