"""Tagger: Main entry point."""

import asyncio
import logging
import os
from typing import Optional

from .config import TaggerSettings, load_settings
from .communication.telegram import TelegramChannel

_log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("tagger")


def configure_logging(settings: TaggerSettings):
    """Console logging, plus a UTF-8 log file unless disabled."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]  # stderr (console)
    if settings.log_file:
        handlers.append(logging.FileHandler(os.path.expanduser(settings.log_file), encoding="utf-8"))

    logging.basicConfig(
        level=logging.INFO,
        format=_log_format,
        handlers=handlers,
    )
    if settings.debug:
        logging.getLogger("tagger").setLevel(logging.DEBUG)
    # PTB logs every getUpdates call through httpx at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run(settings: Optional[TaggerSettings] = None):
    """Main run loop."""
    settings = settings or load_settings()
    configure_logging(settings)

    if not settings.telegram_bot_token:
        logger.critical("Cannot start without a Telegram bot token (TAGGER_TELEGRAM_BOT_TOKEN).")
        return

    channel = TelegramChannel(settings)
    try:
        await channel.start()

        # Keep alive
        logger.info("Tagger is running. Press Ctrl+C to stop.")
        while True:
            await asyncio.sleep(1)

    except (KeyboardInterrupt, asyncio.CancelledError):
        pass
    except Exception as e:
        logger.critical(f"Fatal error: {type(e).__name__}: {e}", exc_info=True)
    finally:
        await channel.stop()


def main():
    """Entry point."""
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
