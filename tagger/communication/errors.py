"""Error classification for user-facing failure notices."""

import asyncio
from datetime import timedelta

import httpx
from telegram.error import BadRequest, ChatMigrated, Forbidden, NetworkError, RetryAfter, TelegramError, TimedOut

from ..errors import TransportFailure


def _seconds(value) -> int:
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    return int(value)


def classify_error(e: BaseException) -> str:
    """Classify a transport exception into a short message for the group.

    ``TransportFailure`` is unwrapped to its cause first.
    """
    # 1: Unwrap transport failures
    if isinstance(e, TransportFailure) and e.__cause__ is not None:
        return classify_error(e.__cause__)

    # 2: Timeouts (ours and the HTTP layer's)
    if isinstance(e, (asyncio.TimeoutError, TimedOut, httpx.TimeoutException)):
        return "⚠️ Telegram did not respond in time. Please try again."

    # 3-6: Telegram API errors
    if isinstance(e, RetryAfter):
        return f"⚠️ Telegram is rate limiting the bot. Please try again in {_seconds(e.retry_after)}s."
    if isinstance(e, Forbidden):
        return "⚠️ I'm not allowed to do that here. Check the bot's permissions in this group."
    if isinstance(e, ChatMigrated):
        return "⚠️ This group was upgraded to a supergroup. Please send the command again."
    if isinstance(e, BadRequest):
        return f"⚠️ Telegram rejected the request: {e.message}"

    # 7: Network errors
    if isinstance(e, (NetworkError, httpx.TransportError)):
        return "⚠️ Cannot reach Telegram right now. Please try again later."

    # 8: Any other Telegram error
    if isinstance(e, TelegramError):
        return f"⚠️ Telegram error: {e.message}"

    # 9: Fallback, with the type name for debugging
    type_name = type(e).__name__
    return f"⚠️ Something went wrong ({type_name}). Check logs for details."
