"""Communication layer: Telegram formatting, outbound splitting, error notices.

The Telegram channel itself lives in ``tagger.communication.telegram`` and
is imported explicitly by the entry point.
"""

from .formatting import escape, mention, spoiler, utf16_len
from .outbound import TELEGRAM_MAX_LENGTH, split_message

__all__ = [
    "escape",
    "mention",
    "spoiler",
    "utf16_len",
    "TELEGRAM_MAX_LENGTH",
    "split_message",
]
