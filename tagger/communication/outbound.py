"""Outbound text helpers shared by the composer and the channel."""

from .formatting import utf16_len

# Telegram's limit for message text, in UTF-16 code units after entity parsing
TELEGRAM_MAX_LENGTH = 4096


def _cut_index(text: str, max_length: int) -> int:
    """Largest prefix length of ``text`` that fits in ``max_length`` UTF-16 units."""
    units = 0
    for i, ch in enumerate(text):
        units += 2 if ord(ch) > 0xFFFF else 1
        if units > max_length:
            return i
    return len(text)


def split_message(text: str, max_length: int = TELEGRAM_MAX_LENGTH) -> list[str]:
    """Split plain text into chunks respecting platform length limits.

    Tries to split at newlines first, then spaces, then hard-cuts.

    Args:
        text: Message text to split
        max_length: Maximum length per chunk in UTF-16 code units

    Returns:
        List of message chunks
    """
    if utf16_len(text) <= max_length:
        return [text]

    chunks = []
    remaining = text

    while remaining:
        if utf16_len(remaining) <= max_length:
            chunks.append(remaining)
            break

        limit = max(1, _cut_index(remaining, max_length))

        # Try splitting at a newline
        split_at = remaining.rfind("\n", 0, limit)
        if split_at <= 0:
            # Try splitting at a space
            split_at = remaining.rfind(" ", 0, limit)
        if split_at <= 0:
            # Hard cut
            split_at = limit

        chunks.append(remaining[:split_at])
        remaining = remaining[split_at:].lstrip()

    return chunks
