"""Telegram HTML helpers for mentions.

Telegram supports a limited HTML subset. The ones used here:
  <a href="tg://user?id=123">name</a>  : text mention, works for users without a username
  <tg-spoiler>...</tg-spoiler>         : hidden until tapped

Message length limits apply to the text *after* entity parsing, counted
in UTF-16 code units, so tags never count and escaped characters count once.
"""

import html as _html


def escape(text: str) -> str:
    """Escape HTML special characters in plain text segments."""
    return _html.escape(text, quote=False)


def utf16_len(text: str) -> int:
    """Length of ``text`` the way Telegram counts it."""
    return len(text.encode("utf-16-le")) // 2


def mention(user_id: int, name: str) -> str:
    """Render a text mention for a user."""
    return f'<a href="tg://user?id={user_id}">{escape(name)}</a>'


def spoiler(html: str) -> str:
    return f"<tg-spoiler>{html}</tg-spoiler>"
