"""Inbound events: the only shapes the core ever sees.

The transport decodes raw platform updates into one of these once, at the
boundary. Everything past that point works on plain values.
"""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class MemberJoined:
    """A user became a member of a conversation."""

    conversation: int
    user_id: int
    handle: str
    is_bot: bool = False


@dataclass(frozen=True)
class MemberLeft:
    """A user left or was removed from a conversation."""

    conversation: int
    user_id: int
    is_bot: bool = False


@dataclass(frozen=True)
class MessageReceived:
    """A user authored a message in a conversation."""

    conversation: int
    user_id: int
    handle: str
    text: str
    message_id: int
    is_bot: bool = False


InboundEvent = Union[MemberJoined, MemberLeft, MessageReceived]
