"""Transport interface: what the core needs from the messaging platform."""

from abc import ABC, abstractmethod

from .roster import Participant


class Transport(ABC):
    """Outbound capabilities of a messaging platform.

    Implementations wrap platform errors in ``TransportFailure``.
    """

    @abstractmethod
    async def send_reply(self, conversation: int, reply_to_message_id: int | None, text: str) -> None:
        """Send ``text`` (HTML) to the conversation as a reply."""

    @abstractmethod
    async def is_administrator(self, conversation: int, user_id: int) -> bool:
        """Whether the user currently holds administrator or owner status."""

    async def list_administrators(self, conversation: int) -> list[Participant]:
        """Administrators of the conversation, if the platform can list them."""
        return []
