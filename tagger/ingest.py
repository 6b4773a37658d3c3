"""Event ingestor: turns inbound events into roster updates."""

import logging
from typing import Optional

from .events import InboundEvent, MemberJoined, MemberLeft, MessageReceived
from .roster import RosterStore

logger = logging.getLogger("tagger.ingest")


class EventIngestor:
    """Apply membership evidence to the roster store.

    Joins and authored messages establish presence; leave notifications
    remove it. Bot accounts are never tracked.

    The ingestor also follows the bot's own membership. When the bot is
    removed from a group its roster is dropped and later events for that
    group are ignored until the bot is added back.
    """

    def __init__(self, store: RosterStore, bot_user_id: Optional[int] = None):
        self.store = store
        self.bot_user_id = bot_user_id
        self._departed: set[int] = set()

    def is_active(self, conversation: int) -> bool:
        """Whether the bot is (as far as we know) a member of the conversation."""
        return conversation not in self._departed

    async def ingest(self, event: InboundEvent) -> None:
        if self._is_self(event):
            await self._track_self(event)
            return

        if not self.is_active(event.conversation):
            logger.debug(f"[{event.conversation}] Ignoring {type(event).__name__}: bot is not a member")
            return

        if event.is_bot:
            return

        if isinstance(event, MemberJoined):
            added = await self.store.upsert(event.conversation, event.user_id, event.handle)
            if added:
                logger.info(f"[{event.conversation}] Member joined: {event.handle} (ID: {event.user_id})")
        elif isinstance(event, MemberLeft):
            removed = await self.store.remove(event.conversation, event.user_id)
            if removed:
                logger.info(f"[{event.conversation}] Member left: ID {event.user_id}")
        elif isinstance(event, MessageReceived):
            added = await self.store.upsert(event.conversation, event.user_id, event.handle)
            if added:
                logger.info(f"[{event.conversation}] Tracked user from message: {event.handle} (ID: {event.user_id})")
        else:
            raise TypeError(f"Unknown event type: {type(event).__name__}")

    def _is_self(self, event: InboundEvent) -> bool:
        return self.bot_user_id is not None and event.user_id == self.bot_user_id

    async def _track_self(self, event: InboundEvent) -> None:
        if isinstance(event, MemberLeft):
            self._departed.add(event.conversation)
            await self.store.forget(event.conversation)
            logger.info(f"[{event.conversation}] Bot removed from group")
        elif isinstance(event, MemberJoined):
            if event.conversation in self._departed:
                self._departed.discard(event.conversation)
                logger.info(f"[{event.conversation}] Bot added back to group")
