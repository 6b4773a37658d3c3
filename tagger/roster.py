"""Roster store: per-conversation set of known participants.

Telegram gives bots no way to list the members of a group, so the roster
is built up from what the bot observes: join notifications and authored
messages add people, leave notifications remove them.

State lives in memory only. Each conversation gets its own asyncio.Lock,
created on first use, so busy groups never hold up quiet ones.
"""

import asyncio
import logging
from dataclasses import dataclass

logger = logging.getLogger("tagger.roster")


@dataclass(frozen=True)
class Participant:
    """A user known to be present in a conversation."""

    user_id: int
    handle: str

    @property
    def display_name(self) -> str:
        return self.handle or str(self.user_id)


class RosterStore:
    """In-memory rosters keyed by conversation id.

    Participants are kept in join order: the order in which presence was
    first established. Refreshing a handle keeps the position; a user who
    leaves and comes back is appended at the end.
    """

    def __init__(self):
        self._rosters: dict[int, dict[int, Participant]] = {}
        self._locks: dict[int, asyncio.Lock] = {}

    def _lock_for(self, conversation: int) -> asyncio.Lock:
        lock = self._locks.get(conversation)
        if lock is None:
            lock = self._locks.setdefault(conversation, asyncio.Lock())
        return lock

    async def upsert(self, conversation: int, user_id: int, handle: str) -> bool:
        """Insert the participant or refresh its handle.

        Returns:
            True if the participant was not in the roster before.
        """
        async with self._lock_for(conversation):
            roster = self._rosters.setdefault(conversation, {})
            existing = roster.get(user_id)
            if existing is not None and existing.handle == handle:
                return False
            roster[user_id] = Participant(user_id=user_id, handle=handle)
            return existing is None

    async def remove(self, conversation: int, user_id: int) -> bool:
        """Drop the participant. Unknown participants are a no-op.

        Returns:
            True if a participant was removed.
        """
        async with self._lock_for(conversation):
            roster = self._rosters.get(conversation)
            if not roster or user_id not in roster:
                return False
            del roster[user_id]
            return True

    async def snapshot(self, conversation: int) -> tuple[Participant, ...]:
        """Point-in-time view of present participants, in join order.

        Unknown conversations yield an empty tuple.
        """
        async with self._lock_for(conversation):
            roster = self._rosters.get(conversation)
            if not roster:
                return ()
            return tuple(roster.values())

    async def forget(self, conversation: int) -> int:
        """Drop the whole roster for a conversation.

        Returns:
            Number of participants dropped.
        """
        async with self._lock_for(conversation):
            roster = self._rosters.pop(conversation, None)
            count = len(roster) if roster else 0
        if count:
            logger.info(f"[{conversation}] Forgot roster of {count} participants")
        return count

    def size(self, conversation: int) -> int:
        return len(self._rosters.get(conversation) or ())

    def conversations(self) -> list[int]:
        return [cid for cid, roster in self._rosters.items() if roster]
