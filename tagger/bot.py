"""TaggerBot: wires ingestion and the tag-all command together."""

import logging
from typing import Optional

from .commands import CommandInterpreter, CommandOutcome
from .compose import ReplyComposer
from .config import TaggerSettings
from .events import InboundEvent, MessageReceived
from .ingest import EventIngestor
from .ratelimit import RateLimiter
from .roster import RosterStore
from .transport import Transport

logger = logging.getLogger("tagger.bot")


class TaggerBot:
    """Entry point for every inbound event.

    Each event is processed to completion on its own: roster first, then
    the command check, so a command always sees its sender in the roster.
    A failure while handling one event is logged and never reaches the
    caller.
    """

    def __init__(
        self,
        settings: TaggerSettings,
        transport: Transport,
        bot_user_id: Optional[int] = None,
        bot_username: Optional[str] = None,
        store: Optional[RosterStore] = None,
    ):
        self.settings = settings
        self.store = store if store is not None else RosterStore()
        self.ingestor = EventIngestor(self.store, bot_user_id=bot_user_id)
        self.composer = ReplyComposer(
            self.store,
            max_length=settings.max_message_length,
            hide_mentions=settings.hide_mentions,
        )
        self.interpreter = CommandInterpreter(
            self.store,
            self.composer,
            transport,
            command=settings.command,
            bot_username=bot_username,
            deny_policy=settings.deny_policy,
            timeout=settings.transport_timeout,
            sync_administrators=settings.sync_administrators,
            rate_limiter=RateLimiter(settings.rate_limit_max, settings.rate_limit_window),
        )

    async def handle_event(self, event: InboundEvent) -> Optional[CommandOutcome]:
        """Apply one event. Returns the command outcome for messages."""
        try:
            await self.ingestor.ingest(event)
            if isinstance(event, MessageReceived) and self.ingestor.is_active(event.conversation):
                return await self.interpreter.handle(event)
        except Exception as e:
            logger.error(
                f"[{event.conversation}] Error handling {type(event).__name__}: {type(e).__name__}: {e}",
                exc_info=True,
            )
        return None

    def status(self) -> str:
        """One-line summary of what is being tracked."""
        conversations = self.store.conversations()
        members = sum(self.store.size(c) for c in conversations)
        return f"Tracking {members} members across {len(conversations)} groups"
