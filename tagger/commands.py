"""Command interpreter: recognizes /all and enforces who may use it."""

import asyncio
import enum
import logging
import re
from typing import Awaitable, Optional, TypeVar

from .communication.errors import classify_error
from .communication.formatting import escape
from .compose import ReplyComposer
from .errors import TransportFailure
from .events import MessageReceived
from .ratelimit import RateLimiter
from .roster import RosterStore
from .transport import Transport

logger = logging.getLogger("tagger.commands")

T = TypeVar("T")

DENIED_TEXT = "Only admins can use this command."
EMPTY_ROSTER_TEXT = (
    "No users tracked yet. Users will be tracked as they send messages or join the group."
)

DENY_REPLY = "reply"
DENY_SILENT = "silent"


class CommandOutcome(enum.Enum):
    IGNORED = "ignored"
    DENIED = "denied"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"
    SENT = "sent"


def parse_command(text: Optional[str], command: str = "all", bot_username: Optional[str] = None) -> Optional[str]:
    """Extract the body of a tag-all command.

    Accepts ``/all`` and ``/all@botname`` as an exact, case-sensitive prefix
    followed by whitespace or end of text. A ``@botname`` suffix naming a
    different bot is not ours.

    Returns:
        The trimmed text after the trigger (may be empty), or None if the
        text is not the command.
    """
    if not text:
        return None

    m = re.match(rf"/{re.escape(command)}(?:@(\w+))?(?=\s|$)(.*)", text, re.DOTALL)
    if not m:
        return None

    addressed_to = m.group(1)
    if addressed_to and bot_username and addressed_to.lower() != bot_username.lower():
        return None

    return m.group(2).strip()


class CommandInterpreter:
    """Handle tag-all commands from group messages.

    Only administrators and owners may tag everyone. Their status is asked
    from the transport on every command; the roster is never consulted
    for it. Every transport call is bounded by ``timeout`` seconds.
    """

    def __init__(
        self,
        store: RosterStore,
        composer: ReplyComposer,
        transport: Transport,
        command: str = "all",
        bot_username: Optional[str] = None,
        deny_policy: str = DENY_REPLY,
        timeout: Optional[float] = 10.0,
        sync_administrators: bool = True,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        if deny_policy not in (DENY_REPLY, DENY_SILENT):
            raise ValueError(f"Unknown deny policy: {deny_policy!r}")
        self.store = store
        self.composer = composer
        self.transport = transport
        self.command = command
        self.bot_username = bot_username
        self.deny_policy = deny_policy
        self.timeout = timeout
        self.sync_administrators = sync_administrators
        self.rate_limiter = rate_limiter

    async def handle(self, message: MessageReceived) -> CommandOutcome:
        if message.is_bot:
            return CommandOutcome.IGNORED

        body = parse_command(message.text, self.command, self.bot_username)
        if body is None:
            return CommandOutcome.IGNORED

        conversation = message.conversation
        logger.info(f"[{conversation}] /{self.command} invoked by {message.handle} (ID: {message.user_id})")

        try:
            is_admin = await self._call(self.transport.is_administrator(conversation, message.user_id))
        except (TransportFailure, asyncio.TimeoutError) as e:
            logger.error(f"[{conversation}] Admin check failed for {message.user_id}: {e!r}", exc_info=True)
            await self._notify_failure(message, e)
            return CommandOutcome.FAILED

        if not is_admin:
            logger.warning(
                f"[{conversation}] Non-admin {message.handle} (ID: {message.user_id}) attempted to use /{self.command}"
            )
            if self.deny_policy == DENY_REPLY:
                await self._send_notice(message, DENIED_TEXT)
            return CommandOutcome.DENIED

        if self.rate_limiter:
            allowed, notice = self.rate_limiter.check(conversation)
            if not allowed:
                await self._send_notice(message, notice)
                return CommandOutcome.RATE_LIMITED

        if self.sync_administrators:
            await self._sync_administrators(conversation)

        messages = await self.composer.compose(conversation, body)
        if messages == [""]:
            logger.warning(f"[{conversation}] No users tracked yet")
            messages = [EMPTY_ROSTER_TEXT]

        for i, text in enumerate(messages):
            try:
                await self._call(self.transport.send_reply(conversation, message.message_id, text))
            except (TransportFailure, asyncio.TimeoutError) as e:
                logger.error(
                    f"[{conversation}] Failed to send tag message {i + 1}/{len(messages)}: {e!r}",
                    exc_info=True,
                )
                await self._notify_failure(message, e)
                return CommandOutcome.FAILED

        logger.info(f"[{conversation}] Sent tag message in {len(messages)} part(s)")
        return CommandOutcome.SENT

    async def _call(self, aw: Awaitable[T]) -> T:
        return await asyncio.wait_for(aw, timeout=self.timeout)

    async def _sync_administrators(self, conversation: int):
        """Make sure every administrator is in the roster before tagging."""
        try:
            admins = await self._call(self.transport.list_administrators(conversation))
        except (TransportFailure, asyncio.TimeoutError) as e:
            logger.warning(f"[{conversation}] Could not sync administrators: {e!r}")
            return

        for admin in admins:
            await self.store.upsert(conversation, admin.user_id, admin.handle)
        if admins:
            logger.info(f"[{conversation}] Synced {len(admins)} admins to roster")

    async def _send_notice(self, message: MessageReceived, text: str) -> bool:
        """Best-effort short reply. Returns False if it could not be sent."""
        try:
            await self._call(self.transport.send_reply(message.conversation, message.message_id, escape(text)))
            return True
        except (TransportFailure, asyncio.TimeoutError) as e:
            logger.warning(f"[{message.conversation}] Could not send notice: {e!r}")
            return False

    async def _notify_failure(self, message: MessageReceived, error: BaseException):
        await self._send_notice(message, classify_error(error))
