"""Telegram channel adapter.

Decodes python-telegram-bot updates into inbound events for TaggerBot and
implements the Transport interface on top of the Bot API.

Telegram only sends ``chat_member`` updates to bots that are administrators
in the group. Without admin rights the bot still sees join/leave service
messages and ordinary messages, which is enough to build a roster.
"""

import asyncio
import logging
from typing import Optional

from telegram import BotCommand, ChatMember, ChatMemberUpdated, Message, ReplyParameters, Update
from telegram.constants import ChatType, ParseMode
from telegram.error import TelegramError
from telegram.ext import Application, ChatMemberHandler, ContextTypes, MessageHandler, filters

from ..bot import TaggerBot
from ..commands import parse_command
from ..config import TaggerSettings
from ..errors import TransportFailure
from ..events import InboundEvent, MemberJoined, MemberLeft, MessageReceived
from ..roster import Participant, RosterStore
from ..transport import Transport

logger = logging.getLogger("tagger.telegram")

GROUP_CHAT_TYPES = (ChatType.GROUP, ChatType.SUPERGROUP)
PRESENT_STATUSES = (ChatMember.MEMBER, ChatMember.ADMINISTRATOR, ChatMember.OWNER)
ADMIN_STATUSES = (ChatMember.ADMINISTRATOR, ChatMember.OWNER)

GROUPS_ONLY_TEXT = "This command only works in groups."


def display_name(user) -> str:
    """Get a display name for a Telegram user."""
    if user.first_name and user.last_name:
        return f"{user.first_name} {user.last_name}"
    return user.first_name or user.username or str(user.id)


def is_present(member: ChatMember) -> bool:
    """Whether a chat member status means the user is in the group."""
    if member.status in PRESENT_STATUSES:
        return True
    if member.status == ChatMember.RESTRICTED:
        return bool(getattr(member, "is_member", False))
    return False


def decode_message(message: Message) -> list[InboundEvent]:
    """Turn a group message into inbound events.

    The sender comes first so that a user leaving on their own is still
    gone once all events are applied.
    """
    if message.chat.type not in GROUP_CHAT_TYPES:
        return []

    chat_id = message.chat.id
    events: list[InboundEvent] = []

    sender = message.from_user
    if sender:
        events.append(MessageReceived(
            conversation=chat_id,
            user_id=sender.id,
            handle=display_name(sender),
            text=message.text or "",
            message_id=message.message_id,
            is_bot=sender.is_bot,
        ))

    for user in message.new_chat_members or ():
        events.append(MemberJoined(chat_id, user.id, display_name(user), is_bot=user.is_bot))

    if message.left_chat_member:
        user = message.left_chat_member
        events.append(MemberLeft(chat_id, user.id, is_bot=user.is_bot))

    return events


def decode_chat_member(member_update: ChatMemberUpdated) -> Optional[InboundEvent]:
    """Turn a chat member status change into a join or leave event."""
    chat = member_update.chat
    if chat.type not in GROUP_CHAT_TYPES:
        return None

    new = member_update.new_chat_member
    user = new.user
    if is_present(new):
        return MemberJoined(chat.id, user.id, display_name(user), is_bot=user.is_bot)
    return MemberLeft(chat.id, user.id, is_bot=user.is_bot)


class TelegramChannel(Transport):
    """Telegram bot adapter for Tagger."""

    def __init__(self, settings: TaggerSettings, store: Optional[RosterStore] = None):
        self.settings = settings
        self.store = store
        self.app: Optional[Application] = None
        self.tagger: Optional[TaggerBot] = None

    def _register_handlers(self):
        """Register all Telegram handlers on self.app."""
        self.app.add_handler(MessageHandler(filters.UpdateType.MESSAGE, self._handle_message))
        self.app.add_handler(ChatMemberHandler(self._handle_chat_member, ChatMemberHandler.ANY_CHAT_MEMBER))
        self.app.add_error_handler(self._handle_error)

    async def start(self):
        """Start the Telegram bot."""
        self.app = (
            Application.builder()
            .token(self.settings.telegram_bot_token)
            .concurrent_updates(self.settings.concurrent_updates)
            .build()
        )

        logger.info("Starting Telegram bot...")
        # Retry initialization (getMe) on transient network errors
        for attempt in range(5):
            try:
                await self.app.initialize()
                break
            except TelegramError as e:
                if attempt < 4:
                    delay = [2, 5, 10, 15][attempt]
                    logger.warning(f"Telegram init failed (attempt {attempt + 1}/5): {type(e).__name__}: {e}. Retrying in {delay}s...")
                    await asyncio.sleep(delay)
                else:
                    raise

        bot = self.app.bot
        self.tagger = TaggerBot(
            self.settings,
            transport=self,
            bot_user_id=bot.id,
            bot_username=bot.username,
            store=self.store,
        )
        self._register_handlers()

        await self.app.start()
        # Pending updates are membership evidence
        await self.app.updater.start_polling(
            drop_pending_updates=False,
            allowed_updates=[Update.MESSAGE, Update.CHAT_MEMBER, Update.MY_CHAT_MEMBER],
        )

        await bot.set_my_commands([
            BotCommand(self.settings.command, "Tag all users in the group"),
        ])

        logger.info(f"Telegram bot started as @{bot.username}.")

    async def stop(self):
        """Stop the Telegram bot."""
        if not self.app:
            return
        if self.app.updater and self.app.updater.running:
            await self.app.updater.stop()
        if self.app.running:
            await self.app.stop()
        await self.app.shutdown()
        if self.tagger:
            logger.info(self.tagger.status())
        logger.info("Telegram bot stopped.")

    # ── Update handlers ──────────────────────────────────────

    async def _handle_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        message = update.message
        if not message or not self.tagger:
            return

        if message.chat.type not in GROUP_CHAT_TYPES:
            if parse_command(message.text, self.settings.command, context.bot.username) is not None:
                logger.debug(f"Command /{self.settings.command} used outside of group, ignoring")
                await message.reply_text(GROUPS_ONLY_TEXT)
            return

        for event in decode_message(message):
            await self.tagger.handle_event(event)

    async def _handle_chat_member(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        member_update = update.chat_member or update.my_chat_member
        if not member_update or not self.tagger:
            return

        event = decode_chat_member(member_update)
        if event:
            await self.tagger.handle_event(event)

    async def _handle_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        """Handle errors in update processing."""
        error = context.error
        if update:
            logger.error(f"Telegram error processing update {type(update).__name__}: {type(error).__name__}: {error}", exc_info=error)
        else:
            logger.error(f"Telegram error (no update): {type(error).__name__}: {error}", exc_info=error)
        if not (self.app and self.app.updater and self.app.updater.running):
            logger.critical("POLLING STOPPED after error, bot will not receive new messages!")

    # ── Transport ────────────────────────────────────────────

    async def send_reply(self, conversation: int, reply_to_message_id: int | None, text: str) -> None:
        reply_params = (
            ReplyParameters(message_id=reply_to_message_id, allow_sending_without_reply=True)
            if reply_to_message_id
            else None
        )
        try:
            await self.app.bot.send_message(
                chat_id=conversation,
                text=text,
                parse_mode=ParseMode.HTML,
                reply_parameters=reply_params,
            )
        except TelegramError as e:
            raise TransportFailure("sendMessage", str(e)) from e

    async def is_administrator(self, conversation: int, user_id: int) -> bool:
        try:
            member = await self.app.bot.get_chat_member(conversation, user_id)
        except TelegramError as e:
            raise TransportFailure("getChatMember", str(e)) from e
        return member.status in ADMIN_STATUSES

    async def list_administrators(self, conversation: int) -> list[Participant]:
        try:
            admins = await self.app.bot.get_chat_administrators(conversation)
        except TelegramError as e:
            raise TransportFailure("getChatAdministrators", str(e)) from e
        return [
            Participant(user_id=admin.user.id, handle=display_name(admin.user))
            for admin in admins
            if not admin.user.is_bot
        ]
