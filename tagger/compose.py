"""Reply composer: renders the mention list for a tag-all command.

Layout of the first message:

    <body>
    <mention> <mention> <mention> ...

When the mentions do not fit in one Telegram message they continue in
follow-up messages that carry mentions only. A mention is never split
across messages, and every present participant appears exactly once.
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .communication.formatting import escape, mention, spoiler, utf16_len
from .communication.outbound import TELEGRAM_MAX_LENGTH, split_message
from .roster import Participant, RosterStore

logger = logging.getLogger("tagger.compose")


@dataclass
class _Page:
    body: str = ""
    participants: list[Participant] = field(default_factory=list)
    length: int = 0

    @property
    def empty(self) -> bool:
        return not self.body and not self.participants


class ReplyComposer:
    """Build outgoing HTML messages that mention every participant."""

    def __init__(self, store: RosterStore, max_length: int = TELEGRAM_MAX_LENGTH, hide_mentions: bool = True):
        self.store = store
        self.max_length = max_length
        self.hide_mentions = hide_mentions

    async def compose(self, conversation: int, body: str) -> list[str]:
        """Render the reply for ``conversation`` from its current roster.

        Always returns at least one message. With an empty roster the only
        message is the body itself (possibly empty).
        """
        participants = await self.store.snapshot(conversation)
        messages = self.render(body, participants)
        logger.debug(
            f"[{conversation}] Composed {len(messages)} message(s) for {len(participants)} participants"
        )
        return messages

    def render(self, body: str, participants: Sequence[Participant]) -> list[str]:
        return [self._render_page(page) for page in self._paginate(body.strip(), participants)]

    def _paginate(self, body: str, participants: Sequence[Participant]) -> list[_Page]:
        pages: list[_Page] = []

        body_chunks = split_message(body, self.max_length) if body else [""]
        for chunk in body_chunks[:-1]:
            pages.append(_Page(body=chunk, length=utf16_len(chunk)))

        current = _Page(body=body_chunks[-1], length=utf16_len(body_chunks[-1]))
        for participant in participants:
            name_len = utf16_len(participant.display_name)
            # One separator before each mention: newline after the body, space between mentions
            cost = name_len + (0 if current.empty else 1)
            if current.length + cost > self.max_length and not current.empty:
                pages.append(current)
                current = _Page()
                cost = name_len
            current.participants.append(participant)
            current.length += cost
        pages.append(current)

        return pages

    def _render_page(self, page: _Page) -> str:
        parts = []
        if page.body:
            parts.append(escape(page.body))
        if page.participants:
            block = " ".join(mention(p.user_id, p.display_name) for p in page.participants)
            parts.append(spoiler(block) if self.hide_mentions else block)
        return "\n".join(parts)
