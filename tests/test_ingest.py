"""Tests for event ingestion."""

from types import SimpleNamespace

import pytest

from tagger.events import MemberJoined, MemberLeft, MessageReceived
from tagger.ingest import EventIngestor

BOT_ID = 999


def _message(conversation, user_id, handle, text="hi", message_id=1, is_bot=False):
    return MessageReceived(conversation, user_id, handle, text, message_id, is_bot=is_bot)


class TestMembershipEvents:
    """Join, leave and message events against the roster."""

    @pytest.mark.asyncio
    async def test_join_adds_participant(self, store):
        ingestor = EventIngestor(store)
        await ingestor.ingest(MemberJoined(-100, 2, "bob"))
        assert [(p.user_id, p.handle) for p in await store.snapshot(-100)] == [(2, "bob")]

    @pytest.mark.asyncio
    async def test_message_adds_participant(self, store):
        ingestor = EventIngestor(store)
        await ingestor.ingest(_message(-100, 1, "alice"))
        assert [p.user_id for p in await store.snapshot(-100)] == [1]

    @pytest.mark.asyncio
    async def test_leave_removes_participant(self, store):
        ingestor = EventIngestor(store)
        await ingestor.ingest(MemberJoined(-100, 2, "bob"))
        await ingestor.ingest(MemberLeft(-100, 2))
        assert await store.snapshot(-100) == ()

    @pytest.mark.asyncio
    async def test_message_after_leave_readds(self, store):
        ingestor = EventIngestor(store)
        await ingestor.ingest(MemberJoined(-100, 2, "bob"))
        await ingestor.ingest(MemberLeft(-100, 2))
        await ingestor.ingest(_message(-100, 2, "bob"))
        assert [p.user_id for p in await store.snapshot(-100)] == [2]

    @pytest.mark.asyncio
    async def test_latest_handle_across_event_kinds(self, store):
        ingestor = EventIngestor(store)
        await ingestor.ingest(MemberJoined(-100, 2, "bob"))
        await ingestor.ingest(_message(-100, 2, "Bobby"))
        await ingestor.ingest(MemberJoined(-100, 2, "Robert"))
        snapshot = await store.snapshot(-100)
        assert len(snapshot) == 1
        assert snapshot[0].handle == "Robert"

    @pytest.mark.asyncio
    async def test_replayed_join_is_idempotent(self, store):
        ingestor = EventIngestor(store)
        event = MemberJoined(-100, 2, "bob")
        await ingestor.ingest(event)
        once = await store.snapshot(-100)
        await ingestor.ingest(event)
        assert await store.snapshot(-100) == once

    @pytest.mark.asyncio
    async def test_events_do_not_cross_conversations(self, store):
        ingestor = EventIngestor(store)
        await ingestor.ingest(MemberJoined(-100, 1, "alice"))
        await ingestor.ingest(MemberJoined(-200, 2, "bob"))
        await ingestor.ingest(MemberLeft(-200, 1))
        assert [p.user_id for p in await store.snapshot(-100)] == [1]
        assert [p.user_id for p in await store.snapshot(-200)] == [2]

    @pytest.mark.asyncio
    async def test_bot_accounts_are_not_tracked(self, store):
        ingestor = EventIngestor(store)
        await ingestor.ingest(MemberJoined(-100, 5, "helper_bot", is_bot=True))
        await ingestor.ingest(_message(-100, 6, "other_bot", is_bot=True))
        assert await store.snapshot(-100) == ()

    @pytest.mark.asyncio
    async def test_unknown_event_type(self, store):
        ingestor = EventIngestor(store)
        with pytest.raises(TypeError):
            await ingestor.ingest(SimpleNamespace(conversation=-100, user_id=1, is_bot=False))


class TestBotMembership:
    """The bot's own join/leave controls which conversations are tracked."""

    @pytest.mark.asyncio
    async def test_bot_removed_forgets_roster(self, store):
        ingestor = EventIngestor(store, bot_user_id=BOT_ID)
        await ingestor.ingest(MemberJoined(-100, 1, "alice"))
        await ingestor.ingest(MemberLeft(-100, BOT_ID, is_bot=True))
        assert await store.snapshot(-100) == ()
        assert ingestor.is_active(-100) is False

    @pytest.mark.asyncio
    async def test_events_for_departed_conversation_discarded(self, store):
        ingestor = EventIngestor(store, bot_user_id=BOT_ID)
        await ingestor.ingest(MemberLeft(-100, BOT_ID, is_bot=True))
        await ingestor.ingest(_message(-100, 1, "alice"))
        await ingestor.ingest(MemberJoined(-100, 2, "bob"))
        assert await store.snapshot(-100) == ()

    @pytest.mark.asyncio
    async def test_bot_added_back_resumes_tracking(self, store):
        ingestor = EventIngestor(store, bot_user_id=BOT_ID)
        await ingestor.ingest(MemberLeft(-100, BOT_ID, is_bot=True))
        await ingestor.ingest(MemberJoined(-100, BOT_ID, "tagger", is_bot=True))
        await ingestor.ingest(_message(-100, 1, "alice"))
        assert ingestor.is_active(-100) is True
        assert [p.user_id for p in await store.snapshot(-100)] == [1]

    @pytest.mark.asyncio
    async def test_bot_never_in_roster(self, store):
        ingestor = EventIngestor(store, bot_user_id=BOT_ID)
        await ingestor.ingest(MemberJoined(-100, BOT_ID, "tagger", is_bot=True))
        assert await store.snapshot(-100) == ()

    @pytest.mark.asyncio
    async def test_departure_only_affects_that_conversation(self, store):
        ingestor = EventIngestor(store, bot_user_id=BOT_ID)
        await ingestor.ingest(MemberJoined(-200, 2, "bob"))
        await ingestor.ingest(MemberLeft(-100, BOT_ID, is_bot=True))
        await ingestor.ingest(MemberJoined(-200, 3, "carol"))
        assert [p.user_id for p in await store.snapshot(-200)] == [2, 3]
