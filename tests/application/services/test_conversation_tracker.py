"""Tests for ConversationTracker."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from chatctx.application.services import (
    ConversationTracker,
    InboundMessage,
    resolve_identity,
)
from chatctx.config import ConversationConfig
from chatctx.domain.entities import ContextType
from chatctx.domain.exceptions import ContextNotFoundError, InvalidMessageError
from chatctx.infrastructure.memory import (
    InMemoryConversationRepository,
    InMemoryConversationStore,
)


@pytest.fixture
def store() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture
def repository(store: InMemoryConversationStore) -> InMemoryConversationRepository:
    return InMemoryConversationRepository(store)


@pytest.fixture
def tracker(repository: InMemoryConversationRepository) -> ConversationTracker:
    return ConversationTracker(repository, ConversationConfig(history_limit=3))


def inbound(
    text: str,
    sender: str = "U1",
    channel_id: str = "D1",
    is_direct: bool = True,
    offset_seconds: int = 0,
) -> InboundMessage:
    return InboundMessage(
        sender=sender,
        text=text,
        channel_id=channel_id,
        is_direct=is_direct,
        timestamp=datetime.now(timezone.utc) + timedelta(seconds=offset_seconds),
    )


class TestResolveIdentity:
    """resolve_identity tests."""

    def test_direct_message_is_keyed_by_sender(self) -> None:
        assert resolve_identity("U1", "D1", True) == (ContextType.USER, ["U1"])

    def test_channel_message_is_keyed_by_channel(self) -> None:
        assert resolve_identity("U1", "C1", False) == (ContextType.GROUP, ["C1"])


class TestRecordMessage:
    """record_message tests."""

    async def test_first_message_creates_context(
        self,
        tracker: ConversationTracker,
        store: InMemoryConversationStore,
    ) -> None:
        transcript = await tracker.record_message(inbound("hi"))

        assert transcript == ["U1: hi"]
        assert store.context_count() == 1

    async def test_conversation_round_trip(
        self,
        tracker: ConversationTracker,
        store: InMemoryConversationStore,
    ) -> None:
        """Test a user message, a bot reply and a follow-up."""
        await tracker.record_message(inbound("hi"))
        await tracker.record_bot_response("D1", True, "U1", "hello")
        transcript = await tracker.record_message(inbound("again", offset_seconds=1))

        assert transcript == ["U1: hi", "BOT: hello", "U1: again"]
        assert store.context_count() == 1

    async def test_channel_members_share_context(
        self,
        tracker: ConversationTracker,
        store: InMemoryConversationStore,
    ) -> None:
        await tracker.record_message(inbound("a", "U1", "C1", is_direct=False))
        transcript = await tracker.record_message(
            inbound("b", "U2", "C1", is_direct=False, offset_seconds=1)
        )

        assert transcript == ["U1: a", "U2: b"]
        assert store.context_count() == 1

    async def test_transcript_respects_history_limit(
        self,
        tracker: ConversationTracker,
    ) -> None:
        """Test that the latest history_limit lines are returned."""
        for i in range(5):
            transcript = await tracker.record_message(
                inbound(f"m{i}", offset_seconds=i)
            )

        assert transcript == ["U1: m2", "U1: m3", "U1: m4"]

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_message_creates_no_context(
        self,
        tracker: ConversationTracker,
        store: InMemoryConversationStore,
        text: str,
    ) -> None:
        """Test that a rejected message leaves no context behind."""
        with pytest.raises(InvalidMessageError):
            await tracker.record_message(inbound(text))

        assert store.context_count() == 0

    async def test_concurrent_create_is_re_resolved(
        self,
        tracker: ConversationTracker,
        repository: InMemoryConversationRepository,
        store: InMemoryConversationStore,
    ) -> None:
        """Test the get-or-create retry when another request won the race."""
        winner = await repository.create_context(ContextType.USER, ["U1"])
        original_find = repository.find_context
        calls = 0

        async def find_missing_once(context_filter):
            nonlocal calls
            calls += 1
            if calls == 1:
                # The other request has not committed yet
                return None
            return await original_find(context_filter)

        with patch.object(repository, "find_context", side_effect=find_missing_once):
            transcript = await tracker.record_message(inbound("hi"))

        assert transcript == ["U1: hi"]
        assert store.context_count() == 1
        assert store.message_count(winner.id) == 1


class TestRecordBotResponse:
    """record_bot_response tests."""

    async def test_without_context_raises(self, tracker: ConversationTracker) -> None:
        with pytest.raises(ContextNotFoundError):
            await tracker.record_bot_response("D1", True, "U1", "hello")


class TestTranscriptQueries:
    """get_transcript and has_context tests."""

    async def test_get_transcript(self, tracker: ConversationTracker) -> None:
        await tracker.record_message(inbound("a", "U1", "C1", is_direct=False))

        assert await tracker.get_transcript("C1", ContextType.GROUP) == ["U1: a"]

    async def test_get_transcript_missing(self, tracker: ConversationTracker) -> None:
        with pytest.raises(ContextNotFoundError):
            await tracker.get_transcript("C1", ContextType.GROUP)

    async def test_has_context(self, tracker: ConversationTracker) -> None:
        await tracker.record_message(inbound("hi"))

        assert await tracker.has_context("U1", ContextType.USER) is True
        assert await tracker.has_context("U1", ContextType.GROUP) is False
        assert await tracker.has_context("U2", ContextType.USER) is False
