"""Common fixtures for application layer tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from chatctx.domain.entities import ContextType, ConversationContext


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_context(now: datetime) -> ConversationContext:
    """Create a live user context."""
    return ConversationContext(
        id="ctx-1",
        context_type=ContextType.USER,
        participants=("U1",),
        created_at=now,
        updated_at=now,
        expires_at=now + timedelta(days=30),
    )


@pytest.fixture
def mock_repository() -> Mock:
    """Create mock ConversationRepository."""
    repo = Mock()
    repo.create_context = AsyncMock()
    repo.find_context = AsyncMock(return_value=None)
    repo.update_context_activity = AsyncMock()
    repo.add_message = AsyncMock()
    repo.get_messages = AsyncMock(return_value=[])
    repo.get_conversation_history = AsyncMock()
    repo.find_expired_contexts = AsyncMock(return_value=[])
    repo.delete_context = AsyncMock()
    return repo
