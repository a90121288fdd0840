"""Tests for RepositoryContextCleanupService."""

import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from chatctx.application.services import RepositoryContextCleanupService
from chatctx.domain.entities import ConversationContext


@pytest.fixture
def mock_notifier() -> Mock:
    notifier = Mock()
    notifier.notify = AsyncMock()
    return notifier


class TestRepositoryContextCleanupService:
    """RepositoryContextCleanupService tests."""

    async def test_find_expired_contexts_uses_current_time(
        self,
        mock_repository: Mock,
        sample_context: ConversationContext,
    ) -> None:
        mock_repository.find_expired_contexts.return_value = [sample_context]
        service = RepositoryContextCleanupService(mock_repository)
        before = datetime.now(timezone.utc)

        result = await service.find_expired_contexts()

        assert result == [sample_context]
        cutoff = mock_repository.find_expired_contexts.await_args.args[0]
        assert cutoff >= before

    async def test_mark_for_deletion_does_not_touch_storage(
        self, mock_repository: Mock
    ) -> None:
        service = RepositoryContextCleanupService(mock_repository)

        await service.mark_for_deletion("ctx-1")

        mock_repository.delete_context.assert_not_awaited()

    async def test_permanent_delete(self, mock_repository: Mock) -> None:
        service = RepositoryContextCleanupService(mock_repository)

        await service.permanent_delete("ctx-1")

        mock_repository.delete_context.assert_awaited_once_with("ctx-1")

    async def test_notify_without_notifier_only_logs(
        self,
        mock_repository: Mock,
        sample_context: ConversationContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        service = RepositoryContextCleanupService(mock_repository)

        with caplog.at_level(logging.INFO):
            await service.notify_before_expiration(sample_context)

        assert "Context ctx-1" in caplog.text

    async def test_notify_calls_notifier(
        self,
        mock_repository: Mock,
        mock_notifier: Mock,
        sample_context: ConversationContext,
    ) -> None:
        service = RepositoryContextCleanupService(mock_repository, mock_notifier)

        await service.notify_before_expiration(sample_context)

        mock_notifier.notify.assert_awaited_once_with(sample_context)

    async def test_notifier_failure_is_logged_not_raised(
        self,
        mock_repository: Mock,
        mock_notifier: Mock,
        sample_context: ConversationContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        mock_notifier.notify.side_effect = RuntimeError("webhook down")
        service = RepositoryContextCleanupService(mock_repository, mock_notifier)

        with caplog.at_level(logging.WARNING):
            await service.notify_before_expiration(sample_context)

        assert "Expiration notification failed for context ctx-1" in caplog.text
