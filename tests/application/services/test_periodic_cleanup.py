"""Tests for PeriodicCleanup service."""

import asyncio
import logging
from unittest.mock import AsyncMock, Mock

import pytest

from chatctx.application.services import PeriodicCleanup
from chatctx.config import ConversationConfig


@pytest.fixture
def mock_use_case() -> Mock:
    """Create mock CleanupExpiredContextsUseCase."""
    use_case = Mock()
    use_case.execute = AsyncMock(return_value=0)
    return use_case


@pytest.fixture
def config() -> ConversationConfig:
    """Create test ConversationConfig."""
    return ConversationConfig(cleanup_interval_seconds=1)


@pytest.fixture
def long_interval_config() -> ConversationConfig:
    return ConversationConfig(cleanup_interval_seconds=10)


@pytest.fixture
def cleanup(mock_use_case: Mock, config: ConversationConfig) -> PeriodicCleanup:
    """Create PeriodicCleanup instance."""
    return PeriodicCleanup(cleanup_use_case=mock_use_case, config=config)


class TestPeriodicCleanupStart:
    """Tests for start method."""

    async def test_executes_use_case_in_loop(
        self,
        cleanup: PeriodicCleanup,
        mock_use_case: Mock,
    ) -> None:
        """Test that the use case runs right after start."""
        task = asyncio.create_task(cleanup.start())

        await asyncio.sleep(0.1)

        await cleanup.stop()
        await task

        assert mock_use_case.execute.await_count >= 1

    async def test_second_start_is_ignored(
        self,
        cleanup: PeriodicCleanup,
        mock_use_case: Mock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        task = asyncio.create_task(cleanup.start())
        await asyncio.sleep(0.05)

        await cleanup.start()

        await cleanup.stop()
        await task
        assert mock_use_case.execute.await_count == 1
        assert "already running" in caplog.text

    async def test_continues_after_exception(
        self,
        cleanup: PeriodicCleanup,
        mock_use_case: Mock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test that the loop keeps running after a failed pass."""
        call_count = 0
        continue_event = asyncio.Event()

        async def execute_with_error() -> int:
            nonlocal call_count
            call_count += 1
            if call_count == 1:
                raise RuntimeError("Test error")
            continue_event.set()
            return 0

        mock_use_case.execute = AsyncMock(side_effect=execute_with_error)

        task = asyncio.create_task(cleanup.start())

        try:
            await asyncio.wait_for(continue_event.wait(), timeout=3.0)
        except asyncio.TimeoutError:
            pass

        await cleanup.stop()
        await task

        assert call_count >= 2
        assert any(
            record.levelno == logging.ERROR
            and "Periodic cleanup failed" in record.getMessage()
            for record in caplog.records
        )

    async def test_logs_deleted_count(
        self,
        cleanup: PeriodicCleanup,
        mock_use_case: Mock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        mock_use_case.execute = AsyncMock(return_value=2)

        with caplog.at_level(logging.INFO):
            task = asyncio.create_task(cleanup.start())
            await asyncio.sleep(0.05)
            await cleanup.stop()
            await task

        assert "Periodic cleanup deleted 2 contexts" in caplog.text


class TestPeriodicCleanupStop:
    """Tests for stop method."""

    async def test_stop_during_sleep_exits_immediately(
        self,
        mock_use_case: Mock,
        long_interval_config: ConversationConfig,
    ) -> None:
        """Test that stop() during the interval does not wait it out."""
        cleanup = PeriodicCleanup(
            cleanup_use_case=mock_use_case, config=long_interval_config
        )

        task = asyncio.create_task(cleanup.start())
        await asyncio.sleep(0.05)

        start_time = asyncio.get_running_loop().time()
        await cleanup.stop()
        await task
        elapsed = asyncio.get_running_loop().time() - start_time

        assert elapsed < 1.0


class TestPeriodicCleanupIsRunning:
    """Tests for is_running property."""

    async def test_is_running_false_before_start(
        self,
        cleanup: PeriodicCleanup,
    ) -> None:
        assert not cleanup.is_running

    async def test_is_running_during_and_after(
        self,
        cleanup: PeriodicCleanup,
    ) -> None:
        task = asyncio.create_task(cleanup.start())

        await asyncio.sleep(0.05)
        assert cleanup.is_running

        await cleanup.stop()
        await task

        assert not cleanup.is_running
