"""Periodic cleanup service for expired contexts."""

import asyncio
import logging

from chatctx.application.use_cases.cleanup_expired_contexts import (
    CleanupExpiredContextsUseCase,
)
from chatctx.config import ConversationConfig

logger = logging.getLogger(__name__)


class PeriodicCleanup:
    """Periodic cleanup service.

    Runs the cleanup use case at the configured interval until stopped.
    Runs alongside live message traffic; a context deleted mid-use makes later
    operations on it fail with ContextNotFoundError.
    """

    def __init__(
        self,
        cleanup_use_case: CleanupExpiredContextsUseCase,
        config: ConversationConfig,
    ) -> None:
        """Initialize PeriodicCleanup.

        Args:
            cleanup_use_case: Use case to execute periodically.
            config: Conversation configuration with the cleanup interval.
        """
        self._use_case = cleanup_use_case
        self._config = config
        # set() means stopped, clear() means running
        self._stop_event = asyncio.Event()
        self._stop_event.set()

    async def start(self) -> None:
        """Start periodic cleanup.

        Loops until stop() is called. Returns immediately if already running.
        """
        if not self._stop_event.is_set():
            logger.warning(
                "PeriodicCleanup.start() called while already running; ignoring."
            )
            return
        self._stop_event.clear()

        while not self._stop_event.is_set():
            try:
                deleted = await self._use_case.execute()
                if deleted:
                    logger.info("Periodic cleanup deleted %d contexts", deleted)
            except Exception as e:
                logger.error(
                    "Periodic cleanup failed (interval=%ds): %s",
                    self._config.cleanup_interval_seconds,
                    e,
                )

            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=self._config.cleanup_interval_seconds,
                )
                break
            except asyncio.TimeoutError:
                pass

    async def stop(self) -> None:
        """Signal the loop to stop after the current pass completes."""
        self._stop_event.set()

    @property
    def is_running(self) -> bool:
        return not self._stop_event.is_set()
