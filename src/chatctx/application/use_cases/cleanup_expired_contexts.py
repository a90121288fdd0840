"""CleanupExpiredContextsUseCase."""

import logging

from chatctx.domain.services import ContextCleanupService

logger = logging.getLogger(__name__)


class CleanupExpiredContextsUseCase:
    """Delete every context past its expiration.

    Failures are handled per context: a failed notification is logged and the
    context is still deleted, a failed deletion is logged and the batch moves
    on to the next context.
    """

    def __init__(self, cleanup_service: ContextCleanupService) -> None:
        """Initialize CleanupExpiredContextsUseCase.

        Args:
            cleanup_service: Expiration lookup and deletion policy.
        """
        self._cleanup_service = cleanup_service

    async def execute(self) -> int:
        """Run one cleanup pass.

        Returns:
            Number of contexts actually deleted. Lower than the number of
            expired contexts when some deletions failed.
        """
        expired_contexts = await self._cleanup_service.find_expired_contexts()
        if not expired_contexts:
            logger.debug("No expired contexts found")
            return 0

        logger.info("Found %d expired contexts", len(expired_contexts))

        deleted_count = 0
        for context in expired_contexts:
            try:
                await self._cleanup_service.notify_before_expiration(context)
            except Exception:
                logger.warning(
                    "Failed to notify expiration of context %s",
                    context.id,
                    exc_info=True,
                )

            try:
                await self._cleanup_service.mark_for_deletion(context.id)
                await self._cleanup_service.permanent_delete(context.id)
                deleted_count += 1
            except Exception:
                logger.exception("Failed to delete context %s", context.id)

        logger.info(
            "Cleanup completed: %d/%d contexts deleted",
            deleted_count,
            len(expired_contexts),
        )
        return deleted_count
