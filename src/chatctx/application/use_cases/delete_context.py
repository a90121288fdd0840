"""DeleteContextUseCase."""

import logging

from chatctx.domain.repositories import ConversationRepository

logger = logging.getLogger(__name__)


class DeleteContextUseCase:
    """Delete a context together with its messages."""

    def __init__(self, repository: ConversationRepository) -> None:
        self._repository = repository

    async def execute(self, context_id: str) -> None:
        """Raises ContextNotFoundError if the context does not exist."""
        await self._repository.delete_context(context_id)
        logger.info("Deleted context %s", context_id)
