"""RetrieveContextUseCase."""

from chatctx.domain.entities import ContextFilter, ConversationHistory
from chatctx.domain.repositories import ConversationRepository


class RetrieveContextUseCase:
    """Retrieve the conversation history matching a filter."""

    def __init__(self, repository: ConversationRepository) -> None:
        self._repository = repository

    async def execute(self, context_filter: ContextFilter) -> ConversationHistory:
        """Raises ContextNotFoundError if no context matches."""
        return await self._repository.get_conversation_history(context_filter)
