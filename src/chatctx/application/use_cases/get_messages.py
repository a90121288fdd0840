"""GetMessagesUseCase."""

from chatctx.domain.entities import Message, MessageFilter
from chatctx.domain.repositories import ConversationRepository


class GetMessagesUseCase:
    """Fetch a page of messages of a context, oldest first."""

    def __init__(self, repository: ConversationRepository) -> None:
        self._repository = repository

    async def execute(self, message_filter: MessageFilter) -> list[Message]:
        return await self._repository.get_messages(message_filter)
