"""AddMessageUseCase."""

from datetime import datetime, timezone

from chatctx.domain.entities import Message
from chatctx.domain.exceptions import InvalidMessageError
from chatctx.domain.repositories import ConversationRepository


class AddMessageUseCase:
    """Append a message to a context and refresh the context's activity.

    The message insert and the activity refresh are two repository calls.
    Between them the context's expires_at still reflects the previous activity.
    """

    def __init__(self, repository: ConversationRepository) -> None:
        self._repository = repository

    async def execute(
        self,
        context_id: str,
        sender: str,
        content: str,
        timestamp: datetime | None = None,
    ) -> Message:
        """Add the message.

        Args:
            context_id: Target context ID.
            sender: Sender ID.
            content: Message text.
            timestamp: Event time (defaults to now).

        Returns:
            The stored message.

        Raises:
            InvalidMessageError: content is empty or whitespace only.
            ContextNotFoundError: The context does not exist.
        """
        if not content or not content.strip():
            raise InvalidMessageError("Message content cannot be empty")

        message = await self._repository.add_message(
            context_id,
            sender,
            content,
            timestamp or datetime.now(timezone.utc),
        )
        await self._repository.update_context_activity(context_id)
        return message
