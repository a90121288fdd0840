"""CreateContextUseCase."""

import logging
from collections.abc import Sequence

from chatctx.domain.entities import ContextFilter, ContextType, ConversationContext
from chatctx.domain.exceptions import ContextAlreadyExistsError
from chatctx.domain.repositories import ConversationRepository

logger = logging.getLogger(__name__)


class CreateContextUseCase:
    """Create a context for a (type, participant set) identity.

    Fails if a live context already exists for the identity. Two concurrent
    calls may both pass the check; the repository then reports the conflict
    with ContextAlreadyExistsError and the caller re-resolves.
    """

    def __init__(self, repository: ConversationRepository) -> None:
        self._repository = repository

    async def execute(
        self, context_type: ContextType, participants: Sequence[str]
    ) -> ConversationContext:
        """Create the context.

        Args:
            context_type: Context type.
            participants: Participant IDs.

        Returns:
            The created context.

        Raises:
            ContextAlreadyExistsError: A live context exists for the identity.
            InvalidFilterError: participants is empty.
        """
        existing = await self._repository.find_context(
            ContextFilter(
                participants=tuple(participants),
                context_type=context_type,
                include_expired=False,
            )
        )
        if existing is not None:
            raise ContextAlreadyExistsError(context_type.value, participants)

        context = await self._repository.create_context(context_type, participants)
        logger.info(
            "Created %s context %s for %s",
            context_type.value,
            context.id,
            context.participants,
        )
        return context
