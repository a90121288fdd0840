"""ConversationTracker: keeps conversation context for incoming chat messages."""

import logging
from dataclasses import dataclass
from datetime import datetime

from chatctx.application.services.context_retrieval import (
    RepositoryContextRetrievalService,
)
from chatctx.application.use_cases.add_message import AddMessageUseCase
from chatctx.application.use_cases.create_context import CreateContextUseCase
from chatctx.config import ConversationConfig
from chatctx.domain.entities import (
    BOT_SENDER,
    ContextFilter,
    ContextType,
    ConversationContext,
    ConversationHistory,
    MessageFilter,
)
from chatctx.domain.exceptions import (
    ContextAlreadyExistsError,
    ContextNotFoundError,
    InvalidMessageError,
)
from chatctx.domain.repositories import ConversationRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InboundMessage:
    """A message received from the chat platform.

    Attributes:
        sender: ID of the user who sent the message.
        text: Message text.
        channel_id: Channel (or DM channel) the message was posted in.
        is_direct: True for direct messages, False for channel messages.
        timestamp: When the platform received the message.
    """

    sender: str
    text: str
    channel_id: str
    is_direct: bool
    timestamp: datetime


def resolve_identity(
    sender: str, channel_id: str, is_direct: bool
) -> tuple[ContextType, list[str]]:
    """Map a platform message to its context identity.

    Direct messages are keyed by the sender, channel messages by the channel.

    Returns:
        (context_type, participants)
    """
    if is_direct:
        return ContextType.USER, [sender]
    return ContextType.GROUP, [channel_id]


class ConversationTracker:
    """Platform-independent entry point used by chat bridges.

    Resolves or creates the context for each incoming message, stores the
    message and returns the recent transcript for reply generation.
    """

    def __init__(
        self,
        repository: ConversationRepository,
        config: ConversationConfig,
    ) -> None:
        """Initialize ConversationTracker.

        Args:
            repository: Conversation repository.
            config: Conversation configuration (history_limit is used).
        """
        self._repository = repository
        self._create_context = CreateContextUseCase(repository)
        self._add_message = AddMessageUseCase(repository)
        self._retrieval = RepositoryContextRetrievalService(repository)
        self._config = config

    async def record_message(self, message: InboundMessage) -> list[str]:
        """Store an incoming message and return the recent transcript.

        Args:
            message: Incoming platform message.

        Returns:
            "sender: content" lines, oldest first, limited to the latest
            history_limit messages.

        Raises:
            InvalidMessageError: text is empty or whitespace only. No context
                is created in that case.
        """
        if not message.text or not message.text.strip():
            raise InvalidMessageError("Message content cannot be empty")

        context_type, participants = resolve_identity(
            message.sender, message.channel_id, message.is_direct
        )
        context = await self._get_or_create_context(context_type, participants)

        await self._add_message.execute(
            context.id, message.sender, message.text, message.timestamp
        )
        return await self._recent_transcript(context)

    async def record_bot_response(
        self,
        channel_id: str,
        is_direct: bool,
        user_id: str,
        response: str,
    ) -> None:
        """Store a reply sent by the bot.

        Raises:
            ContextNotFoundError: No live context for the conversation.
        """
        context_type, participants = resolve_identity(user_id, channel_id, is_direct)
        context = await self._find_live_context(context_type, participants)
        await self._add_message.execute(context.id, BOT_SENDER, response)

    async def get_transcript(
        self, identifier: str, context_type: ContextType
    ) -> list[str]:
        """Return the recent transcript of a user or channel.

        Raises:
            ContextNotFoundError: No live context for the identifier.
        """
        context = await self._find_live_context(context_type, [identifier])
        return await self._recent_transcript(context)

    async def has_context(self, identifier: str, context_type: ContextType) -> bool:
        return await self._retrieval.check_context_exists([identifier], context_type)

    async def _find_live_context(
        self, context_type: ContextType, participants: list[str]
    ) -> ConversationContext:
        context = await self._repository.find_context(
            ContextFilter.for_identity(context_type, participants)
        )
        if context is None:
            raise ContextNotFoundError(
                message=f"No live {context_type.value} context for {participants}"
            )
        return context

    async def _get_or_create_context(
        self, context_type: ContextType, participants: list[str]
    ) -> ConversationContext:
        try:
            return await self._find_live_context(context_type, participants)
        except ContextNotFoundError:
            pass

        try:
            return await self._create_context.execute(context_type, participants)
        except ContextAlreadyExistsError:
            # Another request created it between the lookup and the insert
            logger.debug(
                "Context for %s %s created concurrently, re-resolving",
                context_type.value,
                participants,
            )
            return await self._find_live_context(context_type, participants)

    async def _recent_transcript(self, context: ConversationContext) -> list[str]:
        latest = await self._retrieval.get_latest_messages(
            MessageFilter(context_id=context.id, limit=self._config.history_limit)
        )
        return ConversationHistory.create(context, latest[::-1]).to_transcript()
