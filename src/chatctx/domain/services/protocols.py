"""Domain service protocols."""

from collections.abc import Sequence
from typing import Protocol

from chatctx.domain.entities import (
    ContextFilter,
    ContextType,
    ConversationContext,
    ConversationHistory,
    Message,
    MessageFilter,
)


class ContextRetrievalService(Protocol):
    """Context retrieval abstraction.

    Literal filter matching only; ranking by similarity is not supported.
    """

    async def find_relevant_context(
        self, context_filter: ContextFilter
    ) -> list[ConversationHistory]:
        """Find histories relevant to the filter.

        Args:
            context_filter: Context filter.

        Returns:
            Matching histories (currently zero or one).
        """
        ...

    async def get_latest_messages(self, message_filter: MessageFilter) -> list[Message]:
        """Get the most recent messages of a context.

        Args:
            message_filter: Message filter.

        Returns:
            Messages, newest first.
        """
        ...

    async def check_context_exists(
        self, participants: Sequence[str], context_type: ContextType
    ) -> bool:
        """Check if a live context exists for the identity."""
        ...


class ContextCleanupService(Protocol):
    """Expiration and deletion policy abstraction."""

    async def find_expired_contexts(self) -> list[ConversationContext]:
        """Find contexts already past their expiration.

        Returns:
            Expired contexts.
        """
        ...

    async def mark_for_deletion(self, context_id: str) -> None:
        """Soft-delete hook. Backends without soft delete may do nothing."""
        ...

    async def permanent_delete(self, context_id: str) -> None:
        """Delete a context and its messages."""
        ...

    async def notify_before_expiration(self, context: ConversationContext) -> None:
        """Best-effort notification before a context is deleted."""
        ...


class ExpirationNotifier(Protocol):
    """Side channel notified before an expired context is deleted.

    Implemented by platform bridges (e.g. posting a notice to the chat).
    """

    async def notify(self, context: ConversationContext) -> None:
        """Send the notification.

        Args:
            context: Context about to be deleted.
        """
        ...
