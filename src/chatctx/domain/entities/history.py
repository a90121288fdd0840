"""ConversationHistory aggregate."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from chatctx.domain.entities.context import ConversationContext
from chatctx.domain.entities.message import Message


@dataclass(frozen=True)
class ConversationHistory:
    """Read-only view of a context and its messages.

    Built on demand for query responses; never persisted.

    Attributes:
        context: The conversation context.
        messages: Messages in chronological order (oldest first).
    """

    context: ConversationContext
    messages: tuple[Message, ...] = ()

    @classmethod
    def create(
        cls, context: ConversationContext, messages: Iterable[Message]
    ) -> "ConversationHistory":
        return cls(context=context, messages=tuple(messages))

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def last_activity(self) -> datetime:
        """Timestamp of the last message, or the context's updated_at."""
        if self.messages:
            return self.messages[-1].timestamp
        return self.context.updated_at

    def to_transcript(self) -> list[str]:
        """Format messages as "sender: content" lines.

        Returns:
            One line per message, oldest first.
        """
        return [f"{m.sender}: {m.content}" for m in self.messages]
