"""Message entity."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

# Sender token used for replies produced by the bot itself
BOT_SENDER = "BOT"


@dataclass(frozen=True)
class Message:
    """Message entity.

    Messages are immutable and always belong to exactly one context.

    Attributes:
        id: Message ID.
        context_id: ID of the owning conversation context.
        sender: Participant ID, or BOT_SENDER for bot replies.
        content: Message text.
        timestamp: Logical event time (e.g. platform-supplied).
        created_at: When the message was stored.
    """

    id: str
    context_id: str
    sender: str
    content: str
    timestamp: datetime
    created_at: datetime

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "Message":
        """Reconstruct a message from stored data."""
        return cls(
            id=data["id"],
            context_id=data["context_id"],
            sender=data["sender"],
            content=data["content"],
            timestamp=data["timestamp"],
            created_at=data["created_at"],
        )

    def is_from_bot(self) -> bool:
        """Check if this message was sent by the bot.

        Returns:
            True if the sender is the reserved bot token.
        """
        return self.sender == BOT_SENDER


def create_message(
    message_id: str,
    context_id: str,
    sender: str,
    content: str,
    timestamp: datetime | None = None,
) -> Message:
    """Create a Message entity.

    Content is not validated here; AddMessageUseCase rejects blank content.

    Args:
        message_id: Message ID.
        context_id: Owning context ID.
        sender: Sender ID.
        content: Message text.
        timestamp: Event time (defaults to now).

    Returns:
        Message entity.
    """
    now = datetime.now(timezone.utc)
    return Message(
        id=message_id,
        context_id=context_id,
        sender=sender,
        content=content,
        timestamp=timestamp or now,
        created_at=now,
    )
