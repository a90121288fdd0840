"""Domain entities."""

from chatctx.domain.entities.context import (
    DEFAULT_RETENTION_DAYS,
    ContextType,
    ConversationContext,
    create_conversation_context,
    normalize_participants,
)
from chatctx.domain.entities.filters import ContextFilter, MessageFilter
from chatctx.domain.entities.history import ConversationHistory
from chatctx.domain.entities.message import BOT_SENDER, Message, create_message

__all__ = [
    "BOT_SENDER",
    "DEFAULT_RETENTION_DAYS",
    "ContextFilter",
    "ContextType",
    "ConversationContext",
    "ConversationHistory",
    "Message",
    "MessageFilter",
    "create_conversation_context",
    "create_message",
    "normalize_participants",
]
