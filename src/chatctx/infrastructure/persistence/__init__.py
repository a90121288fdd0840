"""Persistence infrastructure."""

from chatctx.infrastructure.persistence.conversation_repository import (
    SQLiteConversationRepository,
    make_participant_key,
)
from chatctx.infrastructure.persistence.database import DatabaseManager
from chatctx.infrastructure.persistence.exceptions import (
    DatabaseError,
    PersistenceError,
)
from chatctx.infrastructure.persistence.models import (
    ContextParticipantModel,
    ConversationContextModel,
    ConversationMessageModel,
)

__all__ = [
    "ContextParticipantModel",
    "ConversationContextModel",
    "ConversationMessageModel",
    "DatabaseError",
    "DatabaseManager",
    "PersistenceError",
    "SQLiteConversationRepository",
    "make_participant_key",
]
