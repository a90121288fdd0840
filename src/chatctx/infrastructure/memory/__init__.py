"""In-memory storage backend."""

from chatctx.infrastructure.memory.repository import (
    InMemoryConversationRepository,
    InMemoryConversationStore,
)

__all__ = ["InMemoryConversationRepository", "InMemoryConversationStore"]
