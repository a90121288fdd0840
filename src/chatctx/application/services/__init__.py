"""Application services."""

from chatctx.application.services.context_cleanup import (
    RepositoryContextCleanupService,
)
from chatctx.application.services.context_retrieval import (
    RepositoryContextRetrievalService,
)
from chatctx.application.services.conversation_tracker import (
    ConversationTracker,
    InboundMessage,
    resolve_identity,
)
from chatctx.application.services.periodic_cleanup import PeriodicCleanup

__all__ = [
    "ConversationTracker",
    "InboundMessage",
    "PeriodicCleanup",
    "RepositoryContextCleanupService",
    "RepositoryContextRetrievalService",
    "resolve_identity",
]
