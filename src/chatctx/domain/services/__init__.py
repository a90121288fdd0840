"""Domain services."""

from chatctx.domain.services.protocols import (
    ContextCleanupService,
    ContextRetrievalService,
    ExpirationNotifier,
)

__all__ = [
    "ContextCleanupService",
    "ContextRetrievalService",
    "ExpirationNotifier",
]
