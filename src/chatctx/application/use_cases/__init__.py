"""Use cases."""

from chatctx.application.use_cases.add_message import AddMessageUseCase
from chatctx.application.use_cases.cleanup_expired_contexts import (
    CleanupExpiredContextsUseCase,
)
from chatctx.application.use_cases.create_context import CreateContextUseCase
from chatctx.application.use_cases.delete_context import DeleteContextUseCase
from chatctx.application.use_cases.get_messages import GetMessagesUseCase
from chatctx.application.use_cases.retrieve_context import RetrieveContextUseCase

__all__ = [
    "AddMessageUseCase",
    "CleanupExpiredContextsUseCase",
    "CreateContextUseCase",
    "DeleteContextUseCase",
    "GetMessagesUseCase",
    "RetrieveContextUseCase",
]
