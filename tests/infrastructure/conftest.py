"""Common fixtures for storage backend tests."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass, replace
from datetime import datetime

import pytest

from chatctx.domain.repositories import ConversationRepository
from chatctx.infrastructure.memory import (
    InMemoryConversationRepository,
    InMemoryConversationStore,
)
from chatctx.infrastructure.persistence import (
    ConversationContextModel,
    DatabaseManager,
    SQLiteConversationRepository,
)
from chatctx.infrastructure.persistence.datetime_utils import normalize_to_utc

TimeSetter = Callable[..., Awaitable[None]]


@dataclass
class Backend:
    """A repository plus a hook to rewrite a stored context's timestamps.

    set_times(context_id, updated_at=None, expires_at=None) lets tests put a
    context in the past without waiting for the clock.
    """

    name: str
    repository: ConversationRepository
    set_times: TimeSetter


def _memory_backend() -> Backend:
    store = InMemoryConversationStore()

    async def set_times(
        context_id: str,
        updated_at: datetime | None = None,
        expires_at: datetime | None = None,
    ) -> None:
        context = store.contexts[context_id]
        store.contexts[context_id] = replace(
            context,
            updated_at=updated_at or context.updated_at,
            expires_at=expires_at or context.expires_at,
        )

    return Backend("memory", InMemoryConversationRepository(store), set_times)


def _sqlite_backend(db_manager: DatabaseManager) -> Backend:
    async def set_times(
        context_id: str,
        updated_at: datetime | None = None,
        expires_at: datetime | None = None,
    ) -> None:
        async with db_manager.get_session() as session:
            model = await session.get(ConversationContextModel, context_id)
            assert model is not None
            if updated_at is not None:
                model.updated_at = normalize_to_utc(updated_at)
            if expires_at is not None:
                model.expires_at = normalize_to_utc(expires_at)
            session.add(model)
            await session.commit()

    return Backend(
        "sqlite",
        SQLiteConversationRepository(db_manager.get_session),
        set_times,
    )


@pytest.fixture
async def db_manager() -> AsyncGenerator[DatabaseManager, None]:
    """Create an in-memory database manager."""
    manager = DatabaseManager(":memory:")
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture(params=["memory", "sqlite"])
def backend(request: pytest.FixtureRequest, db_manager: DatabaseManager) -> Backend:
    """Run the test once per storage backend."""
    if request.param == "memory":
        return _memory_backend()
    return _sqlite_backend(db_manager)


@pytest.fixture
def repository(backend: Backend) -> ConversationRepository:
    return backend.repository


@pytest.fixture
def set_times(backend: Backend) -> TimeSetter:
    """Rewrite a stored context's updated_at / expires_at."""
    return backend.set_times
