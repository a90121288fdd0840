"""Storage backend selection."""

from chatctx.config import Config
from chatctx.domain.repositories import ConversationRepository
from chatctx.infrastructure.memory import (
    InMemoryConversationRepository,
    InMemoryConversationStore,
)
from chatctx.infrastructure.persistence import (
    DatabaseManager,
    SQLiteConversationRepository,
)


def create_conversation_repository(
    config: Config,
    db_manager: DatabaseManager | None = None,
) -> ConversationRepository:
    """設定に従って ConversationRepository を生成する

    Args:
        config: アプリケーション設定
        db_manager: SQLite バックエンドで使うデータベース管理（テーブル作成済み）

    Returns:
        ConversationRepository 実装

    Raises:
        ValueError: 未対応のドライバ、または sqlite で db_manager が無い場合
    """
    driver = config.storage.driver
    retention_days = config.conversation.retention_days

    if driver == "memory":
        return InMemoryConversationRepository(
            InMemoryConversationStore(), retention_days=retention_days
        )
    if driver == "sqlite":
        if db_manager is None:
            raise ValueError("sqlite driver requires a DatabaseManager")
        return SQLiteConversationRepository(
            db_manager.get_session, retention_days=retention_days
        )
    raise ValueError(f"Unsupported storage driver: {driver}")
