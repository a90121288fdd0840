"""SQLModel table definitions."""

from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


class ConversationContextModel(SQLModel, table=True):
    """会話コンテキストテーブル"""

    __tablename__ = "conversation_contexts"

    id: str = Field(primary_key=True)
    context_type: str = Field(index=True)
    participant_key: str  # JSON format: sorted ["C123", "U456"]
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), index=True
    )
    expires_at: datetime = Field(index=True)

    __table_args__ = (
        UniqueConstraint(
            "context_type", "participant_key", name="uq_context_identity"
        ),
    )


class ContextParticipantModel(SQLModel, table=True):
    """コンテキスト参加者テーブル"""

    __tablename__ = "context_participants"

    id: int | None = Field(default=None, primary_key=True)
    context_id: str = Field(foreign_key="conversation_contexts.id", index=True)
    participant: str = Field(index=True)

    __table_args__ = (
        UniqueConstraint("context_id", "participant", name="uq_context_participant"),
    )


class ConversationMessageModel(SQLModel, table=True):
    """会話メッセージテーブル"""

    __tablename__ = "conversation_messages"

    id: str = Field(primary_key=True)
    context_id: str = Field(foreign_key="conversation_contexts.id", index=True)
    sender: str
    content: str
    timestamp: datetime = Field(index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
