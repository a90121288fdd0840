"""ConversationContext entity."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from chatctx.domain.exceptions import InvalidContextError

DEFAULT_RETENTION_DAYS = 30


class ContextType(Enum):
    """会話コンテキストの種別"""

    USER = "user"
    GROUP = "group"


def normalize_participants(participants: Iterable[str]) -> tuple[str, ...]:
    """参加者リストを正規化する

    重複を除去してソートするため、並び順に依存せず同じ集合は同じ値になる。

    Args:
        participants: 参加者 ID のリスト

    Returns:
        ソート済みの参加者タプル
    """
    return tuple(sorted(set(participants)))


@dataclass(frozen=True)
class ConversationContext:
    """会話コンテキストエンティティ

    保持期間とメッセージのスコープの単位。
    (context_type, 参加者集合) の組み合わせごとに有効なコンテキストは1つだけ存在する。

    Attributes:
        id: コンテキストの一意識別子
        context_type: 種別（USER / GROUP）
        participants: 参加者 ID（ユーザー ID またはチャンネル ID）
        created_at: 作成日時
        updated_at: 最終アクティビティ日時
        expires_at: 有効期限（updated_at + 保持期間）
    """

    id: str
    context_type: ContextType
    participants: tuple[str, ...]
    created_at: datetime
    updated_at: datetime
    expires_at: datetime

    @classmethod
    def from_data(cls, data: Mapping[str, Any]) -> "ConversationContext":
        """保存済みデータから再構築する（期限の再計算は行わない）

        Args:
            data: id, context_type, participants, created_at, updated_at,
                expires_at を持つマッピング

        Returns:
            ConversationContext エンティティ
        """
        return cls(
            id=data["id"],
            context_type=ContextType(data["context_type"]),
            participants=tuple(data["participants"]),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
            expires_at=data["expires_at"],
        )

    def update_activity(
        self, retention_days: int = DEFAULT_RETENTION_DAYS
    ) -> "ConversationContext":
        """アクティビティを記録した新しいコンテキストを返す

        updated_at と expires_at は以前の値を下回らない。

        Args:
            retention_days: 更新後の保持日数

        Returns:
            更新されたコンテキスト
        """
        now = datetime.now(timezone.utc)
        updated_at = max(now, self.updated_at)
        expires_at = max(now + timedelta(days=retention_days), self.expires_at)
        return replace(self, updated_at=updated_at, expires_at=expires_at)

    def is_expired(self, now: datetime | None = None) -> bool:
        """有効期限を過ぎているかどうか

        Args:
            now: 判定基準の時刻（省略時は現在時刻）

        Returns:
            now が expires_at より後であれば True
        """
        if now is None:
            now = datetime.now(timezone.utc)
        return now > self.expires_at

    def has_participants(self, participants: Iterable[str]) -> bool:
        """参加者集合が完全に一致するかどうか（順序は問わない）"""
        return normalize_participants(self.participants) == normalize_participants(
            participants
        )


def create_conversation_context(
    context_id: str,
    context_type: ContextType,
    participants: Iterable[str],
    retention_days: int = DEFAULT_RETENTION_DAYS,
) -> ConversationContext:
    """ConversationContext エンティティを生成する

    Args:
        context_id: コンテキスト ID
        context_type: 種別
        participants: 参加者リスト（正規化して保存する）
        retention_days: 保持日数

    Returns:
        ConversationContext エンティティ

    Raises:
        InvalidContextError: 参加者が空、または保持日数が1未満の場合
    """
    normalized = normalize_participants(participants)
    if not normalized:
        raise InvalidContextError("Context must have at least one participant")
    if retention_days < 1:
        raise InvalidContextError("Retention period must be at least one day")

    now = datetime.now(timezone.utc)
    return ConversationContext(
        id=context_id,
        context_type=context_type,
        participants=normalized,
        created_at=now,
        updated_at=now,
        expires_at=now + timedelta(days=retention_days),
    )
