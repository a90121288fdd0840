"""In-memory implementation of ConversationRepository."""

import asyncio
import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from chatctx.domain.entities import (
    DEFAULT_RETENTION_DAYS,
    ContextFilter,
    ContextType,
    ConversationContext,
    ConversationHistory,
    Message,
    MessageFilter,
    create_conversation_context,
    create_message,
    normalize_participants,
)
from chatctx.domain.exceptions import (
    ContextAlreadyExistsError,
    ContextNotFoundError,
)

logger = logging.getLogger(__name__)


@dataclass
class InMemoryConversationStore:
    """プロセス内のコンテキスト・メッセージ保存領域

    プロセスまたはテストごとに生成する。モジュールグローバルには置かない。

    Attributes:
        contexts: コンテキスト ID をキーとするコンテキスト
        messages: コンテキスト ID をキーとする挿入順のメッセージリスト
        lock: 全ての変更操作を直列化するロック
    """

    contexts: dict[str, ConversationContext] = field(default_factory=dict)
    messages: dict[str, list[Message]] = field(default_factory=dict)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    def clear(self) -> None:
        """全データを削除する"""
        self.contexts.clear()
        self.messages.clear()

    def context_count(self) -> int:
        return len(self.contexts)

    def message_count(self, context_id: str) -> int:
        return len(self.messages.get(context_id, []))


class InMemoryConversationRepository:
    """インメモリ版 ConversationRepository 実装

    変更操作はストアのロック内で行うため、同一の種別・参加者集合に対して
    有効なコンテキストが重複して作成されることはない。
    """

    def __init__(
        self,
        store: InMemoryConversationStore,
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> None:
        """初期化

        Args:
            store: 保存領域
            retention_days: 作成時・アクティビティ更新時に適用する保持日数
        """
        self._store = store
        self._retention_days = retention_days

    async def create_context(
        self,
        context_type: ContextType,
        participants: Sequence[str],
    ) -> ConversationContext:
        """コンテキストを新規作成する

        同一の種別・参加者集合の期限切れコンテキストが残っている場合は
        メッセージごと置き換える。

        Raises:
            ContextAlreadyExistsError: 有効なコンテキストが既に存在する
            InvalidContextError: 参加者が空
        """
        context = create_conversation_context(
            str(uuid.uuid4()), context_type, participants, self._retention_days
        )
        async with self._store.lock:
            for existing in self._find_same_identity(context):
                if not existing.is_expired():
                    raise ContextAlreadyExistsError(
                        context_type.value, context.participants
                    )
                logger.info(
                    "Replacing expired context %s for %s %s",
                    existing.id,
                    context_type.value,
                    context.participants,
                )
                self._remove(existing.id)

            self._store.contexts[context.id] = context
            self._store.messages[context.id] = []
        return context

    async def find_context(
        self, context_filter: ContextFilter
    ) -> ConversationContext | None:
        """条件に一致するコンテキストのうち最も最近更新されたものを返す"""
        now = datetime.now(timezone.utc)
        candidates = [
            context
            for context in self._store.contexts.values()
            if self._matches(context, context_filter, now)
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda c: c.updated_at)

    async def update_context_activity(self, context_id: str) -> None:
        """アクティビティ日時と有効期限を更新する

        Raises:
            ContextNotFoundError: コンテキストが存在しない
        """
        async with self._store.lock:
            context = self._get_or_raise(context_id)
            self._store.contexts[context_id] = context.update_activity(
                self._retention_days
            )

    async def add_message(
        self,
        context_id: str,
        sender: str,
        content: str,
        timestamp: datetime,
    ) -> Message:
        """メッセージを追加する

        Raises:
            ContextNotFoundError: コンテキストが存在しない
        """
        async with self._store.lock:
            self._get_or_raise(context_id)
            message = create_message(
                str(uuid.uuid4()), context_id, sender, content, timestamp
            )
            self._store.messages.setdefault(context_id, []).append(message)
        return message

    async def get_messages(self, message_filter: MessageFilter) -> list[Message]:
        """メッセージを古い順に取得する（offset の後に limit を適用）"""
        messages = self._store.messages.get(message_filter.context_id, [])

        # sorted は安定ソートなので同時刻のメッセージは挿入順を保つ
        filtered = sorted(
            (
                m
                for m in messages
                if (message_filter.since is None or m.timestamp >= message_filter.since)
                and (
                    message_filter.until is None or m.timestamp <= message_filter.until
                )
            ),
            key=lambda m: m.timestamp,
        )

        if message_filter.offset:
            filtered = filtered[message_filter.offset :]
        if message_filter.limit is not None:
            filtered = filtered[: message_filter.limit]
        return filtered

    async def get_conversation_history(
        self, context_filter: ContextFilter
    ) -> ConversationHistory:
        """会話履歴を取得する

        Raises:
            ContextNotFoundError: 一致するコンテキストが存在しない
        """
        context = await self.find_context(context_filter)
        if context is None:
            raise ContextNotFoundError()

        messages = await self.get_messages(
            MessageFilter(context_id=context.id, limit=context_filter.limit)
        )
        return ConversationHistory.create(context, messages)

    async def find_expired_contexts(
        self, cutoff: datetime
    ) -> list[ConversationContext]:
        return [c for c in self._store.contexts.values() if c.expires_at < cutoff]

    async def delete_context(self, context_id: str) -> None:
        """コンテキストとメッセージを1つのクリティカルセクション内で削除する

        Raises:
            ContextNotFoundError: コンテキストが存在しない
        """
        async with self._store.lock:
            self._get_or_raise(context_id)
            self._remove(context_id)

    def _matches(
        self,
        context: ConversationContext,
        context_filter: ContextFilter,
        now: datetime,
    ) -> bool:
        if (
            context_filter.context_type is not None
            and context.context_type != context_filter.context_type
        ):
            return False
        if not context.has_participants(context_filter.participants):
            return False
        if not context_filter.include_expired and context.expires_at < now:
            return False
        if context_filter.since is not None and context.created_at < context_filter.since:
            return False
        return True

    def _find_same_identity(
        self, context: ConversationContext
    ) -> list[ConversationContext]:
        key = normalize_participants(context.participants)
        return [
            c
            for c in self._store.contexts.values()
            if c.context_type == context.context_type
            and normalize_participants(c.participants) == key
        ]

    def _get_or_raise(self, context_id: str) -> ConversationContext:
        context = self._store.contexts.get(context_id)
        if context is None:
            raise ContextNotFoundError(context_id)
        return context

    def _remove(self, context_id: str) -> None:
        self._store.contexts.pop(context_id, None)
        self._store.messages.pop(context_id, None)
