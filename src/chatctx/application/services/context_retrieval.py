"""Repository-backed ContextRetrievalService."""

from collections.abc import Sequence

from chatctx.domain.entities import (
    ContextFilter,
    ContextType,
    ConversationHistory,
    Message,
    MessageFilter,
)
from chatctx.domain.exceptions import ContextNotFoundError
from chatctx.domain.repositories import ConversationRepository


class RepositoryContextRetrievalService:
    """ConversationRepository を使うコンテキスト取得サービス

    フィルタ条件の完全一致のみで検索する。類似度によるランキングは行わない。
    """

    def __init__(self, repository: ConversationRepository) -> None:
        """初期化

        Args:
            repository: 会話リポジトリ
        """
        self._repository = repository

    async def find_relevant_context(
        self, context_filter: ContextFilter
    ) -> list[ConversationHistory]:
        """一致するコンテキストの履歴を取得する

        Args:
            context_filter: 検索条件

        Returns:
            会話履歴のリスト（現状は0件または1件）
        """
        try:
            history = await self._repository.get_conversation_history(context_filter)
        except ContextNotFoundError:
            return []
        return [history]

    async def get_latest_messages(self, message_filter: MessageFilter) -> list[Message]:
        """最新のメッセージを取得する

        リポジトリの get_messages とは逆に、新しい順で返す。
        offset と limit は新しい順に並べた後に適用する。

        Args:
            message_filter: 検索条件

        Returns:
            メッセージリスト（新しい順）
        """
        unlimited = MessageFilter(
            context_id=message_filter.context_id,
            since=message_filter.since,
            until=message_filter.until,
        )
        messages = await self._repository.get_messages(unlimited)
        latest = sorted(messages, key=lambda m: m.timestamp, reverse=True)
        if message_filter.offset:
            latest = latest[message_filter.offset :]
        if message_filter.limit is not None:
            return latest[: message_filter.limit]
        return latest

    async def check_context_exists(
        self, participants: Sequence[str], context_type: ContextType
    ) -> bool:
        """有効なコンテキストが存在するかどうか"""
        context = await self._repository.find_context(
            ContextFilter.for_identity(context_type, participants)
        )
        return context is not None
