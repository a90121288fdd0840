"""Conversation repository protocol."""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from chatctx.domain.entities import (
    ContextFilter,
    ContextType,
    ConversationContext,
    ConversationHistory,
    Message,
    MessageFilter,
)


class ConversationRepository(Protocol):
    """会話コンテキストリポジトリの抽象インターフェース

    コンテキストとメッセージの永続化を抽象化する。
    プラットフォーム連携や推論ワークフローなどの外部コンポーネントは、
    このインターフェースを通してのみコアにアクセスする。
    """

    async def create_context(
        self,
        context_type: ContextType,
        participants: Sequence[str],
    ) -> ConversationContext:
        """コンテキストを新規作成する

        Args:
            context_type: 種別
            participants: 参加者リスト

        Returns:
            作成したコンテキスト

        Raises:
            ContextAlreadyExistsError: 同一の種別・参加者集合の有効なコンテキストが存在する
            InvalidContextError: 参加者が空
        """
        ...

    async def find_context(
        self, context_filter: ContextFilter
    ) -> ConversationContext | None:
        """条件に一致するコンテキストを1件取得する

        参加者集合の完全一致（順序は問わない）で絞り込み、
        複数一致した場合は最も最近更新されたものを返す。

        Args:
            context_filter: 検索条件

        Returns:
            コンテキスト（存在しない場合は None）
        """
        ...

    async def update_context_activity(self, context_id: str) -> None:
        """アクティビティ日時と有効期限を更新する

        Args:
            context_id: コンテキスト ID

        Raises:
            ContextNotFoundError: コンテキストが存在しない
        """
        ...

    async def add_message(
        self,
        context_id: str,
        sender: str,
        content: str,
        timestamp: datetime,
    ) -> Message:
        """メッセージを追加する

        Args:
            context_id: コンテキスト ID
            sender: 送信者 ID
            content: メッセージ本文
            timestamp: イベント発生時刻

        Returns:
            保存したメッセージ

        Raises:
            ContextNotFoundError: コンテキストが存在しない
        """
        ...

    async def get_messages(self, message_filter: MessageFilter) -> list[Message]:
        """メッセージを取得する

        timestamp の [since, until] で絞り込み（境界を含む）、
        古い順に並べてから offset、limit の順に適用する。

        Args:
            message_filter: 検索条件

        Returns:
            メッセージリスト（古い順）
        """
        ...

    async def get_conversation_history(
        self, context_filter: ContextFilter
    ) -> ConversationHistory:
        """コンテキストとそのメッセージをまとめて取得する

        メッセージ件数の上限には context_filter.limit を使う。

        Args:
            context_filter: 検索条件

        Returns:
            会話履歴

        Raises:
            ContextNotFoundError: 一致するコンテキストが存在しない
        """
        ...

    async def find_expired_contexts(
        self, cutoff: datetime
    ) -> list[ConversationContext]:
        """expires_at が cutoff より前のコンテキストを全て取得する

        Args:
            cutoff: 基準日時

        Returns:
            期限切れコンテキストのリスト
        """
        ...

    async def delete_context(self, context_id: str) -> None:
        """コンテキストと全メッセージを削除する

        Args:
            context_id: コンテキスト ID

        Raises:
            ContextNotFoundError: コンテキストが存在しない
        """
        ...
