"""Repository-backed ContextCleanupService."""

import logging
from datetime import datetime, timezone

from chatctx.domain.entities import ConversationContext
from chatctx.domain.repositories import ConversationRepository
from chatctx.domain.services import ExpirationNotifier

logger = logging.getLogger(__name__)


class RepositoryContextCleanupService:
    """ConversationRepository を使う期限切れコンテキストの削除サービス"""

    def __init__(
        self,
        repository: ConversationRepository,
        notifier: ExpirationNotifier | None = None,
    ) -> None:
        """初期化

        Args:
            repository: 会話リポジトリ
            notifier: 削除前の通知先（省略時はログ出力のみ）
        """
        self._repository = repository
        self._notifier = notifier

    async def find_expired_contexts(self) -> list[ConversationContext]:
        """現在時刻の時点で期限切れのコンテキストを取得する"""
        return await self._repository.find_expired_contexts(datetime.now(timezone.utc))

    async def mark_for_deletion(self, context_id: str) -> None:
        """論理削除フック

        どちらのバックエンドも物理削除のみなので何もしない。
        """
        logger.debug("Context %s marked for deletion", context_id)

    async def permanent_delete(self, context_id: str) -> None:
        """コンテキストとメッセージを物理削除する

        Raises:
            ContextNotFoundError: コンテキストが存在しない
        """
        await self._repository.delete_context(context_id)

    async def notify_before_expiration(self, context: ConversationContext) -> None:
        """削除前の通知（ベストエフォート）

        通知先の失敗はログに残して握りつぶし、削除処理を妨げない。

        Args:
            context: 削除予定のコンテキスト
        """
        logger.info(
            "Context %s (%s %s) expired at %s and will be deleted",
            context.id,
            context.context_type.value,
            context.participants,
            context.expires_at.isoformat(),
        )
        if self._notifier is None:
            return
        try:
            await self._notifier.notify(context)
        except Exception:
            logger.warning(
                "Expiration notification failed for context %s",
                context.id,
                exc_info=True,
            )
