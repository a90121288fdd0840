"""SQLite implementation of ConversationRepository."""

import json
import logging
import uuid
from collections.abc import Callable, Sequence
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

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
from chatctx.infrastructure.persistence.datetime_utils import normalize_to_utc
from chatctx.infrastructure.persistence.models import (
    ContextParticipantModel,
    ConversationContextModel,
    ConversationMessageModel,
)

logger = logging.getLogger(__name__)


def make_participant_key(participants: Sequence[str]) -> str:
    """正規化した参加者集合を一意制約用の文字列にする

    Args:
        participants: 参加者リスト

    Returns:
        ソート済み参加者の JSON 文字列
    """
    return json.dumps(list(normalize_participants(participants)))


class SQLiteConversationRepository:
    """SQLite 版 ConversationRepository 実装

    コンテキスト、参加者（正規化テーブル）、メッセージを SQLite に保存する。
    (context_type, participant_key) の一意制約により、同一の参加者集合に対する
    コンテキストの同時作成は ContextAlreadyExistsError になる。
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
        retention_days: int = DEFAULT_RETENTION_DAYS,
    ) -> None:
        """初期化

        Args:
            session_factory: 非同期セッション生成関数
            retention_days: 作成時・アクティビティ更新時に適用する保持日数
        """
        self._session_factory = session_factory
        self._retention_days = retention_days

    async def create_context(
        self,
        context_type: ContextType,
        participants: Sequence[str],
    ) -> ConversationContext:
        """コンテキストを新規作成する

        同一の種別・参加者集合の期限切れコンテキストが残っている場合は
        同じトランザクション内でメッセージごと削除してから作成する。

        Raises:
            ContextAlreadyExistsError: 有効なコンテキストが既に存在する
            InvalidContextError: 参加者が空
        """
        context = create_conversation_context(
            str(uuid.uuid4()), context_type, participants, self._retention_days
        )
        participant_key = make_participant_key(context.participants)

        async with self._session_factory() as session:
            result = await session.exec(
                select(ConversationContextModel).where(
                    ConversationContextModel.context_type == context_type.value,
                    ConversationContextModel.participant_key == participant_key,
                )
            )
            existing = result.first()
            if existing is not None:
                if normalize_to_utc(existing.expires_at) >= context.created_at:
                    raise ContextAlreadyExistsError(
                        context_type.value, context.participants
                    )
                logger.info(
                    "Replacing expired context %s for %s %s",
                    existing.id,
                    context_type.value,
                    context.participants,
                )
                await self._delete_with_children(session, existing)

            try:
                session.add(self._to_model(context, participant_key))
                await session.flush()
                for participant in context.participants:
                    session.add(
                        ContextParticipantModel(
                            context_id=context.id, participant=participant
                        )
                    )
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ContextAlreadyExistsError(
                    context_type.value, context.participants
                ) from e

        return context

    async def find_context(
        self, context_filter: ContextFilter
    ) -> ConversationContext | None:
        """条件に一致するコンテキストのうち最も最近更新されたものを返す"""
        conditions = [
            ConversationContextModel.participant_key
            == make_participant_key(context_filter.participants)
        ]
        if context_filter.context_type is not None:
            conditions.append(
                ConversationContextModel.context_type
                == context_filter.context_type.value
            )
        if not context_filter.include_expired:
            now = datetime.now(timezone.utc)
            conditions.append(col(ConversationContextModel.expires_at) >= now)
        if context_filter.since is not None:
            conditions.append(
                col(ConversationContextModel.created_at)
                >= normalize_to_utc(context_filter.since)
            )

        async with self._session_factory() as session:
            statement = (
                select(ConversationContextModel)
                .where(*conditions)
                .order_by(col(ConversationContextModel.updated_at).desc())
                .limit(1)
            )
            result = await session.exec(statement)
            model = result.first()
            if model is None:
                return None
            return await self._to_entity(session, model)

    async def update_context_activity(self, context_id: str) -> None:
        """アクティビティ日時と有効期限を更新する

        Raises:
            ContextNotFoundError: コンテキストが存在しない
        """
        async with self._session_factory() as session:
            model = await self._get_model_or_raise(session, context_id)
            context = await self._to_entity(session, model)
            updated = context.update_activity(self._retention_days)

            model.updated_at = normalize_to_utc(updated.updated_at)
            model.expires_at = normalize_to_utc(updated.expires_at)
            session.add(model)
            await session.commit()

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
        message = create_message(
            str(uuid.uuid4()),
            context_id,
            sender,
            content,
            normalize_to_utc(timestamp),
        )
        async with self._session_factory() as session:
            await self._get_model_or_raise(session, context_id)
            session.add(
                ConversationMessageModel(
                    id=message.id,
                    context_id=message.context_id,
                    sender=message.sender,
                    content=message.content,
                    timestamp=normalize_to_utc(message.timestamp),
                    created_at=normalize_to_utc(message.created_at),
                )
            )
            await session.commit()
        return message

    async def get_messages(self, message_filter: MessageFilter) -> list[Message]:
        """メッセージを古い順に取得する（offset の後に limit を適用）"""
        conditions = [ConversationMessageModel.context_id == message_filter.context_id]
        if message_filter.since is not None:
            conditions.append(
                col(ConversationMessageModel.timestamp)
                >= normalize_to_utc(message_filter.since)
            )
        if message_filter.until is not None:
            conditions.append(
                col(ConversationMessageModel.timestamp)
                <= normalize_to_utc(message_filter.until)
            )

        statement = (
            select(ConversationMessageModel)
            .where(*conditions)
            .order_by(
                col(ConversationMessageModel.timestamp).asc(),
                col(ConversationMessageModel.created_at).asc(),
            )
        )
        if message_filter.offset:
            statement = statement.offset(message_filter.offset)
        if message_filter.limit is not None:
            statement = statement.limit(message_filter.limit)

        async with self._session_factory() as session:
            result = await session.exec(statement)
            return [self._to_message(m) for m in result.all()]

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
        async with self._session_factory() as session:
            result = await session.exec(
                select(ConversationContextModel).where(
                    col(ConversationContextModel.expires_at) < normalize_to_utc(cutoff)
                )
            )
            return [await self._to_entity(session, m) for m in result.all()]

    async def delete_context(self, context_id: str) -> None:
        """コンテキスト、参加者、メッセージを1トランザクションで削除する

        Raises:
            ContextNotFoundError: コンテキストが存在しない
        """
        async with self._session_factory() as session:
            model = await self._get_model_or_raise(session, context_id)
            await self._delete_with_children(session, model)
            await session.commit()

    async def _get_model_or_raise(
        self, session: AsyncSession, context_id: str
    ) -> ConversationContextModel:
        model = await session.get(ConversationContextModel, context_id)
        if model is None:
            raise ContextNotFoundError(context_id)
        return model

    async def _delete_with_children(
        self, session: AsyncSession, model: ConversationContextModel
    ) -> None:
        """子テーブルの行を先に削除し、その後コンテキストを削除する（commit はしない）"""
        messages = await session.exec(
            select(ConversationMessageModel).where(
                ConversationMessageModel.context_id == model.id
            )
        )
        for message in messages.all():
            await session.delete(message)

        participants = await session.exec(
            select(ContextParticipantModel).where(
                ContextParticipantModel.context_id == model.id
            )
        )
        for participant in participants.all():
            await session.delete(participant)

        # 外部キー制約のため、親の削除前に子の削除を反映しておく
        await session.flush()
        await session.delete(model)
        await session.flush()

    async def _to_entity(
        self, session: AsyncSession, model: ConversationContextModel
    ) -> ConversationContext:
        """モデルをエンティティに変換する（参加者は正規化テーブルから読む）"""
        result = await session.exec(
            select(ContextParticipantModel.participant).where(
                ContextParticipantModel.context_id == model.id
            )
        )
        participants = sorted(result.all())
        return ConversationContext.from_data(
            {
                "id": model.id,
                "context_type": model.context_type,
                "participants": participants,
                "created_at": normalize_to_utc(model.created_at),
                "updated_at": normalize_to_utc(model.updated_at),
                "expires_at": normalize_to_utc(model.expires_at),
            }
        )

    def _to_model(
        self, context: ConversationContext, participant_key: str
    ) -> ConversationContextModel:
        return ConversationContextModel(
            id=context.id,
            context_type=context.context_type.value,
            participant_key=participant_key,
            created_at=normalize_to_utc(context.created_at),
            updated_at=normalize_to_utc(context.updated_at),
            expires_at=normalize_to_utc(context.expires_at),
        )

    def _to_message(self, model: ConversationMessageModel) -> Message:
        return Message.from_data(
            {
                "id": model.id,
                "context_id": model.context_id,
                "sender": model.sender,
                "content": model.content,
                "timestamp": normalize_to_utc(model.timestamp),
                "created_at": normalize_to_utc(model.created_at),
            }
        )
