"""Query filter value objects."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from chatctx.domain.entities.context import ContextType
from chatctx.domain.exceptions import InvalidFilterError


def _validate_pagination(limit: int | None, offset: int | None = None) -> None:
    if limit is not None and limit < 1:
        raise InvalidFilterError(f"limit must be a positive integer: {limit}")
    if offset is not None and offset < 0:
        raise InvalidFilterError(f"offset must not be negative: {offset}")


@dataclass(frozen=True)
class ContextFilter:
    """コンテキスト検索条件

    Attributes:
        participants: 参加者 ID（必須、空不可）
        context_type: 種別（None の場合は種別を問わない）
        since: この日時以降に作成されたコンテキストのみ
        limit: 履歴取得時のメッセージ最大件数
        include_expired: 期限切れのコンテキストも対象にするかどうか
    """

    participants: tuple[str, ...]
    context_type: ContextType | None = None
    since: datetime | None = None
    limit: int | None = None
    include_expired: bool = False

    def __post_init__(self) -> None:
        """バリデーション"""
        # list で渡されても不変にしておく
        object.__setattr__(self, "participants", tuple(self.participants))
        if not self.participants:
            raise InvalidFilterError(
                "ContextFilter must have at least one participant"
            )
        _validate_pagination(self.limit)

    @classmethod
    def for_identity(
        cls,
        context_type: ContextType,
        participants: Iterable[str],
        limit: int | None = None,
    ) -> "ContextFilter":
        """有効なコンテキストを (種別, 参加者) で検索する条件を生成する"""
        return cls(
            participants=tuple(participants),
            context_type=context_type,
            limit=limit,
        )


@dataclass(frozen=True)
class MessageFilter:
    """メッセージ検索条件

    Attributes:
        context_id: 対象コンテキスト ID（必須）
        since: この日時以降（境界を含む）
        until: この日時以前（境界を含む）
        limit: 最大件数（offset 適用後）
        offset: 先頭から読み飛ばす件数
    """

    context_id: str
    since: datetime | None = None
    until: datetime | None = None
    limit: int | None = None
    offset: int | None = None

    def __post_init__(self) -> None:
        """バリデーション"""
        if not self.context_id:
            raise InvalidFilterError("MessageFilter must have a context_id")
        if (
            self.since is not None
            and self.until is not None
            and self.since > self.until
        ):
            raise InvalidFilterError("since must not be later than until")
        _validate_pagination(self.limit, self.offset)
