"""Domain exceptions."""

from collections.abc import Sequence


class ConversationContextError(Exception):
    """会話コンテキストに関する例外の基底クラス"""


class ContextNotFoundError(ConversationContextError):
    """コンテキストが存在しない場合に発生する例外

    存在しない ID、または削除済みのコンテキストを参照した場合に発生する。
    コア側ではリトライしない。
    """

    def __init__(self, context_id: str | None = None, message: str = "") -> None:
        """初期化

        Args:
            context_id: 見つからなかったコンテキストの ID（フィルタ検索時は None）
            message: エラーメッセージ（オプション）
        """
        self.context_id = context_id
        if not message:
            message = (
                f"Context not found: {context_id}"
                if context_id
                else "Context not found for provided filter"
            )
        super().__init__(message)


class ContextAlreadyExistsError(ConversationContextError):
    """同一の (type, participants) を持つ有効なコンテキストが既に存在する場合の例外

    呼び出し側は既存コンテキストを再解決してリトライすることを想定している。
    """

    def __init__(self, context_type: str, participants: Sequence[str]) -> None:
        """初期化

        Args:
            context_type: コンテキスト種別の値
            participants: 衝突した参加者リスト
        """
        self.context_type = context_type
        self.participants = tuple(participants)
        super().__init__(
            f"Context already exists for {context_type} participants: "
            f"{', '.join(self.participants)}"
        )


class InvalidInputError(ConversationContextError, ValueError):
    """不正な入力値（永続化される前に即座に報告される）"""


class InvalidContextError(InvalidInputError):
    """コンテキストの生成パラメータが不正"""


class InvalidMessageError(InvalidInputError):
    """メッセージ内容が不正（空文字・空白のみなど）"""


class InvalidFilterError(InvalidInputError):
    """検索フィルタのパラメータが不正"""
