"""設定データクラス"""

from dataclasses import dataclass

SUPPORTED_STORAGE_DRIVERS = ("memory", "sqlite")


@dataclass
class StorageConfig:
    """ストレージ設定

    Attributes:
        driver: バックエンド（"memory" または "sqlite"）
        database_path: SQLite のファイルパス（":memory:" も可）
    """

    driver: str = "sqlite"
    database_path: str | None = None


@dataclass
class ConversationConfig:
    """会話コンテキスト設定"""

    retention_days: int = 30
    history_limit: int = 50
    cleanup_interval_seconds: int = 3600


@dataclass
class LoggingConfig:
    """ログ設定"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None


@dataclass
class Config:
    """アプリケーション設定"""

    storage: StorageConfig
    conversation: ConversationConfig
    logging: LoggingConfig | None = None
