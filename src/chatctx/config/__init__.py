"""設定管理モジュール"""

from chatctx.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
from chatctx.config.models import (
    SUPPORTED_STORAGE_DRIVERS,
    Config,
    ConversationConfig,
    LoggingConfig,
    StorageConfig,
)

__all__ = [
    "SUPPORTED_STORAGE_DRIVERS",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "ConversationConfig",
    "EnvironmentVariableError",
    "LoggingConfig",
    "StorageConfig",
    "expand_env_vars",
    "load_config",
]
