"""設定管理モジュール"""

from contextkit.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
from contextkit.config.models import (
    AIConfig,
    CompressionOptions,
    Config,
    FileContentMode,
    LoggingConfig,
    PromptCardSeed,
    StorageConfig,
)

__all__ = [
    "AIConfig",
    "CompressionOptions",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "EnvironmentVariableError",
    "FileContentMode",
    "LoggingConfig",
    "PromptCardSeed",
    "StorageConfig",
    "expand_env_vars",
    "load_config",
]
