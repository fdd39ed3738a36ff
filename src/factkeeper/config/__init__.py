"""Configuration loading and validation."""

from factkeeper.config.models import (
    BotConfig,
    LoggingConfig,
    MessagesConfig,
    StorageConfig,
    TelegramConfig,
)
from factkeeper.config.loader import load_config

__all__ = [
    "BotConfig",
    "LoggingConfig",
    "MessagesConfig",
    "StorageConfig",
    "TelegramConfig",
    "load_config",
]
