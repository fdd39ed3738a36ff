"""Pydantic models for bot configuration. Central contract for IDE and validation."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


# --- Storage ---


class StorageConfig(BaseModel):
    """Where the durable state file lives."""

    path: str = Field(default="data.json", description="JSON state file, rewritten on every change")


# --- Transport ---


class TelegramConfig(BaseModel):
    """Bot API endpoint and long-polling behaviour. The token itself is never stored here."""

    base_url: str = Field(default="https://api.telegram.org")
    poll_timeout: int = Field(default=10, ge=0, description="getUpdates long-poll timeout, seconds")
    token_env: str = Field(default="TELEGRAM_TOKEN", description="Environment variable holding the token")


# --- Logging ---


class LoggingConfig(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


# --- Messages ---


class MessagesConfig(BaseModel):
    """Reply texts. {field} and {summary} are substituted."""

    greeting: str = Field(
        default="Hi! I can remember a few facts about you. What would you like to tell me?",
        description="Reply to /start",
    )
    prompt_field: str = Field(default="Okay, enter your data for {field}:")
    recorded: str = Field(default="Recorded {field}! Anything else?")
    use_menu: str = Field(default="Please choose a button from the menu.")
    summary: str = Field(default="Here is what I remember:\n{summary}\nSee you!", description="Reply to Done")
    show_data: str = Field(default="Here is what I know:\n{summary}", description="Reply to /show_data")
    no_data: str = Field(default="No data.", description="Summary for a user with no stored fields")
    restart: str = Field(default="Send /start to begin.")


# --- Top-level bot config ---


class BotConfig(BaseModel):
    """Full bot configuration loaded from YAML. Every section has defaults."""

    name: str = Field(default="Factkeeper", description="Bot display name")
    storage: StorageConfig = Field(default_factory=StorageConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    messages: MessagesConfig = Field(default_factory=MessagesConfig)
