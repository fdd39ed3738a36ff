"""Pytest fixtures: state file paths, recording sink, configs."""

from __future__ import annotations

from pathlib import Path

import pytest

from factkeeper.config.models import BotConfig, MessagesConfig
from factkeeper.infrastructure.transport import RecordingReplySink


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    """Path for a state file that does not exist yet."""
    return tmp_path / "data.json"


@pytest.fixture
def sink() -> RecordingReplySink:
    return RecordingReplySink()


@pytest.fixture
def messages() -> MessagesConfig:
    return MessagesConfig()


@pytest.fixture
def bot_config(state_path: Path) -> BotConfig:
    """Default config pointed at the test state file."""
    config = BotConfig(name="TestBot")
    config.storage.path = str(state_path)
    return config


@pytest.fixture
def configs_dir() -> Path:
    """Path to configs directory."""
    return Path(__file__).resolve().parent.parent / "configs"
