"""Load and validate bot config from YAML."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from factkeeper.config.models import BotConfig


def load_config(path: str | Path | None = None) -> BotConfig:
    """
    Load YAML file and validate into BotConfig. With no path, return defaults.
    Raises FileNotFoundError, yaml.YAMLError, or ValueError on invalid config.
    """
    if path is None:
        return BotConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw)
    if data is None:
        raise ValueError("Config file is empty")

    try:
        return BotConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config: {e}") from e
