"""Configuration for the drill service."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

CONFIG_ENV_VAR = "MATHDRILL_CONFIG_PATH"
DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.yaml")


class LoggingConfig(BaseModel):
    """Log output settings."""

    model_config = ConfigDict(extra="forbid")

    level: str = "INFO"
    service_name: str = "mathdrill"
    json_output: bool = True


class GameConfig(BaseModel):
    """Game defaults."""

    model_config = ConfigDict(extra="forbid")

    default_timer_seconds: int = Field(default=60, ge=1)
    leaderboard_page_size: int = Field(default=25, ge=1)
    random_seed: int | None = None


class AppConfig(BaseModel):
    """Raw YAML file shape."""

    model_config = ConfigDict(extra="forbid")

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    game: GameConfig = Field(default_factory=GameConfig)


def get_config_path(config_path: Path | None = None) -> Path:
    """Resolve the config file: explicit path, then env var, then the default."""
    if config_path is not None:
        return config_path
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    return DEFAULT_CONFIG_PATH


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load settings from config.yaml.

    Args:
        config_path: Explicit path to config.yaml.  Falls back to the
                     MATHDRILL_CONFIG_PATH env var, then to ``config.yaml``
                     next to this module.

    Returns:
        The parsed AppConfig.  A missing default file yields defaults;
        a missing explicit or env-var file raises FileNotFoundError.
    """
    path = get_config_path(config_path)
    if not path.exists():
        if path == DEFAULT_CONFIG_PATH:
            return AppConfig()
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = yaml.safe_load(path.read_text())
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        msg = f"Invalid config file: {path}"
        raise ValueError(msg)

    return AppConfig(**raw)
