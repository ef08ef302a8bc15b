"""Configuration loader with YAML parsing, env-var interpolation, and Pydantic validation."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class AnthropicConfig(BaseModel):
    api_key: str
    base_url: Optional[str] = None
    max_retries: int = 3
    timeout: int = 120


class AIConfig(BaseModel):
    model: str = "claude-sonnet-4-5-20250929"  # conversation turns
    structured_model: str = "claude-sonnet-4-5-20250929"  # niche/offer/demo generation
    fast_model: str = "claude-haiku-4-5-20251001"  # freeform interpretation
    max_tokens: int = 4096
    temperature: float = 0.7
    thinking_budget: int = 0  # 0 disables the reasoning stream
    max_tool_rounds: int = Field(default=20, ge=1)


class WorkflowConfig(BaseModel):
    max_quality_retries: int = Field(default=2, ge=0)
    niche_progress_seconds: float = Field(default=10.0, gt=0)


class StorageConfig(BaseModel):
    db_path: str = "./data/launchpath.db"


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=list)


class AppConfig(BaseModel):
    log_level: str = "INFO"
    json_logs: bool = False
    data_dir: str = "./data"
    anthropic: Optional[AnthropicConfig] = None
    ai: AIConfig = Field(default_factory=AIConfig)
    workflows: WorkflowConfig = Field(default_factory=WorkflowConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


_ENV_VAR_PATTERN = re.compile(r"\$\{(\w+)\}")


def _interpolate_env_vars(text: str, extra: dict[str, str] | None = None) -> str:
    """Replace ${VAR_NAME} patterns with environment variable values."""

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        if extra and var_name in extra:
            return extra[var_name]
        value = os.environ.get(var_name)
        if value is None:
            return match.group(0)
        return value

    return _ENV_VAR_PATTERN.sub(_replace, text)


def load_config(config_path: str | Path = "config.yaml", env_path: str | Path = ".env") -> AppConfig:
    """Load and validate configuration from YAML file with env-var interpolation."""
    env_file = Path(env_path)
    if env_file.exists():
        load_dotenv(env_file)

    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_file}")

    raw_text = config_file.read_text(encoding="utf-8")

    # data_dir may be referenced as ${data_dir} elsewhere in the file
    raw_data = yaml.safe_load(raw_text) or {}
    data_dir = _interpolate_env_vars(str(raw_data.get("data_dir", "./data")))

    interpolated = _interpolate_env_vars(raw_text, extra={"data_dir": data_dir})
    data = yaml.safe_load(interpolated) or {}

    return AppConfig(**data)
