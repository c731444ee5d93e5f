"""Configuration management.

Loads from an optional TOML config file + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from .enums import HandlerErrorPolicy, LogFormat, SourcePolicy

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: LogFormat = LogFormat.JSON
    metrics_port: int | None = None  # None keeps the exporter off

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


class Settings(BaseSettings):
    """Top-level scopebind settings.

    Environment variables (``SCOPEBIND_SOURCE_POLICY=raise``,
    ``SCOPEBIND_OBSERVABILITY__LOG_LEVEL=debug``) fill in whatever the TOML
    file and explicit overrides leave unset. Values passed to the constructor,
    which is how ``load_settings`` applies the file, take precedence over them.
    """

    source_policy: SourcePolicy = SourcePolicy.NOOP
    handler_error_policy: HandlerErrorPolicy = HandlerErrorPolicy.LOG
    root_name: str = "root"

    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "SCOPEBIND_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional, ignored if missing).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        data.update(overrides)

    return Settings(**data)
