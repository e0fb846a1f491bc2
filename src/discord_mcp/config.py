"""Server configuration: settings model and loader.

Settings come from three places, later ones winning:

1. An optional YAML file. ``${VAR}`` / ``$VAR`` references are expanded with
   :func:`os.path.expandvars` before parsing.
2. A ``.env`` file (loaded into the process environment, never overriding
   variables that are already set).
3. The environment: ``DISCORD_BOT_TOKEN`` and ``DISCORD_MCP_LOG_LEVEL``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from discord_mcp import __version__
from discord_mcp.chat.discord import DEFAULT_API_BASE

TOKEN_ENV = "DISCORD_BOT_TOKEN"
LOG_LEVEL_ENV = "DISCORD_MCP_LOG_LEVEL"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when configuration is unreadable, invalid, or missing a required value."""


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class ServerSettings(BaseModel):
    """Everything the server needs to start, with safe defaults."""

    bot_token: str | None = Field(default=None, repr=False)
    server_name: str = "MCP-Discord"
    server_version: str = __version__
    protocol_version: str = "2024-11-05"
    api_base_url: str = DEFAULT_API_BASE
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout for Discord calls.")
    tool_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Upper bound on a single tool execution; unbounded when unset.",
    )
    disabled_tools: list[str] = Field(default_factory=list)
    log_level: str = "INFO"
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            msg = f"log_level must be one of {', '.join(_LOG_LEVELS)}"
            raise ValueError(msg)
        return level

    def require_token(self) -> str:
        """Return the bot token or raise :class:`ConfigError`."""
        if not self.bot_token:
            raise ConfigError(f"Please set {TOKEN_ENV}")
        return self.bot_token


def load_settings(config_path: Path | None = None, env_file: Path | None = None) -> ServerSettings:
    """Build :class:`ServerSettings` from a YAML file, a ``.env`` file and the environment.

    Raises:
        ConfigError: On unreadable files, YAML errors or validation failures.
    """
    _load_env_file(env_file)

    data: dict[str, Any] = _read_yaml(config_path) if config_path is not None else {}

    token = os.environ.get(TOKEN_ENV)
    if token:
        data["bot_token"] = token
    level = os.environ.get(LOG_LEVEL_ENV)
    if level:
        data["log_level"] = level

    try:
        return ServerSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc


def _load_env_file(env_file: Path | None) -> None:
    if env_file is None:
        load_dotenv(find_dotenv(usecwd=True))
        return
    if not env_file.is_file():
        raise ConfigError(f"Cannot read {env_file}: no such file")
    load_dotenv(env_file)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    try:
        data: Any = yaml.safe_load(os.path.expandvars(raw))
    except yaml.YAMLError as exc:
        raise ConfigError(f"YAML parse error: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("Configuration YAML must be a mapping")
    return data
