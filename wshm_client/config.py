from __future__ import annotations

import logging
import os
from typing import Any, Callable, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from wshm_shared.protocol.constants import (
    DEFAULT_ESCAPE_CHAR,
    DEFAULT_MAX_JSON_SIZE,
    DEFAULT_MAX_MESSAGE_SIZE,
    DEFAULT_MAX_PARTS,
    DEFAULT_VERSION,
    FIELD_SEPARATOR,
)

ENV_PREFIX = "WSHM_"

Sanitizer = Callable[[str], str]


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


class ClientConfig(BaseModel):
    """Read-only client settings; build a new instance to change anything."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    url: str
    auto_reconnect: bool = True
    reconnect_delay: float = Field(default=1.0, ge=0, description="Base backoff delay in seconds")
    max_reconnect_attempts: int = Field(default=5, ge=0)
    escape_char: str = DEFAULT_ESCAPE_CHAR
    max_message_size: int = Field(default=DEFAULT_MAX_MESSAGE_SIZE, gt=0)
    max_parts: int = Field(default=DEFAULT_MAX_PARTS, ge=1)
    max_json_size: int = Field(default=DEFAULT_MAX_JSON_SIZE, gt=0)
    enable_json_validation: bool = True
    enable_logging: bool = True
    enable_security_logging: bool = True
    protocol_version: str = DEFAULT_VERSION
    require_version: bool = False
    open_timeout: float = Field(default=10.0, gt=0)
    log_level: str = "INFO"
    sanitizers: Dict[str, Sanitizer] = Field(default_factory=dict)
    on_connect: Optional[Callable[[], Any]] = None
    on_disconnect: Optional[Callable[[Optional[int], str], Any]] = None
    on_error: Optional[Callable[[BaseException], Any]] = None
    on_message: Optional[Callable[[str], Any]] = None

    @field_validator("escape_char")
    @classmethod
    def _check_escape_char(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("escape_char must be a single character")
        if value == FIELD_SEPARATOR:
            raise ValueError("escape_char cannot be the field separator")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level {value}")
        return level


# Fields that can come from the environment; callbacks and hooks can't.
ENV_FIELDS = (
    "url",
    "auto_reconnect",
    "reconnect_delay",
    "max_reconnect_attempts",
    "escape_char",
    "max_message_size",
    "max_parts",
    "max_json_size",
    "enable_json_validation",
    "enable_logging",
    "enable_security_logging",
    "protocol_version",
    "require_version",
    "open_timeout",
    "log_level",
)


def load_config(env_path: str = ".env", **overrides: Any) -> ClientConfig:
    """Load client configuration from env file/environment variables.

    Keyword overrides win over the environment (callbacks are passed this way).
    """
    if os.path.exists(env_path):
        load_dotenv(env_path)

    values: Dict[str, Any] = {}
    for key in ENV_FIELDS:
        env_value = os.getenv(f"{ENV_PREFIX}{key.upper()}")
        if env_value is not None:
            values[key] = env_value
    values.update(overrides)

    if "url" not in values:
        raise ConfigError(f"{ENV_PREFIX}URL is required")
    try:
        return ClientConfig(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid client configuration: {exc}") from exc


__all__ = ["ClientConfig", "ConfigError", "ENV_PREFIX", "load_config"]
