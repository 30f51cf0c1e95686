"""
Base configuration settings.

Provides common configuration inherited by all specific config modules.
Handles environment detection, log level and request size limits.

Dependencies: pydantic_settings
System role: Foundation for all configuration classes
"""

import logging
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict

LogLevelName = Literal["trace", "debug", "info", "warn", "error", "fatal"]

_LOG_LEVELS: dict[str, int] = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


class BaseSettings(PydanticBaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        default="development",
        description="Application environment (development, staging, production)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: LogLevelName = Field(
        default="info",
        description="Logging level (trace, debug, info, warn, error, fatal)",
    )
    body_size_limit: int = Field(
        default=10_000_000,
        gt=0,
        description="Maximum accepted request body size in bytes",
    )

    @property
    def logging_level(self) -> int:
        """Stdlib logging level matching log_level."""
        return _LOG_LEVELS[self.log_level]

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"
