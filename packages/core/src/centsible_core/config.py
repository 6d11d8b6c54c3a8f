"""Configuration for the Centsible core.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults, plus the structlog setup driven by
it.

Usage:
    from centsible_core.config import CentsibleConfig, configure_logging

    # Load from environment variables and .env file
    config = CentsibleConfig()
    configure_logging(config)

    print(config.ingestion.default_source)

The money range ($1,000,000,000) is not part of this
configuration; it is a constant in ``centsible_core.money``.
"""

import logging
import sys

import structlog
from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class IngestionConfig(BaseSettings):
    """Transaction ingestion settings.

    Environment Variables:
        CENTSIBLE_INGESTION_DEFAULT_SOURCE: Source tag used when a raw row has none
        CENTSIBLE_INGESTION_SCHEMA_VERSION: Version stamped on normalized records
    """

    model_config = SettingsConfigDict(
        env_prefix="CENTSIBLE_INGESTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_source: str = Field(
        default="unknown",
        description="Source tag applied to raw transactions without one",
    )
    schema_version: str = Field(
        default="1.0.0",
        description="Schema version stamped on every EnhancedTransaction",
    )

    @field_validator("default_source", "schema_version")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure the value is not empty."""
        if not v or not v.strip():
            raise ValueError("Value cannot be empty")
        return v.strip()


class CentsibleConfig(BaseSettings):
    """Root configuration for the Centsible core.

    Environment Variables:
        CENTSIBLE_ENV: Environment name (development, staging, production, test)
        CENTSIBLE_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        CENTSIBLE_LOG_JSON: Render log events as JSON instead of console output

    Example:
        config = CentsibleConfig(
            log_level="DEBUG",
            ingestion=IngestionConfig(default_source="csv"),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="CENTSIBLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Emit JSON log lines",
    )

    ingestion: IngestionConfig = Field(default_factory=IngestionConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper().strip()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {valid_levels}")
        return v_upper

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.env == "production"

    @property
    def is_debug(self) -> bool:
        return self.log_level == "DEBUG"


def load_config(**overrides) -> CentsibleConfig:
    """Load configuration, turning validation failures into ConfigurationError."""
    try:
        return CentsibleConfig(**overrides)
    except PydanticValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigurationError(
            f"Invalid configuration: {first.get('msg')}",
            config_key=key or None,
            details={"errors": e.error_count()},
        ) from e


def configure_logging(config: CentsibleConfig) -> None:
    """Configure structlog according to ``config``.

    Installs a level filter so events below ``config.log_level`` are dropped,
    and picks JSON or console rendering.
    """
    level = logging.getLevelName(config.log_level)
    renderer = (
        structlog.processors.JSONRenderer()
        if config.log_json
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
