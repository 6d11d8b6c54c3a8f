"""Configuration for Centsible Agents.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults for the classifier pipeline and the
budget advisor.

Usage:
    from centsible_agents.config import AgentsConfig

    # Load from environment variables and .env file
    config = AgentsConfig()

    # Access classifier settings
    print(config.classifier.max_retries)

    # Access advisor thresholds
    print(config.advisor.overspend_ratio)
"""

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClassifierConfig(BaseSettings):
    """Classifier call settings.

    Environment Variables:
        CENTSIBLE_AGENTS_CLASSIFIER_MAX_RETRIES: Retries after a failed classifier call
        CENTSIBLE_AGENTS_CLASSIFIER_RETRY_DELAY: Delay between retries in seconds
        CENTSIBLE_AGENTS_CLASSIFIER_USE_FALLBACK: Fall back to keyword rules when
            the classifier keeps failing
    """

    model_config = SettingsConfigDict(
        env_prefix="CENTSIBLE_AGENTS_CLASSIFIER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum retry attempts for a failed classifier call",
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0,
        description="Delay between retry attempts in seconds",
    )
    use_fallback: bool = Field(
        default=True,
        description="Use the keyword classifier when the primary one fails",
    )


class AdvisorConfig(BaseSettings):
    """Thresholds for the rule-based budget advisor.

    Ratios compare ``spent`` against ``allocated_amount`` of an allocation.

    Environment Variables:
        CENTSIBLE_AGENTS_ADVISOR_OVERSPEND_RATIO: Ratio above which a category is over
        CENTSIBLE_AGENTS_ADVISOR_UNDERSPEND_RATIO: Ratio below which a category is under
        CENTSIBLE_AGENTS_ADVISOR_INCREASE_FACTOR: Multiplier on spending for raises
        CENTSIBLE_AGENTS_ADVISOR_DECREASE_FACTOR: Multiplier on spending for cuts
    """

    model_config = SettingsConfigDict(
        env_prefix="CENTSIBLE_AGENTS_ADVISOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    overspend_ratio: float = Field(
        default=0.9,
        gt=0.0,
        description="Spending ratio above which a category counts as over budget",
    )
    underspend_ratio: float = Field(
        default=0.5,
        ge=0.0,
        description="Spending ratio below which a category counts as under budget",
    )
    increase_factor: float = Field(
        default=1.1,
        ge=1.0,
        description="Suggested allocation for an over category is spent * factor",
    )
    decrease_factor: float = Field(
        default=1.2,
        ge=1.0,
        description="Suggested allocation for an under category is spent * factor",
    )

    @model_validator(mode="after")
    def validate_ratio_order(self) -> "AdvisorConfig":
        """The under threshold must sit below the over threshold."""
        if self.underspend_ratio >= self.overspend_ratio:
            raise ValueError(
                f"underspend_ratio ({self.underspend_ratio}) must be lower than "
                f"overspend_ratio ({self.overspend_ratio})"
            )
        return self


class AgentsConfig(BaseSettings):
    """Root configuration for Centsible Agents.

    Environment Variables:
        CENTSIBLE_AGENTS_ENV: Environment name (development, staging, production)
        CENTSIBLE_AGENTS_DEBUG_MODE: Enable verbose debug logging

    Example:
        config = AgentsConfig(
            classifier=ClassifierConfig(max_retries=1, retry_delay=0),
            advisor=AdvisorConfig(overspend_ratio=0.95),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="CENTSIBLE_AGENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = Field(
        default="development",
        description="Environment name (development, staging, production)",
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable verbose debug logging for development",
    )

    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    advisor: AdvisorConfig = Field(default_factory=AdvisorConfig)

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment name."""
        valid_envs = {"development", "staging", "production", "test"}
        v_lower = v.lower().strip()
        if v_lower not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v_lower

    @property
    def is_production(self) -> bool:
        return self.env == "production"
