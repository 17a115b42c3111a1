"""Configuration system for the Snang case core.

This module provides Pydantic Settings-based configuration with environment
variable support and sensible defaults.

Usage:
    from snang_core.config import SnangConfig

    # Load from environment variables and .env file
    config = SnangConfig()

    # Access scoring settings
    print(config.scoring.methodology_version)

    # Access permission settings
    if config.permissions.strict_matrix:
        print("Conflicting permission entries will raise")
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .scoring_tables import METHODOLOGY_VERSION


class ScoringConfig(BaseSettings):
    """Readiness scoring settings.

    The scoring formula itself is fixed; these settings only affect the
    metadata stamped on scoring records and the default self-check depth.

    Environment Variables:
        SNANG_SCORING_METHODOLOGY_VERSION: Version tag stored with each record
        SNANG_SCORING_DETERMINISM_ITERATIONS: Default iterations for the
            determinism self-check
    """

    model_config = SettingsConfigDict(
        env_prefix="SNANG_SCORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    methodology_version: str = Field(
        default=METHODOLOGY_VERSION,
        description="Scoring methodology version stamped on scoring records",
    )
    determinism_iterations: int = Field(
        default=10,
        ge=1,
        le=10000,
        description="Default number of recomputations for determinism checks",
    )

    @field_validator("methodology_version")
    @classmethod
    def validate_methodology_version(cls, v: str) -> str:
        """Ensure the version tag is not empty."""
        if not v or not v.strip():
            raise ValueError("Methodology version cannot be empty")
        return v.strip()


class PermissionConfig(BaseSettings):
    """Permission matrix settings.

    Environment Variables:
        SNANG_PERMISSIONS_STRICT_MATRIX: Raise on a resource that is both
            allowed and denied for the same action instead of only logging
    """

    model_config = SettingsConfigDict(
        env_prefix="SNANG_PERMISSIONS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    strict_matrix: bool = Field(
        default=False,
        description="Treat conflicting allow/deny entries as a configuration error",
    )


class SnangConfig(BaseSettings):
    """Root configuration for the Snang case core.

    Environment Variables:
        SNANG_ENV: Environment name (development, staging, production, test)
        SNANG_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        SNANG_LOG_JSON: Render log lines as JSON instead of console text

    Example:
        config = SnangConfig(
            scoring=ScoringConfig(methodology_version="v3.7.0"),
            permissions=PermissionConfig(strict_matrix=True),
        )
    """

    model_config = SettingsConfigDict(
        env_prefix="SNANG_",
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

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    permissions: PermissionConfig = Field(default_factory=PermissionConfig)

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
        """Check if debug logging is enabled."""
        return self.log_level == "DEBUG"
