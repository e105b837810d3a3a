"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class ReasoningConfig(BaseModel):
    """Reasoning service (planning model) configuration."""

    model: str = Field(
        default="google-gla:gemini-2.0-flash",
        alias="REASONING_MODEL",
        description="Pydantic AI model identifier used for tool planning",
    )
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY", description="Gemini API key")
    google_api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY", description="Google API key")
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY", description="OpenAI API key")
    anthropic_api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY", description="Anthropic API key")

    model_config = {"populate_by_name": True}

    @property
    def provider(self) -> str:
        """Provider prefix of the configured model (``google-gla``, ``openai``...)."""
        if ":" in self.model:
            return self.model.split(":", 1)[0]
        return "test" if self.model == "test" else "openai"

    def api_key(self) -> Optional[str]:
        """Return the API key matching the configured provider, if any."""
        provider = self.provider
        if provider in ("google-gla", "google-vertex", "gemini", "google"):
            return self.gemini_api_key or self.google_api_key
        if provider == "openai":
            return self.openai_api_key
        if provider == "anthropic":
            return self.anthropic_api_key
        return None


class PlannerConfig(BaseModel):
    """Plan generator retry/backoff configuration."""

    max_attempts: int = Field(default=3, ge=1, alias="PLANNER_MAX_ATTEMPTS", description="Reasoning call attempt ceiling")
    base_delay: float = Field(
        default=2.0, gt=0, alias="PLANNER_BASE_DELAY", description="First backoff delay in seconds, doubled per retry"
    )
    timeout: float = Field(
        default=60.0, gt=0, alias="PLANNER_TIMEOUT", description="Overall planning timeout in seconds"
    )

    model_config = {"populate_by_name": True}


class ExecutorConfig(BaseModel):
    """Concurrent executor configuration."""

    max_concurrency: int = Field(
        default=8, ge=1, alias="EXECUTOR_MAX_CONCURRENCY", description="Maximum concurrently running invocations"
    )
    invocation_timeout: Optional[float] = Field(
        default=30.0,
        alias="EXECUTOR_INVOCATION_TIMEOUT",
        description="Per-invocation timeout in seconds (unset for no timeout)",
    )

    model_config = {"populate_by_name": True}


class RateLimitConfig(BaseModel):
    """Fallback bucket configuration for service keys missing from the static table."""

    default_capacity: int = Field(default=60, ge=1, alias="RATE_LIMIT_DEFAULT_CAPACITY")
    default_refill_rate: float = Field(default=1.0, gt=0, alias="RATE_LIMIT_DEFAULT_REFILL_RATE")

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Logging Configuration
    # =====================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="ACTION_ORCHESTRATOR_LOG_LEVEL",
    )
    log_format: str = Field(default="detailed", description="simple, detailed or json", alias="LOG_FORMAT")
    log_file_dir: str = Field(default="logs", description="Directory for the log file", alias="LOG_FILE_DIR")
    enable_file_logging: bool = Field(default=False, description="Write logs to a file", alias="ENABLE_FILE_LOGGING")

    # =====================================================================
    # Reasoning Service Configuration
    # =====================================================================
    reasoning_model: str = Field(default="google-gla:gemini-2.0-flash", alias="REASONING_MODEL")
    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    google_api_key: Optional[str] = Field(default=None, alias="GOOGLE_API_KEY")
    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    anthropic_api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")

    # =====================================================================
    # Planner / Executor / Rate Limit Configuration
    # =====================================================================
    planner_max_attempts: int = Field(default=3, ge=1, alias="PLANNER_MAX_ATTEMPTS")
    planner_base_delay: float = Field(default=2.0, gt=0, alias="PLANNER_BASE_DELAY")
    planner_timeout: float = Field(default=60.0, gt=0, alias="PLANNER_TIMEOUT")
    executor_max_concurrency: int = Field(default=8, ge=1, alias="EXECUTOR_MAX_CONCURRENCY")
    executor_invocation_timeout: Optional[float] = Field(default=30.0, alias="EXECUTOR_INVOCATION_TIMEOUT")
    rate_limit_default_capacity: int = Field(default=60, ge=1, alias="RATE_LIMIT_DEFAULT_CAPACITY")
    rate_limit_default_refill_rate: float = Field(default=1.0, gt=0, alias="RATE_LIMIT_DEFAULT_REFILL_RATE")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def reasoning(self) -> ReasoningConfig:
        """Get reasoning service configuration from environment variables."""
        return ReasoningConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def planner(self) -> PlannerConfig:
        """Get planner retry configuration from environment variables."""
        return PlannerConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def executor(self) -> ExecutorConfig:
        """Get executor configuration from environment variables."""
        return ExecutorConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def rate_limit(self) -> RateLimitConfig:
        """Get fallback rate limit configuration from environment variables."""
        return RateLimitConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
