"""
FastAPI application configuration using Pydantic Settings.

Provides centralized configuration for:
- API settings (host, port, environment)
- Fact API client settings
- Artificial latency injection for performance testing
- Sentry error and performance monitoring
- OpenTelemetry tracing and Prometheus metrics
- Logging

All settings support environment variable overrides and .env file loading.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables with the
    prefix "CATFACTS_" (e.g., CATFACTS_SENTRY_DSN).

    Environment variables are loaded from:
    1. System environment
    2. .env file in the current directory
    3. Default values defined below
    """

    # =========================================================================
    # API Settings
    # =========================================================================

    app_name: str = Field(
        default="cat-facts",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    debug: bool = Field(
        default=False,
        description="Debug mode - enables verbose error traces"
    )
    environment: str = Field(
        default="production",
        description="Environment: development|staging|production"
    )

    host: str = Field(
        default="0.0.0.0",
        description="API bind host"
    )
    port: int = Field(
        default=8000,
        description="API bind port",
        gt=0,
        lt=65536
    )

    # =========================================================================
    # Fact API Settings
    # =========================================================================

    fact_api_url: str = Field(
        default="https://catfact.ninja/fact",
        description="Endpoint returning a random fact as JSON"
    )
    fact_api_timeout: float = Field(
        default=10.0,
        description="Fact API request timeout (seconds)",
        gt=0
    )

    # =========================================================================
    # Latency Injection Settings
    # =========================================================================

    latency_probability: float = Field(
        default=0.3,
        description="Probability of delaying a fact request (0.0-1.0)",
        ge=0.0,
        le=1.0
    )
    latency_min_ms: int = Field(
        default=1000,
        description="Minimum injected delay (milliseconds)",
        ge=0
    )
    latency_max_ms: int = Field(
        default=5000,
        description="Maximum injected delay (milliseconds)",
        ge=0
    )

    # =========================================================================
    # Sentry Settings
    # =========================================================================

    sentry_dsn: Optional[str] = Field(
        default=None,
        description="Sentry DSN - Sentry reporting is disabled when unset"
    )
    sentry_traces_sample_rate: float = Field(
        default=1.0,
        description="Fraction of transactions sent to Sentry (0.0-1.0)",
        ge=0.0,
        le=1.0
    )

    # =========================================================================
    # Monitoring and Observability
    # =========================================================================

    metrics_enabled: bool = Field(
        default=True,
        description="Enable Prometheus metrics"
    )
    metrics_endpoint: str = Field(
        default="/metrics",
        description="Metrics endpoint path"
    )

    tracing_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry trace export"
    )
    tracing_otlp_endpoint: str = Field(
        default="http://otel-collector:4318/v1/traces",
        description="OTLP/HTTP traces endpoint"
    )
    tracing_sample_rate: float = Field(
        default=0.1,
        description="Trace sampling rate (0.0-1.0, where 1.0 = 100%)",
        ge=0.0,
        le=1.0
    )

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG|INFO|WARNING|ERROR|CRITICAL"
    )
    log_format: str = Field(
        default="json",
        description="Log format: json|text"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got: {v}")
        return v_upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got: {v}")
        return v_lower

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        allowed = ["json", "text"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got: {v}")
        return v_lower

    @model_validator(mode="after")
    def validate_latency_range(self) -> "Settings":
        """Validate the latency bounds are ordered."""
        if self.latency_min_ms > self.latency_max_ms:
            raise ValueError("latency_min_ms must not exceed latency_max_ms")
        return self

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def release(self) -> str:
        """Release identifier reported to Sentry."""
        return f"{self.app_name}@{self.app_version}"

    # =========================================================================
    # Model Config
    # =========================================================================

    model_config = SettingsConfigDict(
        env_prefix="CATFACTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded from:
    1. Environment variables with CATFACTS_ prefix
    2. .env file in the current directory
    3. Default values

    Returns:
        Settings: Cached settings instance
    """
    return Settings()


def clear_settings_cache():
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.
    """
    get_settings.cache_clear()
