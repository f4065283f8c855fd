"""
Application configuration using Pydantic Settings.
Loads configuration from environment variables with sensible defaults.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Dispatch queue
    queue_capacity: int = Field(default=100, ge=1)

    # Worker pool
    worker_count: int = Field(default=3, ge=1)
    default_max_retries: int = Field(default=3, ge=0)
    # Multiplier applied to simulated execution latency (0 disables sleeping)
    execution_latency_scale: float = Field(default=1.0, ge=0.0)

    # Event log
    event_log_echo: bool = True
    event_log_max_entries: int | None = None

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Observability
    otel_exporter_otlp_endpoint: str | None = None
    otel_service_name: str = "job-queue"
    otel_console_export: bool = False
    log_level: str = "INFO"
    log_format: str = "json"  # json or console


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
