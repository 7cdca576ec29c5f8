"""Application settings loaded from environment variables."""

from functools import lru_cache
from typing import Literal

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

    # Runtime
    ENVIRONMENT: Literal["development", "test", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Persistence
    DATABASE_URL: str = "sqlite+aiosqlite:///./archivist.db"
    DATABASE_ECHO: bool = False

    # Retention policy resolution
    default_classification: str = "other"
    """Classification whose rules apply when a document's classification is unknown."""

    strict_classification: bool = False
    """Raise instead of falling back when a classification is unknown."""

    # Automatic transitions
    system_actor: str = "system"
    sweep_justification: str = "retention period elapsed"
    sweep_interval_seconds: int = Field(default=3600, gt=0)
    sweep_batch_size: int = Field(default=100, gt=0)

    # Durable format advice
    pdfa_target_format: str = "PDF/A-2b"

    # Reporting
    report_horizon_days: int = Field(default=90, ge=0)

    # Observability
    metrics_enabled: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
