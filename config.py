"""
Configuration settings for the adaptive tutor service.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

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

    # ========================================
    # Database (progress store)
    # ========================================
    database_url: str = Field(
        default="sqlite:///./tutor.db",
        description="SQLAlchemy connection string for the progress store",
    )

    # ========================================
    # Curriculum
    # ========================================
    curriculum_path: str | None = Field(
        default="data/curriculum.json",
        description="JSON file describing the prerequisite graph (None for an empty graph)",
    )

    # ========================================
    # Mastery Thresholds
    # ========================================
    mastery_threshold: int = Field(
        default=70,
        description="Mastery level (0-100) at which a topic counts as mastered",
    )
    in_progress_floor: int = Field(
        default=20,
        description="Mastery above this (and below mastery_threshold) marks a topic as in progress",
    )
    gap_threshold: float = Field(
        default=0.7,
        description="Assessment accuracy below this marks a learning gap",
    )

    # ========================================
    # Scheduling
    # ========================================
    default_timeframe_days: int = Field(
        default=30,
        description="Default learning path length in days",
    )
    default_daily_minutes: int = Field(
        default=30,
        description="Default study minutes per day",
    )
    velocity_window_weeks: int = Field(
        default=4,
        description="Look-back window for learning velocity",
    )
    max_prediction_days: int = Field(
        default=90,
        description="Upper bound for time-to-mastery predictions",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8100,
        description="API server port",
    )
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins",
    )

    def get_cors_origins(self) -> list[str]:
        """Allowed CORS origins as a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def has_curriculum_configured(self) -> bool:
        """Check if a curriculum file is configured."""
        return bool(self.curriculum_path)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
