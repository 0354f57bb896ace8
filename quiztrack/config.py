"""
Configuration settings for quiztrack.

Uses Pydantic Settings for environment variable management with .env file support.
Every field can be overridden with a ``QUIZTRACK_`` prefixed variable, e.g.
``QUIZTRACK_PASS_THRESHOLD=0.8``.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="QUIZTRACK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Scoring
    # ========================================
    pass_threshold: float = Field(
        default=0.7,
        gt=0.0,
        le=1.0,
        description="Fraction of correct answers required to pass",
    )
    max_attempts: int | None = Field(
        default=None,
        ge=1,
        description="Maximum number of submissions per quiz (None = unlimited)",
    )
    show_correct_answers: bool = Field(
        default=True,
        description="Include the per-question breakdown in results",
    )

    # ========================================
    # Session
    # ========================================
    time_limit_minutes: float | None = Field(
        default=None,
        gt=0,
        description="Session time limit in minutes (None = no limit)",
    )
    shuffle_questions: bool = Field(
        default=False,
        description="Shuffle question order once when the quiz is built",
    )
    shuffle_seed: int | None = Field(
        default=None,
        description="Seed for reproducible shuffles",
    )

    # ========================================
    # Persistence
    # ========================================
    save_progress: bool = Field(
        default=True,
        description="Persist in-progress answers so a session can resume",
    )
    storage_key: str = Field(
        default="quizState",
        min_length=1,
        description="Key the in-progress record is stored under",
    )
    storage_dir: Path = Field(
        default=Path.home() / ".quiztrack" / "progress",
        description="Directory for file-backed progress records",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: str = Field(
        default="WARNING",
        description="Minimum level written to stderr by the CLI",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
