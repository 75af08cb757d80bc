"""Core configuration and constants.

Uses environment variables for configuration. Follows PEP8 and Google style docstrings.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal
import os

from pydantic import BaseModel


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Application settings loaded from environment variables.

    Attributes:
        app_name: App display name.
        environment: Runtime environment.
        api_host: Host for FastAPI server.
        api_port: Port for FastAPI server.
        database_url: SQLAlchemy URL for session persistence.
        timezone: IANA zone used to bucket sessions into calendar days.
        frame_stride: Process one of every ``frame_stride`` pose frames.
        visibility_threshold: Confidence above which a landmark counts as visible.
        extraction_threshold: Confidence above which a detection is reported at all.
        min_visible_postural: Visible postural joints required to score a frame.
        alignment_threshold: Normalized y delta tolerated between left/right joints.
        alignment_penalty: Score subtracted per misaligned joint pair.
        calories_per_minute: Calorie estimate rate for session summaries.
        tick_interval_sec: Period of the session clock.
        weekly_goal_minutes: Default weekly goal for new profiles.
        log_level: Logging level string.
    """

    app_name: str = "FormCoach"
    environment: Literal["dev", "prod", "test"] = "dev"

    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    exposed_origins: list[str] = (
        os.getenv("EXPOSED_ORIGINS", "*").split(",") if os.getenv("EXPOSED_ORIGINS") else ["*"]
    )

    # Persistence
    database_url: str | None = os.getenv("DATABASE_URL")
    timezone: str = os.getenv("TIMEZONE", "UTC")

    # Pose scoring
    frame_stride: int = int(os.getenv("POSE_FRAME_STRIDE", "3"))  # process 1 of N frames
    visibility_threshold: float = float(os.getenv("POSE_VISIBILITY_THRESHOLD", "0.5"))
    extraction_threshold: float = float(os.getenv("POSE_EXTRACTION_THRESHOLD", "0.1"))
    min_visible_postural: int = int(os.getenv("POSE_MIN_VISIBLE_POSTURAL", "4"))
    alignment_threshold: float = float(os.getenv("FORM_ALIGNMENT_THRESHOLD", "0.1"))
    alignment_penalty: float = float(os.getenv("FORM_ALIGNMENT_PENALTY", "0.2"))

    # Session timing / summaries
    tick_interval_sec: float = float(os.getenv("SESSION_TICK_INTERVAL", "1.0"))
    calories_per_minute: int = int(os.getenv("CALORIES_PER_MINUTE", "7"))
    weekly_goal_minutes: int = int(os.getenv("WEEKLY_GOAL_MINUTES", "150"))
    seed_catalog: bool = _env_flag("SEED_CATALOG", "1")
    clock_enabled: bool = _env_flag("SESSION_CLOCK_ENABLED", "1")


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()
