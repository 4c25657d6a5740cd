"""
TherapyDiary application settings.

Extends the base settings with programme-specific configuration.
"""

from pathlib import Path

from common.config import BaseAppSettings

DATA_DIR = Path(__file__).resolve().parent / "data"


class Settings(BaseAppSettings):
    """TherapyDiary-specific settings."""

    # ==========================================================================
    # Calendar
    # ==========================================================================
    # Day boundaries for mood aggregation and day numbering are computed
    # in this timezone.
    TIMEZONE: str = "Europe/London"

    # ==========================================================================
    # Pagination
    # ==========================================================================
    DIARY_PAGE_SIZE: int = 20
    ACTIVITY_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100

    # Look-back window for mood reports when no range is given
    MOOD_REPORT_DAYS: int = 30

    # ==========================================================================
    # Seed data
    # ==========================================================================
    ACTIVITIES_SEED_FILE: str = str(DATA_DIR / "activities.json")
    SESSIONS_SEED_DIR: str = str(DATA_DIR / "sessions")


# Global settings instance
settings = Settings()
