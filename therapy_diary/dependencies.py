"""
FastAPI dependencies for TherapyDiary application.

Provides dependency injection for all services.
"""

from typing import Annotated, Optional, Tuple

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.auth import JWTAuth, create_auth_dependency
from therapy_diary.config import settings

from therapy_diary.services.activities.activity_service import ActivityService
from therapy_diary.services.diary.daily_entry_service import DailyEntryService
from therapy_diary.services.diary.diary_service import DiaryService
from therapy_diary.services.mood.mood_aggregator import MoodAggregator
from therapy_diary.services.mood.mood_service import MoodService
from therapy_diary.services.progress.progress_service import ProgressService
from therapy_diary.services.sessions.session_service import SessionService
from therapy_diary.services.user.user_service import UserService


# ─────────────────────────────────────────────────────────────────
# Service singletons
# ─────────────────────────────────────────────────────────────────

_auth_provider: Optional[JWTAuth] = None
_user_service: Optional[UserService] = None

_mood_aggregator: Optional[MoodAggregator] = None
_mood_service: Optional[MoodService] = None

_diary_service: Optional[DiaryService] = None
_daily_entry_service: Optional[DailyEntryService] = None

_progress_service: Optional[ProgressService] = None
_session_service: Optional[SessionService] = None
_activity_service: Optional[ActivityService] = None


# ─────────────────────────────────────────────────────────────────
# Initialization functions
# ─────────────────────────────────────────────────────────────────

def init_auth_services(db: AsyncIOMotorDatabase) -> None:
    """Initialize auth and account services."""
    global _auth_provider, _user_service

    _auth_provider = JWTAuth(
        secret=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
    )
    _user_service = UserService(db=db, auth=_auth_provider)


def init_diary_services(db: AsyncIOMotorDatabase) -> None:
    """Initialize diary, daily entry and mood services."""
    global _mood_aggregator, _mood_service, _diary_service, _daily_entry_service

    _mood_aggregator = MoodAggregator(db=db, tz_name=settings.TIMEZONE)
    _mood_service = MoodService(
        db=db,
        tz_name=settings.TIMEZONE,
        default_days=settings.MOOD_REPORT_DAYS,
    )
    _diary_service = DiaryService(
        db=db,
        mood_aggregator=_mood_aggregator,
        tz_name=settings.TIMEZONE,
        page_size=settings.DIARY_PAGE_SIZE,
        max_page_size=settings.MAX_PAGE_SIZE,
    )
    _daily_entry_service = DailyEntryService(db=db, tz_name=settings.TIMEZONE)


def init_programme_services(db: AsyncIOMotorDatabase) -> None:
    """Initialize progress, session and activity services."""
    global _progress_service, _session_service, _activity_service

    _progress_service = ProgressService(db=db, tz_name=settings.TIMEZONE)
    _session_service = SessionService(db=db)
    _activity_service = ActivityService(
        db=db,
        page_size=settings.ACTIVITY_PAGE_SIZE,
        max_page_size=settings.MAX_PAGE_SIZE,
    )


def init_all_services(db: AsyncIOMotorDatabase) -> None:
    """
    Initialize all services at application startup.

    Args:
        db: Main MongoDB database connection
    """
    init_auth_services(db)
    init_diary_services(db)
    init_programme_services(db)


# ─────────────────────────────────────────────────────────────────
# Auth
# ─────────────────────────────────────────────────────────────────

def get_auth_provider() -> JWTAuth:
    """Get JWT auth provider."""
    if _auth_provider is None:
        raise RuntimeError("Auth services not initialized.")
    return _auth_provider


get_token_claims = create_auth_dependency(get_auth_provider)


async def require_auth(
    claims: Annotated[Tuple[str, str], Depends(get_token_claims)],
) -> str:
    """Dependency that requires authentication. Resolves the caller's user ID."""
    user_id, _ = claims
    return user_id


# ─────────────────────────────────────────────────────────────────
# Service getters
# ─────────────────────────────────────────────────────────────────

def get_user_service() -> UserService:
    """Get user service instance."""
    if _user_service is None:
        raise RuntimeError("Auth services not initialized.")
    return _user_service


def get_mood_service() -> MoodService:
    """Get mood reporting service instance."""
    if _mood_service is None:
        raise RuntimeError("Diary services not initialized. Call init_diary_services first.")
    return _mood_service


def get_diary_service() -> DiaryService:
    """Get diary service instance."""
    if _diary_service is None:
        raise RuntimeError("Diary services not initialized. Call init_diary_services first.")
    return _diary_service


def get_daily_entry_service() -> DailyEntryService:
    """Get daily entry service instance."""
    if _daily_entry_service is None:
        raise RuntimeError("Diary services not initialized. Call init_diary_services first.")
    return _daily_entry_service


def get_progress_service() -> ProgressService:
    """Get progress service instance."""
    if _progress_service is None:
        raise RuntimeError("Programme services not initialized. Call init_programme_services first.")
    return _progress_service


def get_session_service() -> SessionService:
    """Get session service instance."""
    if _session_service is None:
        raise RuntimeError("Programme services not initialized. Call init_programme_services first.")
    return _session_service


def get_activity_service() -> ActivityService:
    """Get activity service instance."""
    if _activity_service is None:
        raise RuntimeError("Programme services not initialized. Call init_programme_services first.")
    return _activity_service
