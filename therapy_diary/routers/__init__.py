"""
TherapyDiary API Routers.

All routers are imported here for easy access.
"""

from therapy_diary.routers.auth import router as auth_router
from therapy_diary.routers.diary import router as diary_router
from therapy_diary.routers.daily_entries import router as daily_entries_router
from therapy_diary.routers.mood import router as mood_router
from therapy_diary.routers.sessions import router as sessions_router
from therapy_diary.routers.activities import router as activities_router

__all__ = [
    "auth_router",
    "diary_router",
    "daily_entries_router",
    "mood_router",
    "sessions_router",
    "activities_router",
]
