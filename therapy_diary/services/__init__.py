"""
TherapyDiary Services.

All service classes organized by feature.
"""

# Progress services
from therapy_diary.services.progress.progress_service import ProgressService

# Mood services
from therapy_diary.services.mood.mood_aggregator import MoodAggregator
from therapy_diary.services.mood.mood_service import MoodService

# Diary services
from therapy_diary.services.diary.diary_service import DiaryService
from therapy_diary.services.diary.daily_entry_service import DailyEntryService

# Session services
from therapy_diary.services.sessions.session_service import SessionService

# Activity services
from therapy_diary.services.activities.activity_service import ActivityService

# User services
from therapy_diary.services.user.user_service import UserService

__all__ = [
    "ProgressService",
    "MoodAggregator",
    "MoodService",
    "DiaryService",
    "DailyEntryService",
    "SessionService",
    "ActivityService",
    "UserService",
]
