"""
Session pipeline functions.

Gates weekly session content behind the progress tracker's unlock rule.
"""

import logging
from typing import Dict, Any

from common.utils.exceptions import ForbiddenException, NotFoundException
from therapy_diary.services.diary.daily_entry_service import DailyEntryService
from therapy_diary.services.progress.progress_service import ProgressService
from therapy_diary.services.sessions.session_service import SessionService

logger = logging.getLogger(__name__)

__all__ = [
    "get_session_pipeline",
    "mark_session_read_pipeline",
    "get_user_progress_pipeline",
]


async def get_session_pipeline(
    progress_service: ProgressService,
    session_service: SessionService,
    user_id: str,
    week_number: int,
) -> Dict[str, Any]:
    """
    Get a week's session if the user has unlocked it.

    Args:
        progress_service: For the unlock check (creates progress lazily)
        session_service: For session content
        user_id: Current user's ID
        week_number: Requested week (1-5)

    Returns:
        dict with session and userProgress

    Raises:
        ValidationException: Week outside 1-5
        ForbiddenException: Previous week not completed
        NotFoundException: No session content for the week
    """
    progress_service.validate_week_number(week_number)
    state = await progress_service.get_or_create(user_id)

    if not progress_service.is_week_unlocked(state, week_number):
        logger.debug(f"Week {week_number} locked for user {user_id}")
        raise ForbiddenException(
            message="Complete the previous week to unlock this session",
            code="WEEK_LOCKED",
        )

    session = await session_service.get_by_week(week_number)
    if not session:
        raise NotFoundException(message="No session found for this week", code="SESSION_NOT_FOUND")

    return {
        "session": session_service.format_session(session),
        "userProgress": {
            "currentWeek": state.current_week,
            "currentDay": state.current_day,
            "isCurrentWeek": state.current_week == week_number,
        },
    }


async def mark_session_read_pipeline(
    progress_service: ProgressService,
    user_id: str,
    week_number: int,
) -> Dict[str, Any]:
    """
    Mark a completed week's session as read.

    Raises:
        NotFoundException: Progress missing or week not completed yet
    """
    state = await progress_service.mark_session_read(user_id, week_number)
    return {"userProgress": progress_service.format_progress(state)}


async def get_user_progress_pipeline(
    progress_service: ProgressService,
    daily_entry_service: DailyEntryService,
    user_id: str,
) -> Dict[str, Any]:
    """
    Get the user's progress with stats for the current week.

    Returns:
        dict with userProgress and currentWeekStats
    """
    state = await progress_service.get_or_create(user_id)

    entries_count = await daily_entry_service.count_for_week(user_id, state.current_week)
    days_logged = await daily_entry_service.distinct_days(user_id, state.current_week)

    return {
        "userProgress": progress_service.format_progress(state),
        "currentWeekStats": {
            "entriesCount": entries_count,
            "daysCompleted": len(days_logged),
        },
    }
