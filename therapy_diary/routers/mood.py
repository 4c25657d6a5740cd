"""
FastAPI router for mood reporting endpoints.

Read-only views over the daily MoodLogs.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from therapy_diary.dependencies import get_mood_service, require_auth
from therapy_diary.services.mood.mood_service import MoodService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mood", tags=["mood"])


@router.get("")
async def get_mood_logs(
    user_id: Annotated[str, Depends(require_auth)],
    mood_service: Annotated[MoodService, Depends(get_mood_service)],
    startDate: Optional[str] = Query(None, description="YYYY-MM-DD format"),
    endDate: Optional[str] = Query(None, description="YYYY-MM-DD format"),
    days: Optional[int] = Query(None, ge=0, le=366),
):
    """
    Get mood logs with overall statistics.

    Uses startDate/endDate when both are given, else the last `days` days.
    """
    return await mood_service.get_mood_logs(
        user_id,
        start_date=startDate,
        end_date=endDate,
        days=days,
    )


@router.get("/stats/summary")
async def get_stats_summary(
    user_id: Annotated[str, Depends(require_auth)],
    mood_service: Annotated[MoodService, Depends(get_mood_service)],
    days: Optional[int] = Query(None, ge=0, le=366),
):
    """Get mood trend points and activity category totals."""
    return await mood_service.get_stats_summary(user_id, days=days)


@router.get("/{date}")
async def get_mood_log_by_date(
    date: str,
    user_id: Annotated[str, Depends(require_auth)],
    mood_service: Annotated[MoodService, Depends(get_mood_service)],
):
    """Get the mood log for a day (YYYY-MM-DD) with its entries."""
    return {"moodLog": await mood_service.get_mood_log_by_date(user_id, date)}
