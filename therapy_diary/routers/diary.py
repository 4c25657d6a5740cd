"""
FastAPI router for diary entry endpoints.

Numeric-mood activity log. Every write refreshes the affected MoodLogs.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from common.utils import message_response
from therapy_diary.dependencies import get_diary_service, require_auth
from therapy_diary.schemas.diary import DiaryEntryCreate, DiaryEntryUpdate
from therapy_diary.services.diary.diary_service import DiaryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/diary", tags=["diary"])


@router.get("")
async def list_entries(
    user_id: Annotated[str, Depends(require_auth)],
    diary_service: Annotated[DiaryService, Depends(get_diary_service)],
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
    startDate: Optional[str] = Query(None, description="YYYY-MM-DD or ISO 8601"),
    endDate: Optional[str] = Query(None, description="YYYY-MM-DD or ISO 8601"),
    timeOfDay: Optional[str] = Query(None, pattern="^(Morning|Afternoon|Evening|Night)$"),
):
    """
    Get diary entries, newest first.

    Supports date range and time-of-day filters with pagination.
    """
    return await diary_service.list_entries(
        user_id,
        page=page,
        limit=limit,
        start_date=startDate,
        end_date=endDate,
        time_of_day=timeOfDay,
    )


@router.get("/date/{date}")
async def get_entries_by_date(
    date: str,
    user_id: Annotated[str, Depends(require_auth)],
    diary_service: Annotated[DiaryService, Depends(get_diary_service)],
):
    """Get entries logged on a day (YYYY-MM-DD), oldest first."""
    return await diary_service.get_entries_by_date(user_id, date)


@router.get("/{entry_id}")
async def get_entry(
    entry_id: str,
    user_id: Annotated[str, Depends(require_auth)],
    diary_service: Annotated[DiaryService, Depends(get_diary_service)],
):
    """Get a single diary entry."""
    return {"entry": await diary_service.get_entry(user_id, entry_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_entry(
    body: DiaryEntryCreate,
    user_id: Annotated[str, Depends(require_auth)],
    diary_service: Annotated[DiaryService, Depends(get_diary_service)],
):
    """Log an activity with mood ratings."""
    entry = await diary_service.create_entry(
        user_id,
        activity=body.activity,
        mood_after=body.moodAfter,
        mood_before=body.moodBefore,
        activity_id=body.activityId,
        notes=body.notes,
        timestamp=body.timestamp,
        time_of_day=body.timeOfDay,
    )
    return message_response("Diary entry created successfully", entry=entry)


@router.put("/{entry_id}")
async def update_entry(
    entry_id: str,
    body: DiaryEntryUpdate,
    user_id: Annotated[str, Depends(require_auth)],
    diary_service: Annotated[DiaryService, Depends(get_diary_service)],
):
    """
    Update a diary entry.

    Only provided fields change.
    """
    entry = await diary_service.update_entry(user_id, entry_id, body.model_dump(exclude_unset=True))
    return message_response("Diary entry updated successfully", entry=entry)


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str,
    user_id: Annotated[str, Depends(require_auth)],
    diary_service: Annotated[DiaryService, Depends(get_diary_service)],
):
    """Delete a diary entry."""
    await diary_service.delete_entry(user_id, entry_id)
    return message_response("Diary entry deleted successfully")
