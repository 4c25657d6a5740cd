"""
FastAPI router for baseline diary (daily entry) endpoints.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from common.utils import message_response
from therapy_diary.dependencies import (
    get_daily_entry_service,
    get_progress_service,
    require_auth,
)
from therapy_diary.pipelines import daily_entries as pipelines
from therapy_diary.schemas.diary import DailyEntryCreate, DailyEntryUpdate
from therapy_diary.services.diary.daily_entry_service import DailyEntryService
from therapy_diary.services.progress.progress_service import ProgressService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/daily-entries", tags=["daily-entries"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_entry(
    body: DailyEntryCreate,
    user_id: Annotated[str, Depends(require_auth)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
    daily_entry_service: Annotated[DailyEntryService, Depends(get_daily_entry_service)],
):
    """
    Log a baseline diary entry for today.

    The entry is filed under the user's current week and today's day number.
    """
    result = await pipelines.create_daily_entry_pipeline(
        progress_service=progress_service,
        daily_entry_service=daily_entry_service,
        user_id=user_id,
        fields=body.model_dump(),
    )
    return message_response("Entry created successfully", **result)


@router.post("/complete-week")
async def complete_week(
    user_id: Annotated[str, Depends(require_auth)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
    daily_entry_service: Annotated[DailyEntryService, Depends(get_daily_entry_service)],
):
    """Complete the current week and move on to the next one."""
    result = await pipelines.complete_week_pipeline(
        progress_service=progress_service,
        daily_entry_service=daily_entry_service,
        user_id=user_id,
    )
    return message_response("Week completed successfully", **result)


@router.get("/week/{week_number}")
async def get_week_entries(
    week_number: int,
    user_id: Annotated[str, Depends(require_auth)],
    daily_entry_service: Annotated[DailyEntryService, Depends(get_daily_entry_service)],
):
    """Get a week's entries grouped by day."""
    return await pipelines.get_week_entries_pipeline(
        daily_entry_service=daily_entry_service,
        user_id=user_id,
        week_number=week_number,
    )


@router.get("/day/{week_number}/{day_number}")
async def get_day_entries(
    week_number: int,
    day_number: int,
    user_id: Annotated[str, Depends(require_auth)],
    daily_entry_service: Annotated[DailyEntryService, Depends(get_daily_entry_service)],
):
    """Get one day's entries ordered by time."""
    ProgressService.validate_week_number(week_number)
    entries = await daily_entry_service.get_day_entries(user_id, week_number, day_number)
    return {
        "entries": [daily_entry_service.format_entry(e) for e in entries],
        "count": len(entries),
    }


@router.put("/{entry_id}")
async def update_entry(
    entry_id: str,
    body: DailyEntryUpdate,
    user_id: Annotated[str, Depends(require_auth)],
    daily_entry_service: Annotated[DailyEntryService, Depends(get_daily_entry_service)],
):
    """Update an entry. Only provided fields change."""
    entry = await daily_entry_service.update_entry(user_id, entry_id, body.model_dump(exclude_unset=True))
    return message_response("Entry updated successfully", entry=daily_entry_service.format_entry(entry))


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str,
    user_id: Annotated[str, Depends(require_auth)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
    daily_entry_service: Annotated[DailyEntryService, Depends(get_daily_entry_service)],
):
    """Delete an entry."""
    await pipelines.delete_daily_entry_pipeline(
        progress_service=progress_service,
        daily_entry_service=daily_entry_service,
        user_id=user_id,
        entry_id=entry_id,
    )
    return message_response("Entry deleted successfully")
