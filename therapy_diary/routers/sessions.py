"""
FastAPI router for weekly session endpoints.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from common.utils import message_response
from therapy_diary.dependencies import (
    get_daily_entry_service,
    get_progress_service,
    get_session_service,
    require_auth,
)
from therapy_diary.pipelines import sessions as pipelines
from therapy_diary.services.diary.daily_entry_service import DailyEntryService
from therapy_diary.services.progress.progress_service import ProgressService
from therapy_diary.services.sessions.session_service import SessionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


@router.get("/user/progress")
async def get_user_progress(
    user_id: Annotated[str, Depends(require_auth)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
    daily_entry_service: Annotated[DailyEntryService, Depends(get_daily_entry_service)],
):
    """Get the user's programme progress and current-week stats."""
    return await pipelines.get_user_progress_pipeline(
        progress_service=progress_service,
        daily_entry_service=daily_entry_service,
        user_id=user_id,
    )


@router.get("/{week_number}")
async def get_session(
    week_number: int,
    user_id: Annotated[str, Depends(require_auth)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
    session_service: Annotated[SessionService, Depends(get_session_service)],
):
    """
    Get a week's session content.

    Locked weeks return 403 until the previous week is completed.
    """
    return await pipelines.get_session_pipeline(
        progress_service=progress_service,
        session_service=session_service,
        user_id=user_id,
        week_number=week_number,
    )


@router.post("/{week_number}/complete")
async def mark_session_read(
    week_number: int,
    user_id: Annotated[str, Depends(require_auth)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Mark a completed week's session as read."""
    result = await pipelines.mark_session_read_pipeline(
        progress_service=progress_service,
        user_id=user_id,
        week_number=week_number,
    )
    return message_response("Session marked as read", **result)
