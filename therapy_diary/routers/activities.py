"""
FastAPI router for activity catalog endpoints.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from common.utils import message_response
from therapy_diary.dependencies import get_activity_service, require_auth
from therapy_diary.schemas.activities import ActivityCreate, ActivityUpdate, RankRequest
from therapy_diary.services.activities.activity_service import ActivityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/activities", tags=["activities"])


@router.get("")
async def list_activities(
    user_id: Annotated[str, Depends(require_auth)],
    activity_service: Annotated[ActivityService, Depends(get_activity_service)],
    category: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=100),
):
    """
    Get global activities plus the user's custom ones.

    Supports category/difficulty filters, text search and pagination.
    """
    return await activity_service.list_activities(
        user_id,
        category=category,
        difficulty=difficulty,
        search=search,
        page=page,
        limit=limit,
    )


@router.get("/category/{category}")
async def get_by_category(
    category: str,
    user_id: Annotated[str, Depends(require_auth)],
    activity_service: Annotated[ActivityService, Depends(get_activity_service)],
):
    """Get activities in a category."""
    activities = await activity_service.get_by_category(user_id, category)
    return {"category": category, "activities": activities, "count": len(activities)}


@router.get("/difficulty/{difficulty}")
async def get_by_difficulty(
    difficulty: str,
    user_id: Annotated[str, Depends(require_auth)],
    activity_service: Annotated[ActivityService, Depends(get_activity_service)],
):
    """Get activities of a difficulty."""
    activities = await activity_service.get_by_difficulty(user_id, difficulty)
    return {"difficulty": difficulty, "activities": activities, "count": len(activities)}


@router.get("/{activity_id}")
async def get_activity(
    activity_id: str,
    user_id: Annotated[str, Depends(require_auth)],
    activity_service: Annotated[ActivityService, Depends(get_activity_service)],
):
    """Get a single activity."""
    return {"activity": await activity_service.get_activity(user_id, activity_id)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_activity(
    body: ActivityCreate,
    user_id: Annotated[str, Depends(require_auth)],
    activity_service: Annotated[ActivityService, Depends(get_activity_service)],
):
    """Create a custom activity."""
    activity = await activity_service.create_activity(user_id, body.model_dump())
    return message_response("Activity created successfully", activity=activity)


@router.put("/{activity_id}")
async def update_activity(
    activity_id: str,
    body: ActivityUpdate,
    user_id: Annotated[str, Depends(require_auth)],
    activity_service: Annotated[ActivityService, Depends(get_activity_service)],
):
    """Update one of the user's custom activities."""
    activity = await activity_service.update_activity(
        user_id, activity_id, body.model_dump(exclude_unset=True)
    )
    return message_response("Activity updated successfully", activity=activity)


@router.patch("/{activity_id}/rank")
async def update_ranking(
    activity_id: str,
    body: RankRequest,
    user_id: Annotated[str, Depends(require_auth)],
    activity_service: Annotated[ActivityService, Depends(get_activity_service)],
):
    """Re-rank a custom activity's difficulty."""
    activity = await activity_service.update_ranking(user_id, activity_id, body.difficulty)
    return message_response("Activity ranking updated successfully", activity=activity)


@router.delete("/{activity_id}")
async def delete_activity(
    activity_id: str,
    user_id: Annotated[str, Depends(require_auth)],
    activity_service: Annotated[ActivityService, Depends(get_activity_service)],
):
    """Soft-delete one of the user's custom activities."""
    await activity_service.delete_activity(user_id, activity_id)
    return message_response("Activity deleted successfully")
