"""
User progress persistence.

Loads a user's ProgressState, applies a transition from progress_state,
and writes back only the fields that transition changed.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from common.database import to_object_id
from common.utils.exceptions import NotFoundException, ValidationException
from therapy_diary.services.progress import progress_state as transitions
from therapy_diary.services.progress.progress_state import (
    ProgressState,
    WeekNotCompletedError,
    PROGRAM_WEEKS,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProgressService:
    """
    Owns the userprogress collection.
    One document per user, created lazily with week 1 / day 1.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        tz_name: str = "UTC",
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize ProgressService.

        Args:
            db: MongoDB database connection
            tz_name: Timezone used to count calendar days
            clock: Returns the current UTC time
        """
        self._db = db
        self._progress_collection = db["userprogress"]
        self._tz_name = tz_name
        self._clock = clock

    @staticmethod
    def validate_week_number(week_number: int) -> None:
        """
        Raises:
            ValidationException: Week outside the programme
        """
        if not 1 <= week_number <= PROGRAM_WEEKS:
            raise ValidationException(
                message=f"Week number must be between 1 and {PROGRAM_WEEKS}",
                code="INVALID_WEEK",
            )

    async def get(self, user_id: str) -> Optional[ProgressState]:
        """Get a user's progress, or None if it was never created."""
        doc = await self._progress_collection.find_one({"userId": to_object_id(user_id)})
        return ProgressState.from_document(doc) if doc else None

    async def get_or_create(self, user_id: str) -> ProgressState:
        """
        Get a user's progress, creating the default record on first access.

        Args:
            user_id: MongoDB user ID

        Returns:
            ProgressState
        """
        now = self._clock()
        defaults = ProgressState.initial(to_object_id(user_id), now).to_document()
        defaults.pop("userId")
        defaults["createdAt"] = now
        defaults["updatedAt"] = now

        doc = await self._progress_collection.find_one_and_update(
            {"userId": to_object_id(user_id)},
            {"$setOnInsert": defaults},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return ProgressState.from_document(doc)

    async def _write(
        self,
        state: ProgressState,
        update: Dict[str, Any],
        extra_filter: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Apply a partial update to the user's document, stamping updatedAt."""
        update.setdefault("$set", {})["updatedAt"] = self._clock()
        query = {"userId": state.user_id, **(extra_filter or {})}
        await self._progress_collection.update_one(query, update)

    async def require(self, user_id: str) -> ProgressState:
        """
        Raises:
            NotFoundException: Progress was never initialized
        """
        state = await self.get(user_id)
        if state is None:
            raise NotFoundException(
                message="User progress not initialized",
                code="PROGRESS_NOT_FOUND",
            )
        return state

    def current_day_for(self, state: ProgressState) -> int:
        """Day number (1-7) an activity logged now would fall on."""
        return transitions.day_number(state.week_start_date, self._clock(), self._tz_name)

    async def record_activity(self, state: ProgressState) -> ProgressState:
        """
        Apply the log-activity transition and persist it.

        Args:
            state: Progress loaded for the acting user

        Returns:
            Updated ProgressState
        """
        updated = transitions.log_activity(state, self._clock(), self._tz_name)
        await self._write(updated, {
            "$set": {
                "currentDay": updated.current_day,
                "lastActiveDate": updated.last_active_date,
            },
            "$inc": {"totalActivitiesLogged": 1},
        })
        logger.debug(
            f"Activity recorded for user {state.user_id}: "
            f"week {updated.current_week} day {updated.current_day}"
        )
        return updated

    async def record_removal(self, user_id: str) -> Optional[ProgressState]:
        """Decrement the activity counter after an entry is deleted."""
        state = await self.get(user_id)
        if state is None:
            return None
        updated = transitions.remove_activity(state)
        if updated is not state:
            await self._write(
                updated,
                {"$inc": {"totalActivitiesLogged": -1}},
                extra_filter={"totalActivitiesLogged": {"$gt": 0}},
            )
        return updated

    async def complete_week(
        self,
        user_id: str,
        entries_count: int,
        state: Optional[ProgressState] = None,
    ) -> ProgressState:
        """
        Complete the user's current week.

        Args:
            user_id: MongoDB user ID
            entries_count: Entries logged during the week being closed
            state: Progress already loaded for this user, if any

        Returns:
            Updated ProgressState

        Raises:
            NotFoundException: Progress was never initialized
        """
        if state is None:
            state = await self.require(user_id)
        updated = transitions.complete_week(state, entries_count, self._clock())

        update: Dict[str, Any] = {
            "$push": {"completedWeeks": updated.completed_weeks[-1].to_document()},
        }
        if updated.current_week != state.current_week:
            update["$set"] = {
                "currentWeek": updated.current_week,
                "currentDay": updated.current_day,
                "weekStartDate": updated.week_start_date,
            }
        await self._write(updated, update)

        logger.info(
            f"Week {state.current_week} completed for user {user_id} "
            f"({entries_count} entries, now week {updated.current_week})"
        )
        return updated

    async def mark_session_read(self, user_id: str, week_number: int) -> ProgressState:
        """
        Mark the session of a completed week as read.

        Raises:
            NotFoundException: Progress missing, or week not completed yet
        """
        self.validate_week_number(week_number)
        state = await self.require(user_id)

        try:
            updated = transitions.mark_session_read(state, week_number)
        except WeekNotCompletedError as e:
            raise NotFoundException(message=str(e), code="WEEK_NOT_COMPLETED")

        # Positional $ flags the first record for the week
        await self._write(
            updated,
            {"$set": {"completedWeeks.$.sessionRead": True}},
            extra_filter={"completedWeeks.weekNumber": week_number},
        )
        logger.info(f"Session for week {week_number} marked read by user {user_id}")
        return updated

    def is_week_unlocked(self, state: ProgressState, week_number: int) -> bool:
        return transitions.is_week_unlocked(state, week_number)

    @staticmethod
    def format_progress(state: ProgressState) -> Dict[str, Any]:
        """Format progress for API responses."""
        return {
            "id": str(state.id) if state.id else None,
            "userId": str(state.user_id),
            "currentWeek": state.current_week,
            "currentDay": state.current_day,
            "weekStartDate": state.week_start_date,
            "completedWeeks": [w.to_document() for w in state.completed_weeks],
            "totalActivitiesLogged": state.total_activities_logged,
            "startedDate": state.started_date,
            "lastActiveDate": state.last_active_date,
        }
