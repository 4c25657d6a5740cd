"""
Daily (baseline diary) entry service.

Label-mood entries grouped by programme week and day. Unlike diary
entries these carry free-text mood labels and never feed the MoodLog.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Callable

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from common.database import to_object_id
from common.utils.exceptions import NotFoundException, ValidationException
from therapy_diary.services.diary.diary_service import TIMES_OF_DAY
from therapy_diary.services.progress.progress_state import DAYS_PER_WEEK
from therapy_diary.utils.dates import local_date, start_of_day

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "timeOfDay",
    "time",
    "activity",
    "location",
    "withWhom",
    "moodBefore",
    "moodAfter",
    "notes",
)

# Fields that cannot be blanked once set
REQUIRED_FIELDS = ("timeOfDay", "time", "activity", "moodBefore", "moodAfter")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Optional[str]) -> Optional[str]:
    return value.strip() if isinstance(value, str) else value


class DailyEntryService:
    """
    Owns the dailyentries collection.
    Progress bookkeeping is left to the caller (see daily_entries pipeline).
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        tz_name: str = "UTC",
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize DailyEntryService.

        Args:
            db: MongoDB database connection
            tz_name: Timezone defining the entry date
            clock: Returns the current UTC time
        """
        self._db = db
        self._daily_entries_collection = db["dailyentries"]
        self._tz_name = tz_name
        self._clock = clock

    @staticmethod
    def validate_day_number(day_number: int) -> None:
        if not 1 <= day_number <= DAYS_PER_WEEK:
            raise ValidationException(
                message=f"Day number must be between 1 and {DAYS_PER_WEEK}",
                code="INVALID_DAY",
            )

    def _entry_filter(self, user_id: str, entry_id: str) -> Dict[str, Any]:
        entry_oid = to_object_id(entry_id)
        if entry_oid is None:
            raise NotFoundException(message="No entry found with that ID", code="ENTRY_NOT_FOUND")
        return {"_id": entry_oid, "userId": to_object_id(user_id)}

    async def create_entry(
        self,
        user_id: str,
        week_number: int,
        day_number: int,
        fields: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Store a baseline diary entry for today.

        Args:
            user_id: MongoDB user ID
            week_number: User's current week
            day_number: Day of the week (1-7) the entry falls on
            fields: timeOfDay, time, activity, location, withWhom,
                moodBefore, moodAfter, notes

        Returns:
            Created entry document
        """
        self.validate_day_number(day_number)
        if fields.get("timeOfDay") not in TIMES_OF_DAY:
            raise ValidationException(
                message=f"timeOfDay must be one of {', '.join(TIMES_OF_DAY)}",
                code="INVALID_TIME_OF_DAY",
            )

        now = self._clock()
        entry = {
            "userId": to_object_id(user_id),
            "weekNumber": week_number,
            "dayNumber": day_number,
            "date": start_of_day(now, self._tz_name),
            **{name: _clean(fields.get(name)) for name in UPDATABLE_FIELDS},
            "createdAt": now,
            "updatedAt": now,
        }

        result = await self._daily_entries_collection.insert_one(entry)
        entry["_id"] = result.inserted_id

        logger.info(
            f"Daily entry {result.inserted_id} created for user {user_id} "
            f"(week {week_number}, day {day_number})"
        )
        return entry

    async def get_week_entries(self, user_id: str, week_number: int) -> List[Dict[str, Any]]:
        """Entries for a week, ordered by date then time."""
        cursor = self._daily_entries_collection.find({
            "userId": to_object_id(user_id),
            "weekNumber": week_number,
        })
        cursor = cursor.sort([("date", 1), ("time", 1)])
        return await cursor.to_list(length=None)

    async def get_day_entries(
        self,
        user_id: str,
        week_number: int,
        day_number: int,
    ) -> List[Dict[str, Any]]:
        """Entries for one day of a week, ordered by time."""
        self.validate_day_number(day_number)
        cursor = self._daily_entries_collection.find({
            "userId": to_object_id(user_id),
            "weekNumber": week_number,
            "dayNumber": day_number,
        })
        cursor = cursor.sort("time", 1)
        return await cursor.to_list(length=None)

    async def update_entry(
        self,
        user_id: str,
        entry_id: str,
        updates: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Apply a partial update to an owned entry.

        Only content fields can change; week, day and date are fixed at
        creation.

        Raises:
            NotFoundException: Entry missing or owned by someone else
            ValidationException: A required field was blanked
        """
        changes = {
            name: _clean(value)
            for name, value in updates.items()
            if name in UPDATABLE_FIELDS
        }

        for name in REQUIRED_FIELDS:
            if name in changes and not changes[name]:
                raise ValidationException(message=f"{name} is required", code="VALIDATION_ERROR")
        if "timeOfDay" in changes and changes["timeOfDay"] not in TIMES_OF_DAY:
            raise ValidationException(
                message=f"timeOfDay must be one of {', '.join(TIMES_OF_DAY)}",
                code="INVALID_TIME_OF_DAY",
            )

        changes["updatedAt"] = self._clock()

        entry = await self._daily_entries_collection.find_one_and_update(
            self._entry_filter(user_id, entry_id),
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

        if not entry:
            raise NotFoundException(message="No entry found with that ID", code="ENTRY_NOT_FOUND")

        logger.info(f"Daily entry {entry_id} updated for user {user_id}")
        return entry

    async def delete_entry(self, user_id: str, entry_id: str) -> Dict[str, Any]:
        """
        Delete an owned entry.

        Returns:
            The deleted entry document

        Raises:
            NotFoundException: Entry missing or owned by someone else
        """
        entry = await self._daily_entries_collection.find_one_and_delete(
            self._entry_filter(user_id, entry_id)
        )

        if not entry:
            raise NotFoundException(message="No entry found with that ID", code="ENTRY_NOT_FOUND")

        logger.info(f"Daily entry {entry_id} deleted for user {user_id}")
        return entry

    async def count_for_week(self, user_id: str, week_number: int) -> int:
        """Number of entries the user logged in a week."""
        return await self._daily_entries_collection.count_documents({
            "userId": to_object_id(user_id),
            "weekNumber": week_number,
        })

    async def distinct_days(self, user_id: str, week_number: int) -> List[int]:
        """Day numbers of a week that have at least one entry."""
        days = await self._daily_entries_collection.distinct(
            "dayNumber",
            {"userId": to_object_id(user_id), "weekNumber": week_number},
        )
        return sorted(days)

    def format_entry(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        """Format daily entry for response."""
        return {
            "id": str(entry["_id"]),
            "userId": str(entry["userId"]),
            "weekNumber": entry["weekNumber"],
            "dayNumber": entry["dayNumber"],
            "date": entry["date"],
            "formattedDate": local_date(entry["date"], self._tz_name).strftime("%A, %d %B %Y"),
            **{name: entry.get(name) for name in UPDATABLE_FIELDS},
            "createdAt": entry.get("createdAt"),
            "updatedAt": entry.get("updatedAt"),
        }
