"""
Diary entry service.

CRUD for numeric-mood diary entries. Every write is followed by a
MoodLog recompute for each local day it touched.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Callable

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.database import to_object_id
from common.utils.exceptions import NotFoundException, ValidationException
from common.utils.responses import pagination_block
from therapy_diary.services.mood.mood_aggregator import MoodAggregator
from therapy_diary.utils.dates import (
    day_bounds,
    local_date,
    parse_date,
    parse_timestamp,
    time_of_day_for,
)

logger = logging.getLogger(__name__)

TIMES_OF_DAY = ("Morning", "Afternoon", "Evening", "Night")
ACTIVITY_PROJECTION = {"name": 1, "category": 1, "difficulty": 1}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_activity_ref(activity: Dict[str, Any]) -> Dict[str, Any]:
    """Populated activity reference embedded in an entry."""
    return {
        "id": str(activity["_id"]),
        "name": activity.get("name"),
        "category": activity.get("category"),
        "difficulty": activity.get("difficulty"),
    }


def format_diary_entry(
    entry: Dict[str, Any],
    activity: Optional[Dict[str, Any]] = None,
    tz_name: str = "UTC",
) -> Dict[str, Any]:
    """
    Format diary entry for response.

    Args:
        entry: Raw diaryentries document
        activity: Linked activity document to populate, if loaded
        tz_name: Timezone for the entry's local date

    Returns:
        Entry dict with string ids and the derived moodChange
    """
    mood_before = entry.get("moodBefore")
    mood_after = entry.get("moodAfter")

    activity_ref: Any = None
    if activity is not None:
        activity_ref = format_activity_ref(activity)
    elif entry.get("activityId"):
        activity_ref = str(entry["activityId"])

    return {
        "id": str(entry["_id"]),
        "userId": str(entry["userId"]),
        "activity": entry.get("activity"),
        "activityId": activity_ref,
        "moodBefore": mood_before,
        "moodAfter": mood_after,
        "moodChange": (
            mood_after - mood_before
            if mood_before is not None and mood_after is not None
            else None
        ),
        "notes": entry.get("notes"),
        "timeOfDay": entry.get("timeOfDay"),
        "timestamp": entry.get("timestamp"),
        "date": local_date(entry["timestamp"], tz_name).isoformat() if entry.get("timestamp") else None,
        "createdAt": entry.get("createdAt"),
        "updatedAt": entry.get("updatedAt"),
    }


class DiaryService:
    """
    Owns the diaryentries collection.
    All reads and writes are scoped to the owning user.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        mood_aggregator: MoodAggregator,
        tz_name: str = "UTC",
        page_size: int = 20,
        max_page_size: int = 100,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize DiaryService.

        Args:
            db: MongoDB database connection
            mood_aggregator: Recomputes MoodLogs after each write
            tz_name: Timezone defining day boundaries
            page_size: Default page size for listings
            max_page_size: Upper bound for a requested page size
            clock: Returns the current UTC time
        """
        self._db = db
        self._entries_collection = db["diaryentries"]
        self._activities_collection = db["activities"]
        self._mood_aggregator = mood_aggregator
        self._tz_name = tz_name
        self._page_size = page_size
        self._max_page_size = max_page_size
        self._clock = clock

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    def _entry_filter(self, user_id: str, entry_id: str) -> Dict[str, Any]:
        entry_oid = to_object_id(entry_id)
        if entry_oid is None:
            raise NotFoundException(message="Diary entry not found", code="ENTRY_NOT_FOUND")
        return {"_id": entry_oid, "userId": to_object_id(user_id)}

    async def _find_owned(self, user_id: str, entry_id: str) -> Dict[str, Any]:
        entry = await self._entries_collection.find_one(self._entry_filter(user_id, entry_id))
        if not entry:
            raise NotFoundException(message="Diary entry not found", code="ENTRY_NOT_FOUND")
        return entry

    async def _populate(self, entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Format entries with their linked activities populated."""
        activity_ids = list({e["activityId"] for e in entries if e.get("activityId")})
        activities: Dict[Any, Dict[str, Any]] = {}

        if activity_ids:
            cursor = self._activities_collection.find(
                {"_id": {"$in": activity_ids}},
                ACTIVITY_PROJECTION,
            )
            for activity in await cursor.to_list(length=len(activity_ids)):
                activities[activity["_id"]] = activity

        return [
            format_diary_entry(e, activities.get(e.get("activityId")), self._tz_name)
            for e in entries
        ]

    def _range_bound(self, value: str, end: bool) -> datetime:
        # Bare dates cover the whole local day
        if len(value) == 10:
            start, finish = day_bounds(value, self._tz_name)
            return finish if end else start
        return parse_timestamp(value, self._tz_name)

    @staticmethod
    def _clean_activity(value: str) -> str:
        activity = value.strip()
        if not activity:
            raise ValidationException(message="activity cannot be empty", code="VALIDATION_ERROR")
        return activity

    @staticmethod
    def _validate_mood(field: str, value: Optional[int], required: bool = False) -> None:
        if value is None:
            if required:
                raise ValidationException(message=f"{field} is required", code="VALIDATION_ERROR")
            return
        if not 1 <= value <= 10:
            raise ValidationException(
                message=f"{field} must be between 1 and 10",
                code="VALIDATION_ERROR",
            )

    def _activity_ref(self, value: Optional[str]):
        if not value:
            return None
        activity_oid = to_object_id(value)
        if activity_oid is None:
            raise ValidationException(message="Invalid activity ID", code="INVALID_ACTIVITY_ID")
        return activity_oid

    async def _recompute(self, user_id: str, *moments: datetime) -> None:
        """Recompute the MoodLog of every distinct local day among the moments."""
        seen = set()
        for moment in moments:
            day = local_date(moment, self._tz_name)
            if day in seen:
                continue
            seen.add(day)
            await self._mood_aggregator.calculate_for_date(user_id, day)

    # ─────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────

    async def list_entries(
        self,
        user_id: str,
        page: int = 1,
        limit: Optional[int] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        time_of_day: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Get a page of a user's diary entries, newest first.

        Args:
            user_id: MongoDB user ID
            page: 1-based page number
            limit: Page size (defaults to the configured page size)
            start_date: Optional lower bound, YYYY-MM-DD or ISO timestamp
            end_date: Optional upper bound, YYYY-MM-DD or ISO timestamp
            time_of_day: Optional Morning/Afternoon/Evening/Night filter

        Returns:
            dict with entries and pagination
        """
        limit = min(limit or self._page_size, self._max_page_size)
        page = max(page, 1)

        query: Dict[str, Any] = {"userId": to_object_id(user_id)}

        if start_date or end_date:
            query["timestamp"] = {}
            if start_date:
                query["timestamp"]["$gte"] = self._range_bound(start_date, end=False)
            if end_date:
                query["timestamp"]["$lte"] = self._range_bound(end_date, end=True)

        if time_of_day:
            if time_of_day not in TIMES_OF_DAY:
                raise ValidationException(
                    message=f"timeOfDay must be one of {', '.join(TIMES_OF_DAY)}",
                    code="INVALID_TIME_OF_DAY",
                )
            query["timeOfDay"] = time_of_day

        cursor = self._entries_collection.find(query)
        cursor = cursor.sort("timestamp", -1)
        cursor = cursor.skip((page - 1) * limit)
        cursor = cursor.limit(limit)
        entries = await cursor.to_list(length=limit)

        total = await self._entries_collection.count_documents(query)

        return {
            "entries": await self._populate(entries),
            "pagination": pagination_block(page, limit, total),
        }

    async def get_entry(self, user_id: str, entry_id: str) -> Dict[str, Any]:
        """
        Get a single entry owned by the user.

        Raises:
            NotFoundException: Entry missing or owned by someone else
        """
        entry = await self._find_owned(user_id, entry_id)
        return (await self._populate([entry]))[0]

    async def find_in_range(
        self,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> List[Dict[str, Any]]:
        """Raw entries with timestamp in [start, end], oldest first."""
        cursor = self._entries_collection.find({
            "userId": to_object_id(user_id),
            "timestamp": {"$gte": start, "$lte": end},
        })
        cursor = cursor.sort("timestamp", 1)
        return await cursor.to_list(length=None)

    async def get_entries_by_date(self, user_id: str, day: str) -> Dict[str, Any]:
        """
        Get all entries logged on a local calendar day.

        Returns:
            dict with date, entries, count
        """
        start, end = day_bounds(day, self._tz_name)
        entries = await self.find_in_range(user_id, start, end)

        return {
            "date": parse_date(day).isoformat(),
            "entries": await self._populate(entries),
            "count": len(entries),
        }

    # ─────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────

    async def create_entry(
        self,
        user_id: str,
        activity: str,
        mood_after: int,
        mood_before: Optional[int] = None,
        activity_id: Optional[str] = None,
        notes: Optional[str] = None,
        timestamp: Optional[Any] = None,
        time_of_day: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a diary entry and refresh that day's MoodLog.

        Args:
            user_id: MongoDB user ID
            activity: Free-text activity description
            mood_after: Mood after the activity (1-10)
            mood_before: Optional mood before the activity (1-10)
            activity_id: Optional catalog activity ID
            notes: Optional notes
            timestamp: When the activity happened (defaults to now)
            time_of_day: Defaults from the timestamp's local hour

        Returns:
            Formatted entry with its activity populated

        Raises:
            ValidationException: Invalid mood, activity ID or timestamp
        """
        activity = self._clean_activity(activity)
        self._validate_mood("moodAfter", mood_after, required=True)
        self._validate_mood("moodBefore", mood_before)
        activity_oid = self._activity_ref(activity_id)

        now = self._clock()
        moment = parse_timestamp(timestamp, self._tz_name) if timestamp else now

        if time_of_day is not None and time_of_day not in TIMES_OF_DAY:
            raise ValidationException(
                message=f"timeOfDay must be one of {', '.join(TIMES_OF_DAY)}",
                code="INVALID_TIME_OF_DAY",
            )

        entry = {
            "userId": to_object_id(user_id),
            "activity": activity,
            "activityId": activity_oid,
            "moodAfter": mood_after,
            "notes": notes.strip() if notes else None,
            "timeOfDay": time_of_day or time_of_day_for(moment, self._tz_name),
            "timestamp": moment,
            "createdAt": now,
            "updatedAt": now,
        }
        if mood_before is not None:
            entry["moodBefore"] = mood_before

        result = await self._entries_collection.insert_one(entry)
        entry["_id"] = result.inserted_id

        logger.info(f"Diary entry {result.inserted_id} created for user {user_id}")

        await self._recompute(user_id, moment)
        return (await self._populate([entry]))[0]

    async def update_entry(
        self,
        user_id: str,
        entry_id: str,
        updates: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Apply a partial update and refresh the affected MoodLogs.

        Args:
            user_id: MongoDB user ID
            entry_id: Diary entry ID
            updates: Fields to change (activity, activityId, moodBefore,
                moodAfter, notes, timestamp, timeOfDay)

        Returns:
            Formatted updated entry

        Raises:
            NotFoundException: Entry missing or owned by someone else
            ValidationException: Invalid field value
        """
        entry = await self._find_owned(user_id, entry_id)
        old_timestamp = entry["timestamp"]

        changes: Dict[str, Any] = {}
        unset: Dict[str, Any] = {}

        if "activity" in updates and updates["activity"] is not None:
            changes["activity"] = self._clean_activity(updates["activity"])
        if "activityId" in updates:
            changes["activityId"] = self._activity_ref(updates["activityId"])
        if "moodAfter" in updates:
            self._validate_mood("moodAfter", updates["moodAfter"], required=True)
            changes["moodAfter"] = updates["moodAfter"]
        if "moodBefore" in updates:
            if updates["moodBefore"] is None:
                unset["moodBefore"] = ""
            else:
                self._validate_mood("moodBefore", updates["moodBefore"])
                changes["moodBefore"] = updates["moodBefore"]
        if "notes" in updates:
            changes["notes"] = updates["notes"].strip() if updates["notes"] else None
        if updates.get("timestamp"):
            changes["timestamp"] = parse_timestamp(updates["timestamp"], self._tz_name)
        if updates.get("timeOfDay"):
            if updates["timeOfDay"] not in TIMES_OF_DAY:
                raise ValidationException(
                    message=f"timeOfDay must be one of {', '.join(TIMES_OF_DAY)}",
                    code="INVALID_TIME_OF_DAY",
                )
            changes["timeOfDay"] = updates["timeOfDay"]

        changes["updatedAt"] = self._clock()
        update: Dict[str, Any] = {"$set": changes}
        if unset:
            update["$unset"] = unset

        await self._entries_collection.update_one({"_id": entry["_id"]}, update)

        entry.update(changes)
        for field in unset:
            entry.pop(field, None)

        logger.info(f"Diary entry {entry_id} updated for user {user_id}")

        await self._recompute(user_id, old_timestamp, entry["timestamp"])
        return (await self._populate([entry]))[0]

    async def delete_entry(self, user_id: str, entry_id: str) -> None:
        """
        Delete an entry and refresh that day's MoodLog.

        Raises:
            NotFoundException: Entry missing or owned by someone else
        """
        entry = await self._find_owned(user_id, entry_id)

        await self._entries_collection.delete_one({"_id": entry["_id"]})
        logger.info(f"Diary entry {entry_id} deleted for user {user_id}")

        await self._recompute(user_id, entry["timestamp"])
