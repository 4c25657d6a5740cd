"""
Daily mood aggregation.

Keeps one moodlogs document per (user, local day) in sync with the
diary entries logged that day. The aggregate is always rebuilt from the
raw entries, never adjusted incrementally, so it cannot drift from them.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Iterable, Callable

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from common.database import to_object_id
from therapy_diary.utils.dates import DateLike, day_bounds

logger = logging.getLogger(__name__)

CATEGORIES = ("Routine", "Necessary", "Pleasurable")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def summarize_entries(
    entries: List[Dict[str, Any]],
    activity_categories: Dict[Any, str],
) -> Dict[str, Any]:
    """
    Compute the derived fields of a MoodLog from a day's diary entries.

    A missing moodBefore counts as equal to that entry's moodAfter, so an
    entry without a "before" rating contributes no change.

    Args:
        entries: Non-empty list of diary entry documents
        activity_categories: Maps activity _id to its category

    Returns:
        dict with averageMoodBefore, averageMoodAfter, moodChange,
        entryCount, entries, activitiesCompleted, categories
    """
    count = len(entries)
    mood_before_sum = sum(
        e["moodAfter"] if e.get("moodBefore") is None else e["moodBefore"]
        for e in entries
    )
    mood_after_sum = sum(e["moodAfter"] for e in entries)

    categories = {name: 0 for name in CATEGORIES}
    for entry in entries:
        category = activity_categories.get(entry.get("activityId"))
        if category in categories:
            categories[category] += 1

    return {
        "averageMoodBefore": mood_before_sum / count,
        "averageMoodAfter": mood_after_sum / count,
        "moodChange": (mood_after_sum - mood_before_sum) / count,
        "entryCount": count,
        "entries": [e["_id"] for e in entries],
        "activitiesCompleted": count,
        "categories": categories,
    }


class MoodAggregator:
    """
    Recomputes a user's MoodLog for one day.

    Must run after every diary entry create, update (old and new day) and
    delete; DiaryService does this for every mutation it performs.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        tz_name: str = "UTC",
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize MoodAggregator.

        Args:
            db: MongoDB database connection
            tz_name: Timezone defining day boundaries
            clock: Returns the current UTC time
        """
        self._db = db
        self._entries_collection = db["diaryentries"]
        self._activities_collection = db["activities"]
        self._mood_logs_collection = db["moodlogs"]
        self._tz_name = tz_name
        self._clock = clock

    async def _load_categories(self, entries: Iterable[Dict[str, Any]]) -> Dict[Any, str]:
        activity_ids = list({e["activityId"] for e in entries if e.get("activityId")})
        if not activity_ids:
            return {}

        cursor = self._activities_collection.find(
            {"_id": {"$in": activity_ids}},
            {"category": 1},
        )
        activities = await cursor.to_list(length=len(activity_ids))
        return {a["_id"]: a.get("category") for a in activities}

    async def calculate_for_date(self, user_id: str, day: DateLike) -> Optional[Dict[str, Any]]:
        """
        Rebuild the MoodLog for a user's local calendar day.

        Args:
            user_id: MongoDB user ID
            day: Date, "YYYY-MM-DD" string, or any instant within the day

        Returns:
            The stored MoodLog document, or None when the day has no entries
            (any existing MoodLog for the day is deleted)
        """
        user_oid = to_object_id(user_id)
        start_of_day, end_of_day = day_bounds(day, self._tz_name)

        cursor = self._entries_collection.find({
            "userId": user_oid,
            "timestamp": {"$gte": start_of_day, "$lte": end_of_day},
        })
        cursor = cursor.sort([("timestamp", 1), ("_id", 1)])
        entries = await cursor.to_list(length=None)

        key = {"userId": user_oid, "date": start_of_day}

        if not entries:
            result = await self._mood_logs_collection.delete_one(key)
            if result.deleted_count:
                logger.info(f"Mood log removed for user {user_id} on {start_of_day.date()}")
            return None

        categories = await self._load_categories(entries)
        summary = summarize_entries(entries, categories)

        now = self._clock()
        mood_log = await self._mood_logs_collection.find_one_and_update(
            key,
            {
                "$set": {**key, **summary, "updatedAt": now},
                "$setOnInsert": {"createdAt": now},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

        logger.info(
            f"Mood log recomputed for user {user_id} on {start_of_day.date()}: "
            f"{summary['entryCount']} entries"
        )
        return mood_log
