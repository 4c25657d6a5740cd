"""
Mood reporting service.

Read-only queries over the moodlogs collection. MoodAggregator is the
only writer.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Callable

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.database import to_object_id
from common.utils.exceptions import NotFoundException, ValidationException
from therapy_diary.services.diary.diary_service import format_diary_entry
from therapy_diary.services.mood.mood_aggregator import CATEGORIES
from therapy_diary.utils.dates import day_bounds, local_date, lookback_range, start_of_day

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MoodService:
    """
    Serves mood logs for date ranges, single days and trend summaries.
    """

    MAX_DAYS = 366

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        tz_name: str = "UTC",
        default_days: int = 30,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Initialize MoodService.

        Args:
            db: MongoDB database connection
            tz_name: Timezone defining day boundaries
            default_days: Look-back window when no range is given
            clock: Returns the current UTC time
        """
        self._db = db
        self._mood_logs_collection = db["moodlogs"]
        self._entries_collection = db["diaryentries"]
        self._tz_name = tz_name
        self._default_days = default_days
        self._clock = clock

    def _resolve_range(
        self,
        start_date: Optional[str],
        end_date: Optional[str],
        days: Optional[int],
    ):
        if start_date and end_date:
            start, _ = day_bounds(start_date, self._tz_name)
            _, end = day_bounds(end_date, self._tz_name)
            if start > end:
                raise ValidationException(
                    message="startDate must not be after endDate",
                    code="INVALID_DATE_RANGE",
                )
            return start, end

        days = self._default_days if days is None else days
        if not 0 <= days <= self.MAX_DAYS:
            raise ValidationException(
                message=f"days must be between 0 and {self.MAX_DAYS}",
                code="INVALID_DAYS",
            )
        return lookback_range(days, self._tz_name, now=self._clock())

    async def _find_range(self, user_id: str, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        cursor = self._mood_logs_collection.find({
            "userId": to_object_id(user_id),
            "date": {"$gte": start, "$lte": end},
        })
        cursor = cursor.sort("date", 1)
        return await cursor.to_list(length=None)

    def _date_range(self, start: datetime, end: datetime) -> Dict[str, str]:
        return {
            "start": local_date(start, self._tz_name).isoformat(),
            "end": local_date(end, self._tz_name).isoformat(),
        }

    async def get_mood_logs(
        self,
        user_id: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        days: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Get mood logs for a date range with overall statistics.

        Args:
            user_id: MongoDB user ID
            start_date: YYYY-MM-DD, used together with end_date
            end_date: YYYY-MM-DD, used together with start_date
            days: Look-back window when no explicit range is given

        Returns:
            dict with moodLogs, stats, dateRange
        """
        start, end = self._resolve_range(start_date, end_date, days)
        logs = [self.format_mood_log(log) for log in await self._find_range(user_id, start, end)]

        stats: Dict[str, Any] = {
            "totalDays": len(logs),
            "averageMoodBefore": 0,
            "averageMoodAfter": 0,
            "averageMoodChange": 0,
            "totalEntries": 0,
            "bestDay": None,
            "worstDay": None,
        }

        if logs:
            n = len(logs)
            stats["averageMoodBefore"] = sum(log["averageMoodBefore"] for log in logs) / n
            stats["averageMoodAfter"] = sum(log["averageMoodAfter"] for log in logs) / n
            stats["averageMoodChange"] = sum(log["moodChange"] for log in logs) / n
            stats["totalEntries"] = sum(log["entryCount"] for log in logs)
            # Earliest day wins ties
            stats["bestDay"] = max(logs, key=lambda log: log["averageMoodAfter"])
            stats["worstDay"] = min(logs, key=lambda log: log["averageMoodAfter"])

        return {
            "moodLogs": logs,
            "stats": stats,
            "dateRange": self._date_range(start, end),
        }

    async def get_mood_log_by_date(self, user_id: str, day: str) -> Dict[str, Any]:
        """
        Get the mood log for a single day with its diary entries populated.

        Raises:
            NotFoundException: No entries were logged that day
        """
        mood_log = await self._mood_logs_collection.find_one({
            "userId": to_object_id(user_id),
            "date": start_of_day(day, self._tz_name),
        })

        if not mood_log:
            raise NotFoundException(
                message="No mood log found for this date",
                code="MOOD_LOG_NOT_FOUND",
            )

        cursor = self._entries_collection.find({
            "_id": {"$in": mood_log.get("entries", [])},
            "userId": to_object_id(user_id),
        })
        cursor = cursor.sort("timestamp", 1)
        entries = await cursor.to_list(length=None)

        formatted = self.format_mood_log(mood_log)
        formatted["entries"] = [format_diary_entry(e, tz_name=self._tz_name) for e in entries]
        return formatted

    async def get_stats_summary(self, user_id: str, days: Optional[int] = None) -> Dict[str, Any]:
        """
        Get trend points and category totals for the last N days.

        Returns:
            dict with trendData, categoryTotals, totalDays, dateRange
        """
        start, end = self._resolve_range(None, None, days)
        logs = await self._find_range(user_id, start, end)

        trend_data = [
            {
                "date": log["date"],
                "moodBefore": log.get("averageMoodBefore"),
                "moodAfter": log.get("averageMoodAfter"),
                "moodChange": log.get("moodChange", 0),
                "entries": log.get("entryCount", 0),
            }
            for log in logs
        ]

        category_totals = {name: 0 for name in CATEGORIES}
        for log in logs:
            for name in CATEGORIES:
                category_totals[name] += (log.get("categories") or {}).get(name, 0)

        return {
            "trendData": trend_data,
            "categoryTotals": category_totals,
            "totalDays": len(logs),
            "dateRange": self._date_range(start, end),
        }

    def format_mood_log(self, log: Dict[str, Any]) -> Dict[str, Any]:
        """Format mood log for response."""
        return {
            "id": str(log["_id"]),
            "userId": str(log["userId"]),
            "date": log["date"],
            "formattedDate": local_date(log["date"], self._tz_name).isoformat(),
            "averageMoodBefore": log.get("averageMoodBefore"),
            "averageMoodAfter": log.get("averageMoodAfter"),
            "moodChange": log.get("moodChange", 0),
            "entryCount": log.get("entryCount", 0),
            "entries": [str(e) for e in log.get("entries", [])],
            "activitiesCompleted": log.get("activitiesCompleted", 0),
            "categories": {name: (log.get("categories") or {}).get(name, 0) for name in CATEGORIES},
            "updatedAt": log.get("updatedAt"),
        }
