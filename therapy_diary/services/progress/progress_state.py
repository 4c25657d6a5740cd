"""
Weekly progress state machine.

A user's place in the programme is a (currentWeek, currentDay) pointer
plus an append-only list of completed-week records. Every transition is a
pure function returning a new ProgressState; persistence lives in
ProgressService.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Tuple, Dict, Any

from bson import ObjectId

from common.database import ensure_utc
from therapy_diary.utils.dates import days_between

PROGRAM_WEEKS = 5
DAYS_PER_WEEK = 7


class WeekNotCompletedError(Exception):
    """Raised when a week has no completed-week record to update."""

    def __init__(self, week_number: int):
        self.week_number = week_number
        super().__init__(f"Week {week_number} has not been completed yet")


@dataclass(frozen=True)
class CompletedWeek:
    """History record appended when a week is completed."""
    week_number: int
    completed_date: datetime
    session_read: bool = False
    days_completed: int = 0
    total_entries: int = 0

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "CompletedWeek":
        return cls(
            week_number=doc["weekNumber"],
            completed_date=ensure_utc(doc.get("completedDate")),
            session_read=doc.get("sessionRead", False),
            days_completed=doc.get("daysCompleted", 0),
            total_entries=doc.get("totalEntries", 0),
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "weekNumber": self.week_number,
            "completedDate": self.completed_date,
            "sessionRead": self.session_read,
            "daysCompleted": self.days_completed,
            "totalEntries": self.total_entries,
        }


@dataclass(frozen=True)
class ProgressState:
    """A user's position in the programme."""
    user_id: ObjectId
    week_start_date: datetime
    started_date: datetime
    last_active_date: datetime
    current_week: int = 1
    current_day: int = 1
    completed_weeks: Tuple[CompletedWeek, ...] = field(default_factory=tuple)
    total_activities_logged: int = 0
    id: Optional[ObjectId] = None

    @classmethod
    def initial(cls, user_id: ObjectId, now: datetime) -> "ProgressState":
        """Defaults for a user with no progress yet: week 1, day 1."""
        return cls(
            user_id=user_id,
            week_start_date=now,
            started_date=now,
            last_active_date=now,
        )

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "ProgressState":
        return cls(
            id=doc.get("_id"),
            user_id=doc["userId"],
            current_week=doc.get("currentWeek", 1),
            current_day=doc.get("currentDay", 1),
            week_start_date=ensure_utc(doc["weekStartDate"]),
            started_date=ensure_utc(doc.get("startedDate") or doc["weekStartDate"]),
            last_active_date=ensure_utc(doc.get("lastActiveDate") or doc["weekStartDate"]),
            completed_weeks=tuple(
                CompletedWeek.from_document(w) for w in doc.get("completedWeeks", [])
            ),
            total_activities_logged=doc.get("totalActivitiesLogged", 0),
        )

    def to_document(self) -> Dict[str, Any]:
        """Fields persisted on the userprogress document (no _id)."""
        return {
            "userId": self.user_id,
            "currentWeek": self.current_week,
            "currentDay": self.current_day,
            "weekStartDate": self.week_start_date,
            "completedWeeks": [w.to_document() for w in self.completed_weeks],
            "totalActivitiesLogged": self.total_activities_logged,
            "startedDate": self.started_date,
            "lastActiveDate": self.last_active_date,
        }


def clamp_day(day: int) -> int:
    return min(max(day, 1), DAYS_PER_WEEK)


def day_number(week_start: datetime, now: datetime, tz_name: str) -> int:
    """Day of the current week (1-7) for `now`, counted in local calendar days."""
    return clamp_day(days_between(week_start, now, tz_name) + 1)


def log_activity(state: ProgressState, now: datetime, tz_name: str) -> ProgressState:
    """An activity was logged: bump the counter and move the day pointer."""
    return replace(
        state,
        total_activities_logged=state.total_activities_logged + 1,
        current_day=day_number(state.week_start_date, now, tz_name),
        last_active_date=now,
    )


def remove_activity(state: ProgressState) -> ProgressState:
    """A logged activity was deleted. The counter never goes below zero."""
    if state.total_activities_logged <= 0:
        return state
    return replace(state, total_activities_logged=state.total_activities_logged - 1)


def complete_week(state: ProgressState, entries_count: int, now: datetime) -> ProgressState:
    """
    Close the current week.

    Appends a history record; advances to the next week unless the user is
    already in the final week, in which case only the history grows.
    """
    record = CompletedWeek(
        week_number=state.current_week,
        completed_date=now,
        session_read=True,
        days_completed=state.current_day,
        total_entries=entries_count,
    )
    history = state.completed_weeks + (record,)

    if state.current_week < PROGRAM_WEEKS:
        return replace(
            state,
            completed_weeks=history,
            current_week=state.current_week + 1,
            current_day=1,
            week_start_date=now,
        )
    return replace(state, completed_weeks=history)


def is_week_unlocked(state: ProgressState, week_number: int) -> bool:
    """Week 1 is always open; week N needs week N-1 completed with 7 days."""
    if week_number == 1:
        return True
    return any(
        w.week_number == week_number - 1 and w.days_completed >= DAYS_PER_WEEK
        for w in state.completed_weeks
    )


def mark_session_read(state: ProgressState, week_number: int) -> ProgressState:
    """
    Flag the session of a completed week as read.

    Raises:
        WeekNotCompletedError: No history record exists for the week
    """
    if not any(w.week_number == week_number for w in state.completed_weeks):
        raise WeekNotCompletedError(week_number)

    # Flag the first matching record, as repeated final-week records share a number
    updated = []
    flagged = False
    for w in state.completed_weeks:
        if not flagged and w.week_number == week_number:
            updated.append(replace(w, session_read=True))
            flagged = True
        else:
            updated.append(w)
    return replace(state, completed_weeks=tuple(updated))
