"""
Baseline diary pipeline functions.

Stateless orchestration of daily entry writes and the progress
bookkeeping that goes with them.
"""

import logging
from typing import Dict, Any

from therapy_diary.services.diary.daily_entry_service import DailyEntryService
from therapy_diary.services.progress.progress_service import ProgressService

logger = logging.getLogger(__name__)

__all__ = [
    "create_daily_entry_pipeline",
    "get_week_entries_pipeline",
    "delete_daily_entry_pipeline",
    "complete_week_pipeline",
]


async def create_daily_entry_pipeline(
    progress_service: ProgressService,
    daily_entry_service: DailyEntryService,
    user_id: str,
    fields: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Log a baseline diary entry for today.

    Args:
        progress_service: For the week/day pointer
        daily_entry_service: For entry persistence
        user_id: Current user's ID
        fields: Validated entry fields

    Returns:
        dict with entry and userProgress
    """
    state = await progress_service.get_or_create(user_id)
    day_number = progress_service.current_day_for(state)

    entry = await daily_entry_service.create_entry(
        user_id=user_id,
        week_number=state.current_week,
        day_number=day_number,
        fields=fields,
    )

    state = await progress_service.record_activity(state)

    return {
        "entry": daily_entry_service.format_entry(entry),
        "userProgress": progress_service.format_progress(state),
    }


async def get_week_entries_pipeline(
    daily_entry_service: DailyEntryService,
    user_id: str,
    week_number: int,
) -> Dict[str, Any]:
    """
    Get a week's entries grouped by day number.

    Returns:
        dict with entries, groupedByDay, totalEntries, daysWithEntries
    """
    ProgressService.validate_week_number(week_number)
    entries = [
        daily_entry_service.format_entry(e)
        for e in await daily_entry_service.get_week_entries(user_id, week_number)
    ]

    grouped: Dict[str, list] = {}
    for entry in entries:
        grouped.setdefault(str(entry["dayNumber"]), []).append(entry)

    return {
        "entries": entries,
        "groupedByDay": grouped,
        "totalEntries": len(entries),
        "daysWithEntries": len(grouped),
    }


async def delete_daily_entry_pipeline(
    progress_service: ProgressService,
    daily_entry_service: DailyEntryService,
    user_id: str,
    entry_id: str,
) -> None:
    """
    Delete an entry and take it off the activity counter.

    Raises:
        NotFoundException: Entry missing or owned by someone else
    """
    await daily_entry_service.delete_entry(user_id, entry_id)
    await progress_service.record_removal(user_id)


async def complete_week_pipeline(
    progress_service: ProgressService,
    daily_entry_service: DailyEntryService,
    user_id: str,
) -> Dict[str, Any]:
    """
    Close the user's current week.

    Counts the entries logged in the current week and hands the count to
    the progress tracker.

    Returns:
        dict with userProgress and entriesCompleted

    Raises:
        NotFoundException: Progress was never initialized
    """
    state = await progress_service.require(user_id)
    entries_count = await daily_entry_service.count_for_week(user_id, state.current_week)

    state = await progress_service.complete_week(user_id, entries_count, state=state)

    return {
        "userProgress": progress_service.format_progress(state),
        "entriesCompleted": entries_count,
    }
