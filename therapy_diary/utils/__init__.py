"""Shared helpers for the TherapyDiary application."""

from therapy_diary.utils.dates import (
    DateLike,
    day_bounds,
    days_between,
    local_date,
    lookback_range,
    parse_date,
    parse_timestamp,
    start_of_day,
    time_of_day_for,
)

__all__ = [
    "DateLike",
    "day_bounds",
    "days_between",
    "local_date",
    "lookback_range",
    "parse_date",
    "parse_timestamp",
    "start_of_day",
    "time_of_day_for",
]
