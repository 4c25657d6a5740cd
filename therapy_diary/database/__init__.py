"""TherapyDiary collection definitions."""

from therapy_diary.database.indexes import INDEXES

__all__ = ["INDEXES"]
