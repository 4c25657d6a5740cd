"""
TherapyDiary collection indexes.

Created on startup by MongoDB.connect. create_index is idempotent, so
this runs on every boot.
"""

from pymongo import ASCENDING, DESCENDING, TEXT

from common.database.mongodb import IndexSpec


INDEXES: IndexSpec = {
    # ─────────────────────────────────────────────────────────────────
    # Accounts
    # ─────────────────────────────────────────────────────────────────
    "users": [
        ([("email", ASCENDING)], {"unique": True}),
    ],

    # ─────────────────────────────────────────────────────────────────
    # Entries
    # ─────────────────────────────────────────────────────────────────
    "diaryentries": [
        ([("userId", ASCENDING), ("timestamp", DESCENDING)], {}),
        ([("userId", ASCENDING), ("timeOfDay", ASCENDING)], {}),
        ([("activityId", ASCENDING)], {}),
    ],
    "dailyentries": [
        ([("userId", ASCENDING), ("weekNumber", ASCENDING), ("date", ASCENDING)], {}),
        ([("userId", ASCENDING), ("weekNumber", ASCENDING), ("dayNumber", ASCENDING)], {}),
    ],

    # ─────────────────────────────────────────────────────────────────
    # Aggregates and progress
    # ─────────────────────────────────────────────────────────────────
    "moodlogs": [
        ([("userId", ASCENDING), ("date", ASCENDING)], {"unique": True}),
    ],
    "userprogress": [
        ([("userId", ASCENDING)], {"unique": True}),
    ],

    # ─────────────────────────────────────────────────────────────────
    # Content
    # ─────────────────────────────────────────────────────────────────
    "activities": [
        ([("userId", ASCENDING), ("isActive", ASCENDING)], {}),
        ([("category", ASCENDING), ("difficulty", ASCENDING)], {}),
        ([("tags", ASCENDING)], {}),
        ([("name", TEXT), ("description", TEXT)], {"name": "activity_text"}),
    ],
    "sessions": [
        ([("weekNumber", ASCENDING)], {"unique": True}),
    ],
}
