"""
Database module - Generic async MongoDB connection using Motor.

Provides reusable MongoDB connectivity for any project.

Usage:
    from common.database import MongoDB, to_object_id

    db = MongoDB()
    await db.connect(uri, database_name)
    entries = db.get_collection("diaryentries")
"""

from common.database.mongodb import MongoDB
from common.database.helpers import to_object_id, ensure_utc

__all__ = [
    "MongoDB",
    # Helpers
    "to_object_id",
    "ensure_utc",
]
