"""
Small helpers shared by Motor-backed services.

Example:
    from common.database import to_object_id

    oid = to_object_id(entry_id)
    if oid is None:
        raise NotFoundException("Entry not found")
"""

from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId


def to_object_id(value: Any) -> Optional[ObjectId]:
    """
    Convert a value to an ObjectId.

    Args:
        value: ObjectId, 24-char hex string, or anything else

    Returns:
        ObjectId, or None when the value is not a valid id
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ObjectId(value)
    except InvalidId:
        return None


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes read from MongoDB as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
