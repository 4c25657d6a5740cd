"""
Weekly session content service.

Session documents are static, read-mostly content keyed by week number.
They are loaded by scripts/seed_sessions.py.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from common.utils.exceptions import ValidationException

logger = logging.getLogger(__name__)

SESSION_FIELDS = (
    "title",
    "subtitle",
    "introduction",
    "sections",
    "taskDescription",
    "taskInstructions",
    "taskExplanation",
    "exampleDiary",
    "completionMessage",
    "duration",
)


class SessionService:
    """
    Owns the sessions collection.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize SessionService.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._sessions_collection = db["sessions"]

    async def get_by_week(self, week_number: int) -> Optional[Dict[str, Any]]:
        """Active session document for a week, or None."""
        return await self._sessions_collection.find_one({
            "weekNumber": week_number,
            "isActive": {"$ne": False},
        })

    async def list_sessions(self) -> List[Dict[str, Any]]:
        """All active sessions ordered by week."""
        cursor = self._sessions_collection.find({"isActive": {"$ne": False}})
        cursor = cursor.sort("weekNumber", 1)
        return await cursor.to_list(length=None)

    async def upsert_session(self, content: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert or replace the content of a week's session.

        Args:
            content: Session content with weekNumber, title, introduction,
                sections and taskDescription

        Returns:
            Stored session document

        Raises:
            ValidationException: Missing required content
        """
        for name in ("weekNumber", "title", "introduction", "taskDescription"):
            if not content.get(name):
                raise ValidationException(message=f"Session {name} is required", code="INVALID_SESSION")

        now = datetime.now(timezone.utc)
        sections = sorted(content.get("sections", []), key=lambda s: s.get("order", 0))

        fields = {name: content.get(name) for name in SESSION_FIELDS}
        fields["sections"] = sections
        fields["duration"] = content.get("duration") or "7 days"
        fields["isActive"] = content.get("isActive", True)
        fields["updatedAt"] = now

        session = await self._sessions_collection.find_one_and_update(
            {"weekNumber": content["weekNumber"]},
            {"$set": fields, "$setOnInsert": {"createdAt": now}},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

        logger.info(f"Session for week {content['weekNumber']} stored: {content['title']}")
        return session

    @staticmethod
    def format_session(session: Dict[str, Any]) -> Dict[str, Any]:
        """Format session for response."""
        return {
            "id": str(session["_id"]),
            "weekNumber": session["weekNumber"],
            **{name: session.get(name) for name in SESSION_FIELDS},
        }
