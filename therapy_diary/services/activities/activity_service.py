"""
Activity catalog service.

Global activities (userId null) are seeded and read-only. Users can add
their own custom activities, which are soft-deleted via isActive.
"""

import logging
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, Iterable

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from common.database import to_object_id
from common.utils.exceptions import NotFoundException, ValidationException
from common.utils.responses import pagination_block
from therapy_diary.services.mood.mood_aggregator import CATEGORIES

logger = logging.getLogger(__name__)

DIFFICULTIES = ("Easiest", "Moderate", "Difficult")
EDITABLE_FIELDS = ("name", "category", "difficulty", "description", "estimatedDuration", "tags")


def validate_category(category: str) -> None:
    if category not in CATEGORIES:
        raise ValidationException(
            message="Category must be Routine, Necessary, or Pleasurable",
            code="INVALID_CATEGORY",
        )


def validate_difficulty(difficulty: str) -> None:
    if difficulty not in DIFFICULTIES:
        raise ValidationException(
            message="Difficulty must be Easiest, Moderate, or Difficult",
            code="INVALID_DIFFICULTY",
        )


def normalize_tags(tags: Optional[Iterable[str]]) -> List[str]:
    """Lower-case and trim tags, dropping empty ones."""
    return [t.strip().lower() for t in (tags or []) if t and t.strip()]


class ActivityService:
    """
    Owns the activities collection.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        page_size: int = 50,
        max_page_size: int = 100,
    ):
        """
        Initialize ActivityService.

        Args:
            db: MongoDB database connection
            page_size: Default page size for listings
            max_page_size: Upper bound for a requested page size
        """
        self._db = db
        self._activities_collection = db["activities"]
        self._page_size = page_size
        self._max_page_size = max_page_size

    @staticmethod
    def _visible_to(user_id: str) -> Dict[str, Any]:
        """Global activities plus the user's active custom ones."""
        return {
            "$or": [
                {"userId": None},
                {"userId": to_object_id(user_id), "isActive": True},
            ]
        }

    def _custom_filter(self, user_id: str, activity_id: str) -> Dict[str, Any]:
        activity_oid = to_object_id(activity_id)
        if activity_oid is None:
            raise NotFoundException(message="Activity not found", code="ACTIVITY_NOT_FOUND")
        return {"_id": activity_oid, "userId": to_object_id(user_id), "isCustom": True}

    async def list_activities(
        self,
        user_id: str,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        List the activities a user can pick from.

        Args:
            user_id: MongoDB user ID
            category: Optional category filter
            difficulty: Optional difficulty filter
            search: Optional text search over name and description
            page: 1-based page number
            limit: Page size (defaults to the configured page size)

        Returns:
            dict with activities and pagination
        """
        limit = min(limit or self._page_size, self._max_page_size)
        page = max(page, 1)

        query = self._visible_to(user_id)
        if category:
            validate_category(category)
            query["category"] = category
        if difficulty:
            validate_difficulty(difficulty)
            query["difficulty"] = difficulty

        if search:
            query["$text"] = {"$search": search}
            cursor = self._activities_collection.find(query, {"score": {"$meta": "textScore"}})
            cursor = cursor.sort([("score", {"$meta": "textScore"})])
        else:
            cursor = self._activities_collection.find(query)
            cursor = cursor.sort([("category", 1), ("difficulty", 1), ("name", 1)])

        cursor = cursor.skip((page - 1) * limit)
        cursor = cursor.limit(limit)
        activities = await cursor.to_list(length=limit)

        total = await self._activities_collection.count_documents(query)

        return {
            "activities": [self.format_activity(a) for a in activities],
            "pagination": pagination_block(page, limit, total),
        }

    async def get_activity(self, user_id: str, activity_id: str) -> Dict[str, Any]:
        """
        Get one activity visible to the user.

        Raises:
            NotFoundException: Missing, deleted or another user's custom activity
        """
        activity_oid = to_object_id(activity_id)
        activity = None
        if activity_oid is not None:
            activity = await self._activities_collection.find_one({
                "_id": activity_oid,
                **self._visible_to(user_id),
            })

        if not activity:
            raise NotFoundException(message="Activity not found", code="ACTIVITY_NOT_FOUND")
        return self.format_activity(activity)

    async def get_by_category(self, user_id: str, category: str) -> List[Dict[str, Any]]:
        validate_category(category)
        cursor = self._activities_collection.find({"category": category, **self._visible_to(user_id)})
        cursor = cursor.sort([("difficulty", 1), ("name", 1)])
        return [self.format_activity(a) for a in await cursor.to_list(length=None)]

    async def get_by_difficulty(self, user_id: str, difficulty: str) -> List[Dict[str, Any]]:
        validate_difficulty(difficulty)
        cursor = self._activities_collection.find({"difficulty": difficulty, **self._visible_to(user_id)})
        cursor = cursor.sort([("category", 1), ("name", 1)])
        return [self.format_activity(a) for a in await cursor.to_list(length=None)]

    async def create_activity(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a custom activity owned by the user.

        Args:
            user_id: MongoDB user ID
            fields: name, category, difficulty, description,
                estimatedDuration, tags

        Returns:
            Formatted activity
        """
        validate_category(fields.get("category"))
        validate_difficulty(fields.get("difficulty") or "Moderate")

        now = datetime.now(timezone.utc)
        activity = {
            "userId": to_object_id(user_id),
            "name": fields["name"].strip(),
            "category": fields["category"],
            "difficulty": fields.get("difficulty") or "Moderate",
            "description": (fields.get("description") or "").strip() or None,
            "estimatedDuration": fields.get("estimatedDuration"),
            "tags": normalize_tags(fields.get("tags")),
            "isCustom": True,
            "isActive": True,
            "createdAt": now,
            "updatedAt": now,
        }

        result = await self._activities_collection.insert_one(activity)
        activity["_id"] = result.inserted_id

        logger.info(f"Custom activity {result.inserted_id} created for user {user_id}")
        return self.format_activity(activity)

    async def update_activity(
        self,
        user_id: str,
        activity_id: str,
        updates: Dict[str, Any],
    ) -> Dict[str, Any]:
        """
        Update one of the user's custom activities.

        Raises:
            NotFoundException: Not a custom activity owned by the user
        """
        changes = {name: value for name, value in updates.items() if name in EDITABLE_FIELDS}

        if "category" in changes:
            validate_category(changes["category"])
        if "difficulty" in changes:
            validate_difficulty(changes["difficulty"])
        if "name" in changes:
            if not changes["name"] or not changes["name"].strip():
                raise ValidationException(message="Activity name is required", code="VALIDATION_ERROR")
            changes["name"] = changes["name"].strip()
        if "tags" in changes:
            changes["tags"] = normalize_tags(changes["tags"])

        changes["updatedAt"] = datetime.now(timezone.utc)

        activity = await self._activities_collection.find_one_and_update(
            self._custom_filter(user_id, activity_id),
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

        if not activity:
            raise NotFoundException(message="Activity not found", code="ACTIVITY_NOT_FOUND")

        logger.info(f"Custom activity {activity_id} updated for user {user_id}")
        return self.format_activity(activity)

    async def update_ranking(self, user_id: str, activity_id: str, difficulty: str) -> Dict[str, Any]:
        """Re-rank a custom activity's difficulty."""
        validate_difficulty(difficulty)
        return await self.update_activity(user_id, activity_id, {"difficulty": difficulty})

    async def delete_activity(self, user_id: str, activity_id: str) -> None:
        """
        Soft-delete one of the user's custom activities.

        Raises:
            NotFoundException: Not a custom activity owned by the user
        """
        result = await self._activities_collection.update_one(
            self._custom_filter(user_id, activity_id),
            {"$set": {"isActive": False, "updatedAt": datetime.now(timezone.utc)}},
        )

        if result.matched_count == 0:
            raise NotFoundException(message="Activity not found", code="ACTIVITY_NOT_FOUND")

        logger.info(f"Custom activity {activity_id} deactivated for user {user_id}")

    async def seed_global_activities(self, activities: List[Dict[str, Any]]) -> int:
        """
        Replace the global catalog with the given activities.

        Custom activities are left untouched.

        Returns:
            Number of activities inserted
        """
        now = datetime.now(timezone.utc)
        docs = []
        for item in activities:
            validate_category(item["category"])
            validate_difficulty(item.get("difficulty") or "Moderate")
            docs.append({
                "userId": None,
                "name": item["name"].strip(),
                "category": item["category"],
                "difficulty": item.get("difficulty") or "Moderate",
                "description": item.get("description"),
                "estimatedDuration": item.get("estimatedDuration"),
                "tags": normalize_tags(item.get("tags")),
                "isCustom": False,
                "isActive": True,
                "createdAt": now,
                "updatedAt": now,
            })

        deleted = await self._activities_collection.delete_many({"userId": None})
        logger.info(f"Removed {deleted.deleted_count} global activities")

        if not docs:
            return 0

        result = await self._activities_collection.insert_many(docs)
        logger.info(f"Inserted {len(result.inserted_ids)} global activities")
        return len(result.inserted_ids)

    @staticmethod
    def format_activity(activity: Dict[str, Any]) -> Dict[str, Any]:
        """Format activity for response."""
        return {
            "id": str(activity["_id"]),
            "userId": str(activity["userId"]) if activity.get("userId") else None,
            "name": activity.get("name"),
            "category": activity.get("category"),
            "difficulty": activity.get("difficulty"),
            "description": activity.get("description"),
            "estimatedDuration": activity.get("estimatedDuration"),
            "tags": activity.get("tags", []),
            "isCustom": activity.get("isCustom", False),
            "isActive": activity.get("isActive", True),
            "createdAt": activity.get("createdAt"),
            "updatedAt": activity.get("updatedAt"),
        }
