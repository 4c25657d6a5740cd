"""
User account service.

Registration, credential checks and profile updates over the users
collection. Token handling is delegated to the AuthProvider.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from common.auth.base import AuthProvider
from common.database import to_object_id
from common.utils.exceptions import (
    ConflictException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from common.utils.password import validate_password

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    "notifications": True,
    "reminderTime": "09:00",
    "theme": "system",
}

THEMES = ("light", "dark", "system")
REMINDER_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):[0-5]\d$")


class UserService:
    """
    Owns the users collection.
    passwordHash never leaves this service.
    """

    def __init__(self, db: AsyncIOMotorDatabase, auth: AuthProvider):
        """
        Initialize UserService.

        Args:
            db: MongoDB database connection
            auth: Hashes passwords and issues tokens
        """
        self._db = db
        self._users_collection = db["users"]
        self._auth = auth

    @staticmethod
    def _check_password(password: str) -> None:
        is_valid, errors = validate_password(password)
        if not is_valid:
            raise ValidationException(
                message=errors[0],
                code="WEAK_PASSWORD",
                errors=[{"field": "password", "message": e} for e in errors],
            )

    @staticmethod
    def _merge_settings(current: Optional[Dict[str, Any]], changes: Dict[str, Any]) -> Dict[str, Any]:
        settings = {**DEFAULT_SETTINGS, **(current or {})}
        for name, value in changes.items():
            if name not in DEFAULT_SETTINGS or value is None:
                continue
            if name == "theme" and value not in THEMES:
                raise ValidationException(message="Theme must be light, dark, or system", code="INVALID_SETTINGS")
            if name == "reminderTime" and not REMINDER_TIME_PATTERN.match(value):
                raise ValidationException(message="Reminder time must be in HH:MM format", code="INVALID_SETTINGS")
            settings[name] = value
        return settings

    async def register(
        self,
        email: str,
        password: str,
        name: str,
        age: Optional[int] = None,
    ) -> Dict[str, Any]:
        """
        Create an account and issue its first token.

        Returns:
            dict with token and user

        Raises:
            ConflictException: Email already registered
            ValidationException: Weak password
        """
        self._check_password(password)
        email = email.strip().lower()

        if await self._users_collection.find_one({"email": email}, {"_id": 1}):
            raise ConflictException(message="Email already registered", code="EMAIL_EXISTS")

        now = datetime.now(timezone.utc)
        user = {
            "email": email,
            "passwordHash": self._auth.hash_password(password),
            "name": name.strip(),
            "age": age,
            "settings": dict(DEFAULT_SETTINGS),
            "createdAt": now,
            "updatedAt": now,
        }

        try:
            result = await self._users_collection.insert_one(user)
        except DuplicateKeyError:
            raise ConflictException(message="Email already registered", code="EMAIL_EXISTS")
        user["_id"] = result.inserted_id

        logger.info(f"User registered: {result.inserted_id}")

        token = await self._auth.create_token(str(result.inserted_id))
        return {"token": token, "user": self.format_user(user)}

    async def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Check credentials and issue a token.

        Raises:
            UnauthorizedException: Unknown email or wrong password
        """
        user = await self._users_collection.find_one({"email": email.strip().lower()})

        if not user or not self._auth.verify_password(password, user.get("passwordHash", "")):
            logger.warning(f"Failed login attempt for {email}")
            raise UnauthorizedException(message="Invalid email or password", code="INVALID_CREDENTIALS")

        token = await self._auth.create_token(str(user["_id"]))
        logger.info(f"User logged in: {user['_id']}")
        return {"token": token, "user": self.format_user(user)}

    async def get_user(self, user_id: str) -> Dict[str, Any]:
        """
        Raises:
            NotFoundException: Account no longer exists
        """
        user_oid = to_object_id(user_id)
        user = await self._users_collection.find_one({"_id": user_oid}) if user_oid else None
        if not user:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")
        return self.format_user(user)

    async def update_profile(
        self,
        user_id: str,
        name: Optional[str] = None,
        age: Optional[int] = None,
        settings: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Update name, age and settings. Settings are merged, not replaced.

        Returns:
            Formatted user
        """
        user_oid = to_object_id(user_id)
        current = await self._users_collection.find_one({"_id": user_oid}) if user_oid else None
        if not current:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        changes: Dict[str, Any] = {"updatedAt": datetime.now(timezone.utc)}
        if name:
            changes["name"] = name.strip()
        if age:
            changes["age"] = age
        if settings:
            changes["settings"] = self._merge_settings(current.get("settings"), settings)

        user = await self._users_collection.find_one_and_update(
            {"_id": user_oid},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

        logger.info(f"Profile updated for user {user_id}: {sorted(k for k in changes if k != 'updatedAt')}")
        return self.format_user(user)

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        """
        Raises:
            UnauthorizedException: Current password is wrong
            ValidationException: New password too weak
        """
        user_oid = to_object_id(user_id)
        user = await self._users_collection.find_one({"_id": user_oid}) if user_oid else None
        if not user:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        if not self._auth.verify_password(current_password, user.get("passwordHash", "")):
            raise UnauthorizedException(message="Current password is incorrect", code="INVALID_PASSWORD")

        self._check_password(new_password)

        await self._users_collection.update_one(
            {"_id": user_oid},
            {"$set": {
                "passwordHash": self._auth.hash_password(new_password),
                "updatedAt": datetime.now(timezone.utc),
            }},
        )
        logger.info(f"Password changed for user {user_id}")

    async def logout(self, token: str) -> None:
        await self._auth.revoke_token(token)

    @staticmethod
    def format_user(user: Dict[str, Any]) -> Dict[str, Any]:
        """Format user for response."""
        return {
            "id": str(user["_id"]),
            "email": user.get("email"),
            "name": user.get("name"),
            "age": user.get("age"),
            "settings": {**DEFAULT_SETTINGS, **(user.get("settings") or {})},
            "createdAt": user.get("createdAt"),
            "updatedAt": user.get("updatedAt"),
        }
