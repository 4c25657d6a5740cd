"""Tests for account management and JWT auth."""

import pytest
from unittest.mock import MagicMock
from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from common.auth import JWTAuth
from common.utils.exceptions import (
    ConflictException,
    UnauthorizedException,
    ValidationException,
)
from therapy_diary.services.user.user_service import UserService


@pytest.fixture
def auth():
    return JWTAuth(secret="test-secret", access_token_expire_minutes=5)


@pytest.fixture
def service(mock_db, auth):
    return UserService(mock_db, auth)


@pytest.fixture
def stored_user(sample_user_id, auth):
    return {
        "_id": ObjectId(sample_user_id),
        "email": "sam@example.com",
        "name": "Sam",
        "age": 30,
        "passwordHash": auth.hash_password("Str0ngPass"),
        "settings": {"theme": "dark"},
    }


# ─────────────────────────────────────────────────────────────────
# JWTAuth
# ─────────────────────────────────────────────────────────────────


class TestJWTAuth:
    def test_password_round_trip(self, auth):
        hashed = auth.hash_password("Str0ngPass")

        assert hashed != "Str0ngPass"
        assert auth.verify_password("Str0ngPass", hashed) is True
        assert auth.verify_password("WrongPass1", hashed) is False
        assert auth.verify_password("Str0ngPass", "") is False

    @pytest.mark.asyncio
    async def test_token_carries_subject(self, auth, sample_user_id):
        token = await auth.create_token(sample_user_id)

        claims = await auth.verify_token(token)

        assert claims["sub"] == sample_user_id

    @pytest.mark.asyncio
    async def test_revoked_token_rejected(self, auth, sample_user_id):
        token = await auth.create_token(sample_user_id)
        await auth.revoke_token(token)

        with pytest.raises(ValueError):
            await auth.verify_token(token)

    @pytest.mark.asyncio
    async def test_token_from_other_secret_rejected(self, auth, sample_user_id):
        token = await JWTAuth(secret="other-secret").create_token(sample_user_id)

        with pytest.raises(ValueError):
            await auth.verify_token(token)


# ─────────────────────────────────────────────────────────────────
# register / login
# ─────────────────────────────────────────────────────────────────


class TestRegister:
    @pytest.mark.asyncio
    async def test_creates_user_with_default_settings(self, service, mock_collection, auth):
        mock_collection.find_one.return_value = None
        mock_collection.insert_one.return_value = MagicMock(inserted_id=ObjectId())

        result = await service.register(" Sam@Example.com ", "Str0ngPass", "Sam", age=30)

        doc = mock_collection.insert_one.call_args[0][0]
        assert doc["email"] == "sam@example.com"
        assert doc["settings"] == {"notifications": True, "reminderTime": "09:00", "theme": "system"}
        assert auth.verify_password("Str0ngPass", doc["passwordHash"])
        assert "passwordHash" not in result["user"]
        assert (await auth.verify_token(result["token"]))["sub"] == result["user"]["id"]

    @pytest.mark.asyncio
    async def test_duplicate_email(self, service, mock_collection):
        mock_collection.find_one.return_value = {"_id": ObjectId()}

        with pytest.raises(ConflictException) as exc_info:
            await service.register("sam@example.com", "Str0ngPass", "Sam")
        assert exc_info.value.detail["code"] == "EMAIL_EXISTS"
        mock_collection.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_key_race(self, service, mock_collection):
        mock_collection.find_one.return_value = None
        mock_collection.insert_one.side_effect = DuplicateKeyError("E11000")

        with pytest.raises(ConflictException):
            await service.register("sam@example.com", "Str0ngPass", "Sam")

    @pytest.mark.asyncio
    async def test_weak_password(self, service, mock_collection):
        with pytest.raises(ValidationException) as exc_info:
            await service.register("sam@example.com", "weakpass", "Sam")
        assert exc_info.value.detail["code"] == "WEAK_PASSWORD"
        mock_collection.find_one.assert_not_called()


class TestLogin:
    @pytest.mark.asyncio
    async def test_valid_credentials(self, service, mock_collection, stored_user):
        mock_collection.find_one.return_value = stored_user

        result = await service.login("SAM@example.com", "Str0ngPass")

        assert result["user"]["email"] == "sam@example.com"
        assert result["token"]

    @pytest.mark.asyncio
    async def test_wrong_password(self, service, mock_collection, stored_user):
        mock_collection.find_one.return_value = stored_user

        with pytest.raises(UnauthorizedException) as exc_info:
            await service.login("sam@example.com", "WrongPass1")
        assert exc_info.value.detail["code"] == "INVALID_CREDENTIALS"

    @pytest.mark.asyncio
    async def test_unknown_email(self, service, mock_collection):
        mock_collection.find_one.return_value = None

        with pytest.raises(UnauthorizedException):
            await service.login("nobody@example.com", "Str0ngPass")


# ─────────────────────────────────────────────────────────────────
# Profile
# ─────────────────────────────────────────────────────────────────


class TestProfile:
    @pytest.mark.asyncio
    async def test_settings_are_merged(self, service, mock_collection, sample_user_id, stored_user):
        mock_collection.find_one.return_value = stored_user
        mock_collection.find_one_and_update.return_value = stored_user

        await service.update_profile(sample_user_id, settings={"reminderTime": "20:15"})

        changes = mock_collection.find_one_and_update.call_args[0][1]["$set"]
        assert changes["settings"] == {"notifications": True, "reminderTime": "20:15", "theme": "dark"}

    @pytest.mark.asyncio
    async def test_invalid_theme(self, service, mock_collection, sample_user_id, stored_user):
        mock_collection.find_one.return_value = stored_user

        with pytest.raises(ValidationException):
            await service.update_profile(sample_user_id, settings={"theme": "neon"})

    @pytest.mark.asyncio
    async def test_change_password_requires_current(self, service, mock_collection, sample_user_id, stored_user):
        mock_collection.find_one.return_value = stored_user

        with pytest.raises(UnauthorizedException):
            await service.change_password(sample_user_id, "WrongPass1", "N3wPassword")
        mock_collection.update_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_change_password(self, service, mock_collection, sample_user_id, stored_user, auth):
        mock_collection.find_one.return_value = stored_user

        await service.change_password(sample_user_id, "Str0ngPass", "N3wPassword")

        new_hash = mock_collection.update_one.call_args[0][1]["$set"]["passwordHash"]
        assert auth.verify_password("N3wPassword", new_hash)

    def test_format_user_hides_password(self, stored_user):
        formatted = UserService.format_user(stored_user)

        assert "passwordHash" not in formatted
        assert formatted["settings"]["theme"] == "dark"
        assert formatted["settings"]["notifications"] is True
