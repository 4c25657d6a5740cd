"""HTTP-level tests for routing, validation and error mapping."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from api import app
from common.utils.exceptions import ForbiddenException
from therapy_diary.dependencies import (
    get_diary_service,
    get_progress_service,
    get_session_service,
    require_auth,
)


@pytest.fixture
def user_id():
    return str(ObjectId())


@pytest.fixture
def diary_service():
    service = MagicMock()
    service.create_entry = AsyncMock()
    service.list_entries = AsyncMock()
    return service


@pytest.fixture
def client(user_id, diary_service):
    app.dependency_overrides[require_auth] = lambda: user_id
    app.dependency_overrides[get_diary_service] = lambda: diary_service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestDiaryRoutes:
    def test_create_entry(self, client, diary_service, user_id):
        diary_service.create_entry.return_value = {"id": "abc", "moodAfter": 7}

        response = client.post("/api/diary", json={"activity": "Walk", "moodBefore": 4, "moodAfter": 7})

        assert response.status_code == 201
        assert response.json() == {
            "message": "Diary entry created successfully",
            "entry": {"id": "abc", "moodAfter": 7},
        }
        call = diary_service.create_entry.call_args
        assert call.args == (user_id,)
        assert call.kwargs["mood_after"] == 7

    def test_mood_out_of_range(self, client, diary_service):
        response = client.post("/api/diary", json={"activity": "Walk", "moodAfter": 11})

        assert response.status_code == 422
        diary_service.create_entry.assert_not_called()

    def test_storage_failure_is_503(self, client, diary_service):
        diary_service.list_entries.side_effect = ServerSelectionTimeoutError("no servers")

        response = client.get("/api/diary")

        assert response.status_code == 503
        assert response.json()["detail"]["code"] == "STORAGE_UNAVAILABLE"
        assert response.headers["Retry-After"] == "5"


class TestAuth:
    def test_missing_token(self):
        response = TestClient(app).get("/api/diary")

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"


class TestSessionRoutes:
    def test_locked_week(self, client):
        progress_service = MagicMock()
        progress_service.validate_week_number = MagicMock()
        progress_service.get_or_create = AsyncMock(return_value=MagicMock(current_week=1))
        progress_service.is_week_unlocked = MagicMock(return_value=False)
        app.dependency_overrides[get_progress_service] = lambda: progress_service
        app.dependency_overrides[get_session_service] = lambda: MagicMock()

        response = client.get("/api/sessions/3")

        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "WEEK_LOCKED"

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["database"] is False


def test_forbidden_exception_shape():
    exc = ForbiddenException(message="locked", code="WEEK_LOCKED")
    assert exc.detail == {"message": "locked", "code": "WEEK_LOCKED"}
