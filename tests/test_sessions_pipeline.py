"""Tests for session gating and progress pipelines."""

import pytest
from datetime import datetime, timezone
from bson import ObjectId

from common.utils.exceptions import ForbiddenException, NotFoundException, ValidationException
from therapy_diary.pipelines.sessions import (
    get_session_pipeline,
    mark_session_read_pipeline,
    get_user_progress_pipeline,
)
from therapy_diary.services.diary.daily_entry_service import DailyEntryService
from therapy_diary.services.progress.progress_service import ProgressService
from therapy_diary.services.sessions.session_service import SessionService


@pytest.fixture
def progress_service(multi_db, clock):
    return ProgressService(multi_db, tz_name="UTC", clock=clock)


@pytest.fixture
def session_service(multi_db):
    return SessionService(multi_db)


@pytest.fixture
def session_doc():
    return {
        "_id": ObjectId(),
        "weekNumber": 2,
        "title": "Week 2: Planning Activities",
        "introduction": "This week we schedule activities.",
        "sections": [{"heading": "Why plan?", "content": "...", "order": 1}],
        "taskDescription": "Plan one activity a day",
        "duration": "7 days",
    }


def week_record(week_number, days_completed):
    return {
        "weekNumber": week_number,
        "completedDate": datetime(2024, 3, 9, tzinfo=timezone.utc),
        "sessionRead": False,
        "daysCompleted": days_completed,
        "totalEntries": 9,
    }


# ─────────────────────────────────────────────────────────────────
# get_session_pipeline
# ─────────────────────────────────────────────────────────────────


class TestGetSession:
    @pytest.mark.asyncio
    async def test_week_locked(
        self, progress_service, session_service, collections, sample_user_id, sample_progress_doc
    ):
        collections("userprogress").find_one_and_update.return_value = sample_progress_doc

        with pytest.raises(ForbiddenException) as exc_info:
            await get_session_pipeline(progress_service, session_service, sample_user_id, 2)

        assert exc_info.value.status_code == 403
        assert exc_info.value.detail["code"] == "WEEK_LOCKED"
        collections("sessions").find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_partial_week_stays_locked(
        self, progress_service, session_service, collections, sample_user_id, sample_progress_doc
    ):
        sample_progress_doc["completedWeeks"] = [week_record(1, 6)]
        collections("userprogress").find_one_and_update.return_value = sample_progress_doc

        with pytest.raises(ForbiddenException):
            await get_session_pipeline(progress_service, session_service, sample_user_id, 2)

    @pytest.mark.asyncio
    async def test_unlocked_week_returns_session(
        self, progress_service, session_service, collections, sample_user_id, sample_progress_doc, session_doc
    ):
        sample_progress_doc["currentWeek"] = 2
        sample_progress_doc["completedWeeks"] = [week_record(1, 7)]
        collections("userprogress").find_one_and_update.return_value = sample_progress_doc
        collections("sessions").find_one.return_value = session_doc

        result = await get_session_pipeline(progress_service, session_service, sample_user_id, 2)

        assert result["session"]["id"] == str(session_doc["_id"])
        assert result["session"]["title"] == "Week 2: Planning Activities"
        assert result["userProgress"] == {"currentWeek": 2, "currentDay": 1, "isCurrentWeek": True}

    @pytest.mark.asyncio
    async def test_week_one_without_content(
        self, progress_service, session_service, collections, sample_user_id, sample_progress_doc
    ):
        collections("userprogress").find_one_and_update.return_value = sample_progress_doc
        collections("sessions").find_one.return_value = None

        with pytest.raises(NotFoundException) as exc_info:
            await get_session_pipeline(progress_service, session_service, sample_user_id, 1)
        assert exc_info.value.detail["code"] == "SESSION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_invalid_week(self, progress_service, session_service, collections, sample_user_id):
        with pytest.raises(ValidationException):
            await get_session_pipeline(progress_service, session_service, sample_user_id, 6)

        collections("userprogress").find_one_and_update.assert_not_called()


# ─────────────────────────────────────────────────────────────────
# mark_session_read_pipeline / get_user_progress_pipeline
# ─────────────────────────────────────────────────────────────────


class TestMarkSessionRead:
    @pytest.mark.asyncio
    async def test_marks_completed_week(self, progress_service, collections, sample_user_id, sample_progress_doc):
        sample_progress_doc["completedWeeks"] = [week_record(1, 7)]
        collections("userprogress").find_one.return_value = sample_progress_doc

        result = await mark_session_read_pipeline(progress_service, sample_user_id, 1)

        assert result["userProgress"]["completedWeeks"][0]["sessionRead"] is True


class TestUserProgress:
    @pytest.mark.asyncio
    async def test_current_week_stats(self, multi_db, progress_service, collections, sample_user_id, sample_progress_doc):
        collections("userprogress").find_one_and_update.return_value = sample_progress_doc
        collections("dailyentries").count_documents.return_value = 6
        collections("dailyentries").distinct.return_value = [1, 2, 4]

        result = await get_user_progress_pipeline(
            progress_service, DailyEntryService(multi_db), sample_user_id
        )

        assert result["currentWeekStats"] == {"entriesCount": 6, "daysCompleted": 3}
        assert result["userProgress"]["currentWeek"] == 1


# ─────────────────────────────────────────────────────────────────
# SessionService
# ─────────────────────────────────────────────────────────────────


class TestSessionService:
    @pytest.mark.asyncio
    async def test_upsert_keyed_by_week(self, session_service, collections, session_doc):
        collections("sessions").find_one_and_update.return_value = session_doc
        content = {**session_doc, "sections": [
            {"heading": "B", "order": 2},
            {"heading": "A", "order": 1},
        ]}
        del content["_id"]
        del content["duration"]

        await session_service.upsert_session(content)

        query, update = collections("sessions").find_one_and_update.call_args[0]
        assert query == {"weekNumber": 2}
        assert [s["heading"] for s in update["$set"]["sections"]] == ["A", "B"]
        assert update["$set"]["duration"] == "7 days"
        assert update["$set"]["isActive"] is True

    @pytest.mark.asyncio
    async def test_upsert_requires_title(self, session_service, collections):
        with pytest.raises(ValidationException):
            await session_service.upsert_session({"weekNumber": 1, "introduction": "x", "taskDescription": "y"})
        collections("sessions").find_one_and_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_by_week_skips_inactive(self, session_service, collections):
        collections("sessions").find_one.return_value = None

        assert await session_service.get_by_week(3) is None
        query = collections("sessions").find_one.call_args[0][0]
        assert query == {"weekNumber": 3, "isActive": {"$ne": False}}
