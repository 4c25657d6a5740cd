"""Tests for baseline diary (daily entry) pipelines and service."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from bson import ObjectId

from common.utils.exceptions import NotFoundException, ValidationException
from therapy_diary.pipelines.daily_entries import (
    create_daily_entry_pipeline,
    get_week_entries_pipeline,
    delete_daily_entry_pipeline,
    complete_week_pipeline,
)
from therapy_diary.services.diary.daily_entry_service import DailyEntryService
from therapy_diary.services.progress.progress_service import ProgressService


# ─────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────


@pytest.fixture
def progress_service(multi_db, clock):
    return ProgressService(multi_db, tz_name="UTC", clock=clock)


@pytest.fixture
def daily_entry_service(multi_db, clock):
    return DailyEntryService(multi_db, tz_name="UTC", clock=clock)


@pytest.fixture
def entry_fields():
    return {
        "timeOfDay": "Morning",
        "time": "08:30",
        "activity": " Made breakfast ",
        "location": "Home",
        "withWhom": "Alone",
        "moodBefore": "Tired",
        "moodAfter": "Content",
        "notes": None,
    }


def daily_doc(user_id, day_number, week_number=1):
    return {
        "_id": ObjectId(),
        "userId": ObjectId(user_id),
        "weekNumber": week_number,
        "dayNumber": day_number,
        "date": datetime(2024, 3, 10, tzinfo=timezone.utc) + timedelta(days=day_number - 1),
        "timeOfDay": "Evening",
        "time": "19:00",
        "activity": "Called a friend",
        "moodBefore": "Low",
        "moodAfter": "Better",
    }


# ─────────────────────────────────────────────────────────────────
# create_daily_entry_pipeline
# ─────────────────────────────────────────────────────────────────


class TestCreateDailyEntry:
    @pytest.mark.asyncio
    async def test_stamps_week_and_day_and_records_activity(
        self,
        progress_service,
        daily_entry_service,
        collections,
        sample_user_id,
        sample_progress_doc,
        entry_fields,
        fixed_now,
    ):
        # Week started 2024-03-10, now is 2024-03-14: day 5
        collections("userprogress").find_one_and_update.return_value = sample_progress_doc
        collections("dailyentries").insert_one.return_value = MagicMock(inserted_id=ObjectId())

        result = await create_daily_entry_pipeline(
            progress_service, daily_entry_service, sample_user_id, entry_fields
        )

        doc = collections("dailyentries").insert_one.call_args[0][0]
        assert doc["weekNumber"] == 1
        assert doc["dayNumber"] == 5
        assert doc["activity"] == "Made breakfast"
        assert doc["date"] == datetime(2024, 3, 14, tzinfo=timezone.utc)

        assert result["entry"]["dayNumber"] == 5
        assert result["entry"]["formattedDate"] == "Thursday, 14 March 2024"
        assert result["userProgress"]["currentDay"] == 5
        assert result["userProgress"]["totalActivitiesLogged"] == 1
        saved = collections("userprogress").update_one.call_args[0][1]
        assert saved["$inc"] == {"totalActivitiesLogged": 1}
        assert saved["$set"]["lastActiveDate"] == fixed_now

    @pytest.mark.asyncio
    async def test_rejects_unknown_time_of_day(
        self, progress_service, daily_entry_service, collections, sample_user_id, sample_progress_doc, entry_fields
    ):
        collections("userprogress").find_one_and_update.return_value = sample_progress_doc
        entry_fields["timeOfDay"] = "Lunchtime"

        with pytest.raises(ValidationException):
            await create_daily_entry_pipeline(
                progress_service, daily_entry_service, sample_user_id, entry_fields
            )

        collections("dailyentries").insert_one.assert_not_called()
        collections("userprogress").update_one.assert_not_called()


# ─────────────────────────────────────────────────────────────────
# get_week_entries_pipeline
# ─────────────────────────────────────────────────────────────────


class TestGetWeekEntries:
    @pytest.mark.asyncio
    async def test_groups_by_day(self, daily_entry_service, collections, make_cursor, sample_user_id):
        docs = [daily_doc(sample_user_id, 1), daily_doc(sample_user_id, 1), daily_doc(sample_user_id, 3)]
        collections("dailyentries").find.return_value = make_cursor(docs)

        result = await get_week_entries_pipeline(daily_entry_service, sample_user_id, 1)

        assert result["totalEntries"] == 3
        assert result["daysWithEntries"] == 2
        assert sorted(result["groupedByDay"]) == ["1", "3"]
        assert len(result["groupedByDay"]["1"]) == 2

    @pytest.mark.asyncio
    async def test_invalid_week(self, daily_entry_service, sample_user_id):
        with pytest.raises(ValidationException):
            await get_week_entries_pipeline(daily_entry_service, sample_user_id, 0)


# ─────────────────────────────────────────────────────────────────
# delete_daily_entry_pipeline
# ─────────────────────────────────────────────────────────────────


class TestDeleteDailyEntry:
    @pytest.mark.asyncio
    async def test_decrements_counter(
        self, progress_service, daily_entry_service, collections, sample_user_id, sample_progress_doc
    ):
        doc = daily_doc(sample_user_id, 2)
        sample_progress_doc["totalActivitiesLogged"] = 2
        collections("dailyentries").find_one_and_delete.return_value = doc
        collections("userprogress").find_one.return_value = sample_progress_doc

        await delete_daily_entry_pipeline(
            progress_service, daily_entry_service, sample_user_id, str(doc["_id"])
        )

        saved = collections("userprogress").update_one.call_args[0][1]
        assert saved["$inc"] == {"totalActivitiesLogged": -1}

    @pytest.mark.asyncio
    async def test_foreign_entry_leaves_progress_alone(
        self, progress_service, daily_entry_service, collections, sample_user_id
    ):
        collections("dailyentries").find_one_and_delete.return_value = None

        with pytest.raises(NotFoundException):
            await delete_daily_entry_pipeline(
                progress_service, daily_entry_service, sample_user_id, str(ObjectId())
            )

        query = collections("dailyentries").find_one_and_delete.call_args[0][0]
        assert query["userId"] == ObjectId(sample_user_id)
        collections("userprogress").update_one.assert_not_called()


# ─────────────────────────────────────────────────────────────────
# complete_week_pipeline
# ─────────────────────────────────────────────────────────────────


class TestCompleteWeekPipeline:
    @pytest.mark.asyncio
    async def test_counts_current_week_entries(
        self, progress_service, daily_entry_service, collections, sample_user_id, sample_progress_doc
    ):
        sample_progress_doc["currentWeek"] = 2
        sample_progress_doc["currentDay"] = 7
        collections("userprogress").find_one.return_value = sample_progress_doc
        collections("dailyentries").count_documents.return_value = 10

        result = await complete_week_pipeline(progress_service, daily_entry_service, sample_user_id)

        count_query = collections("dailyentries").count_documents.call_args[0][0]
        assert count_query["weekNumber"] == 2
        assert result["entriesCompleted"] == 10
        assert result["userProgress"]["currentWeek"] == 3
        assert result["userProgress"]["currentDay"] == 1
        record = result["userProgress"]["completedWeeks"][-1]
        assert record["weekNumber"] == 2
        assert record["daysCompleted"] == 7
        assert record["totalEntries"] == 10

    @pytest.mark.asyncio
    async def test_requires_existing_progress(
        self, progress_service, daily_entry_service, collections, sample_user_id
    ):
        collections("userprogress").find_one.return_value = None

        with pytest.raises(NotFoundException):
            await complete_week_pipeline(progress_service, daily_entry_service, sample_user_id)

        collections("dailyentries").count_documents.assert_not_called()


# ─────────────────────────────────────────────────────────────────
# DailyEntryService
# ─────────────────────────────────────────────────────────────────


class TestDailyEntryService:
    @pytest.mark.asyncio
    async def test_update_only_touches_content_fields(self, daily_entry_service, collections, sample_user_id):
        doc = daily_doc(sample_user_id, 4)
        collections("dailyentries").find_one_and_update.return_value = doc

        await daily_entry_service.update_entry(
            sample_user_id, str(doc["_id"]), {"notes": " felt ok ", "weekNumber": 5}
        )

        changes = collections("dailyentries").find_one_and_update.call_args[0][1]["$set"]
        assert changes["notes"] == "felt ok"
        assert "weekNumber" not in changes

    @pytest.mark.asyncio
    async def test_update_rejects_blank_required_field(self, daily_entry_service, sample_user_id):
        with pytest.raises(ValidationException):
            await daily_entry_service.update_entry(sample_user_id, str(ObjectId()), {"activity": "  "})

    @pytest.mark.asyncio
    async def test_day_entries_rejects_invalid_day(self, daily_entry_service, sample_user_id):
        with pytest.raises(ValidationException):
            await daily_entry_service.get_day_entries(sample_user_id, 1, 8)

    @pytest.mark.asyncio
    async def test_distinct_days_sorted(self, daily_entry_service, collections, sample_user_id):
        collections("dailyentries").distinct.return_value = [5, 1, 3]

        assert await daily_entry_service.distinct_days(sample_user_id, 1) == [1, 3, 5]
