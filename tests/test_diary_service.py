"""Tests for DiaryService."""

import pytest
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId

from common.utils.exceptions import NotFoundException, ValidationException
from therapy_diary.services.diary.diary_service import DiaryService, format_diary_entry


@pytest.fixture
def aggregator():
    aggregator = MagicMock()
    aggregator.calculate_for_date = AsyncMock(return_value=None)
    return aggregator


@pytest.fixture
def service(multi_db, aggregator, clock):
    return DiaryService(multi_db, aggregator, tz_name="UTC", clock=clock)


@pytest.fixture
def stored_entry(sample_user_id):
    return {
        "_id": ObjectId(),
        "userId": ObjectId(sample_user_id),
        "activity": "Walk in the park",
        "activityId": None,
        "moodBefore": 4,
        "moodAfter": 7,
        "notes": None,
        "timeOfDay": "Morning",
        "timestamp": datetime(2024, 3, 12, 9, 0, tzinfo=timezone.utc),
    }


# ─────────────────────────────────────────────────────────────────
# format_diary_entry
# ─────────────────────────────────────────────────────────────────


class TestFormatDiaryEntry:
    def test_mood_change_and_local_date(self, stored_entry):
        formatted = format_diary_entry(stored_entry)

        assert formatted["id"] == str(stored_entry["_id"])
        assert formatted["moodChange"] == 3
        assert formatted["date"] == "2024-03-12"
        assert formatted["activityId"] is None

    def test_mood_change_absent_without_mood_before(self, stored_entry):
        del stored_entry["moodBefore"]
        assert format_diary_entry(stored_entry)["moodChange"] is None

    def test_populated_activity(self, stored_entry):
        activity = {"_id": ObjectId(), "name": "Walk", "category": "Pleasurable", "difficulty": "Easy"}
        stored_entry["activityId"] = activity["_id"]

        formatted = format_diary_entry(stored_entry, activity)

        assert formatted["activityId"] == {
            "id": str(activity["_id"]),
            "name": "Walk",
            "category": "Pleasurable",
            "difficulty": "Easy",
        }


# ─────────────────────────────────────────────────────────────────
# create_entry
# ─────────────────────────────────────────────────────────────────


class TestCreateEntry:
    @pytest.mark.asyncio
    async def test_inserts_and_recomputes_the_day(self, service, collections, aggregator, sample_user_id):
        inserted_id = ObjectId()
        collections("diaryentries").insert_one.return_value = MagicMock(inserted_id=inserted_id)

        result = await service.create_entry(
            sample_user_id,
            activity="  Cooked dinner ",
            mood_before=3,
            mood_after=6,
            timestamp="2024-03-13T18:30:00Z",
        )

        doc = collections("diaryentries").insert_one.call_args[0][0]
        assert doc["activity"] == "Cooked dinner"
        assert doc["timeOfDay"] == "Evening"
        assert doc["userId"] == ObjectId(sample_user_id)
        assert result["id"] == str(inserted_id)
        assert result["moodChange"] == 3
        aggregator.calculate_for_date.assert_awaited_once_with(sample_user_id, date(2024, 3, 13))

    @pytest.mark.asyncio
    async def test_defaults_timestamp_to_now(self, service, collections, sample_user_id, fixed_now):
        collections("diaryentries").insert_one.return_value = MagicMock(inserted_id=ObjectId())

        await service.create_entry(sample_user_id, activity="Reading", mood_after=5)

        doc = collections("diaryentries").insert_one.call_args[0][0]
        assert doc["timestamp"] == fixed_now
        assert doc["timeOfDay"] == "Morning"
        assert "moodBefore" not in doc

    @pytest.mark.asyncio
    async def test_naive_timestamp_is_local_time(self, multi_db, collections, aggregator, clock, sample_user_id):
        service = DiaryService(multi_db, aggregator, tz_name="Europe/London", clock=clock)
        collections("diaryentries").insert_one.return_value = MagicMock(inserted_id=ObjectId())

        await service.create_entry(
            sample_user_id, activity="Late walk", mood_after=6, timestamp="2024-06-01T23:30:00"
        )

        doc = collections("diaryentries").insert_one.call_args[0][0]
        assert doc["timestamp"] == datetime(2024, 6, 1, 22, 30, tzinfo=timezone.utc)
        assert doc["timeOfDay"] == "Night"
        aggregator.calculate_for_date.assert_awaited_once_with(sample_user_id, date(2024, 6, 1))

    @pytest.mark.asyncio
    async def test_rejects_out_of_range_mood(self, service, collections, aggregator, sample_user_id):
        with pytest.raises(ValidationException):
            await service.create_entry(sample_user_id, activity="Reading", mood_after=11)

        collections("diaryentries").insert_one.assert_not_called()
        aggregator.calculate_for_date.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_blank_activity(self, service, collections, sample_user_id):
        with pytest.raises(ValidationException):
            await service.create_entry(sample_user_id, activity="   ", mood_after=5)

        collections("diaryentries").insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_invalid_activity_id(self, service, sample_user_id):
        with pytest.raises(ValidationException) as exc_info:
            await service.create_entry(
                sample_user_id, activity="Reading", mood_after=5, activity_id="nope"
            )
        assert exc_info.value.detail["code"] == "INVALID_ACTIVITY_ID"


# ─────────────────────────────────────────────────────────────────
# update_entry / delete_entry
# ─────────────────────────────────────────────────────────────────


class TestUpdateEntry:
    @pytest.mark.asyncio
    async def test_moving_day_recomputes_both_days(
        self, service, collections, aggregator, sample_user_id, stored_entry
    ):
        collections("diaryentries").find_one.return_value = stored_entry

        await service.update_entry(
            sample_user_id,
            str(stored_entry["_id"]),
            {"timestamp": "2024-03-10T12:00:00Z"},
        )

        days = [c.args[1] for c in aggregator.calculate_for_date.await_args_list]
        assert days == [date(2024, 3, 12), date(2024, 3, 10)]

    @pytest.mark.asyncio
    async def test_same_day_recomputes_once(
        self, service, collections, aggregator, sample_user_id, stored_entry
    ):
        collections("diaryentries").find_one.return_value = stored_entry

        result = await service.update_entry(
            sample_user_id, str(stored_entry["_id"]), {"moodAfter": 9}
        )

        assert result["moodAfter"] == 9
        assert aggregator.calculate_for_date.await_count == 1

    @pytest.mark.asyncio
    async def test_clearing_mood_before_unsets_it(
        self, service, collections, sample_user_id, stored_entry
    ):
        collections("diaryentries").find_one.return_value = stored_entry

        result = await service.update_entry(
            sample_user_id, str(stored_entry["_id"]), {"moodBefore": None}
        )

        update = collections("diaryentries").update_one.call_args[0][1]
        assert update["$unset"] == {"moodBefore": ""}
        assert result["moodBefore"] is None
        assert result["moodChange"] is None

    @pytest.mark.asyncio
    async def test_blank_activity_rejected(
        self, service, collections, aggregator, sample_user_id, stored_entry
    ):
        collections("diaryentries").find_one.return_value = stored_entry

        with pytest.raises(ValidationException):
            await service.update_entry(sample_user_id, str(stored_entry["_id"]), {"activity": "   "})

        collections("diaryentries").update_one.assert_not_called()
        aggregator.calculate_for_date.assert_not_called()

    @pytest.mark.asyncio
    async def test_foreign_entry_not_found(self, service, collections, aggregator, sample_user_id):
        collections("diaryentries").find_one.return_value = None

        with pytest.raises(NotFoundException):
            await service.update_entry(sample_user_id, str(ObjectId()), {"moodAfter": 5})

        query = collections("diaryentries").find_one.call_args[0][0]
        assert query["userId"] == ObjectId(sample_user_id)
        aggregator.calculate_for_date.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_id_not_found_without_query(self, service, collections, sample_user_id):
        with pytest.raises(NotFoundException):
            await service.update_entry(sample_user_id, "not-an-id", {"moodAfter": 5})

        collections("diaryentries").find_one.assert_not_called()


class TestDeleteEntry:
    @pytest.mark.asyncio
    async def test_deletes_and_recomputes(self, service, collections, aggregator, sample_user_id, stored_entry):
        collections("diaryentries").find_one.return_value = stored_entry

        await service.delete_entry(sample_user_id, str(stored_entry["_id"]))

        collections("diaryentries").delete_one.assert_awaited_once_with({"_id": stored_entry["_id"]})
        aggregator.calculate_for_date.assert_awaited_once_with(sample_user_id, date(2024, 3, 12))


# ─────────────────────────────────────────────────────────────────
# Reads
# ─────────────────────────────────────────────────────────────────


class TestListEntries:
    @pytest.mark.asyncio
    async def test_paginates_newest_first(self, service, collections, make_cursor, sample_user_id, stored_entry):
        cursor = make_cursor([stored_entry])
        collections("diaryentries").find.return_value = cursor
        collections("diaryentries").count_documents.return_value = 45

        result = await service.list_entries(sample_user_id, page=2, limit=20)

        cursor.sort.assert_called_once_with("timestamp", -1)
        cursor.skip.assert_called_once_with(20)
        cursor.limit.assert_called_once_with(20)
        assert result["pagination"]["total"] == 45
        assert result["pagination"]["pages"] == 3
        assert len(result["entries"]) == 1

    @pytest.mark.asyncio
    async def test_date_filters_cover_whole_days(self, service, collections, sample_user_id):
        collections("diaryentries").count_documents.return_value = 0

        await service.list_entries(sample_user_id, start_date="2024-03-01", end_date="2024-03-07")

        query = collections("diaryentries").find.call_args[0][0]
        assert query["timestamp"]["$gte"] == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert query["timestamp"]["$lte"] == datetime(2024, 3, 7, 23, 59, 59, 999000, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_limit_capped(self, service, collections, make_cursor, sample_user_id):
        cursor = make_cursor([])
        collections("diaryentries").find.return_value = cursor
        collections("diaryentries").count_documents.return_value = 0

        await service.list_entries(sample_user_id, limit=1000)

        cursor.limit.assert_called_once_with(100)

    @pytest.mark.asyncio
    async def test_rejects_unknown_time_of_day(self, service, sample_user_id):
        with pytest.raises(ValidationException):
            await service.list_entries(sample_user_id, time_of_day="Brunch")


class TestEntriesByDate:
    @pytest.mark.asyncio
    async def test_returns_day_with_count(self, service, collections, make_cursor, sample_user_id, stored_entry):
        collections("diaryentries").find.return_value = make_cursor([stored_entry])

        result = await service.get_entries_by_date(sample_user_id, "2024-03-12")

        assert result["date"] == "2024-03-12"
        assert result["count"] == 1
        assert result["entries"][0]["activity"] == "Walk in the park"
