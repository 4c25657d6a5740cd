"""Shared test fixtures for TherapyDiary backend tests."""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId


def _make_cursor(docs=None):
    """
    Fake Motor cursor.

    sort/skip/limit chain back to the cursor; to_list resolves to docs.
    """
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(docs or []))
    return cursor


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def fixed_now():
    return datetime(2024, 3, 14, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now):
    return lambda: fixed_now


@pytest.fixture
def mock_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # count_documents etc. stay as AsyncMock.
    collection.find = MagicMock(return_value=_make_cursor())
    return collection


@pytest.fixture
def mock_db(mock_collection):
    db = MagicMock()
    db.__getitem__ = MagicMock(return_value=mock_collection)
    return db


@pytest.fixture
def collections():
    """One independent mock collection per collection name."""
    created = {}

    def get(name):
        if name not in created:
            collection = AsyncMock()
            collection.find = MagicMock(return_value=_make_cursor())
            created[name] = collection
        return created[name]

    return get


@pytest.fixture
def multi_db(collections):
    db = MagicMock()
    db.__getitem__ = MagicMock(side_effect=collections)
    return db


@pytest.fixture
def sample_progress_doc(sample_user_id):
    start = datetime(2024, 3, 10, 9, 0, tzinfo=timezone.utc)
    return {
        "_id": ObjectId(),
        "userId": ObjectId(sample_user_id),
        "currentWeek": 1,
        "currentDay": 1,
        "weekStartDate": start,
        "completedWeeks": [],
        "totalActivitiesLogged": 0,
        "startedDate": start,
        "lastActiveDate": start,
    }


@pytest.fixture
def make_cursor():
    return _make_cursor
