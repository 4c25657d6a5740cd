#!/usr/bin/env python3
"""
Rebuild MoodLogs from diary entries.

MoodLogs are derived data; this script recomputes them for every day a
user has diary entries and removes logs for days that no longer have
any. Safe to run repeatedly.

Usage:
    python scripts/recompute_mood_logs.py [user_id]

Environment variables required:
    MONGODB_URI - MongoDB connection string
    MONGODB_DATABASE - Database name (default: therapydiary)
"""

import asyncio
import logging
import os
import sys
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

# Load environment variables
load_dotenv()

from common.database import to_object_id
from therapy_diary.config import settings
from therapy_diary.services.mood.mood_aggregator import MoodAggregator
from therapy_diary.utils.dates import local_date

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def recompute(user_id: Optional[str] = None) -> int:
    """
    Recompute MoodLogs for one user, or for everyone.

    Returns:
        Number of (user, day) pairs recomputed
    """
    client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
    try:
        db = client[settings.MONGODB_DATABASE]
        aggregator = MoodAggregator(db=db, tz_name=settings.TIMEZONE)

        query = {"userId": to_object_id(user_id)} if user_id else {}

        # Days that have entries, plus days that still have a log
        days = set()
        cursor = db["diaryentries"].find(query, {"userId": 1, "timestamp": 1})
        async for entry in cursor:
            days.add((str(entry["userId"]), local_date(entry["timestamp"], settings.TIMEZONE)))

        cursor = db["moodlogs"].find(query, {"userId": 1, "date": 1})
        async for log in cursor:
            days.add((str(log["userId"]), local_date(log["date"], settings.TIMEZONE)))

        logger.info(f"Recomputing {len(days)} user-days")
        for uid, day in sorted(days):
            await aggregator.calculate_for_date(uid, day)
    finally:
        client.close()

    return len(days)


if __name__ == "__main__":
    if not settings.MONGODB_URI:
        print("ERROR: MONGODB_URI environment variable not set")
        sys.exit(1)

    target = sys.argv[1] if len(sys.argv) > 1 else None
    total = asyncio.run(recompute(target))
    print(f"\nRecompute complete: {total} user-days processed")
