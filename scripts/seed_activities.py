#!/usr/bin/env python3
"""
Seed script for the global activity catalog.

This script:
1. Loads the activity list from therapy_diary/data/activities.json
2. Removes the existing global activities (userId null)
3. Inserts the catalog; users' custom activities are left untouched

Usage:
    python scripts/seed_activities.py [path/to/activities.json]

Environment variables required:
    MONGODB_URI - MongoDB connection string
    MONGODB_DATABASE - Database name (default: therapydiary)
"""

import asyncio
import json
import logging
import os
import sys
from collections import Counter

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

# Load environment variables
load_dotenv()

from therapy_diary.config import settings
from therapy_diary.database import INDEXES
from therapy_diary.services.activities.activity_service import ActivityService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def seed_activities(path: str) -> int:
    """Replace the global catalog with the activities in `path`."""
    with open(path, encoding="utf-8") as f:
        activities = json.load(f)
    logger.info(f"Loaded {len(activities)} activities from {path}")

    client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
    try:
        db = client[settings.MONGODB_DATABASE]

        for keys, options in INDEXES["activities"]:
            await db["activities"].create_index(list(keys), **options)

        service = ActivityService(db=db)
        inserted = await service.seed_global_activities(activities)
    finally:
        client.close()

    counts = Counter(a["category"] for a in activities)
    print("\n" + "=" * 50)
    print("Activity Seed Summary")
    print("=" * 50)
    for category, count in sorted(counts.items()):
        print(f"{category}: {count}")
    print(f"Total inserted: {inserted}")
    print("=" * 50)
    return inserted


if __name__ == "__main__":
    if not settings.MONGODB_URI:
        print("ERROR: MONGODB_URI environment variable not set")
        sys.exit(1)

    seed_file = sys.argv[1] if len(sys.argv) > 1 else settings.ACTIVITIES_SEED_FILE
    asyncio.run(seed_activities(seed_file))
