#!/usr/bin/env python3
"""
Seed script for weekly session content.

Upserts every week*.json file in therapy_diary/data/sessions (or the
directory given on the command line) keyed by weekNumber, so re-running
it updates content in place.

Usage:
    python scripts/seed_sessions.py [path/to/sessions_dir]

Environment variables required:
    MONGODB_URI - MongoDB connection string
    MONGODB_DATABASE - Database name (default: therapydiary)
"""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
from motor.motor_asyncio import AsyncIOMotorClient

# Load environment variables
load_dotenv()

from therapy_diary.config import settings
from therapy_diary.services.sessions.session_service import SessionService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


async def seed_sessions(directory: str) -> None:
    """Upsert all session files found in `directory`."""
    files = sorted(Path(directory).glob("week*.json"))
    if not files:
        logger.warning(f"No session files found in {directory}")
        return

    client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
    try:
        service = SessionService(db=client[settings.MONGODB_DATABASE])

        for path in files:
            with open(path, encoding="utf-8") as f:
                content = json.load(f)
            await service.upsert_session(content)

        stored = await service.list_sessions()
    finally:
        client.close()

    print("\nAvailable sessions:")
    for session in stored:
        print(f"- Week {session['weekNumber']}: {session['title']}")


if __name__ == "__main__":
    if not settings.MONGODB_URI:
        print("ERROR: MONGODB_URI environment variable not set")
        sys.exit(1)

    sessions_dir = sys.argv[1] if len(sys.argv) > 1 else settings.SESSIONS_SEED_DIR
    asyncio.run(seed_sessions(sessions_dir))
