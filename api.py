"""
TherapyDiary FastAPI Application

Main entry point for the TherapyDiary API.
Behavioural Activation programme backend: diary entries, daily mood
logs, weekly progress and session content.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

# Common library imports
from common.database import MongoDB
from common.utils import ServiceUnavailableException

# App-specific imports
from therapy_diary.config import settings
from therapy_diary.database import INDEXES

# Import routers
from therapy_diary.routers import (
    auth_router,
    diary_router,
    daily_entries_router,
    mood_router,
    sessions_router,
    activities_router,
)

# Import service initialization
from therapy_diary.dependencies import init_all_services

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# Database Instance
# =============================================================================
main_db = MongoDB()


# =============================================================================
# Application Lifespan
# =============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown tasks like database connections
    and service initialization.
    """
    logger.info("Starting TherapyDiary API...")
    settings.validate_required()

    await main_db.connect(
        uri=settings.MONGODB_URI,
        database_name=settings.MONGODB_DATABASE,
        indexes=INDEXES,
    )

    init_all_services(db=main_db.db)
    logger.info(f"TherapyDiary API started (timezone {settings.TIMEZONE})")

    yield

    logger.info("Shutting down TherapyDiary API...")
    await main_db.disconnect()


# =============================================================================
# FastAPI Application
# =============================================================================
app = FastAPI(
    title="TherapyDiary API",
    description="Behavioural Activation therapy diary",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
)

# =============================================================================
# CORS Middleware
# =============================================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Error Handlers
# =============================================================================
@app.exception_handler(PyMongoError)
async def storage_error_handler(request: Request, exc: PyMongoError):
    """Storage failures surface as 503 so clients can tell them from bugs."""
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    unavailable = ServiceUnavailableException(
        message="Storage temporarily unavailable",
        code="STORAGE_UNAVAILABLE",
        retry_after=5,
    )
    return await http_exception_handler(request, unavailable)


# =============================================================================
# Include Routers (all under /api prefix)
# =============================================================================
API_PREFIX = "/api"

app.include_router(auth_router, prefix=API_PREFIX, tags=["Authentication"])
app.include_router(diary_router, prefix=API_PREFIX, tags=["Diary"])
app.include_router(daily_entries_router, prefix=API_PREFIX, tags=["Daily Entries"])
app.include_router(mood_router, prefix=API_PREFIX, tags=["Mood"])
app.include_router(sessions_router, prefix=API_PREFIX, tags=["Sessions"])
app.include_router(activities_router, prefix=API_PREFIX, tags=["Activities"])


# =============================================================================
# Health Check Endpoint
# =============================================================================
@app.get(f"{API_PREFIX}/health", tags=["Health"])
async def health():
    """
    Health check endpoint.

    Returns the status of the API and database connection.
    """
    return {
        "status": "ok",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "database": main_db.is_connected,
    }


# =============================================================================
# Run with Uvicorn
# =============================================================================
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
    )
