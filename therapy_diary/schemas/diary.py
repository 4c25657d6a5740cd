"""
Pydantic models for diary entry request validation.
"""

from typing import Optional
from pydantic import BaseModel, Field

TIME_OF_DAY_PATTERN = "^(Morning|Afternoon|Evening|Night)$"


class DiaryEntryCreate(BaseModel):
    """POST /api/diary"""
    activity: str = Field(..., min_length=1, max_length=300)
    activityId: Optional[str] = Field(None, pattern="^[0-9a-fA-F]{24}$")
    moodBefore: Optional[int] = Field(None, ge=1, le=10, description="1-10 scale")
    moodAfter: int = Field(..., ge=1, le=10, description="1-10 scale")
    notes: Optional[str] = Field(None, max_length=1000)
    timestamp: Optional[str] = Field(None, description="ISO 8601, defaults to now")
    timeOfDay: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)


class DiaryEntryUpdate(BaseModel):
    """PUT /api/diary/{id} - only provided fields change"""
    activity: Optional[str] = Field(None, min_length=1, max_length=300)
    activityId: Optional[str] = Field(None, pattern="^[0-9a-fA-F]{24}$")
    moodBefore: Optional[int] = Field(None, ge=1, le=10)
    moodAfter: Optional[int] = Field(None, ge=1, le=10)
    notes: Optional[str] = Field(None, max_length=1000)
    timestamp: Optional[str] = None
    timeOfDay: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)


class DailyEntryCreate(BaseModel):
    """POST /api/daily-entries"""
    timeOfDay: str = Field(..., pattern=TIME_OF_DAY_PATTERN)
    time: str = Field(..., min_length=1, max_length=20, description="Free text, e.g. 9:30am")
    activity: str = Field(..., min_length=1, max_length=300)
    location: Optional[str] = Field(None, max_length=100)
    withWhom: Optional[str] = Field(None, max_length=100)
    moodBefore: str = Field(..., min_length=1, max_length=100, description="Mood label")
    moodAfter: str = Field(..., min_length=1, max_length=100, description="Mood label")
    notes: Optional[str] = Field(None, max_length=500)


class DailyEntryUpdate(BaseModel):
    """PUT /api/daily-entries/{id}"""
    timeOfDay: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)
    time: Optional[str] = Field(None, min_length=1, max_length=20)
    activity: Optional[str] = Field(None, min_length=1, max_length=300)
    location: Optional[str] = Field(None, max_length=100)
    withWhom: Optional[str] = Field(None, max_length=100)
    moodBefore: Optional[str] = Field(None, min_length=1, max_length=100)
    moodAfter: Optional[str] = Field(None, min_length=1, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)
