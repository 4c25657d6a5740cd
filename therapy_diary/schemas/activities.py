"""
Pydantic models for activity catalog request validation.
"""

from typing import Optional, List
from pydantic import BaseModel, Field

CATEGORY_PATTERN = "^(Routine|Necessary|Pleasurable)$"
DIFFICULTY_PATTERN = "^(Easiest|Moderate|Difficult)$"


class ActivityCreate(BaseModel):
    """POST /api/activities"""
    name: str = Field(..., min_length=1, max_length=200)
    category: str = Field(..., pattern=CATEGORY_PATTERN)
    difficulty: str = Field(default="Moderate", pattern=DIFFICULTY_PATTERN)
    description: Optional[str] = Field(None, max_length=500)
    estimatedDuration: Optional[int] = Field(None, ge=1, le=480, description="Minutes")
    tags: List[str] = Field(default_factory=list)


class ActivityUpdate(BaseModel):
    """PUT /api/activities/{id}"""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = Field(None, pattern=CATEGORY_PATTERN)
    difficulty: Optional[str] = Field(None, pattern=DIFFICULTY_PATTERN)
    description: Optional[str] = Field(None, max_length=500)
    estimatedDuration: Optional[int] = Field(None, ge=1, le=480)
    tags: Optional[List[str]] = None


class RankRequest(BaseModel):
    """PATCH /api/activities/{id}/rank"""
    difficulty: str = Field(..., pattern=DIFFICULTY_PATTERN)
