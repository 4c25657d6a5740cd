"""
Pydantic models for account request validation.

Defines schemas for registration, login, profile and password changes.
"""

from typing import Optional
from pydantic import BaseModel, Field, EmailStr


class RegisterRequest(BaseModel):
    """POST /api/auth/register"""
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=2, max_length=100)
    age: Optional[int] = Field(None, ge=14, le=120)


class LoginRequest(BaseModel):
    """POST /api/auth/login"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class SettingsUpdate(BaseModel):
    """Partial settings; omitted keys keep their stored value."""
    notifications: Optional[bool] = None
    reminderTime: Optional[str] = Field(None, pattern=r"^([01]?\d|2[0-3]):[0-5]\d$")
    theme: Optional[str] = Field(None, pattern="^(light|dark|system)$")


class ProfileUpdateRequest(BaseModel):
    """PATCH /api/auth/profile"""
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    age: Optional[int] = Field(None, ge=14, le=120)
    settings: Optional[SettingsUpdate] = None


class ChangePasswordRequest(BaseModel):
    """POST /api/auth/change-password"""
    currentPassword: str = Field(..., min_length=1)
    newPassword: str = Field(..., min_length=8, max_length=128)
