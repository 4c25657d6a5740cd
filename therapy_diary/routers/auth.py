"""
FastAPI router for account endpoints.

Registration, login, current user, profile and password management.
"""

import logging
from typing import Annotated, Tuple

from fastapi import APIRouter, Depends, status

from common.utils import message_response
from therapy_diary.dependencies import get_token_claims, get_user_service, require_auth
from therapy_diary.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
)
from therapy_diary.services.user.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """
    Register a new account.

    Returns a bearer token and the created user.
    """
    result = await user_service.register(
        email=body.email,
        password=body.password,
        name=body.name,
        age=body.age,
    )
    return message_response("Registration successful", **result)


@router.post("/login")
async def login(
    body: LoginRequest,
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Log in with email and password."""
    result = await user_service.login(body.email, body.password)
    return message_response("Login successful", **result)


@router.get("/me")
async def get_current_user(
    user_id: Annotated[str, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Get the authenticated user."""
    return {"user": await user_service.get_user(user_id)}


@router.patch("/profile")
async def update_profile(
    body: ProfileUpdateRequest,
    user_id: Annotated[str, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """
    Update name, age and settings.

    Settings are merged into the stored ones.
    """
    settings = body.settings.model_dump(exclude_none=True) if body.settings else None
    user = await user_service.update_profile(
        user_id,
        name=body.name,
        age=body.age,
        settings=settings,
    )
    return message_response("Profile updated successfully", user=user)


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    user_id: Annotated[str, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Change password after verifying the current one."""
    await user_service.change_password(user_id, body.currentPassword, body.newPassword)
    return message_response("Password changed successfully")


@router.post("/logout")
async def logout(
    claims: Annotated[Tuple[str, str], Depends(get_token_claims)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Revoke the presented token."""
    user_id, token = claims
    await user_service.logout(token)
    logger.info(f"User logged out: {user_id}")
    return message_response("Logout successful")
