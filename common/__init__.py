"""
Common library for reusable infrastructure components.

This package provides generic modules that the application builds on:

- database: Async MongoDB connection with Motor
- auth: Pluggable authentication (JWT + bcrypt)
- utils: Standard responses, exceptions, password validation
- config: Base settings class
"""

from common.database import MongoDB
from common.auth import AuthProvider, JWTAuth, create_auth_dependency
from common.utils import (
    message_response,
    APIException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    ValidationException,
    validate_password,
)
from common.config import BaseAppSettings

__all__ = [
    # Database
    "MongoDB",
    # Auth
    "AuthProvider",
    "JWTAuth",
    "create_auth_dependency",
    # Utils
    "message_response",
    "APIException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "ValidationException",
    "validate_password",
    # Config
    "BaseAppSettings",
]
