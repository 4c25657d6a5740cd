"""
Utilities module - Common helpers for API responses, exceptions, and validation.
"""

from common.utils.responses import message_response, pagination_block
from common.utils.exceptions import (
    APIException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    ConflictException,
    ValidationException,
    ServiceUnavailableException,
)
from common.utils.password import validate_password

__all__ = [
    "message_response",
    "pagination_block",
    "APIException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "ConflictException",
    "ValidationException",
    "ServiceUnavailableException",
    "validate_password",
]
