"""
Standard API response helpers.

Provides consistent response formatting for messages and paginated lists.

Example:
    from common.utils import message_response, pagination_block

    @router.post("/diary", status_code=201)
    async def create_entry(...):
        entry = await service.create_entry(user_id, body)
        return message_response("Diary entry created successfully", entry=entry)
"""

import math
from typing import Any, Dict


def message_response(message: str, **payload: Any) -> Dict[str, Any]:
    """
    Create a response carrying a human-readable message plus payload keys.

    Args:
        message: Success message
        **payload: Extra top-level keys (entry, activity, userProgress, ...)

    Returns:
        Dictionary with message and payload keys
    """
    response: Dict[str, Any] = {"message": message}
    response.update(payload)
    return response


def pagination_block(page: int, limit: int, total: int) -> Dict[str, int]:
    """
    Build the pagination metadata returned alongside list endpoints.

    Args:
        page: Current page number (1-indexed)
        limit: Items per page
        total: Total number of items across all pages

    Returns:
        dict with page, limit, total, pages
    """
    pages = math.ceil(total / limit) if limit > 0 else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": pages,
    }
