"""
Password strength validation for account registration and password changes.

Example:
    from common.utils import validate_password

    is_valid, errors = validate_password("weakpass")
    if not is_valid:
        raise ValidationException(errors[0], code="WEAK_PASSWORD")
"""

import re
from typing import List, Tuple

# (pattern that must match, message when it doesn't)
CHARACTER_RULES = (
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"\d"), "Password must contain at least one number"),
)


def validate_password(
    password: str,
    min_length: int = 8,
    max_length: int = 128,
) -> Tuple[bool, List[str]]:
    """
    Check a password against the account password rules.

    Args:
        password: The password to validate
        min_length: Minimum password length
        max_length: Maximum password length

    Returns:
        Tuple of (is_valid, errors) with one message per failed rule

    Examples:
        >>> validate_password("weak")[0]
        False

        >>> validate_password("StrongPass123")
        (True, [])
    """
    errors: List[str] = []

    if len(password) < min_length:
        errors.append(f"Password must be at least {min_length} characters long")
    elif len(password) > max_length:
        errors.append(f"Password must be no more than {max_length} characters")

    errors.extend(message for pattern, message in CHARACTER_RULES if not pattern.search(password))

    return not errors, errors
