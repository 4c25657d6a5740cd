"""
FastAPI authentication dependencies.

Provides a factory to create auth dependencies that can be injected into
route handlers. Works with any AuthProvider implementation.

Example:
    from common.auth import JWTAuth, create_auth_dependency

    auth = JWTAuth(secret="your-secret")
    get_current_user_id = create_auth_dependency(lambda: auth)

    @app.get("/profile")
    async def get_profile(user_id: str = Depends(get_current_user_id)):
        return {"user_id": user_id}
"""

from typing import Callable, Optional, Tuple

from fastapi import Header

from common.auth.base import AuthProvider
from common.utils.exceptions import UnauthorizedException


def extract_bearer_token(
    authorization: Optional[str],
    scheme: str = "Bearer",
) -> str:
    """
    Pull the token out of an Authorization header value.

    Raises:
        UnauthorizedException: If the header is missing or malformed
    """
    if not authorization:
        raise UnauthorizedException(
            message="Missing authorization header",
            code="UNAUTHORIZED",
        )

    prefix = f"{scheme} "
    if not authorization.startswith(prefix):
        raise UnauthorizedException(
            message=f"Invalid authorization scheme. Expected: {scheme}",
            code="INVALID_AUTH_SCHEME",
        )

    token = authorization[len(prefix):].strip()

    if not token:
        raise UnauthorizedException(message="Token is empty", code="EMPTY_TOKEN")

    return token


def create_auth_dependency(
    get_auth_provider: Callable[[], AuthProvider],
    header_name: str = "Authorization",
    scheme: str = "Bearer",
):
    """
    Factory to create FastAPI auth dependencies.

    Args:
        get_auth_provider: Callable that returns the AuthProvider instance
        header_name: Header to extract token from (default: Authorization)
        scheme: Auth scheme prefix (default: Bearer)

    Returns:
        A FastAPI dependency returning (user_id, token)
    """

    async def get_current_token_claims(
        authorization: Optional[str] = Header(None, alias=header_name),
    ) -> Tuple[str, str]:
        """
        Extract and verify user ID from the authorization header.

        Raises:
            UnauthorizedException: If token is missing, invalid, or expired
        """
        token = extract_bearer_token(authorization, scheme)

        auth = get_auth_provider()
        try:
            payload = await auth.verify_token(token)
        except ValueError as e:
            raise UnauthorizedException(message=str(e), code="INVALID_TOKEN")

        user_id = payload.get("sub")
        if not user_id:
            raise UnauthorizedException(
                message="Token missing user ID",
                code="INVALID_TOKEN",
            )

        return user_id, token

    return get_current_token_claims
