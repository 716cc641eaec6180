"""
Authentication dependencies.

Provides FastAPI dependencies for getting the current authenticated user
from a bearer JWT.
"""
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import Settings
from core.dependencies import get_app_settings
from core.exceptions import UnauthorizedError
from core.security import decode_access_token
from schemas import UserIdentity

# Use auto_error=False to handle missing credentials manually and return 401 (not 403)
security = HTTPBearer(auto_error=False)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_app_settings),
) -> UserIdentity:
    """
    Get the current authenticated user from JWT token.

    Raises UnauthorizedError if the token is missing or invalid.
    """
    if not credentials:
        raise UnauthorizedError("Not authenticated")

    payload = decode_access_token(credentials.credentials, settings.JWT_SECRET)
    if not payload:
        raise UnauthorizedError("Invalid authentication credentials")

    email = payload.get("sub")
    if not email:
        raise UnauthorizedError("Invalid token payload")

    return UserIdentity(email=email)
