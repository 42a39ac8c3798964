"""FastAPI dependency injection functions for authentication and database access."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from pesxchange.core.exceptions import AuthenticationError, AuthorizationError
from pesxchange.core.security import decode_token
from pesxchange.crud import crud_user
from pesxchange.database import get_db
from pesxchange.models.user import UserProfile
from pesxchange.utils.validators import is_uuid

logger = logging.getLogger(__name__)

# Missing tokens are reported by get_current_user so every 401 carries the same detail
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/pesu", auto_error=False)


def _user_from_token(db: Session, token: str) -> Optional[UserProfile]:
    try:
        payload = decode_token(token)
    except AuthenticationError:
        logger.info("[AUTH] Token decode failed")
        return None

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not is_uuid(user_id):
        logger.warning("[AUTH] Token subject missing or malformed")
        return None

    return crud_user.get(db, UUID(user_id))


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> UserProfile:
    """
    Dependency to get current authenticated user from JWT token.

    Raises:
        AuthenticationError: 401 if the token is missing, invalid or its user is gone
    """
    if not token:
        raise AuthenticationError("Authentication required")

    user = _user_from_token(db, token)
    if user is None:
        raise AuthenticationError()
    return user


def get_current_active_user(
    current_user: UserProfile = Depends(get_current_user)
) -> UserProfile:
    """
    Dependency to verify current user is active.

    Raises:
        AuthorizationError: 403 if user is inactive
    """
    if not current_user.is_active:
        raise AuthorizationError("Inactive user")
    return current_user


def get_optional_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[UserProfile]:
    """
    Dependency to optionally get current authenticated user.
    Returns None if no valid token provided.
    """
    if not token:
        return None
    user = _user_from_token(db, token)
    if user is None or not user.is_active:
        return None
    return user


def get_client_address(request: Request) -> str:
    """Client IP, preferring the first ``X-Forwarded-For`` hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client:
        return request.client.host
    return "unknown"


__all__ = [
    "oauth2_scheme",
    "get_db",
    "get_current_user",
    "get_current_active_user",
    "get_optional_current_user",
    "get_client_address",
]
