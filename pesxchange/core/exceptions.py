"""Custom exceptions for the PesXChange application.

Every error is an ``HTTPException`` so FastAPI renders it as
``{"detail": ...}`` with the right status code, whether it is raised from an
endpoint, a dependency or the CRUD layer.
"""

from typing import Dict, Optional, Type

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base exception for PesXChange errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(
            status_code=type(self).status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


class ValidationError(AppError):
    """Malformed input: bad UUID shape, empty message, bad SRN."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class AuthenticationError(AppError):
    """Missing or invalid caller identity."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(detail, headers=headers or {"WWW-Authenticate": "Bearer"})


class AuthorizationError(AppError):
    """Caller acting on a resource or conversation they are not party to."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class NotFoundError(AppError):
    """Referenced user or item does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ConflictError(AppError):
    """Resource already exists (e.g. an SRN that is already registered)."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Already exists"


class RateLimitError(AppError):
    """
    Too many requests for the caller's current window.

    Clients may retry after ``retry_after`` seconds; nothing in this service
    retries automatically.
    """

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Too many requests. Please try again later."

    def __init__(self, detail: Optional[str] = None, retry_after: Optional[int] = None):
        headers = {"Retry-After": str(retry_after)} if retry_after is not None else None
        super().__init__(detail, headers=headers)
        self.retry_after = retry_after


class StoreError(AppError):
    """Backing store (or network) failure."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"


class IdentityProviderError(AppError):
    """The academic identity provider could not be reached."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Authentication service unavailable"


_ERRORS_BY_STATUS: Dict[int, Type[AppError]] = {
    cls.status_code: cls
    for cls in (
        ValidationError,
        AuthenticationError,
        AuthorizationError,
        NotFoundError,
        ConflictError,
        RateLimitError,
        StoreError,
        IdentityProviderError,
    )
}


def error_for_status(status_code: int, detail: Optional[str] = None) -> AppError:
    """Build the exception matching an HTTP status code returned by the API."""
    if status_code == status.HTTP_422_UNPROCESSABLE_ENTITY:
        return ValidationError(detail)
    error_cls = _ERRORS_BY_STATUS.get(status_code, StoreError)
    return error_cls(detail)


__all__ = [
    "AppError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitError",
    "StoreError",
    "IdentityProviderError",
    "error_for_status",
]
