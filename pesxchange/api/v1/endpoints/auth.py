"""Authentication endpoints backed by PESU Academy credentials."""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from pesxchange.api.deps import get_client_address, get_current_active_user, get_db
from pesxchange.core.exceptions import RateLimitError, ValidationError
from pesxchange.core.rate_limiter import InMemoryRateLimiter, get_auth_rate_limiter
from pesxchange.core.security import create_access_token
from pesxchange.crud import crud_user
from pesxchange.models.user import UserProfile
from pesxchange.schemas.user import (
    LoginUserInfo,
    PesuLoginRequest,
    PesuLoginResponse,
    UserProfileResponse,
)
from pesxchange.services.pesu_auth import PesuAuthClient, get_pesu_auth_client
from pesxchange.utils.validators import is_valid_srn, sanitize_input

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
)


@router.post(
    "/pesu",
    response_model=PesuLoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Login with PESU Academy credentials",
)
async def login_pesu(
    login_in: PesuLoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    limiter: InMemoryRateLimiter = Depends(get_auth_rate_limiter),
    pesu_client: PesuAuthClient = Depends(get_pesu_auth_client),
) -> PesuLoginResponse:
    """
    Verify an SRN/password pair with PESU Academy and sign the student in.

    The profile is created on first login and refreshed on later ones.

    Raises:
        ValidationError: 400 on missing credentials or a malformed SRN
        RateLimitError: 429 after too many attempts from one address for one SRN
        AuthenticationError: 401 if PESU Academy rejects the credentials
        IdentityProviderError: 503 if PESU Academy is unreachable
    """
    if not login_in.username or not login_in.password:
        raise ValidationError("Username and password are required")

    srn = sanitize_input(login_in.username).upper()
    password = sanitize_input(login_in.password)

    if not is_valid_srn(srn):
        raise ValidationError("Invalid SRN format")

    attempt_key = f"{get_client_address(request)}-{srn}"
    if not limiter.check_and_consume(attempt_key):
        raise RateLimitError(
            "Too many authentication attempts. Please try again later.",
            retry_after=limiter.retry_after(attempt_key),
        )

    identity = await pesu_client.authenticate(srn, password)
    user = crud_user.upsert_from_identity(db, profile_in=identity)
    logger.info(f"User {user.id} signed in with SRN {user.srn}")

    access_token = create_access_token(data={"sub": str(user.id), "srn": user.srn})
    return PesuLoginResponse(
        user=LoginUserInfo(id=user.id, srn=user.srn, name=user.name, email=user.email),
        access_token=access_token,
    )


@router.get(
    "/me",
    response_model=UserProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
)
def get_me(
    current_user: UserProfile = Depends(get_current_active_user),
) -> UserProfile:
    return current_user
