"""Profile endpoints for the signed-in student."""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from pesxchange.api.deps import get_client_address, get_current_active_user, get_db
from pesxchange.core.exceptions import AuthorizationError, ConflictError, RateLimitError, ValidationError
from pesxchange.core.rate_limiter import (
    InMemoryRateLimiter,
    get_profile_stats_rate_limiter,
    get_profile_update_rate_limiter,
)
from pesxchange.crud import crud_item, crud_user
from pesxchange.models.item import Item
from pesxchange.models.user import UserProfile
from pesxchange.schemas.item import OwnItemResponse, ProfileResponse
from pesxchange.schemas.user import (
    CheckSrnRequest,
    CheckSrnResponse,
    ProfileStats,
    UserProfileResponse,
    UserProfileUpdate,
)
from pesxchange.utils.validators import is_valid_srn, parse_uuid, sanitize_input

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/profile",
    tags=["Profile"],
)


def _build_stats(user: UserProfile, items: List[Item], like_counts: Dict[UUID, int]) -> ProfileStats:
    return ProfileStats(
        total_items_listed=len(items),
        total_views=sum(item.views or 0 for item in items),
        total_likes=sum(like_counts.get(item.id, 0) for item in items),
        average_rating=user.rating or 0.0,
    )


@router.get(
    "",
    response_model=ProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get own profile",
    description="Profile, own listings with like counts, and listing stats.",
)
def get_profile(
    current_user: UserProfile = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> ProfileResponse:
    items = crud_item.get_by_seller(db, seller_id=current_user.id)
    like_counts = crud_item.get_like_counts(db, [item.id for item in items])

    own_items = [
        OwnItemResponse(
            id=item.id,
            title=item.title,
            price=item.price,
            condition=item.condition,
            category=item.category.name if item.category else "Others",
            images=item.images or [],
            views=item.views or 0,
            likes=like_counts.get(item.id, 0),
            is_available=item.is_available,
            created_at=item.created_at,
        )
        for item in items
    ]

    return ProfileResponse(
        profile=UserProfileResponse.model_validate(current_user),
        items=own_items,
        stats=_build_stats(current_user, items, like_counts),
    )


@router.put(
    "",
    response_model=UserProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Update own profile",
)
def update_profile(
    profile_in: UserProfileUpdate,
    current_user: UserProfile = Depends(get_current_active_user),
    db: Session = Depends(get_db),
    limiter: InMemoryRateLimiter = Depends(get_profile_update_rate_limiter),
) -> UserProfile:
    identifier = str(current_user.id)
    if not limiter.check_and_consume(identifier):
        raise RateLimitError(
            "Too many profile updates. Please try again later.",
            retry_after=limiter.retry_after(identifier),
        )

    update_data = profile_in.model_dump(exclude_unset=True)
    if "name" in update_data and not (update_data["name"] or "").strip():
        raise ValidationError("Name cannot be empty")

    updated = crud_user.update(db, db_obj=current_user, obj_in=update_data)
    logger.info(f"Profile {current_user.id} updated: {sorted(update_data)}")
    return updated


@router.get(
    "/stats",
    response_model=ProfileStats,
    status_code=status.HTTP_200_OK,
    summary="Get profile stats",
)
def get_profile_stats(
    request: Request,
    user_id: Optional[str] = Query(None, alias="userId"),
    current_user: UserProfile = Depends(get_current_active_user),
    db: Session = Depends(get_db),
    limiter: InMemoryRateLimiter = Depends(get_profile_stats_rate_limiter),
) -> ProfileStats:
    client_address = get_client_address(request)
    if not limiter.check_and_consume(client_address):
        raise RateLimitError(retry_after=limiter.retry_after(client_address))

    target_id = parse_uuid(user_id, "userId") if user_id else current_user.id
    if target_id != current_user.id:
        raise AuthorizationError("You can only view your own stats")

    items = crud_item.get_by_seller(db, seller_id=current_user.id)
    like_counts = crud_item.get_like_counts(db, [item.id for item in items])
    return _build_stats(current_user, items, like_counts)


@router.post(
    "/check-srn",
    response_model=CheckSrnResponse,
    status_code=status.HTTP_200_OK,
    summary="Check whether an SRN is registered",
)
def check_srn(
    check_in: CheckSrnRequest,
    db: Session = Depends(get_db),
) -> CheckSrnResponse:
    srn = sanitize_input(check_in.srn, max_length=20).upper()
    if not srn or not is_valid_srn(srn):
        raise ValidationError("Invalid SRN format")

    if crud_user.get_by_srn(db, srn):
        raise ConflictError("This SRN is already registered")

    return CheckSrnResponse(exists=False, message="SRN is available")
