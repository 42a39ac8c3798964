"""Public user lookup."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from pesxchange.api.deps import get_db
from pesxchange.core.exceptions import NotFoundError
from pesxchange.crud import crud_user
from pesxchange.models.user import UserProfile
from pesxchange.schemas.user import PublicUserResponse
from pesxchange.utils.validators import parse_uuid

router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


@router.get(
    "/{user_id}",
    response_model=PublicUserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get public user profile",
    description="Only fields safe to show other students: id, name, srn, verified, rating, created_at.",
)
def get_user(
    user_id: str,
    db: Session = Depends(get_db),
) -> UserProfile:
    user = crud_user.get(db, parse_uuid(user_id, "user id"))
    if not user or not user.is_active:
        raise NotFoundError("User not found")
    return user
