"""Marketplace listing endpoints."""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from pesxchange.api.deps import get_current_active_user, get_db
from pesxchange.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from pesxchange.crud import crud_category, crud_item, crud_item_like, crud_user
from pesxchange.models.item import Item
from pesxchange.models.user import UserProfile
from pesxchange.schemas.item import (
    AvailabilityUpdate,
    ItemCreate,
    ItemDetailResponse,
    ItemLikeResponse,
    ItemResponse,
    ItemUpdate,
    SellerDetail,
    SellerSummary,
)
from pesxchange.utils.validators import (
    ALLOWED_CONDITIONS,
    parse_uuid,
    sanitize_search_term,
    validate_price_range,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/items",
    tags=["Items"],
)

ALL_CATEGORIES = "All"


def _seller_summary(seller_id: UUID, seller: Optional[UserProfile]) -> SellerSummary:
    if seller is None:
        return SellerSummary(id=seller_id)
    return SellerSummary(
        id=seller.id,
        name=seller.name or "Unknown User",
        rating=seller.rating or 0.0,
        verified=bool(seller.verified),
    )


def _item_response(item: Item, seller: Optional[UserProfile], likes: int) -> ItemResponse:
    return ItemResponse(
        id=item.id,
        title=item.title,
        description=item.description,
        price=item.price,
        location=item.location,
        condition=item.condition,
        category=item.category.name if item.category else "Others",
        images=item.images or [],
        views=item.views or 0,
        likes=likes,
        is_available=item.is_available,
        created_at=item.created_at,
        seller=_seller_summary(item.seller_id, seller),
    )


def _item_detail(db: Session, item: Item) -> ItemDetailResponse:
    seller = item.seller
    if seller is None:
        seller_block = SellerDetail(id=item.seller_id)
    else:
        seller_block = SellerDetail(
            id=seller.id,
            name=seller.name or "Unknown User",
            rating=seller.rating or 0.0,
            verified=bool(seller.verified),
            avatar_url=seller.avatar_url,
            bio=seller.bio,
            phone=seller.phone,
            location=seller.location or "Unknown Location",
            created_at=seller.created_at,
        )
    base = _item_response(item, seller, crud_item_like.count_for_item(db, item_id=item.id))
    return ItemDetailResponse(
        **base.model_dump(exclude={"seller"}),
        year=item.year,
        category_id=item.category_id,
        updated_at=item.updated_at,
        seller=seller_block,
    )


def _get_item_or_404(db: Session, item_id: str) -> Item:
    item = crud_item.get(db, parse_uuid(item_id, "item id"))
    if not item:
        raise NotFoundError("Item not found")
    return item


def _get_own_item(db: Session, item_id: str, current_user: UserProfile) -> Item:
    item = _get_item_or_404(db, item_id)
    if item.seller_id != current_user.id:
        raise AuthorizationError("Only the seller can modify this item")
    return item


@router.get(
    "",
    response_model=List[ItemResponse],
    status_code=status.HTTP_200_OK,
    summary="List available items",
    description="""
    Available listings, newest first.

    - **category**: ignored when "All" or unknown
    - **condition**: one of New, Like New, Good, Fair, Poor
    - **minPrice / maxPrice**: invalid values are ignored; min above max drops both
    - **search**: matches title or description
    """,
)
def list_items(
    category: Optional[str] = Query(None),
    condition: Optional[str] = Query(None),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    search: Optional[str] = Query(None),
    limit: int = Query(20),
    offset: int = Query(0),
    db: Session = Depends(get_db),
) -> List[ItemResponse]:
    category_id = None
    if category and category != ALL_CATEGORIES:
        found = crud_category.get_by_name(db, category)
        if found:
            category_id = found.id

    low, high = validate_price_range(min_price, max_price)

    items = crud_item.get_available(
        db,
        category_id=category_id,
        condition=condition if condition in ALLOWED_CONDITIONS else None,
        min_price=low,
        max_price=high,
        search=sanitize_search_term(search),
        skip=max(offset, 0),
        limit=min(max(limit, 1), 100),
    )

    sellers = crud_user.get_map(db, {item.seller_id for item in items})
    like_counts: Dict[UUID, int] = crud_item.get_like_counts(db, [item.id for item in items])
    return [
        _item_response(item, sellers.get(item.seller_id), like_counts.get(item.id, 0))
        for item in items
    ]


@router.post(
    "",
    response_model=ItemDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a listing",
)
def create_item(
    item_in: ItemCreate,
    current_user: UserProfile = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> ItemDetailResponse:
    if not (item_in.title or "").strip() or not (item_in.description or "").strip() or item_in.price is None:
        raise ValidationError("Title, description and price are required")
    if item_in.condition and item_in.condition not in ALLOWED_CONDITIONS:
        raise ValidationError("Invalid condition")

    category = crud_category.get_or_create(db, name=item_in.category)
    item = crud_item.create_item(
        db,
        seller_id=current_user.id,
        item_in=item_in,
        category_id=category.id if category else None,
    )
    logger.info(f"Item {item.id} listed by {current_user.id}")
    return _item_detail(db, item)


@router.get(
    "/{item_id}",
    response_model=ItemDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get item details",
)
def get_item(
    item_id: str,
    db: Session = Depends(get_db),
) -> ItemDetailResponse:
    return _item_detail(db, _get_item_or_404(db, item_id))


@router.put(
    "/{item_id}",
    response_model=ItemDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a listing",
)
def update_item(
    item_id: str,
    item_in: ItemUpdate,
    current_user: UserProfile = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> ItemDetailResponse:
    item = _get_own_item(db, item_id, current_user)
    if item_in.condition and item_in.condition not in ALLOWED_CONDITIONS:
        raise ValidationError("Invalid condition")
    item = crud_item.update(db, db_obj=item, obj_in=item_in)
    return _item_detail(db, item)


@router.put(
    "/{item_id}/availability",
    response_model=ItemDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Mark a listing available or sold",
)
def update_availability(
    item_id: str,
    availability_in: AvailabilityUpdate,
    current_user: UserProfile = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> ItemDetailResponse:
    item = _get_own_item(db, item_id, current_user)
    item = crud_item.update(db, db_obj=item, obj_in={"is_available": availability_in.is_available})
    return _item_detail(db, item)


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a listing",
)
def delete_item(
    item_id: str,
    current_user: UserProfile = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> dict:
    item = _get_own_item(db, item_id, current_user)
    crud_item.delete(db, id=item.id)
    logger.info(f"Item {item_id} deleted by {current_user.id}")
    return {"message": "Item deleted successfully"}


@router.post(
    "/{item_id}/like",
    response_model=ItemLikeResponse,
    status_code=status.HTTP_200_OK,
    summary="Like or unlike an item",
)
def toggle_like(
    item_id: str,
    current_user: UserProfile = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> ItemLikeResponse:
    item_uuid = parse_uuid(item_id, "item id")
    try:
        liked, like_count = crud_item_like.toggle_like(db, item_id=item_uuid, user_id=current_user.id)
    except ValueError as e:
        raise NotFoundError(str(e)) from e
    return ItemLikeResponse(item_id=item_uuid, liked=liked, like_count=like_count)


@router.post(
    "/{item_id}/view",
    status_code=status.HTTP_200_OK,
    summary="Count a view",
)
def record_view(
    item_id: str,
    db: Session = Depends(get_db),
) -> dict:
    item = crud_item.increment_views(db, item_id=parse_uuid(item_id, "item id"))
    if not item:
        raise NotFoundError("Item not found")
    return {"views": item.views}
