"""CRUD operations for Item."""

from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select, func, or_, desc
from sqlalchemy.orm import Session

from pesxchange.crud.base import CRUDBase
from pesxchange.models.item import Item, DEFAULT_LOCATION
from pesxchange.models.item_like import ItemLike
from pesxchange.schemas.item import ItemCreate, ItemUpdate


class CRUDItem(CRUDBase[Item, ItemCreate, ItemUpdate]):
    """CRUD operations for Item."""

    def create_item(
        self,
        db: Session,
        *,
        seller_id: UUID,
        item_in: ItemCreate,
        category_id: Optional[int] = None
    ) -> Item:
        """Create a new listing."""
        item = Item(
            seller_id=seller_id,
            category_id=category_id,
            title=item_in.title,
            description=item_in.description,
            price=item_in.price,
            condition=item_in.condition,
            location=item_in.location or DEFAULT_LOCATION,
            year=item_in.year,
            images=list(item_in.images or []),
            is_available=item_in.is_available,
            views=0
        )
        try:
            db.add(item)
            db.commit()
            db.refresh(item)
        except Exception:
            db.rollback()
            raise
        return item

    def get_available(
        self,
        db: Session,
        *,
        category_id: Optional[int] = None,
        condition: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 20
    ) -> List[Item]:
        """Get available listings (newest first) with optional filters."""
        stmt = select(Item).where(Item.is_available == True)

        if category_id is not None:
            stmt = stmt.where(Item.category_id == category_id)
        if condition:
            stmt = stmt.where(Item.condition == condition)
        if min_price is not None:
            stmt = stmt.where(Item.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Item.price <= max_price)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(Item.title.ilike(pattern), Item.description.ilike(pattern))
            )

        stmt = stmt.order_by(desc(Item.created_at)).offset(skip).limit(limit)
        return list(db.scalars(stmt).all())

    def get_by_seller(self, db: Session, *, seller_id: UUID) -> List[Item]:
        stmt = (
            select(Item)
            .where(Item.seller_id == seller_id)
            .order_by(desc(Item.created_at))
        )
        return list(db.scalars(stmt).all())

    def get_like_counts(self, db: Session, item_ids: Iterable[UUID]) -> Dict[UUID, int]:
        """Like count per item in one grouped query."""
        id_list = list(item_ids)
        if not id_list:
            return {}
        stmt = (
            select(ItemLike.item_id, func.count(ItemLike.id))
            .where(ItemLike.item_id.in_(id_list))
            .group_by(ItemLike.item_id)
        )
        return {item_id: count for item_id, count in db.execute(stmt).all()}

    def increment_views(self, db: Session, *, item_id: UUID) -> Optional[Item]:
        item = self.get(db, item_id)
        if not item:
            return None
        item.views = (item.views or 0) + 1
        try:
            db.add(item)
            db.commit()
            db.refresh(item)
        except Exception:
            db.rollback()
            raise
        return item


# Singleton instance
crud_item = CRUDItem(Item)
