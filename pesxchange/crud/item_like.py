"""CRUD operations for ItemLike."""

from typing import Tuple
from uuid import UUID

from sqlalchemy import select, and_, func
from sqlalchemy.orm import Session

from pesxchange.crud.base import CRUDBase
from pesxchange.models.item import Item
from pesxchange.models.item_like import ItemLike


class CRUDItemLike(CRUDBase[ItemLike, dict, dict]):
    """CRUD operations for ItemLike."""

    def toggle_like(
        self,
        db: Session,
        *,
        item_id: UUID,
        user_id: UUID
    ) -> Tuple[bool, int]:
        """
        Toggle like on an item.

        Returns:
            (is_liked: bool, new_like_count: int)
        """
        item = db.get(Item, item_id)
        if not item:
            raise ValueError("Item not found")

        stmt = select(ItemLike).where(
            and_(
                ItemLike.item_id == item_id,
                ItemLike.user_id == user_id
            )
        )
        existing_like = db.scalars(stmt).first()

        try:
            if existing_like:
                # Unlike: delete the like
                db.delete(existing_like)
                is_liked = False
            else:
                # Like: create new like
                db.add(ItemLike(item_id=item_id, user_id=user_id))
                is_liked = True
            db.commit()
        except Exception:
            db.rollback()
            raise

        return is_liked, self.count_for_item(db, item_id=item_id)

    def count_for_item(self, db: Session, *, item_id: UUID) -> int:
        stmt = select(func.count(ItemLike.id)).where(ItemLike.item_id == item_id)
        return db.scalar(stmt) or 0


# Singleton instance
crud_item_like = CRUDItemLike(ItemLike)
