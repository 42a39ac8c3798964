"""CRUD operations for Category."""

from typing import Optional

from sqlalchemy.orm import Session

from pesxchange.crud.base import CRUDBase
from pesxchange.models.category import Category

OTHERS = "Others"


class CRUDCategory(CRUDBase[Category, dict, dict]):
    """CRUD operations for Category."""

    def get_by_name(self, db: Session, name: str) -> Optional[Category]:
        return self.get_by_field(db, "name", name)

    def get_or_create(self, db: Session, *, name: Optional[str]) -> Optional[Category]:
        """Find a category by name, creating it on first use. "Others" maps to no category."""
        if not name or name == OTHERS:
            return None
        category = self.get_by_name(db, name)
        if category:
            return category
        return self.create(db, obj_in={"name": name})


# Singleton instance
crud_category = CRUDCategory(Category)
