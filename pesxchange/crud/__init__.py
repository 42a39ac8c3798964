"""CRUD operations package - exports singleton instances for all models."""

from .base import CRUDBase
from .user import crud_user
from .category import crud_category
from .item import crud_item
from .item_like import crud_item_like
from .message import crud_message


__all__ = [
    # Base
    "CRUDBase",
    # CRUD instances
    "crud_user",
    "crud_category",
    "crud_item",
    "crud_item_like",
    "crud_message",
]
