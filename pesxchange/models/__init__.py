"""
SQLAlchemy Models for PesXChange
"""

from ..database import Base
from .user import UserProfile
from .category import Category
from .item import Item
from .item_like import ItemLike
from .message import Message

# Export all models
__all__ = [
    "Base",
    "UserProfile",
    "Category",
    "Item",
    "ItemLike",
    "Message",
]
