"""ItemLike model for item likes."""

from sqlalchemy import Column, Integer, TIMESTAMP, ForeignKey, UniqueConstraint, Index, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


class ItemLike(Base):
    """A like on an item."""

    __tablename__ = "item_likes"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    item_id = Column(
        Uuid,
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id = Column(
        Uuid,
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Timestamps
    created_at = Column(TIMESTAMP, server_default=func.now())

    # Constraints
    __table_args__ = (
        # One like per user per item
        UniqueConstraint('item_id', 'user_id', name='uq_item_like'),
        Index('idx_item_like_user', 'user_id', 'created_at'),
    )

    # Relationships
    item = relationship("Item", back_populates="likes")
    user = relationship("UserProfile", foreign_keys=[user_id])
