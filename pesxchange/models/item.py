"""Item model for marketplace listings."""

import uuid

from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    Numeric,
    Boolean,
    JSON,
    TIMESTAMP,
    ForeignKey,
    Index,
    Uuid,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base

DEFAULT_LOCATION = "PES University, Bangalore"


class Item(Base):
    """An item listed for sale by a student."""

    __tablename__ = "items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Foreign Keys
    seller_id = Column(
        Uuid,
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    category_id = Column(
        Integer,
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Listing Content
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    condition = Column(String(20))
    location = Column(String(255), default=DEFAULT_LOCATION)
    year = Column(Integer, nullable=True)
    images = Column(JSON, default=list)  # base64 data URLs

    # Counters & status
    views = Column(Integer, default=0)
    is_available = Column(Boolean, default=True, index=True)

    # Timestamps
    created_at = Column(TIMESTAMP, server_default=func.now(), index=True)
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        # Available listings, newest first
        Index('idx_item_available_created', 'is_available', 'created_at'),
    )

    # Relationships
    seller = relationship("UserProfile", foreign_keys=[seller_id])
    category = relationship("Category")
    likes = relationship(
        "ItemLike",
        back_populates="item",
        cascade="all, delete-orphan"
    )
