"""Message model for direct messages between students."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Text, TIMESTAMP, ForeignKey, Index, Uuid
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from ..database import Base


def _utcnow() -> datetime:
    # Microsecond precision keeps inserts ordered on backends whose now() is per-second
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Message(Base):
    """A direct message between two users."""

    __tablename__ = "messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Foreign Keys
    sender_id = Column(
        Uuid,
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    receiver_id = Column(
        Uuid,
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Message Content
    message = Column(Text, nullable=False)

    # Timestamps
    created_at = Column(TIMESTAMP, default=_utcnow, server_default=func.now(), nullable=False, index=True)

    # Constraints & Indexes
    __table_args__ = (
        # Conversation queries filter by pair and order by created_at
        Index('idx_message_pair_created', 'sender_id', 'receiver_id', 'created_at'),
    )

    # Relationships
    sender = relationship("UserProfile", foreign_keys=[sender_id])
    receiver = relationship("UserProfile", foreign_keys=[receiver_id])
