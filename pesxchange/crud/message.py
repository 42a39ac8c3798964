"""CRUD operations for Message.

This is the only layer that reads or writes message rows. Write failures are
raised as ``StoreError``; the aggregated sidebar reads degrade to empty results.
"""

import logging
from typing import Any, Dict, List, Set
from uuid import UUID

from sqlalchemy import select, and_, or_, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pesxchange.config import settings
from pesxchange.core.exceptions import NotFoundError, StoreError
from pesxchange.crud.base import CRUDBase
from pesxchange.models.message import Message
from pesxchange.models.user import UserProfile
from pesxchange.schemas.message import MessageCreate
from pesxchange.utils.validators import normalize_message_body, parse_uuid

logger = logging.getLogger(__name__)


class CRUDMessage(CRUDBase[Message, MessageCreate, dict]):
    """CRUD operations for Message."""

    def insert_message(
        self,
        db: Session,
        *,
        sender_id: Any,
        receiver_id: Any,
        body: str
    ) -> Message:
        """Store a new message and return it with its id and timestamp.

        Raises:
            ValidationError: malformed ids or an empty body
            NotFoundError: receiver is not a known user
            StoreError: the insert failed
        """
        sender_uuid = parse_uuid(sender_id, "sender_id")
        receiver_uuid = parse_uuid(receiver_id, "receiver_id")
        text = normalize_message_body(body, settings.MESSAGE_MAX_LENGTH)

        try:
            receiver = db.get(UserProfile, receiver_uuid)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to look up receiver {receiver_uuid}")
            raise StoreError("Failed to send message") from e
        if receiver is None:
            raise NotFoundError("Receiver not found")

        message = Message(
            sender_id=sender_uuid,
            receiver_id=receiver_uuid,
            message=text
        )
        try:
            db.add(message)
            db.commit()
            db.refresh(message)
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to insert message {sender_uuid} -> {receiver_uuid}")
            raise StoreError("Failed to send message") from e

        logger.info(f"Message {message.id} stored: {sender_uuid} -> {receiver_uuid}")
        return message

    def fetch_conversation(
        self,
        db: Session,
        *,
        user_a: Any,
        user_b: Any,
        limit: int = 100
    ) -> List[Message]:
        """The newest ``limit`` messages exchanged between two users, returned oldest first."""
        a = parse_uuid(user_a, "user1")
        b = parse_uuid(user_b, "user2")
        stmt = (
            select(Message)
            .where(
                or_(
                    and_(Message.sender_id == a, Message.receiver_id == b),
                    and_(Message.sender_id == b, Message.receiver_id == a),
                )
            )
            .order_by(desc(Message.created_at))
            .limit(limit)
        )
        try:
            newest_first = list(db.scalars(stmt).all())
        except SQLAlchemyError as e:
            logger.exception(f"Failed to fetch conversation {a} <-> {b}")
            raise StoreError("Failed to fetch messages") from e
        # Oldest first for chat UI
        newest_first.reverse()
        return newest_first

    def fetch_conversation_summaries(
        self,
        db: Session,
        *,
        user_id: Any,
        limit: int = 200
    ) -> Dict[UUID, Message]:
        """Latest message per counterpart, taken from the user's ``limit`` most recent messages."""
        uid = parse_uuid(user_id, "userId")
        stmt = (
            select(Message)
            .where(or_(Message.sender_id == uid, Message.receiver_id == uid))
            .order_by(desc(Message.created_at))
            .limit(limit)
        )
        try:
            messages = db.scalars(stmt).all()
        except SQLAlchemyError:
            logger.warning(f"Failed to fetch conversation summaries for {uid}", exc_info=True)
            return {}

        summaries: Dict[UUID, Message] = {}
        for msg in messages:
            other_id = msg.receiver_id if msg.sender_id == uid else msg.sender_id
            # Newest first, so the first message seen per counterpart is the latest
            summaries.setdefault(other_id, msg)
        return summaries

    def fetch_active_counterparts(self, db: Session, *, user_id: Any) -> Set[UUID]:
        """Distinct ids of everyone the user has exchanged messages with."""
        return set(self.fetch_conversation_summaries(db, user_id=user_id))


# Create instance
crud_message = CRUDMessage(Message)
