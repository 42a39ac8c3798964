"""Active-conversations aggregation for the chat sidebar."""

import logging
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pesxchange.crud import crud_message, crud_user
from pesxchange.models.message import Message
from pesxchange.models.user import UserProfile
from pesxchange.schemas.conversation import ConversationSummary

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"
PREVIEW_LENGTH = 100


def _display_name(profile: Optional[UserProfile]) -> str:
    if profile is None:
        return UNKNOWN_USER
    return profile.name or profile.srn or UNKNOWN_USER


class ConversationService:
    """Builds the list of people a user has exchanged messages with.

    Never raises for data-layer failures: the sidebar shows "no chats yet"
    instead of an error.
    """

    def list_conversations(
        self,
        db: Session,
        *,
        user_id: UUID,
        counterpart_id: Optional[UUID] = None
    ) -> List[ConversationSummary]:
        try:
            summaries = crud_message.fetch_conversation_summaries(db, user_id=user_id)
        except Exception:
            logger.warning(f"Active conversations lookup failed for {user_id}", exc_info=True)
            summaries = {}
        if not isinstance(summaries, dict):
            summaries = {}

        if counterpart_id == user_id:
            counterpart_id = None

        if not summaries and counterpart_id is None:
            return []

        lookup_ids = set(summaries)
        if counterpart_id is not None:
            lookup_ids.add(counterpart_id)

        try:
            profiles = crud_user.get_map(db, lookup_ids)
        except SQLAlchemyError:
            logger.warning(f"Profile lookup failed for conversations of {user_id}", exc_info=True)
            return []

        conversations = self._build_entries(summaries, profiles)

        # Deep link to someone the user has not messaged yet
        if counterpart_id is not None and counterpart_id not in summaries:
            conversations.insert(
                0,
                ConversationSummary(
                    id=counterpart_id,
                    name=_display_name(profiles.get(counterpart_id)),
                    unread_count=0,
                ),
            )

        return conversations

    def _build_entries(
        self,
        summaries: Dict[UUID, Message],
        profiles: Dict[UUID, UserProfile],
    ) -> List[ConversationSummary]:
        entries = []
        for other_id, last in summaries.items():
            profile = profiles.get(other_id)
            if profile is None:
                continue
            entries.append(
                ConversationSummary(
                    id=other_id,
                    name=_display_name(profile),
                    unread_count=0,  # read state is not tracked
                    last_message=last.message[:PREVIEW_LENGTH],
                    last_message_at=last.created_at,
                )
            )
        entries.sort(key=lambda c: c.last_message_at or datetime.min, reverse=True)
        return entries


# Singleton instance
conversation_service = ConversationService()
