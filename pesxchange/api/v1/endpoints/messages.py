"""Direct-message endpoints: send, fetch a conversation, list active chats."""

import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from pesxchange.api.deps import get_current_active_user, get_db
from pesxchange.config import settings
from pesxchange.core.exceptions import AuthorizationError, RateLimitError
from pesxchange.core.rate_limiter import InMemoryRateLimiter, get_api_rate_limiter
from pesxchange.crud import crud_message
from pesxchange.models.user import UserProfile
from pesxchange.schemas.conversation import ConversationSummary
from pesxchange.schemas.message import MessageCreate, MessageResponse
from pesxchange.services.conversation_service import conversation_service
from pesxchange.services.live_feed import MessageFeed, get_message_feed
from pesxchange.utils.validators import normalize_message_body, parse_uuid

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Messages"],
)


def _enforce_rate_limit(limiter: InMemoryRateLimiter, identifier: str) -> None:
    if not limiter.check_and_consume(identifier):
        raise RateLimitError(retry_after=limiter.retry_after(identifier))


@router.post(
    "/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
    description="""
    Send a direct message from the authenticated user to another user.

    - `sender_id` may be omitted; it must equal the caller when given
    - The message is trimmed and cut to 1000 characters
    - Rate limited per caller
    """,
)
def send_message(
    message_in: MessageCreate,
    background_tasks: BackgroundTasks,
    current_user: UserProfile = Depends(get_current_active_user),
    db: Session = Depends(get_db),
    limiter: InMemoryRateLimiter = Depends(get_api_rate_limiter),
    feed: MessageFeed = Depends(get_message_feed),
) -> MessageResponse:
    caller_id = current_user.id
    _enforce_rate_limit(limiter, f"send_{caller_id}")

    sender_raw = message_in.sender_id if message_in.sender_id is not None else str(caller_id)
    sender_id = parse_uuid(sender_raw, "sender_id")
    receiver_id = parse_uuid(message_in.receiver_id, "receiver_id")

    if sender_id != caller_id:
        logger.warning(f"User {caller_id} tried to send as {sender_id}")
        raise AuthorizationError("Cannot send messages as another user")

    body = normalize_message_body(message_in.message, settings.MESSAGE_MAX_LENGTH)

    message = crud_message.insert_message(
        db, sender_id=sender_id, receiver_id=receiver_id, body=body
    )
    response = MessageResponse.model_validate(message)

    # Live subscribers are notified after the response is sent
    background_tasks.add_task(feed.publish_insert, response)
    return response


@router.get(
    "/messages",
    response_model=List[MessageResponse],
    status_code=status.HTTP_200_OK,
    summary="Get conversation messages",
    description="Messages between `user1` and `user2`, oldest first, at most 100. The caller must be one of them.",
)
def get_messages(
    user1: Optional[str] = Query(None, description="First participant id"),
    user2: Optional[str] = Query(None, description="Second participant id"),
    current_user: UserProfile = Depends(get_current_active_user),
    db: Session = Depends(get_db),
    limiter: InMemoryRateLimiter = Depends(get_api_rate_limiter),
) -> List[MessageResponse]:
    _enforce_rate_limit(limiter, str(current_user.id))

    user_a = parse_uuid(user1, "user1")
    user_b = parse_uuid(user2, "user2")

    if current_user.id not in (user_a, user_b):
        raise AuthorizationError("Cannot read a conversation you are not part of")

    messages = crud_message.fetch_conversation(
        db, user_a=user_a, user_b=user_b, limit=settings.MESSAGE_FETCH_LIMIT
    )
    return [MessageResponse.model_validate(m) for m in messages]


@router.get(
    "/active-chats",
    response_model=List[ConversationSummary],
    status_code=status.HTTP_200_OK,
    summary="List active conversations",
    description="""
    People the user has exchanged messages with, most recent first.

    Pass `with` to open a conversation with someone new; they are listed
    first even before any message exists. Data-layer failures return an
    empty list.
    """,
)
def get_active_chats(
    user_id: Optional[str] = Query(None, alias="userId"),
    with_user: Optional[str] = Query(None, alias="with"),
    current_user: UserProfile = Depends(get_current_active_user),
    db: Session = Depends(get_db),
) -> List[ConversationSummary]:
    target_id = parse_uuid(user_id, "userId") if user_id else current_user.id
    counterpart_id = parse_uuid(with_user, "with") if with_user else None

    if target_id != current_user.id:
        raise AuthorizationError("Cannot list another user's conversations")

    return conversation_service.list_conversations(
        db, user_id=target_id, counterpart_id=counterpart_id
    )
