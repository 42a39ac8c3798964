"""Controller for one open conversation between the current user and a counterpart."""

import logging
from typing import Any, List, Optional, Protocol, Set

from pesxchange.client.message_cache import MessageCache, conversation_key, get_message_cache
from pesxchange.core.exceptions import AppError, StoreError
from pesxchange.schemas.message import MessageEvent, MessageResponse
from pesxchange.utils.validators import parse_uuid

logger = logging.getLogger(__name__)


class MessageClient(Protocol):
    async def get_messages(self, user1, user2) -> List[MessageResponse]: ...

    async def send_message(self, receiver_id, body: str, sender_id=None) -> MessageResponse: ...


class ConversationView:
    """
    Reconciles cached history, a fresh fetch and the live feed into one
    ordered, duplicate-free message list.

    ``client`` is usually a ``MarketplaceClient`` and ``feed`` its
    ``live_feed()``; any object with a ``subscribe(handler)`` method returning
    something with ``close()`` works as a feed.
    """

    def __init__(
        self,
        current_user_id,
        counterpart_id,
        client: MessageClient,
        feed: Any = None,
        cache: Optional[MessageCache] = None,
    ):
        # Canonical lowercase form, matching ids in fetched and live messages
        self.current_user_id = str(parse_uuid(current_user_id, "current_user_id"))
        self.counterpart_id = str(parse_uuid(counterpart_id, "counterpart_id"))
        self.client = client
        self.feed = feed
        self.cache = cache if cache is not None else get_message_cache()
        self.key = conversation_key(self.current_user_id, self.counterpart_id)

        self.messages: List[MessageResponse] = []
        self._ids: Set[str] = set()
        self.input_text = ""
        self.sending = False
        self.error: Optional[str] = None
        self.load_failed = False
        self.from_cache = False
        self._subscription = None

    @property
    def is_active(self) -> bool:
        return self._subscription is not None

    def _set_messages(self, messages: List[MessageResponse]) -> None:
        self.messages = list(messages)
        self._ids = {str(m.id) for m in self.messages}

    async def activate(self) -> List[MessageResponse]:
        """Initial load (cache, else fetch) followed by the live subscription."""
        cached = self.cache.get(self.key)
        if cached is not None:
            self._set_messages(cached)
            self.from_cache = True
        else:
            await self.load()

        if self.feed is not None and self._subscription is None:
            self._subscription = self.feed.subscribe(self.handle_event)
        return self.messages

    async def load(self) -> None:
        self.from_cache = False
        try:
            fetched = await self.client.get_messages(self.current_user_id, self.counterpart_id)
        except AppError as e:
            # Shown as an empty conversation, not an error banner
            logger.warning(f"Failed to load conversation {self.key}: {e.detail}")
            self._set_messages([])
            self.load_failed = True
            return

        self.load_failed = False
        self._set_messages(sorted(fetched, key=lambda m: m.created_at))
        self.cache.put(self.key, self.messages)

    def _belongs_here(self, message: MessageResponse) -> bool:
        pair = {str(message.sender_id), str(message.receiver_id)}
        return pair == {self.current_user_id, self.counterpart_id}

    def handle_event(self, event) -> None:
        """Live-feed callback; ignores anything outside this conversation."""
        if isinstance(event, dict):
            event = MessageEvent.model_validate(event)
        if event.type != "INSERT":
            return
        if self._belongs_here(event.record):
            self.merge(event.record)

    def merge(self, message: MessageResponse) -> bool:
        """Add ``message`` unless already present. Returns True if state changed."""
        message_id = str(message.id)
        if message_id in self._ids:
            return False

        index = len(self.messages)
        while index > 0 and self.messages[index - 1].created_at > message.created_at:
            index -= 1
        self.messages.insert(index, message)
        self._ids.add(message_id)

        self.cache.put(self.key, self.messages)
        return True

    async def send(self, text: Optional[str] = None) -> Optional[MessageResponse]:
        """Send the current input (or ``text``). Returns the stored message on success."""
        if text is not None:
            self.input_text = text
        body = self.input_text
        if not body.strip() or self.sending:
            return None

        self.sending = True
        self.error = None
        self.input_text = ""
        try:
            stored = await self.client.send_message(
                self.counterpart_id, body.strip(), sender_id=self.current_user_id
            )
        except AppError as e:
            self.input_text = body
            self.error = e.detail
            logger.info(f"Send failed in conversation {self.key}: {e.status_code}")
            return None
        except Exception:
            self.input_text = body
            self.error = StoreError.default_detail
            logger.exception(f"Unexpected send failure in conversation {self.key}")
            return None
        finally:
            self.sending = False

        self.merge(stored)
        self.cache.invalidate(self.key)
        return stored

    def deactivate(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
