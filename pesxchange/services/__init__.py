"""Services package for PesXChange application."""

from .conversation_service import conversation_service, ConversationService
from .live_feed import message_feed, MessageFeed, Subscription, get_message_feed
from .pesu_auth import PesuAuthClient, get_pesu_auth_client

__all__ = [
    "conversation_service",
    "ConversationService",
    "message_feed",
    "MessageFeed",
    "Subscription",
    "get_message_feed",
    "PesuAuthClient",
    "get_pesu_auth_client",
]
