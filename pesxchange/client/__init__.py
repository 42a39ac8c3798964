"""Client-side messaging: API client, live feed, local cache and conversation view."""

from .api_client import MarketplaceClient
from .conversation_view import ConversationView
from .live_feed import RemoteMessageFeed, RemoteSubscription
from .message_cache import MessageCache, conversation_key, get_message_cache

__all__ = [
    "MarketplaceClient",
    "ConversationView",
    "RemoteMessageFeed",
    "RemoteSubscription",
    "MessageCache",
    "conversation_key",
    "get_message_cache",
]
