"""Short-lived local cache of conversations."""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, TypeVar

from pesxchange.config import settings

T = TypeVar("T")


def conversation_key(user_a, user_b) -> str:
    """Order-independent key for the conversation between two users."""
    first, second = sorted((str(user_a), str(user_b)))
    return f"{first}_{second}"


@dataclass
class CacheEntry(Generic[T]):
    messages: List[T]
    stored_at: float


class MessageCache(Generic[T]):
    """
    Bounded TTL cache of message lists keyed by conversation.

    Entries expire ``ttl`` seconds after they were written. When a new key is
    written and the cache is full, the entry written longest ago is evicted.
    Lists are copied on the way in and out so callers never share state.
    """

    def __init__(
        self,
        ttl: float = 120.0,
        max_entries: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry[T]]" = OrderedDict()
        self._lock = threading.Lock()

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at >= self.ttl

    def get(self, key: str) -> Optional[List[T]]:
        """Cached messages for ``key``, or None when absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                return None
            return list(entry.messages)

    def put(self, key: str, messages: List[T]) -> None:
        with self._lock:
            now = self._clock()
            for stale in [k for k, e in self._entries.items() if self._expired(e, now)]:
                del self._entries[stale]

            if key in self._entries:
                # Rewriting a key moves it to the back of the eviction order
                del self._entries[key]
            else:
                while len(self._entries) >= self.max_entries:
                    self._entries.popitem(last=False)

            self._entries[key] = CacheEntry(messages=list(messages), stored_at=now)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None


_message_cache: Optional[MessageCache] = None


def get_message_cache() -> MessageCache:
    global _message_cache
    if _message_cache is None:
        _message_cache = MessageCache(
            ttl=settings.MESSAGE_CACHE_TTL_SECONDS,
            max_entries=settings.MESSAGE_CACHE_MAX_ENTRIES,
        )
    return _message_cache
