"""In-process live feed of message INSERT events."""

import logging
import threading
from typing import Callable, List

from pesxchange.schemas.message import MessageEvent, MessageResponse

logger = logging.getLogger(__name__)

EventHandler = Callable[[MessageEvent], None]


class Subscription:
    """Handle returned by ``MessageFeed.subscribe``; ``close()`` unsubscribes."""

    def __init__(self, feed: "MessageFeed", handler: EventHandler):
        self._feed = feed
        self.handler = handler
        self.closed = False

    def close(self) -> None:
        if not self.closed:
            self._feed._remove(self)
            self.closed = True


class MessageFeed:
    """Publish/subscribe broker for new messages.

    Handlers are called synchronously, in subscription order, on the thread
    that publishes. Subscribers filter events themselves.
    """

    def __init__(self):
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(self, handler: EventHandler) -> Subscription:
        subscription = Subscription(self, handler)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def publish(self, event: MessageEvent) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            try:
                subscription.handler(event)
            except Exception:
                # One broken subscriber must not stop delivery to the others
                logger.exception("Live feed handler failed")

    def publish_insert(self, message: MessageResponse) -> None:
        self.publish(MessageEvent(type="INSERT", record=message))

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)


# Global feed instance
message_feed = MessageFeed()


def get_message_feed() -> MessageFeed:
    return message_feed
