"""Client side of the live message feed served at ``/api/v1/ws/messages``."""

import asyncio
import json
import logging
from typing import Callable, Optional
from urllib.parse import urlencode

import websockets

from pesxchange.schemas.message import MessageEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[MessageEvent], None]


def websocket_url(base_url: str, token: str) -> str:
    """``http(s)://host`` -> ``ws(s)://host/api/v1/ws/messages?token=...``"""
    base = base_url.rstrip("/")
    if base.startswith("https://"):
        base = "wss://" + base[len("https://"):]
    elif base.startswith("http://"):
        base = "ws://" + base[len("http://"):]
    return f"{base}/api/v1/ws/messages?{urlencode({'token': token})}"


class RemoteSubscription:
    """One open WebSocket connection feeding a handler; ``close()`` disconnects."""

    def __init__(self, feed: "RemoteMessageFeed", handler: EventHandler):
        self._feed = feed
        self.handler = handler
        self.closed = False
        self._task: Optional[asyncio.Task] = None

    def start(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def _run(self) -> None:
        try:
            async with self._feed.connect(self._feed.url) as connection:
                async for frame in connection:
                    self.dispatch(frame)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning("Live feed connection lost", exc_info=True)

    def dispatch(self, frame) -> None:
        """Pass INSERT frames to the handler; other frame types are ignored."""
        try:
            data = json.loads(frame)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed live feed frame")
            return
        if not isinstance(data, dict) or data.get("type") != "INSERT":
            return
        try:
            event = MessageEvent.model_validate(data)
        except ValueError:
            logger.warning("Ignoring malformed live feed event")
            return
        self.handler(event)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._task is not None:
            self._task.cancel()


class RemoteMessageFeed:
    """
    Live INSERT events from a PesXChange server.

    ``subscribe`` must be called from a running event loop; each
    subscription holds its own connection. ``connect`` defaults to
    ``websockets.connect`` and can be replaced in tests.
    """

    def __init__(self, base_url: str, token: str, connect=None):
        self.url = websocket_url(base_url, token)
        self.connect = connect or websockets.connect

    def subscribe(self, handler: EventHandler) -> RemoteSubscription:
        subscription = RemoteSubscription(self, handler)
        subscription.start()
        return subscription
