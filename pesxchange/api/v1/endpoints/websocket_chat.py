"""WebSocket endpoint forwarding live message events to connected users."""

import asyncio
import json
import logging
from typing import Dict, Set
from uuid import UUID

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from pesxchange.api.deps import get_db, get_optional_current_user
from pesxchange.schemas.message import MessageEvent
from pesxchange.services.live_feed import MessageFeed, get_message_feed

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks open WebSocket connections per user."""

    def __init__(self):
        # Map user_id -> Set of WebSocket connections
        self.active_connections: Dict[UUID, Set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, user_id: UUID):
        await websocket.accept()
        self.active_connections.setdefault(user_id, set()).add(websocket)

    def disconnect(self, websocket: WebSocket, user_id: UUID):
        connections = self.active_connections.get(user_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            del self.active_connections[user_id]

    @property
    def connection_count(self) -> int:
        return sum(len(c) for c in self.active_connections.values())


# Global connection manager instance
manager = ConnectionManager()

router = APIRouter(
    prefix="/ws",
    tags=["WebSocket Chat"],
)


async def _forward(websocket: WebSocket, queue: "asyncio.Queue[dict]") -> None:
    try:
        while True:
            payload = await queue.get()
            await websocket.send_json(payload)
    except asyncio.CancelledError:
        raise
    except Exception:
        logger.warning("Live feed forwarding stopped", exc_info=True)



@router.websocket("/messages")
async def websocket_endpoint(
    websocket: WebSocket,
    token: str = None,
    db: Session = Depends(get_db),
    feed: MessageFeed = Depends(get_message_feed),
):
    """
    Live message feed for the authenticated user.

    Query parameters:
    - token: JWT token for authentication

    Every stored message where the user is sender or receiver is pushed as
    ``{"type": "INSERT", "record": {...}}``. Send ``{"type": "ping"}`` to get
    ``{"type": "pong"}``.
    """
    if not token:
        await websocket.close(code=1008, reason="Token required")
        return

    user = get_optional_current_user(token=token, db=db)
    if user is None:
        await websocket.close(code=1008, reason="Invalid token")
        return
    user_id = user.id

    await manager.connect(websocket, user_id)

    loop = asyncio.get_running_loop()
    queue: "asyncio.Queue[dict]" = asyncio.Queue()

    def on_event(event: MessageEvent) -> None:
        record = event.record
        if user_id not in (record.sender_id, record.receiver_id):
            return
        # Published from worker threads; hand over to this connection's loop
        loop.call_soon_threadsafe(queue.put_nowait, event.model_dump(mode="json"))

    subscription = feed.subscribe(on_event)
    forwarder = asyncio.create_task(_forward(websocket, queue))

    try:
        await websocket.send_json({
            "type": "connection",
            "message": "Connected to live messages",
            "user_id": str(user_id),
        })

        while True:
            data = await websocket.receive_text()
            try:
                message_data = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json({
                    "type": "error",
                    "message": "Invalid JSON format"
                })
                continue

            if isinstance(message_data, dict) and message_data.get("type") == "ping":
                await websocket.send_json({"type": "pong"})

    except WebSocketDisconnect:
        logger.info(f"WebSocket closed for user {user_id}")
    finally:
        subscription.close()
        forwarder.cancel()
        manager.disconnect(websocket, user_id)
