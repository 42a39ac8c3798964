"""API v1 router aggregator."""

from fastapi import APIRouter

from pesxchange.api.v1.endpoints import auth, items, messages, profile, users, websocket_chat

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router)
api_router.include_router(profile.router)
api_router.include_router(users.router)
api_router.include_router(items.router)
api_router.include_router(messages.router)
api_router.include_router(websocket_chat.router)

__all__ = ["api_router"]
