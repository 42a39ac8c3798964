"""Async HTTP client for the PesXChange REST API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from pesxchange.config import settings
from pesxchange.client.live_feed import RemoteMessageFeed
from pesxchange.core.exceptions import AuthenticationError, StoreError, error_for_status
from pesxchange.schemas.conversation import ConversationSummary
from pesxchange.schemas.message import MessageResponse

logger = logging.getLogger(__name__)


class MarketplaceClient:
    """Talks to ``/api/v1`` on behalf of one signed-in user.

    Error responses are raised as the matching ``AppError`` subclass, so a
    429 from the server surfaces as ``RateLimitError`` and so on. Timeouts
    and connection failures are raised as ``StoreError``.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout if timeout is not None else settings.OUTBOUND_TIMEOUT_SECONDS
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}/api/v1{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"{method} {path} timed out")
            raise StoreError("Request timed out") from e
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise StoreError("Network error") from e

        if resp.is_success:
            return resp.json()

        detail = None
        try:
            detail = resp.json().get("detail")
        except ValueError:
            pass
        if not isinstance(detail, str):
            detail = None
        raise error_for_status(resp.status_code, detail)

    async def send_message(self, receiver_id, body: str, sender_id=None) -> MessageResponse:
        payload = {"receiver_id": str(receiver_id), "message": body}
        if sender_id is not None:
            payload["sender_id"] = str(sender_id)
        data = await self._request("POST", "/messages", json=payload)
        return MessageResponse.model_validate(data)

    async def get_messages(self, user1, user2) -> List[MessageResponse]:
        data = await self._request("GET", "/messages", params={"user1": str(user1), "user2": str(user2)})
        return [MessageResponse.model_validate(item) for item in data]

    async def get_active_chats(self, user_id, with_user=None) -> List[ConversationSummary]:
        params = {"userId": str(user_id)}
        if with_user is not None:
            params["with"] = str(with_user)
        data = await self._request("GET", "/active-chats", params=params)
        return [ConversationSummary.model_validate(item) for item in data]

    async def login(self, srn: str, password: str) -> Dict[str, Any]:
        """Sign in and keep the returned token for later calls."""
        data = await self._request("POST", "/auth/pesu", json={"username": srn, "password": password})
        self.token = data.get("access_token")
        return data

    def live_feed(self) -> RemoteMessageFeed:
        """Live message feed for the signed-in user, for use with ``ConversationView``."""
        if not self.token:
            raise AuthenticationError("Sign in before opening the live feed")
        return RemoteMessageFeed(self.base_url, self.token)
