"""Tests for the async API client."""

import asyncio
import json

import httpx
import pytest

from pesxchange.client.api_client import MarketplaceClient
from pesxchange.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    RateLimitError,
    StoreError,
    ValidationError,
)

ME = "11111111-1111-4111-8111-111111111111"
THEM = "22222222-2222-4222-8222-222222222222"

STORED = {
    "id": "44444444-4444-4444-8444-444444444444",
    "sender_id": ME,
    "receiver_id": THEM,
    "message": "hello",
    "created_at": "2025-01-01T12:00:00",
}


def make_client(handler, token="abc") -> MarketplaceClient:
    return MarketplaceClient("http://api.test/", token=token, transport=httpx.MockTransport(handler))


def test_send_message_posts_payload_with_token():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json=STORED)

    message = asyncio.run(make_client(handler).send_message(THEM, "hello", sender_id=ME))

    assert seen["path"] == "/api/v1/messages"
    assert seen["auth"] == "Bearer abc"
    assert seen["body"] == {"receiver_id": THEM, "message": "hello", "sender_id": ME}
    assert str(message.id) == STORED["id"]


def test_get_messages_and_active_chats():
    def handler(request):
        if request.url.path == "/api/v1/messages":
            assert request.url.params["user1"] == ME
            return httpx.Response(200, json=[STORED])
        assert request.url.params["with"] == THEM
        return httpx.Response(200, json=[{"id": THEM, "name": "Vikram Nair", "unread_count": 0}])

    client = make_client(handler)
    messages = asyncio.run(client.get_messages(ME, THEM))
    chats = asyncio.run(client.get_active_chats(ME, with_user=THEM))

    assert messages[0].message == "hello"
    assert chats[0].name == "Vikram Nair"


@pytest.mark.parametrize(
    "status_code,error_cls",
    [
        (400, ValidationError),
        (422, ValidationError),
        (403, AuthorizationError),
        (404, NotFoundError),
        (429, RateLimitError),
        (500, StoreError),
        (502, StoreError),
    ],
)
def test_error_statuses_map_to_exceptions(status_code, error_cls):
    def handler(request):
        return httpx.Response(status_code, json={"detail": "nope"})

    with pytest.raises(error_cls):
        asyncio.run(make_client(handler).send_message(THEM, "hello"))


def test_error_detail_preserved():
    def handler(request):
        return httpx.Response(400, json={"detail": "Message cannot be empty"})

    with pytest.raises(ValidationError) as exc:
        asyncio.run(make_client(handler).send_message(THEM, " "))
    assert exc.value.detail == "Message cannot be empty"


def test_timeout_is_store_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(StoreError) as exc:
        asyncio.run(make_client(handler).get_messages(ME, THEM))
    assert exc.value.detail == "Request timed out"


def test_login_keeps_token():
    def handler(request):
        assert "authorization" not in request.headers
        return httpx.Response(200, json={
            "user": {"id": ME, "srn": "PES2UG24CS001", "name": "Asha Rao"},
            "access_token": "new-token",
            "token_type": "bearer",
        })

    client = make_client(handler, token=None)
    asyncio.run(client.login("PES2UG24CS001", "secret"))

    assert client.token == "new-token"
