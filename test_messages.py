"""
Tests for the direct-message endpoints.

Tests cover:
- Sending and reading back a conversation
- Validation, authorization and rate limiting order
- Conversation ordering and the fetch cap
- Live feed notification after a send
"""

import asyncio
from datetime import datetime, timedelta

from sqlalchemy import func, select

from conftest import USER_X_ID, USER_Y_ID, USER_Z_ID, auth_headers
from pesxchange.api.v1.endpoints.websocket_chat import _forward
from pesxchange.models import Message
from pesxchange.schemas.message import MessageEvent


def count_messages(db) -> int:
    return db.scalar(select(func.count(Message.id)))


def send(client, sender, receiver, text, **extra):
    payload = {"receiver_id": str(receiver), "message": text, **extra}
    return client.post("/api/v1/messages", json=payload, headers=auth_headers(sender))


def test_send_then_fetch(client, db, user_x, user_y):
    response = send(client, USER_X_ID, USER_Y_ID, "hello")

    assert response.status_code == 201
    data = response.json()
    assert data["sender_id"] == str(USER_X_ID)
    assert data["receiver_id"] == str(USER_Y_ID)
    assert data["message"] == "hello"
    assert data["id"]
    assert data["created_at"]

    fetched = client.get(
        "/api/v1/messages",
        params={"user1": str(USER_X_ID), "user2": str(USER_Y_ID)},
        headers=auth_headers(USER_X_ID),
    )
    assert fetched.status_code == 200
    assert [m["id"] for m in fetched.json()] == [data["id"]]


def test_receiver_can_read_conversation(client, user_x, user_y):
    send(client, USER_X_ID, USER_Y_ID, "hello")

    fetched = client.get(
        "/api/v1/messages",
        params={"user1": str(USER_X_ID), "user2": str(USER_Y_ID)},
        headers=auth_headers(USER_Y_ID),
    )
    assert fetched.status_code == 200
    assert len(fetched.json()) == 1


def test_blank_message_rejected(client, db, user_x, user_y):
    response = send(client, USER_X_ID, USER_Y_ID, "   ")

    assert response.status_code == 400
    assert count_messages(db) == 0


def test_long_message_truncated(client, user_x, user_y):
    response = send(client, USER_X_ID, USER_Y_ID, "  " + "a" * 1500 + "  ")

    assert response.status_code == 201
    assert response.json()["message"] == "a" * 1000


def test_send_requires_authentication(client, user_y):
    response = client.post(
        "/api/v1/messages",
        json={"receiver_id": str(USER_Y_ID), "message": "hello"},
    )
    assert response.status_code == 401


def test_invalid_token_rejected(client, user_y):
    response = client.post(
        "/api/v1/messages",
        json={"receiver_id": str(USER_Y_ID), "message": "hello"},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert response.status_code == 401


def test_malformed_receiver_id(client, user_x):
    response = send(client, USER_X_ID, "not-a-uuid", "hello")

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid receiver_id format"


def test_cannot_send_as_someone_else(client, db, user_x, user_y, user_z):
    response = send(client, USER_X_ID, USER_Y_ID, "hello", sender_id=str(USER_Z_ID))

    assert response.status_code == 403
    assert count_messages(db) == 0


def test_forbidden_checked_before_empty_body(client, user_x, user_y, user_z):
    response = send(client, USER_X_ID, USER_Y_ID, "", sender_id=str(USER_Z_ID))

    assert response.status_code == 403


def test_unknown_receiver(client, user_x):
    response = send(client, USER_X_ID, USER_Z_ID, "hello")

    assert response.status_code == 404


def test_rate_limit_blocks_101st_send(client, db, user_x, user_y):
    for i in range(100):
        assert send(client, USER_X_ID, USER_Y_ID, f"msg {i}").status_code == 201

    response = send(client, USER_X_ID, USER_Y_ID, "one too many")

    assert response.status_code == 429
    assert "Retry-After" in response.headers
    assert count_messages(db) == 100


def test_rate_limit_precedes_validation(client, api_limiter, user_x):
    for _ in range(100):
        api_limiter.check_and_consume(f"send_{USER_X_ID}")

    response = send(client, USER_X_ID, "not-a-uuid", "   ")

    assert response.status_code == 429


def test_sends_and_reads_use_separate_counters(client, api_limiter, user_x, user_y):
    for _ in range(100):
        api_limiter.check_and_consume(str(USER_X_ID))

    assert send(client, USER_X_ID, USER_Y_ID, "still allowed").status_code == 201
    fetched = client.get(
        "/api/v1/messages",
        params={"user1": str(USER_X_ID), "user2": str(USER_Y_ID)},
        headers=auth_headers(USER_X_ID),
    )
    assert fetched.status_code == 429


def test_fetch_by_outsider_forbidden(client, user_x, user_y, user_z):
    response = client.get(
        "/api/v1/messages",
        params={"user1": str(USER_X_ID), "user2": str(USER_Y_ID)},
        headers=auth_headers(USER_Z_ID),
    )
    assert response.status_code == 403


def test_fetch_malformed_ids(client, user_x):
    response = client.get(
        "/api/v1/messages",
        params={"user1": str(USER_X_ID), "user2": "nope"},
        headers=auth_headers(USER_X_ID),
    )
    assert response.status_code == 400


def test_fetch_orders_by_creation_time(client, db, user_x, user_y):
    base = datetime(2025, 3, 1, 9, 0, 0)
    # Inserted out of order on purpose
    for text, offset in (("third", 3), ("first", 1), ("second", 2)):
        db.add(Message(
            sender_id=USER_X_ID if offset % 2 else USER_Y_ID,
            receiver_id=USER_Y_ID if offset % 2 else USER_X_ID,
            message=text,
            created_at=base + timedelta(minutes=offset),
        ))
    db.commit()

    response = client.get(
        "/api/v1/messages",
        params={"user1": str(USER_Y_ID), "user2": str(USER_X_ID)},
        headers=auth_headers(USER_X_ID),
    )

    assert [m["message"] for m in response.json()] == ["first", "second", "third"]


def test_fetch_excludes_other_conversations_and_caps(client, db, user_x, user_y, user_z):
    base = datetime(2025, 3, 1, 9, 0, 0)
    for i in range(105):
        db.add(Message(sender_id=USER_X_ID, receiver_id=USER_Y_ID, message=f"m{i}",
                       created_at=base + timedelta(seconds=i)))
    db.add(Message(sender_id=USER_X_ID, receiver_id=USER_Z_ID, message="elsewhere", created_at=base))
    db.commit()

    response = client.get(
        "/api/v1/messages",
        params={"user1": str(USER_X_ID), "user2": str(USER_Y_ID)},
        headers=auth_headers(USER_X_ID),
    )

    messages = response.json()
    assert [m["message"] for m in messages] == [f"m{i}" for i in range(5, 105)]
    assert "elsewhere" not in {m["message"] for m in messages}


def test_full_conversation_still_shows_new_message(client, db, user_x, user_y):
    base = datetime(2025, 3, 1, 9, 0, 0)
    for i in range(100):
        db.add(Message(sender_id=USER_Y_ID, receiver_id=USER_X_ID, message=f"m{i}",
                       created_at=base + timedelta(seconds=i)))
    db.commit()

    sent = send(client, USER_X_ID, USER_Y_ID, "hello").json()
    response = client.get(
        "/api/v1/messages",
        params={"user1": str(USER_X_ID), "user2": str(USER_Y_ID)},
        headers=auth_headers(USER_X_ID),
    )

    messages = response.json()
    assert len(messages) == 100
    assert messages[-1]["id"] == sent["id"]
    assert messages[0]["message"] == "m1"


def test_empty_conversation(client, user_x, user_y):
    response = client.get(
        "/api/v1/messages",
        params={"user1": str(USER_X_ID), "user2": str(USER_Y_ID)},
        headers=auth_headers(USER_X_ID),
    )
    assert response.status_code == 200
    assert response.json() == []


def test_send_publishes_to_live_feed(client, feed, user_x, user_y):
    events = []
    feed.subscribe(events.append)

    response = send(client, USER_X_ID, USER_Y_ID, "live")

    assert len(events) == 1
    assert isinstance(events[0], MessageEvent)
    assert str(events[0].record.id) == response.json()["id"]


def test_websocket_forwards_own_messages(client, user_x, user_y, user_z):
    token = auth_headers(USER_Y_ID)["Authorization"].split()[1]
    with client.websocket_connect(f"/api/v1/ws/messages?token={token}") as ws:
        assert ws.receive_json()["type"] == "connection"

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}

        send(client, USER_X_ID, USER_Z_ID, "not for y")
        send(client, USER_X_ID, USER_Y_ID, "for y")

        event = ws.receive_json()
        assert event["type"] == "INSERT"
        assert event["record"]["message"] == "for y"


def test_forwarder_logs_send_failure(caplog):
    class BrokenSocket:
        async def send_json(self, payload):
            raise RuntimeError("socket closed")

    async def run():
        queue = asyncio.Queue()
        queue.put_nowait({"type": "INSERT"})
        await _forward(BrokenSocket(), queue)

    asyncio.run(run())

    assert "Live feed forwarding stopped" in caplog.text
