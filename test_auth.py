"""Tests for PESU Academy login and token handling."""

import asyncio

import httpx
import pytest

from conftest import USER_X_ID, auth_headers
from pesxchange.core.exceptions import AuthenticationError, IdentityProviderError, StoreError
from pesxchange.main import app
from pesxchange.schemas.user import IdentityProfile
from pesxchange.services.pesu_auth import PesuAuthClient, get_pesu_auth_client

PROFILE = {
    "name": "Asha Rao",
    "srn": "PES2UG24CS001",
    "prn": "PES2202400001",
    "program": "Bachelor of Technology",
    "branch": "Computer Science and Engineering",
    "semester": "Sem-3",
    "section": "Section A",
    "email": "asha@example.com",
    "phone": "9876543210",
    "campus_code": 2,
    "campus": "EC",
}


class FakePesuClient:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def authenticate(self, srn, password):
        self.calls.append((srn, password))
        if self.error:
            raise self.error
        return IdentityProfile.model_validate({**PROFILE, "srn": srn})


@pytest.fixture()
def pesu():
    fake = FakePesuClient()
    app.dependency_overrides[get_pesu_auth_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_pesu_auth_client, None)


def login(client, username="PES2UG24CS001", password="secret"):
    return client.post("/api/v1/auth/pesu", json={"username": username, "password": password})


def test_login_creates_profile_and_token(client, pesu):
    response = login(client, username="pes2ug24cs001")

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["srn"] == "PES2UG24CS001"
    assert data["user"]["name"] == "Asha Rao"
    assert data["token_type"] == "bearer"
    assert pesu.calls == [("PES2UG24CS001", "secret")]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["branch"] == "Computer Science and Engineering"


def test_second_login_reuses_profile(client, pesu):
    first = login(client).json()
    second = login(client).json()

    assert first["user"]["id"] == second["user"]["id"]


def test_missing_credentials(client, pesu):
    response = client.post("/api/v1/auth/pesu", json={"username": "PES2UG24CS001"})

    assert response.status_code == 400
    assert pesu.calls == []


def test_invalid_srn_format(client, pesu):
    response = login(client, username="12345")

    assert response.status_code == 400
    assert pesu.calls == []


def test_login_rate_limited_per_srn(client, pesu):
    for _ in range(5):
        assert login(client).status_code == 200

    assert login(client).status_code == 429
    assert login(client, username="PES2UG24CS002").status_code == 200


def test_provider_rejection_is_401(client, pesu):
    pesu.error = AuthenticationError("Invalid username or password")

    response = login(client)

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid username or password"


def test_provider_unavailable_is_503(client, pesu):
    pesu.error = IdentityProviderError()

    assert login(client).status_code == 503


def test_me_requires_token(client):
    assert client.get("/api/v1/auth/me").status_code == 401


def test_token_for_deleted_user_rejected(client, db):
    assert client.get("/api/v1/auth/me", headers=auth_headers(USER_X_ID)).status_code == 401


def _client_with(handler) -> PesuAuthClient:
    return PesuAuthClient(url="https://auth.test/authenticate", timeout=1, transport=httpx.MockTransport(handler))


def test_pesu_client_returns_profile():
    def handler(request):
        assert request.url.path == "/authenticate"
        return httpx.Response(200, json={"status": True, "profile": PROFILE})

    profile = asyncio.run(_client_with(handler).authenticate("pes2ug24cs001", "secret"))

    assert profile.srn == "PES2UG24CS001"
    assert profile.campus == "EC"


def test_pesu_client_sends_profile_flag():
    seen = {}

    def handler(request):
        seen["body"] = request.content
        return httpx.Response(200, json={"status": True, "profile": PROFILE})

    asyncio.run(_client_with(handler).authenticate("PES2UG24CS001", "secret"))

    assert b'"profile":true' in seen["body"].replace(b" ", b"")


def test_pesu_client_rejected_credentials():
    def handler(request):
        return httpx.Response(200, json={"status": False, "message": "Invalid credentials"})

    with pytest.raises(AuthenticationError) as exc:
        asyncio.run(_client_with(handler).authenticate("PES2UG24CS001", "bad"))
    assert exc.value.detail == "Invalid credentials"


def test_pesu_client_malformed_body():
    def handler(request):
        return httpx.Response(200, json={"ok": True})

    with pytest.raises(StoreError):
        asyncio.run(_client_with(handler).authenticate("PES2UG24CS001", "secret"))


def test_pesu_client_missing_profile():
    def handler(request):
        return httpx.Response(200, json={"status": True})

    with pytest.raises(StoreError):
        asyncio.run(_client_with(handler).authenticate("PES2UG24CS001", "secret"))


def test_pesu_client_upstream_error():
    def handler(request):
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(IdentityProviderError):
        asyncio.run(_client_with(handler).authenticate("PES2UG24CS001", "secret"))


def test_pesu_client_transport_failure():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(IdentityProviderError):
        asyncio.run(_client_with(handler).authenticate("PES2UG24CS001", "secret"))
