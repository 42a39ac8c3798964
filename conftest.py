"""
Pytest configuration and shared fixtures.

Settings are read at import time, so the test environment is set up here
before anything from pesxchange is imported.
"""

import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pesxchange.core.rate_limiter import (
    InMemoryRateLimiter,
    get_api_rate_limiter,
    get_auth_rate_limiter,
    get_profile_stats_rate_limiter,
    get_profile_update_rate_limiter,
)
from pesxchange.core.security import create_access_token
from pesxchange.database import Base, get_db
from pesxchange.main import app
from pesxchange.models import UserProfile
from pesxchange.services.live_feed import MessageFeed, get_message_feed


USER_X_ID = uuid.UUID("11111111-1111-4111-8111-111111111111")
USER_Y_ID = uuid.UUID("22222222-2222-4222-8222-222222222222")
USER_Z_ID = uuid.UUID("33333333-3333-4333-8333-333333333333")

# One shared in-memory database; endpoints run on worker threads
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def auth_headers(user_id) -> dict:
    token = create_access_token(data={"sub": str(user_id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def db():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def api_limiter():
    return InMemoryRateLimiter(max_requests=100, window_seconds=3600)


@pytest.fixture()
def auth_limiter():
    return InMemoryRateLimiter(max_requests=5, window_seconds=900)


@pytest.fixture()
def profile_update_limiter():
    return InMemoryRateLimiter(max_requests=10, window_seconds=60)


@pytest.fixture()
def profile_stats_limiter():
    return InMemoryRateLimiter(max_requests=30, window_seconds=120)


@pytest.fixture()
def feed():
    return MessageFeed()


@pytest.fixture()
def client(db, api_limiter, auth_limiter, profile_update_limiter, profile_stats_limiter, feed):
    """Test client bound to the test database with fresh limiters and feed."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_api_rate_limiter] = lambda: api_limiter
    app.dependency_overrides[get_auth_rate_limiter] = lambda: auth_limiter
    app.dependency_overrides[get_profile_update_rate_limiter] = lambda: profile_update_limiter
    app.dependency_overrides[get_profile_stats_rate_limiter] = lambda: profile_stats_limiter
    app.dependency_overrides[get_message_feed] = lambda: feed

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _make_user(db, user_id, srn, name) -> UserProfile:
    user = UserProfile(id=user_id, srn=srn, name=name, email=f"{srn.lower()}@pesu.pes.edu")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def user_x(db):
    return _make_user(db, USER_X_ID, "PES2UG24CS001", "Asha Rao")


@pytest.fixture()
def user_y(db):
    return _make_user(db, USER_Y_ID, "PES2UG24CS002", "Vikram Nair")


@pytest.fixture()
def user_z(db):
    return _make_user(db, USER_Z_ID, "PES2UG24CS003", "Meera Iyer")
