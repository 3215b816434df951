import os

# Keep the app's own engine off disk; tests use test_engine below
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from datetime import datetime  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi import Depends, HTTPException  # noqa: E402
from fastapi.security import HTTPAuthorizationCredentials  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from spearo.auth import bearer_scheme, get_token_claims  # noqa: E402
from spearo.database import get_session  # noqa: E402
from spearo.main import app  # noqa: E402
from spearo.models.dive_session import DiveSession  # noqa: E402
from spearo.models.user import User  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. Tables dropped and recreated per test so every test starts empty
# 4. Bearer tokens resolve through TEST_IDENTITIES, never the identity provider
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TEST_IDENTITIES = {
    "token-a": {"sub": "auth0|diver1", "email": "diver1@example.com", "nickname": "diver1"},
    "token-b": {"sub": "auth0|diver2", "email": "diver2@example.com", "nickname": "diver2"},
    "token-c": {"sub": "auth0|reefhunter", "email": "Reef.Hunter@Example.com", "nickname": None},
}


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


def override_get_token_claims(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)):
    """Map known test tokens to claims; anything else is rejected"""
    if credentials is None or credentials.credentials not in TEST_IDENTITIES:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return TEST_IDENTITIES[credentials.credentials]


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on freshly created tables"""
    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session and token verification

    Overrides MUST be set BEFORE TestClient() and stay in place for the
    entire duration so the app never uses its own engine or the provider.
    """
    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_token_claims] = override_get_token_claims

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session: Session):
    """Factory for users inserted directly into the store"""

    def _make(username: str, email: Optional[str] = None) -> User:
        user = User(auth0_id=f"auth0|{username}", username=username, email=email or f"{username}@example.com")
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_dive(session: Session):
    """Factory for sessions inserted directly into the store"""

    def _make(owner: User, date: datetime, **fields) -> DiveSession:
        dive = DiveSession(user_id=owner.id, date=date, **fields)
        session.add(dive)
        session.commit()
        session.refresh(dive)
        return dive

    return _make
