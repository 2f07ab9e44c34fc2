import time
import uuid

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session

from app.core.config import get_settings
from app.database import engine
from app.main import app
from app.models.user import User

API = "/api/v1"

settings = get_settings()


def _token(sub: str, email: str | None, expires_in: int = 3600) -> str:
    claims = {"sub": sub, "exp": int(time.time()) + expires_in, "aud": "authenticated"}
    if email is not None:
        claims["email"] = email
    return jwt.encode(claims, settings.SUPABASE_JWT_SECRET, algorithm=settings.SUPABASE_JWT_ALG)


@pytest.fixture
def raw_client() -> TestClient:
    return TestClient(app)


def test_first_request_provisions_profile(raw_client):
    sub = str(uuid.uuid4())

    resp = raw_client.get(
        f"{API}/users/me",
        headers={"Authorization": f"Bearer {_token(sub, 'neha.k@example.com')}"},
    )

    assert resp.status_code == 200
    assert resp.json()["name"] == "neha.k"
    assert resp.json()["role"] == "user"
    with Session(engine) as s:
        assert s.get(User, uuid.UUID(sub)).email == "neha.k@example.com"


def test_existing_profile_is_reused(raw_client, admin):
    resp = raw_client.get(
        f"{API}/users/me",
        headers={"Authorization": f"Bearer {_token(str(admin.id), admin.email)}"},
    )
    assert resp.json()["role"] == "admin"


def test_expired_token_is_rejected(raw_client):
    token = _token(str(uuid.uuid4()), "a@example.com", expires_in=-60)
    resp = raw_client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_token_without_email_is_rejected(raw_client):
    token = _token(str(uuid.uuid4()), None)
    resp = raw_client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_bad_signature_is_rejected(raw_client):
    token = jwt.encode({"sub": str(uuid.uuid4()), "email": "a@example.com"}, "wrong", algorithm="HS256")
    resp = raw_client.get(f"{API}/users/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_health_check(raw_client):
    assert raw_client.get("/").json() == {"status": "ok", "service": "techstore-backend"}
