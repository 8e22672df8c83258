from __future__ import annotations

import time
import uuid
from decimal import Decimal
from io import BytesIO

import jwt

from orchard.core.config import settings
from orchard.enums import AccountType


def _signup(client, email: str = "fan@example.com", username: str | None = None) -> dict:
    body = {"email": email, "password": "password123"}
    if username:
        body["username"] = username
    r = client.post("/api/v1/auth/signup", json=body)
    assert r.status_code == 200
    data = r.json()
    assert data["code"] == 0
    return data["data"]


def test_signup_login_and_profile(client):
    data = _signup(client, email="Alice@Example.com", username="alice")
    assert data["user"]["email"] == "alice@example.com"
    assert data["user"]["needs_onboarding"] is True
    assert data["expires_in"] == settings.ACCESS_TOKEN_EXPIRE_DAYS * 24 * 3600

    r = client.post(
        "/api/v1/auth/login", json={"email": "alice@example.com", "password": "password123"}
    )
    assert r.status_code == 200
    token = r.json()["data"]["access_token"]

    r = client.get("/api/v1/user/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    body = r.json()
    assert body["code"] == 0
    assert body["data"]["id"] == data["user"]["id"]
    assert body["data"]["username"] == "alice"
    assert body["data"]["account_type"] is None


def test_signup_duplicates_rejected(client):
    _signup(client, email="dup@example.com", username="dup")

    r = client.post("/api/v1/auth/signup", json={"email": "DUP@example.com", "password": "password123"})
    assert r.status_code == 409
    assert r.json()["message"] == "Email already registered"

    r = client.post(
        "/api/v1/auth/signup",
        json={"email": "other@example.com", "password": "password123", "username": "dup"},
    )
    assert r.status_code == 409
    assert r.json()["message"] == "Username already taken"


def test_login_wrong_password(client):
    _signup(client, email="bob@example.com")
    r = client.post("/api/v1/auth/login", json={"email": "bob@example.com", "password": "nope-nope"})
    assert r.status_code == 401
    assert r.json()["code"] == 401002

    r = client.post("/api/v1/auth/login", json={"email": "ghost@example.com", "password": "password123"})
    assert r.status_code == 401


def test_account_type_set_once(client):
    token = _signup(client, email="onboard@example.com")["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    r = client.post("/api/v1/user/account-type", headers=headers, json={"account_type": "creator"})
    assert r.status_code == 200
    assert r.json()["data"]["account_type"] == "creator"
    assert r.json()["data"]["needs_onboarding"] is False

    r = client.post("/api/v1/user/account-type", headers=headers, json={"account_type": "fan"})
    assert r.status_code == 409
    assert r.json()["message"] == "Account type already set"


def test_update_profile_subscription_price_only_for_creators(client, make_profile, auth_headers):
    fan = make_profile("fan@example.com", username="fan")
    creator = make_profile("creator@example.com", username="maker", account_type=AccountType.creator)

    r = client.put(
        "/api/v1/user/profile",
        headers=auth_headers(fan),
        json={"full_name": "Fan Person", "subscription_price": "9.99"},
    )
    assert r.status_code == 200
    assert r.json()["data"]["full_name"] == "Fan Person"
    assert r.json()["data"]["subscription_price"] is None

    r = client.put(
        "/api/v1/user/profile",
        headers=auth_headers(creator),
        json={"subscription_price": "9.99", "bio": "  "},
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["subscription_price"] == "9.99"
    assert data["bio"] is None

    # Fields missing from the request keep their values.
    r = client.put("/api/v1/user/profile", headers=auth_headers(creator), json={"full_name": "Maker"})
    data = r.json()["data"]
    assert data["full_name"] == "Maker"
    assert data["subscription_price"] == "9.99"
    assert data["username"] == "maker"


def test_switching_to_fan_clears_price(client, make_profile, auth_headers):
    creator = make_profile(
        "switch@example.com",
        username="switch",
        account_type=AccountType.creator,
        subscription_price=Decimal("7.00"),
    )
    r = client.put("/api/v1/user/profile", headers=auth_headers(creator), json={"account_type": "fan"})
    assert r.status_code == 200
    assert r.json()["data"]["account_type"] == "fan"
    assert r.json()["data"]["subscription_price"] is None


def test_update_profile_username_conflict(client, make_profile, auth_headers):
    make_profile("taken@example.com", username="taken")
    other = make_profile("other@example.com", username="other")
    r = client.put("/api/v1/user/profile", headers=auth_headers(other), json={"username": "taken"})
    assert r.status_code == 409


def test_upload_avatar(client, make_profile, auth_headers, monkeypatch):
    uploads: list[tuple[str, bytes, str | None]] = []

    def _fake_upload(*, key: str, data: bytes, content_type: str | None = None) -> str:
        uploads.append((key, data, content_type))
        return key

    monkeypatch.setattr("orchard.integrations.oss.upload_object", _fake_upload)
    profile = make_profile("avatar@example.com", username="avatar")

    r = client.post(
        "/api/v1/user/avatar",
        headers=auth_headers(profile),
        files={"file": ("me.PNG", BytesIO(b"png-bytes"), "image/png")},
    )
    assert r.status_code == 200
    assert uploads == [(f"avatars/{profile.id}/avatar.png", b"png-bytes", "image/png")]
    assert r.json()["data"]["avatar_url"].endswith(f"avatars/{profile.id}/avatar.png")


def test_invalid_tokens_rejected(client):
    r = client.get("/api/v1/user/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401

    # sub is not a UUID
    token = jwt.encode({"sub": "abc", "exp": int(time.time()) + 60}, settings.SECRET_KEY, algorithm="HS256")
    r = client.get("/api/v1/user/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401

    # missing sub
    token = jwt.encode({"exp": int(time.time()) + 60}, settings.SECRET_KEY, algorithm="HS256")
    r = client.get("/api/v1/user/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401

    # user doesn't exist
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "exp": int(time.time()) + 60}, settings.SECRET_KEY, algorithm="HS256"
    )
    r = client.get("/api/v1/user/profile", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401

    # no token at all: rejected by HTTPBearer (401 or 403 depending on FastAPI version)
    r = client.get("/api/v1/user/profile")
    assert r.status_code in (401, 403)
