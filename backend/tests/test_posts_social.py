from __future__ import annotations

import uuid
from io import BytesIO

import pytest

from orchard.enums import AccountType, SubscriptionStatus
from orchard.models import Post, Subscription


@pytest.fixture
def fake_upload(monkeypatch) -> list[str]:
    keys: list[str] = []

    def _upload(*, key: str, data: bytes, content_type: str | None = None) -> str:
        keys.append(key)
        return key

    monkeypatch.setattr("orchard.integrations.oss.upload_object", _upload)
    return keys


def _post(db, creator, *, title="Hello", is_preview=False, file_url="x/1.mp4") -> Post:
    post = Post(creator_id=creator.id, title=title, content="body", file_url=file_url, is_preview=is_preview)
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def test_create_post_creator_only(client, make_profile, auth_headers, fake_upload):
    fan = make_profile("fan@example.com", username="fan")
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)

    files = {"file": ("clip.mp4", BytesIO(b"video"), "video/mp4")}
    r = client.post(
        "/api/v1/posts", headers=auth_headers(fan), data={"title": "Nope"}, files=files
    )
    assert r.status_code == 403
    assert fake_upload == []

    files = {"file": ("clip.mp4", BytesIO(b"video"), "video/mp4")}
    r = client.post(
        "/api/v1/posts",
        headers=auth_headers(creator),
        data={"title": "First clip", "content": "hi", "is_preview": "true"},
        files=files,
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["title"] == "First clip"
    assert data["is_preview"] is True
    assert data["media_type"] == "video"
    assert data["locked"] is False
    assert data["creator"]["username"] == "maker"
    assert len(fake_upload) == 1
    assert fake_upload[0].startswith(f"content/{creator.id}/")
    assert fake_upload[0].endswith(".mp4")


def test_create_post_requires_title(client, make_profile, auth_headers, fake_upload):
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    r = client.post(
        "/api/v1/posts",
        headers=auth_headers(creator),
        data={"title": "   "},
        files={"file": ("a.png", BytesIO(b"img"), "image/png")},
    )
    assert r.status_code == 400
    assert fake_upload == []


def test_post_visibility_follows_subscription(client, db, make_profile, auth_headers):
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    fan = make_profile("fan@example.com", username="fan")
    preview = _post(db, creator, title="Free", is_preview=True, file_url=f"{creator.id}/1.jpg")
    exclusive = _post(db, creator, title="Paid", is_preview=False, file_url=f"{creator.id}/2.mp4")

    # Preview content is visible to everyone, including anonymous viewers.
    r = client.get(f"/api/v1/posts/{preview.id}")
    data = r.json()["data"]
    assert data["locked"] is False
    assert data["media_type"] == "image"
    assert f"content/{creator.id}/1.jpg" in data["media_url"]

    # Exclusive content is locked without a subscription.
    for headers in ({}, auth_headers(fan)):
        r = client.get(f"/api/v1/posts/{exclusive.id}", headers=headers)
        data = r.json()["data"]
        assert data["locked"] is True
        assert data["media_url"] is None
        assert data["content"] is None

    # The creator always sees their own posts.
    r = client.get(f"/api/v1/posts/{exclusive.id}", headers=auth_headers(creator))
    assert r.json()["data"]["locked"] is False

    # An active subscription unlocks the post...
    sub = Subscription(subscriber_id=fan.id, creator_id=creator.id, status=SubscriptionStatus.active)
    db.add(sub)
    db.commit()
    r = client.get(f"/api/v1/posts/{exclusive.id}", headers=auth_headers(fan))
    assert r.json()["data"]["locked"] is False
    assert r.json()["data"]["media_url"]

    # ...and canceling it locks the post again on the next request.
    sub.status = SubscriptionStatus.canceled
    db.add(sub)
    db.commit()
    r = client.get(f"/api/v1/posts/{exclusive.id}", headers=auth_headers(fan))
    assert r.json()["data"]["locked"] is True


def test_get_missing_post(client):
    r = client.get(f"/api/v1/posts/{uuid.uuid4()}")
    assert r.status_code == 404
    assert r.json()["message"] == "Post not found"


def test_like_toggle_twice_restores_state(client, db, make_profile, auth_headers):
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    fan = make_profile("fan@example.com", username="fan")
    other = make_profile("other@example.com", username="other")
    post = _post(db, creator, is_preview=True)

    client.post(f"/api/v1/posts/{post.id}/like", headers=auth_headers(other))

    r = client.get(f"/api/v1/posts/{post.id}/likes", headers=auth_headers(fan))
    assert r.json()["data"] == {"liked": False, "count": 1}

    r = client.post(f"/api/v1/posts/{post.id}/like", headers=auth_headers(fan))
    assert r.json()["data"] == {"liked": True, "count": 2}

    r = client.post(f"/api/v1/posts/{post.id}/like", headers=auth_headers(fan))
    assert r.json()["data"] == {"liked": False, "count": 1}

    r = client.get(f"/api/v1/posts/{post.id}/likes")
    assert r.json()["data"] == {"liked": False, "count": 1}


def test_like_requires_login(client, db, make_profile):
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    post = _post(db, creator, is_preview=True)
    r = client.post(f"/api/v1/posts/{post.id}/like")
    assert r.status_code == 401
    assert r.json()["message"] == "You must be logged in to like a post"


def test_follow_flow(client, make_profile, auth_headers):
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    fan = make_profile("fan@example.com", username="fan")
    headers = auth_headers(fan)

    r = client.post(f"/api/v1/users/{creator.id}/follow", headers=headers)
    assert r.status_code == 200
    assert r.json()["data"] == {"following": True}

    r = client.post(f"/api/v1/users/{creator.id}/follow", headers=headers)
    assert r.status_code == 409

    r = client.get(f"/api/v1/users/{creator.id}/follow-status", headers=headers)
    assert r.json()["data"] == {"following": True}
    r = client.get(f"/api/v1/users/{creator.id}/follow-status")
    assert r.json()["data"] == {"following": False}

    r = client.get(f"/api/v1/users/{creator.id}/follow-counts")
    assert r.json()["data"] == {"followers": 1, "following": 0}
    r = client.get(f"/api/v1/users/{fan.id}/follow-counts")
    assert r.json()["data"] == {"followers": 0, "following": 1}

    r = client.get(f"/api/v1/users/{creator.id}/followers")
    body = r.json()["data"]
    assert body["count"] == 1
    assert body["data"][0]["user"]["username"] == "fan"

    r = client.get(f"/api/v1/users/{fan.id}/following")
    assert r.json()["data"]["data"][0]["user"]["username"] == "maker"

    r = client.delete(f"/api/v1/users/{creator.id}/follow", headers=headers)
    assert r.json()["data"] == {"following": False}
    # Unfollowing again is not an error.
    r = client.delete(f"/api/v1/users/{creator.id}/follow", headers=headers)
    assert r.status_code == 200

    r = client.get(f"/api/v1/users/{creator.id}/follow-counts")
    assert r.json()["data"] == {"followers": 0, "following": 0}


def test_follow_self_and_unknown(client, make_profile, auth_headers):
    fan = make_profile("fan@example.com", username="fan")
    r = client.post(f"/api/v1/users/{fan.id}/follow", headers=auth_headers(fan))
    assert r.status_code == 400

    r = client.post(f"/api/v1/users/{uuid.uuid4()}/follow", headers=auth_headers(fan))
    assert r.status_code == 404


def test_post_responses_use_entitlement_rule(client, db, make_profile, auth_headers, monkeypatch):
    from orchard.services import entitlement, presenters

    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    fan = make_profile("fan@example.com", username="fan")
    exclusive = _post(db, creator, title="Paid", is_preview=False)
    calls: list[tuple] = []

    def _spy(*, session, viewer_id, posts):
        calls.append((viewer_id, [p.id for p in posts]))
        return entitlement.visible_post_ids(session=session, viewer_id=viewer_id, posts=posts)

    monkeypatch.setattr(presenters, "visible_post_ids", _spy)

    r = client.get(f"/api/v1/posts/{exclusive.id}", headers=auth_headers(fan))
    assert r.json()["data"]["locked"] is True
    assert calls == [(fan.id, [exclusive.id])]

    # A rule change in entitlement is what the response follows.
    monkeypatch.setattr(presenters, "visible_post_ids", lambda **kw: {exclusive.id})
    r = client.get(f"/api/v1/posts/{exclusive.id}", headers=auth_headers(fan))
    assert r.json()["data"]["locked"] is False
