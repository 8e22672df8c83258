from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlmodel import select

from orchard.enums import AccountType, PaymentStatus, RedemptionStatus, SubscriptionStatus
from orchard.models import AppleGift, AppleRedemption, Follower, Post, Subscription


def _gift(db, sender, creator, amount: int, post=None) -> AppleGift:
    gift = AppleGift(
        sender_id=sender.id,
        creator_id=creator.id,
        post_id=post.id if post else None,
        amount=amount,
        price_per_apple=Decimal("1.44"),
        total_amount=(Decimal("1.44") * amount).quantize(Decimal("0.01")),
        status=PaymentStatus.completed,
    )
    db.add(gift)
    db.commit()
    return gift


def _post(db, creator, title: str, *, is_preview: bool, file_url: str | None, minutes_ago: int = 0) -> Post:
    post = Post(
        creator_id=creator.id,
        title=title,
        file_url=file_url,
        is_preview=is_preview,
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )
    db.add(post)
    db.commit()
    db.refresh(post)
    return post


def test_redeem_rules(client, db, make_profile, auth_headers):
    fan = make_profile("fan@example.com", username="fan")
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    _gift(db, fan, creator, 150)

    r = client.post("/api/v1/apples/redeem", headers=auth_headers(creator), json={"apple_count": 99})
    assert r.status_code == 400
    assert r.json()["message"] == "Minimum redemption is 100 apples"

    r = client.post("/api/v1/apples/redeem", headers=auth_headers(creator), json={"apple_count": 151})
    assert r.status_code == 400
    assert r.json()["message"] == "You don't have enough apples to redeem"

    r = client.post("/api/v1/apples/redeem", headers=auth_headers(creator), json={"apple_count": 120})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["apple_count"] == 120
    assert data["amount"] == "120.00"
    assert data["status"] == "pending"

    redemption = db.exec(select(AppleRedemption)).one()
    assert redemption.payout_method == "stripe"

    # Only 30 apples remain, below the minimum.
    r = client.get("/api/v1/apples/summary", headers=auth_headers(creator))
    data = r.json()["data"]
    assert data["total_apples"] == 150
    assert data["redeemed_apples"] == 120
    assert data["redeemable_apples"] == 30
    r = client.post("/api/v1/apples/redeem", headers=auth_headers(creator), json={"apple_count": 100})
    assert r.status_code == 400


def test_rejected_redemption_returns_to_balance(client, db, make_profile, auth_headers):
    fan = make_profile("fan@example.com", username="fan")
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    _gift(db, fan, creator, 100)
    db.add(
        AppleRedemption(
            creator_id=creator.id, apple_count=100, amount=Decimal("100.00"), status=RedemptionStatus.rejected
        )
    )
    db.commit()

    r = client.get("/api/v1/apples/summary", headers=auth_headers(creator))
    assert r.json()["data"]["redeemable_apples"] == 100


def test_apples_creator_only(client, make_profile, auth_headers):
    fan = make_profile("fan@example.com", username="fan")
    r = client.post("/api/v1/apples/redeem", headers=auth_headers(fan), json={"apple_count": 100})
    assert r.status_code == 403
    r = client.get("/api/v1/apples/summary", headers=auth_headers(fan))
    assert r.status_code == 403
    r = client.post("/api/v1/apples/redeem", json={"apple_count": 100})
    assert r.status_code in (401, 403)


def test_preview_feed_and_explore(client, db, make_profile, auth_headers):
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    make_profile("quiet@example.com", username="quiet", account_type=AccountType.creator)
    make_profile("fan@example.com", username="fan")
    old = _post(db, creator, "Old", is_preview=True, file_url="c/1.jpg", minutes_ago=10)
    new = _post(db, creator, "New", is_preview=True, file_url="c/2.mp4", minutes_ago=1)
    _post(db, creator, "Text only", is_preview=True, file_url=None)
    _post(db, creator, "Paid", is_preview=False, file_url="c/3.mp4")

    r = client.get("/api/v1/feed/preview")
    data = r.json()["data"]
    assert data["count"] == 2
    assert [p["id"] for p in data["data"]] == [str(new.id), str(old.id)]
    assert all(p["media_url"] for p in data["data"])

    r = client.get("/api/v1/explore")
    creators = {c["creator"]["username"]: c for c in r.json()["data"]}
    assert set(creators) == {"maker", "quiet"}
    assert creators["maker"]["preview_post"]["id"] == str(new.id)
    assert creators["quiet"]["preview_post"] is None


def test_shorts_include_subscribed_exclusive_videos(client, db, make_profile, auth_headers):
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    fan = make_profile("fan@example.com", username="fan")
    public_video = _post(db, creator, "Public", is_preview=True, file_url="c/1.mp4", minutes_ago=5)
    _post(db, creator, "Public image", is_preview=True, file_url="c/2.png")
    paid_video = _post(db, creator, "Paid", is_preview=False, file_url="c/3.webm", minutes_ago=1)

    r = client.get("/api/v1/feed/shorts", headers=auth_headers(fan))
    assert [p["id"] for p in r.json()["data"]["data"]] == [str(public_video.id)]

    db.add(Subscription(subscriber_id=fan.id, creator_id=creator.id, status=SubscriptionStatus.active))
    db.commit()
    r = client.get("/api/v1/feed/shorts", headers=auth_headers(fan))
    posts = r.json()["data"]["data"]
    assert [p["id"] for p in posts] == [str(paid_video.id), str(public_video.id)]
    assert posts[0]["locked"] is False


def test_creator_page(client, db, make_profile, auth_headers):
    creator = make_profile(
        "c@example.com", username="maker", account_type=AccountType.creator, bio="I make things"
    )
    fan = make_profile("fan@example.com", username="fan")
    preview = _post(db, creator, "Free", is_preview=True, file_url="c/1.jpg")
    _post(db, creator, "Paid", is_preview=False, file_url="c/2.mp4")
    for i in range(6):
        _gift(db, fan, creator, i + 1)
    db.add(Follower(user_id=fan.id, followed_id=creator.id))
    db.add(Subscription(subscriber_id=fan.id, creator_id=creator.id, status=SubscriptionStatus.active))
    db.commit()

    r = client.get("/api/v1/creator/maker", headers=auth_headers(fan))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["bio"] == "I make things"
    assert data["subscription_price"] == "4.99"
    assert data["is_subscribed"] is True
    assert data["is_following"] is True
    assert [p["id"] for p in data["posts"]] == [str(preview.id)]
    assert data["featured_post"]["id"] == str(preview.id)
    assert data["subscriber_count"] == 1
    assert data["post_count"] == 2
    assert len(data["recent_gifts"]) == 5
    assert data["total_gifts"] == 6
    assert data["follower_count"] == 1
    assert data["following_count"] == 0
    assert data["apple_gifts_enabled"] is False
    assert data["subscribe_enabled"] is False

    r = client.get("/api/v1/creator/maker")
    data = r.json()["data"]
    assert data["is_subscribed"] is False
    assert data["is_following"] is False


def test_creator_page_not_found(client, make_profile):
    make_profile("fan@example.com", username="fan")
    for username in ("fan", "nobody"):
        r = client.get(f"/api/v1/creator/{username}")
        assert r.status_code == 404
        assert r.json()["message"] == "Creator not found"


def test_qualification_thresholds(client, db, make_profile, auth_headers):
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    for i in range(100):
        db.add(Follower(user_id=uuid.uuid4(), followed_id=creator.id))
    db.commit()

    r = client.get("/api/v1/dashboard", headers=auth_headers(creator))
    q = r.json()["data"]["qualification"]
    assert q["follower_count"] == 100
    assert q["apple_gifts_enabled"] is True
    assert q["subscribe_enabled"] is False
    assert q["followers_to_apple_gifts"] == 0
    assert q["followers_to_subscribe"] == 900


def test_dashboards(client, db, make_profile, auth_headers):
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    fan = make_profile("fan@example.com", username="fan")
    paid = _post(db, creator, "Paid", is_preview=False, file_url="c/2.mp4")
    db.add(Subscription(subscriber_id=fan.id, creator_id=creator.id, status=SubscriptionStatus.active))
    db.commit()
    _gift(db, fan, creator, 5)

    r = client.get("/api/v1/dashboard", headers=auth_headers(creator))
    data = r.json()["data"]
    assert data["account_type"] == "creator"
    assert [p["id"] for p in data["posts"]] == [str(paid.id)]
    assert data["subscribers"][0]["subscriber"]["username"] == "fan"
    assert data["apples"]["total_amount"] == "7.20"

    r = client.get("/api/v1/dashboard", headers=auth_headers(fan))
    data = r.json()["data"]
    assert data["account_type"] == "fan"
    assert data["subscriptions"][0]["creator"]["username"] == "maker"
    assert data["posts"][0]["locked"] is False
    assert data["apples"] is None


def test_cancel_subscription(client, db, make_profile, auth_headers):
    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    fan = make_profile("fan@example.com", username="fan")
    other = make_profile("other@example.com", username="other")
    sub = Subscription(subscriber_id=fan.id, creator_id=creator.id, status=SubscriptionStatus.active)
    db.add(sub)
    db.commit()
    db.refresh(sub)

    r = client.post(f"/api/v1/subscription/{sub.id}/cancel", headers=auth_headers(other))
    assert r.status_code == 404

    r = client.post(f"/api/v1/subscription/{sub.id}/cancel", headers=auth_headers(fan))
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "canceled"

    r = client.post(f"/api/v1/subscription/{sub.id}/cancel", headers=auth_headers(fan))
    assert r.status_code == 409

    r = client.get(f"/api/v1/subscription/status/{creator.id}", headers=auth_headers(fan))
    assert r.json()["data"] == {"is_subscribed": False}


def test_shorts_are_limited_and_filtered_in_query(client, db, make_profile, monkeypatch):
    from orchard.core.config import settings

    creator = make_profile("c@example.com", username="maker", account_type=AccountType.creator)
    oldest = _post(db, creator, "Oldest", is_preview=True, file_url="c/1.mp4", minutes_ago=30)
    upper = _post(db, creator, "Upper", is_preview=True, file_url="c/2.MOV", minutes_ago=20)
    _post(db, creator, "Image", is_preview=True, file_url="c/3.jpg", minutes_ago=15)
    _post(db, creator, "Not quite", is_preview=True, file_url="c/mp4.txt", minutes_ago=12)
    newest = _post(db, creator, "Newest", is_preview=True, file_url="c/4.webm", minutes_ago=10)

    r = client.get("/api/v1/feed/shorts")
    assert [p["id"] for p in r.json()["data"]["data"]] == [str(newest.id), str(upper.id), str(oldest.id)]

    monkeypatch.setattr(settings, "FEED_PAGE_SIZE", 2)
    r = client.get("/api/v1/feed/shorts")
    data = r.json()["data"]
    assert data["count"] == 2
    assert [p["id"] for p in data["data"]] == [str(newest.id), str(upper.id)]
