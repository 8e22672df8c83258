"""
数据库模型到响应模型的转换

作品转换集中在 present_posts：一次性批量查询作者、点赞数、点赞状态和订阅关系，
再逐条判断可见性并生成签名 URL。
"""
import uuid
from collections.abc import Sequence

from sqlmodel import Session, select

from orchard import crud
from orchard.api.schemas import (
    AppleGiftData,
    PostData,
    ProfilePublic,
    SubscriptionData,
    UserSummary,
)
from orchard.integrations import oss
from orchard.models import AppleGift, Post, Profile, Subscription
from orchard.services.entitlement import visible_post_ids


def money(value) -> str:
    """金额统一格式化为两位小数，如 "7.20" """
    return f"{value or 0:.2f}"


def user_summary(profile: Profile) -> UserSummary:
    return UserSummary(
        id=profile.id,
        username=profile.username,
        full_name=profile.full_name,
        avatar_url=oss.avatar_public_url(profile.avatar_url),
        account_type=profile.account_type,
    )


def profile_public(profile: Profile) -> ProfilePublic:
    return ProfilePublic(
        id=profile.id,
        email=profile.email,
        username=profile.username,
        full_name=profile.full_name,
        bio=profile.bio,
        avatar_url=oss.avatar_public_url(profile.avatar_url),
        account_type=profile.account_type,
        subscription_price=profile.subscription_price,
        needs_onboarding=profile.account_type is None,
        created_at=profile.created_at,
    )


def profiles_by_id(*, session: Session, ids: set[uuid.UUID]) -> dict[uuid.UUID, Profile]:
    if not ids:
        return {}
    rows = session.exec(select(Profile).where(Profile.id.in_(ids))).all()  # type: ignore[union-attr]
    return {p.id: p for p in rows}


def present_posts(
    *, session: Session, posts: Sequence[Post], viewer_id: uuid.UUID | None
) -> list[PostData]:
    """
    批量转换作品

    无权查看的作品 locked 为真，正文和媒体 URL 都不返回。
    """
    if not posts:
        return []
    post_ids = [p.id for p in posts]
    creators = profiles_by_id(session=session, ids={p.creator_id for p in posts})
    counts = crud.like_counts(session=session, post_ids=post_ids)
    liked = crud.liked_post_ids(session=session, user_id=viewer_id, post_ids=post_ids)
    visible_ids = visible_post_ids(session=session, viewer_id=viewer_id, posts=posts)

    result: list[PostData] = []
    for post in posts:
        visible = post.id in visible_ids
        creator = creators.get(post.creator_id)
        result.append(
            PostData(
                id=post.id,
                creator_id=post.creator_id,
                title=post.title,
                content=post.content if visible else None,
                is_preview=post.is_preview,
                media_type=oss.media_type_for(post.file_url),
                media_url=oss.signed_content_url(post.file_url) if visible else None,
                locked=not visible,
                like_count=counts.get(post.id, 0),
                liked=post.id in liked,
                creator=user_summary(creator) if creator else None,
                created_at=post.created_at,
            )
        )
    return result


def present_post(*, session: Session, post: Post, viewer_id: uuid.UUID | None) -> PostData:
    return present_posts(session=session, posts=[post], viewer_id=viewer_id)[0]


def present_gifts(*, session: Session, gifts: Sequence[AppleGift]) -> list[AppleGiftData]:
    senders = profiles_by_id(session=session, ids={g.sender_id for g in gifts})
    result = []
    for gift in gifts:
        sender = senders.get(gift.sender_id)
        result.append(
            AppleGiftData(
                id=gift.id,
                sender=user_summary(sender) if sender else None,
                post_id=gift.post_id,
                amount=gift.amount,
                total_amount=money(gift.total_amount),
                created_at=gift.created_at,
            )
        )
    return result


def present_subscriptions(
    *, session: Session, subscriptions: Sequence[Subscription]
) -> list[SubscriptionData]:
    ids = {s.subscriber_id for s in subscriptions} | {s.creator_id for s in subscriptions}
    people = profiles_by_id(session=session, ids=ids)
    result = []
    for sub in subscriptions:
        subscriber = people.get(sub.subscriber_id)
        creator = people.get(sub.creator_id)
        result.append(
            SubscriptionData(
                id=sub.id,
                subscriber_id=sub.subscriber_id,
                creator_id=sub.creator_id,
                status=sub.status,
                subscriber=user_summary(subscriber) if subscriber else None,
                creator=user_summary(creator) if creator else None,
                created_at=sub.created_at,
                updated_at=sub.updated_at,
            )
        )
    return result
