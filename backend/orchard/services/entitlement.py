"""
内容可见性判断

每次请求都从订阅表重新计算，不做缓存：
订阅取消后，下一次请求立即失去非预览作品的访问权。
"""
import uuid
from collections.abc import Sequence

from sqlmodel import Session, select

from orchard.enums import SubscriptionStatus
from orchard.models import Post, Subscription


def has_active_subscription(
    *, session: Session, subscriber_id: uuid.UUID | None, creator_id: uuid.UUID
) -> bool:
    if subscriber_id is None:
        return False
    statement = select(Subscription.id).where(
        Subscription.subscriber_id == subscriber_id,
        Subscription.creator_id == creator_id,
        Subscription.status == SubscriptionStatus.active,
    )
    return session.exec(statement).first() is not None


def subscribed_creator_ids(*, session: Session, subscriber_id: uuid.UUID | None) -> set[uuid.UUID]:
    """观看者有生效订阅的全部创作者"""
    if subscriber_id is None:
        return set()
    statement = select(Subscription.creator_id).where(
        Subscription.subscriber_id == subscriber_id,
        Subscription.status == SubscriptionStatus.active,
    )
    return set(session.exec(statement).all())


def _visible(post: Post, viewer_id: uuid.UUID | None, subscribed: set[uuid.UUID]) -> bool:
    return (
        post.is_preview
        or (viewer_id is not None and viewer_id == post.creator_id)
        or post.creator_id in subscribed
    )


def can_view_post(*, session: Session, viewer_id: uuid.UUID | None, post: Post) -> bool:
    """
    观看者能否查看作品全文和媒体

    满足任一条件即可：
    - 作品是公开预览
    - 观看者就是作者
    - 观看者对作者有生效中的订阅
    """
    return post.id in visible_post_ids(session=session, viewer_id=viewer_id, posts=[post])


def visible_post_ids(
    *, session: Session, viewer_id: uuid.UUID | None, posts: Sequence[Post]
) -> set[uuid.UUID]:
    """批量版 can_view_post：订阅只查询一次"""
    if all(p.is_preview for p in posts):
        subscribed: set[uuid.UUID] = set()
    else:
        subscribed = subscribed_creator_ids(session=session, subscriber_id=viewer_id)
    return {p.id for p in posts if _visible(p, viewer_id, subscribed)}
