"""
页面数据聚合

首页预览流、短视频流、发现页、创作者主页、仪表盘。
所有计数都来自 ledger 的实时汇总，可见性来自 entitlement。
"""
import logging
import uuid

from sqlalchemy import func, or_
from sqlmodel import Session, select

from orchard import crud
from orchard.api.errors import AppError
from orchard.api.schemas import (
    CreatorPageData,
    DashboardData,
    ExploreCreatorData,
    PostData,
)
from orchard.core.config import settings
from orchard.enums import AccountType
from orchard.integrations import oss
from orchard.models import Post, Profile
from orchard.services import ledger
from orchard.services.entitlement import has_active_subscription, subscribed_creator_ids
from orchard.services.presenters import (
    present_gifts,
    present_post,
    present_posts,
    present_subscriptions,
    user_summary,
)

logger = logging.getLogger(__name__)

# 创作者主页展示的最近礼物条数
RECENT_GIFTS_LIMIT = 5


def _with_media():
    return Post.file_url.is_not(None)  # type: ignore[union-attr]


def _is_video():
    path = func.lower(Post.file_url)
    return or_(*(path.like(f"%.{ext}") for ext in oss.VIDEO_EXTENSIONS))


def preview_feed(*, session: Session, viewer_id: uuid.UUID | None) -> list[PostData]:
    """首页：最新的公开预览作品"""
    statement = (
        select(Post)
        .where(Post.is_preview == True, _with_media())  # noqa: E712
        .order_by(Post.created_at.desc())  # type: ignore[attr-defined]
        .limit(settings.FEED_PAGE_SIZE)
    )
    posts = session.exec(statement).all()
    return present_posts(session=session, posts=posts, viewer_id=viewer_id)


def shorts_feed(*, session: Session, viewer_id: uuid.UUID | None) -> list[PostData]:
    """
    短视频流

    公开预览视频，加上登录用户已订阅创作者的非预览视频，按发布时间倒序。
    """
    visible = Post.is_preview == True  # noqa: E712
    creator_ids = subscribed_creator_ids(session=session, subscriber_id=viewer_id)
    if creator_ids:
        visible = or_(visible, Post.creator_id.in_(creator_ids))  # type: ignore[attr-defined]
    statement = (
        select(Post)
        .where(visible, _is_video())
        .order_by(Post.created_at.desc())  # type: ignore[attr-defined]
        .limit(settings.FEED_PAGE_SIZE)
    )
    posts = session.exec(statement).all()
    return present_posts(session=session, posts=posts, viewer_id=viewer_id)


def explore(*, session: Session, viewer_id: uuid.UUID | None) -> list[ExploreCreatorData]:
    """发现页：所有创作者（最新注册在前）及各自最新一条带媒体的预览作品"""
    creators = session.exec(
        select(Profile)
        .where(Profile.account_type == AccountType.creator)
        .order_by(Profile.created_at.desc())  # type: ignore[attr-defined]
    ).all()

    result = []
    for creator in creators:
        preview = session.exec(
            select(Post)
            .where(
                Post.creator_id == creator.id,
                Post.is_preview == True,  # noqa: E712
                _with_media(),
            )
            .order_by(Post.created_at.desc())  # type: ignore[attr-defined]
            .limit(1)
        ).first()
        result.append(
            ExploreCreatorData(
                creator=user_summary(creator),
                bio=creator.bio,
                preview_post=(
                    present_post(session=session, post=preview, viewer_id=viewer_id)
                    if preview
                    else None
                ),
            )
        )
    return result


def creator_page(*, session: Session, username: str, viewer_id: uuid.UUID | None) -> CreatorPageData:
    """
    创作者主页

    Raises:
        AppError: 用户不存在或不是创作者时返回 404
    """
    creator = crud.get_creator(session=session, username=username)
    if creator is None:
        raise AppError(code=404101, message="Creator not found", status_code=404)

    previews = session.exec(
        select(Post)
        .where(Post.creator_id == creator.id, Post.is_preview == True)  # noqa: E712
        .order_by(Post.created_at.desc())  # type: ignore[attr-defined]
    ).all()
    posts = present_posts(session=session, posts=previews, viewer_id=viewer_id)
    featured = next((data for post, data in zip(previews, posts) if post.file_url), None)

    recent = ledger.completed_gifts(session=session, creator_id=creator.id, limit=RECENT_GIFTS_LIMIT)
    qualification = ledger.qualification(session=session, creator_id=creator.id)

    return CreatorPageData(
        creator=user_summary(creator),
        bio=creator.bio,
        subscription_price=creator.subscription_price or settings.DEFAULT_SUBSCRIPTION_PRICE,
        is_subscribed=has_active_subscription(
            session=session, subscriber_id=viewer_id, creator_id=creator.id
        ),
        is_following=crud.is_following(session=session, user_id=viewer_id, followed_id=creator.id),
        posts=posts,
        featured_post=featured,
        subscriber_count=ledger.active_subscriber_count(session=session, creator_id=creator.id),
        post_count=ledger.media_post_count(session=session, creator_id=creator.id),
        recent_gifts=present_gifts(session=session, gifts=recent),
        total_gifts=ledger.gift_count(session=session, creator_id=creator.id),
        follower_count=qualification.follower_count,
        following_count=crud.following_count(session=session, user_id=creator.id),
        apple_gifts_enabled=qualification.apple_gifts_enabled,
        subscribe_enabled=qualification.subscribe_enabled,
    )


def dashboard(*, session: Session, user: Profile) -> DashboardData:
    """
    仪表盘

    创作者看到自己的作品、订阅者、苹果收入和解锁进度；
    粉丝看到自己的订阅和已订阅创作者的作品。
    """
    if user.is_creator:
        own = session.exec(
            select(Post)
            .where(Post.creator_id == user.id)
            .order_by(Post.created_at.desc())  # type: ignore[attr-defined]
        ).all()
        subscribers = ledger.active_subscribers(session=session, creator_id=user.id)
        return DashboardData(
            account_type=user.account_type,
            posts=present_posts(session=session, posts=own, viewer_id=user.id),
            subscribers=present_subscriptions(session=session, subscriptions=subscribers),
            apples=ledger.apple_summary(session=session, creator_id=user.id),
            qualification=ledger.qualification(session=session, creator_id=user.id),
        )

    subscriptions = ledger.active_subscriptions(session=session, subscriber_id=user.id)
    creator_ids = [s.creator_id for s in subscriptions]
    posts: list[Post] = []
    if creator_ids:
        posts = list(
            session.exec(
                select(Post)
                .where(Post.creator_id.in_(creator_ids))  # type: ignore[attr-defined]
                .order_by(Post.created_at.desc())  # type: ignore[attr-defined]
            ).all()
        )
    logger.debug(f"Dashboard for fan {user.id}: {len(subscriptions)} subscriptions")
    return DashboardData(
        account_type=user.account_type,
        posts=present_posts(session=session, posts=posts, viewer_id=user.id),
        subscriptions=present_subscriptions(session=session, subscriptions=subscriptions),
    )
