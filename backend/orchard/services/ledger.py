"""
账本汇总

粉丝数、订阅者数、作品数、苹果收入都在读取时由明细行 COUNT / SUM 得到，
没有单独维护的计数器，因此不存在计数与明细不一致的问题。
"""
import uuid
from decimal import Decimal

from sqlmodel import Session, func, select

from orchard import crud
from orchard.api.schemas import AppleSummaryData, QualificationData
from orchard.core.config import settings
from orchard.enums import PaymentStatus, RedemptionStatus, SubscriptionStatus
from orchard.models import AppleGift, AppleRedemption, Post, Subscription
from orchard.services.presenters import money, present_gifts


def active_subscriber_count(*, session: Session, creator_id: uuid.UUID) -> int:
    statement = (
        select(func.count())
        .select_from(Subscription)
        .where(
            Subscription.creator_id == creator_id,
            Subscription.status == SubscriptionStatus.active,
        )
    )
    return session.exec(statement).one()


def active_subscribers(*, session: Session, creator_id: uuid.UUID) -> list[Subscription]:
    statement = (
        select(Subscription)
        .where(
            Subscription.creator_id == creator_id,
            Subscription.status == SubscriptionStatus.active,
        )
        .order_by(Subscription.created_at.desc())  # type: ignore[attr-defined]
    )
    return list(session.exec(statement).all())


def active_subscriptions(*, session: Session, subscriber_id: uuid.UUID) -> list[Subscription]:
    statement = (
        select(Subscription)
        .where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.status == SubscriptionStatus.active,
        )
        .order_by(Subscription.created_at.desc())  # type: ignore[attr-defined]
    )
    return list(session.exec(statement).all())


def media_post_count(*, session: Session, creator_id: uuid.UUID) -> int:
    """带媒体文件的作品数"""
    statement = (
        select(func.count())
        .select_from(Post)
        .where(Post.creator_id == creator_id, Post.file_url.is_not(None))  # type: ignore[union-attr]
    )
    return session.exec(statement).one()


def completed_gifts(
    *, session: Session, creator_id: uuid.UUID, limit: int | None = None
) -> list[AppleGift]:
    statement = (
        select(AppleGift)
        .where(AppleGift.creator_id == creator_id, AppleGift.status == PaymentStatus.completed)
        .order_by(AppleGift.created_at.desc())  # type: ignore[attr-defined]
    )
    if limit is not None:
        statement = statement.limit(limit)
    return list(session.exec(statement).all())


def gift_count(*, session: Session, creator_id: uuid.UUID) -> int:
    statement = (
        select(func.count())
        .select_from(AppleGift)
        .where(AppleGift.creator_id == creator_id, AppleGift.status == PaymentStatus.completed)
    )
    return session.exec(statement).one()


def gift_totals(*, session: Session, creator_id: uuid.UUID) -> tuple[int, Decimal]:
    """累计收到的苹果数量和金额"""
    statement = select(
        func.coalesce(func.sum(AppleGift.amount), 0),
        func.coalesce(func.sum(AppleGift.total_amount), 0),
    ).where(AppleGift.creator_id == creator_id, AppleGift.status == PaymentStatus.completed)
    apples, amount = session.exec(statement).one()
    return int(apples), Decimal(str(amount))


def redeemed_apples(*, session: Session, creator_id: uuid.UUID) -> int:
    """已申请兑换的苹果（被拒绝的申请退回余额）"""
    statement = select(func.coalesce(func.sum(AppleRedemption.apple_count), 0)).where(
        AppleRedemption.creator_id == creator_id,
        AppleRedemption.status != RedemptionStatus.rejected,
    )
    return int(session.exec(statement).one())


def redeemable_apples(*, session: Session, creator_id: uuid.UUID) -> int:
    total, _ = gift_totals(session=session, creator_id=creator_id)
    return max(total - redeemed_apples(session=session, creator_id=creator_id), 0)


def apple_summary(*, session: Session, creator_id: uuid.UUID) -> AppleSummaryData:
    gifts = completed_gifts(session=session, creator_id=creator_id)
    total_apples, total_amount = gift_totals(session=session, creator_id=creator_id)
    redeemed = redeemed_apples(session=session, creator_id=creator_id)
    return AppleSummaryData(
        gifts=present_gifts(session=session, gifts=gifts),
        total_apples=total_apples,
        total_amount=money(total_amount),
        redeemed_apples=redeemed,
        redeemable_apples=max(total_apples - redeemed, 0),
    )


def qualification(*, session: Session, creator_id: uuid.UUID) -> QualificationData:
    """
    创作者功能解锁进度

    粉丝数达到 APPLE_GIFT_FOLLOWER_THRESHOLD 解锁苹果礼物，
    达到 SUBSCRIBE_FOLLOWER_THRESHOLD 解锁订阅按钮。
    """
    followers = crud.follower_count(session=session, user_id=creator_id)
    return QualificationData(
        follower_count=followers,
        apple_gifts_enabled=followers >= settings.APPLE_GIFT_FOLLOWER_THRESHOLD,
        subscribe_enabled=followers >= settings.SUBSCRIBE_FOLLOWER_THRESHOLD,
        followers_to_apple_gifts=max(settings.APPLE_GIFT_FOLLOWER_THRESHOLD - followers, 0),
        followers_to_subscribe=max(settings.SUBSCRIBE_FOLLOWER_THRESHOLD - followers, 0),
    )
