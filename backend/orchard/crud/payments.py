"""
订阅、苹果礼物、兑换 CRUD 操作

webhook 写入（礼物、订阅、流水）只 add 不 commit，由调用方在同一事务中提交，
保证事件去重记录与业务行一起落库或一起回滚。
"""
import uuid
from decimal import Decimal

from sqlmodel import Session, select

from orchard.api.errors import AppError
from orchard.core.config import settings
from orchard.enums import (
    SUBSCRIPTION_TRANSITIONS,
    PaymentStatus,
    RedemptionStatus,
    SubscriptionStatus,
)
from orchard.models import AppleGift, AppleRedemption, Subscription, Transaction, utc_now


def get_subscription(
    *, session: Session, subscriber_id: uuid.UUID, creator_id: uuid.UUID
) -> Subscription | None:
    statement = select(Subscription).where(
        Subscription.subscriber_id == subscriber_id,
        Subscription.creator_id == creator_id,
    )
    return session.exec(statement).first()


def _transition(subscription: Subscription, target: SubscriptionStatus) -> None:
    current = SubscriptionStatus(subscription.status)
    if (current, target) not in SUBSCRIPTION_TRANSITIONS:
        raise AppError(
            code=409201,
            message=f"Subscription is already {current.value}",
            status_code=409,
        )
    subscription.status = target
    subscription.updated_at = utc_now()


def activate_subscription(
    *,
    session: Session,
    subscriber_id: uuid.UUID,
    creator_id: uuid.UUID,
    stripe_subscription_id: str | None,
) -> Subscription:
    """
    checkout 完成后创建或重新激活订阅（不提交）

    每对 (subscriber, creator) 只保留一行，已生效的订阅只刷新 Stripe 订阅 ID。
    """
    subscription = get_subscription(
        session=session, subscriber_id=subscriber_id, creator_id=creator_id
    )
    if subscription is None:
        subscription = Subscription(
            subscriber_id=subscriber_id,
            creator_id=creator_id,
            status=SubscriptionStatus.active,
        )
    elif subscription.status != SubscriptionStatus.active:
        _transition(subscription, SubscriptionStatus.active)
    else:
        subscription.updated_at = utc_now()
    if stripe_subscription_id:
        subscription.stripe_subscription_id = stripe_subscription_id
    session.add(subscription)
    return subscription


def record_transaction(
    *,
    session: Session,
    subscriber_id: uuid.UUID,
    creator_id: uuid.UUID,
    amount: Decimal,
    currency: str,
) -> Transaction:
    """记录订阅付款流水（不提交）"""
    transaction = Transaction(
        subscriber_id=subscriber_id,
        creator_id=creator_id,
        amount=amount,
        currency=currency,
        status=PaymentStatus.completed,
        payment_method="stripe",
    )
    session.add(transaction)
    return transaction


def record_apple_gift(
    *,
    session: Session,
    sender_id: uuid.UUID,
    creator_id: uuid.UUID,
    post_id: uuid.UUID | None,
    amount: int,
    price_per_apple: Decimal,
    total_amount: Decimal,
    currency: str = "usd",
) -> AppleGift:
    """记录一笔已完成的苹果礼物（不提交）"""
    gift = AppleGift(
        sender_id=sender_id,
        creator_id=creator_id,
        post_id=post_id,
        amount=amount,
        price_per_apple=price_per_apple,
        total_amount=total_amount,
        currency=currency,
        status=PaymentStatus.completed,
    )
    session.add(gift)
    return gift


def mark_subscription_deleted(*, session: Session, stripe_subscription_id: str) -> Subscription | None:
    """
    Stripe 删除订阅后把对应行置为 canceled（不提交）

    找不到对应行或已经取消时不做任何修改。
    """
    subscription = session.exec(
        select(Subscription).where(Subscription.stripe_subscription_id == stripe_subscription_id)
    ).first()
    if subscription is None or subscription.status == SubscriptionStatus.canceled:
        return subscription
    _transition(subscription, SubscriptionStatus.canceled)
    session.add(subscription)
    return subscription


def cancel_subscription(
    *, session: Session, subscription_id: uuid.UUID, subscriber_id: uuid.UUID
) -> Subscription:
    """订阅者主动取消订阅"""
    subscription = session.get(Subscription, subscription_id)
    if subscription is None or subscription.subscriber_id != subscriber_id:
        raise AppError(code=404201, message="Subscription not found", status_code=404)
    _transition(subscription, SubscriptionStatus.canceled)
    session.add(subscription)
    session.commit()
    session.refresh(subscription)
    return subscription


def create_redemption(
    *, session: Session, creator_id: uuid.UUID, apple_count: int, redeemable: int
) -> AppleRedemption:
    """
    提交苹果兑换申请

    Args:
        session: 数据库会话
        creator_id: 创作者 ID
        apple_count: 申请兑换的苹果数量
        redeemable: 当前可兑换余额（由调用方汇总）

    Raises:
        AppError: 低于最低兑换数量或超过可兑换余额时返回 400
    """
    if apple_count < settings.MIN_REDEMPTION_APPLES:
        raise AppError(
            code=400401,
            message=f"Minimum redemption is {settings.MIN_REDEMPTION_APPLES} apples",
            status_code=400,
        )
    if apple_count > redeemable:
        raise AppError(
            code=400402,
            message="You don't have enough apples to redeem",
            status_code=400,
        )

    amount = (Decimal(apple_count) * settings.APPLE_REDEMPTION_RATE).quantize(Decimal("0.01"))
    redemption = AppleRedemption(
        creator_id=creator_id,
        apple_count=apple_count,
        amount=amount,
        currency="usd",
        status=RedemptionStatus.pending,
        payout_method="stripe",
    )
    session.add(redemption)
    session.commit()
    session.refresh(redemption)
    return redemption
