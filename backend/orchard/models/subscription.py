"""
订阅模型模块

定义订阅与订阅付款流水相关的数据库模型。
"""
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlmodel import Field, SQLModel

from orchard.enums import PaymentStatus, SubscriptionStatus

from .base import new_id, utc_now


class Subscription(SQLModel, table=True):
    """
    订阅记录模型

    每对 (subscriber_id, creator_id) 只有一行，状态原地覆盖，不保留历史版本。
    由 Stripe checkout.session.completed webhook 创建或重新激活，
    由用户取消或 customer.subscription.deleted webhook 置为 canceled。

    字段说明：
    - id: 主键
    - subscriber_id: 订阅者 ID
    - creator_id: 创作者 ID
    - status: 订阅状态（active/canceled）
    - stripe_subscription_id: Stripe 订阅 ID（用于匹配删除事件）
    - created_at / updated_at: 创建 / 更新时间
    """
    __tablename__ = "subscriptions"
    __table_args__ = (
        UniqueConstraint("subscriber_id", "creator_id", name="uq_subscriptions_pair"),
    )
    id: uuid.UUID = Field(
        default_factory=new_id,
        sa_column=Column(Uuid, primary_key=True),
    )
    subscriber_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    creator_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    status: SubscriptionStatus = Field(sa_column=Column(String(16), nullable=False))
    stripe_subscription_id: str | None = Field(
        default=None, sa_column=Column(String(128), index=True, nullable=True)
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class Transaction(SQLModel, table=True):
    """
    订阅付款流水模型（只追加）

    字段说明：
    - id: 主键
    - subscriber_id / creator_id: 付款方 / 收款方
    - amount: 实付金额（Stripe amount_total / 100）
    - currency: 货币
    - status: 状态（completed）
    - payment_method: 支付渠道（stripe）
    - created_at: 创建时间
    """
    __tablename__ = "transactions"
    id: uuid.UUID = Field(
        default_factory=new_id,
        sa_column=Column(Uuid, primary_key=True),
    )
    subscriber_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    creator_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(10, 2), nullable=False),
    )
    currency: str = Field(default="usd", max_length=8)
    status: PaymentStatus = Field(sa_column=Column(String(16), nullable=False))
    payment_method: str = Field(default="stripe", max_length=32)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
