"""
苹果礼物模型模块

定义苹果礼物（打赏）和苹果兑换申请的数据库模型。
"""
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Uuid
from sqlmodel import Field, SQLModel

from orchard.enums import PaymentStatus, RedemptionStatus

from .base import new_id, utc_now


class AppleGift(SQLModel, table=True):
    """
    苹果礼物模型（只追加）

    只由 webhook 在 checkout 完成后写入，价格字段直接取自结账时写入的 metadata。

    字段说明：
    - id: 主键
    - sender_id: 赠送者 ID
    - creator_id: 接收的创作者 ID
    - post_id: 关联作品 ID（在创作者主页赠送时为空）
    - amount: 苹果数量
    - price_per_apple: 单价
    - total_amount: 总金额
    - currency: 货币
    - status: 状态（completed）
    - created_at: 创建时间
    """
    __tablename__ = "apple_gifts"
    id: uuid.UUID = Field(
        default_factory=new_id,
        sa_column=Column(Uuid, primary_key=True),
    )
    sender_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    creator_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    post_id: uuid.UUID | None = Field(
        default=None,
        sa_column=Column(
            Uuid, ForeignKey("posts.id", ondelete="SET NULL"), index=True, nullable=True
        ),
    )
    amount: int = Field(default=0)
    price_per_apple: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(10, 2), nullable=False),
    )
    total_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
    )
    currency: str = Field(default="usd", max_length=8)
    status: PaymentStatus = Field(sa_column=Column(String(16), nullable=False, index=True))

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class AppleRedemption(SQLModel, table=True):
    """
    苹果兑换申请模型

    创作者提交兑换后只生成一条 pending 记录，打款不在系统内自动完成。

    字段说明：
    - id: 主键
    - creator_id: 创作者 ID
    - apple_count: 兑换的苹果数量
    - amount: 兑换金额（apple_count * 兑换比例）
    - currency: 货币
    - status: 状态（pending/paid/rejected）
    - payout_method: 打款方式（stripe）
    - created_at: 创建时间
    """
    __tablename__ = "apple_redemptions"
    id: uuid.UUID = Field(
        default_factory=new_id,
        sa_column=Column(Uuid, primary_key=True),
    )
    creator_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    apple_count: int
    amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False),
    )
    currency: str = Field(default="usd", max_length=8)
    status: RedemptionStatus = Field(sa_column=Column(String(16), nullable=False))
    payout_method: str = Field(default="stripe", max_length=32)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
