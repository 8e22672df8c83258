"""
用户资料模型模块

定义用户（粉丝/创作者）相关的数据库模型。
"""
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, DateTime, Numeric, String, Uuid
from sqlmodel import Field, SQLModel

from orchard.enums import AccountType

from .base import new_id, utc_now


class Profile(SQLModel, table=True):
    """
    用户资料模型

    注册时创建，account_type 在首次引导（onboarding）时设置一次，
    之后只能通过设置页修改。

    字段说明：
    - id: 主键（UUID）
    - email: 登录邮箱（唯一）
    - hashed_password: 密码哈希
    - username: 用户名（唯一，创作者主页路径 /creator/{username}）
    - full_name: 显示名称
    - bio: 个人简介
    - avatar_url: 头像在对象存储中的路径
    - account_type: 账号类型（fan/creator），未完成引导时为空
    - subscription_price: 月订阅价格（仅创作者）
    - stripe_customer_id: Stripe 客户 ID（首次结账时创建）
    - created_at / updated_at: 创建 / 更新时间
    """
    __tablename__ = "profiles"
    id: uuid.UUID = Field(
        default_factory=new_id,
        sa_column=Column(Uuid, primary_key=True),
    )
    email: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False)
    )
    hashed_password: str = Field(max_length=255)

    username: str | None = Field(
        default=None,
        sa_column=Column(String(64), unique=True, index=True, nullable=True),
    )
    full_name: str | None = Field(default=None, max_length=128)
    bio: str | None = Field(default=None, max_length=1024)
    avatar_url: str | None = Field(default=None, max_length=512)

    account_type: AccountType | None = Field(
        default=None, sa_column=Column(String(16), nullable=True, index=True)
    )
    subscription_price: Decimal | None = Field(
        default=None, sa_column=Column(Numeric(10, 2), nullable=True)
    )
    stripe_customer_id: str | None = Field(default=None, max_length=128)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    @property
    def is_creator(self) -> bool:
        return self.account_type == AccountType.creator
