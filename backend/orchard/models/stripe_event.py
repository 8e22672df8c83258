"""
Stripe 事件模型模块

定义 Stripe webhook 事件相关的数据库模型。
"""
import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String, Uuid
from sqlmodel import Field, SQLModel

from .base import new_id, utc_now


class StripeEvent(SQLModel, table=True):
    """
    Stripe Webhook 事件记录模型

    存储已处理的 webhook 事件，用于去重和审计。
    Stripe 重投同一事件时 event_id 不变，通过唯一约束防止重复写入礼物/订阅。

    字段说明：
    - id: 主键
    - event_id: Stripe 事件 ID（evt_...，唯一）
    - event_type: 事件类型（如 "checkout.session.completed"）
    - payload: 事件完整数据（JSON 格式）
    - created_at: 接收时间
    """
    __tablename__ = "stripe_events"

    id: uuid.UUID = Field(
        default_factory=new_id,
        sa_column=Column(Uuid, primary_key=True),
    )
    event_id: str = Field(sa_column=Column(String(255), unique=True, index=True, nullable=False))
    event_type: str = Field(max_length=64)
    payload: dict | None = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
