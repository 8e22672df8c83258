"""
作品模型模块

定义创作者发布的作品（图片/视频）数据库模型。
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlmodel import Field, SQLModel

from .base import new_id, utc_now


class Post(SQLModel, table=True):
    """
    作品模型

    可见性规则：is_preview 为真、或观看者有生效中的订阅、或观看者就是作者。

    字段说明：
    - id: 主键
    - creator_id: 作者 ID（外键）
    - title: 标题
    - content: 正文 / 描述
    - file_url: 媒体文件在对象存储中的路径（不是可访问的 URL）
    - is_preview: 是否为公开预览
    - created_at / updated_at: 创建 / 更新时间
    """
    __tablename__ = "posts"
    id: uuid.UUID = Field(
        default_factory=new_id,
        sa_column=Column(Uuid, primary_key=True),
    )
    creator_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    title: str = Field(max_length=255)
    content: str | None = Field(default=None)
    file_url: str | None = Field(
        default=None, sa_column=Column(String(512), nullable=True)
    )
    is_preview: bool = Field(default=False, index=True)

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
