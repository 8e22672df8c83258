"""
社交关系模型模块

定义关注、点赞两种边关系的数据库模型，两者都按对唯一。
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlmodel import Field, SQLModel

from .base import new_id, utc_now


class Follower(SQLModel, table=True):
    """
    关注关系：user_id 关注了 followed_id
    """
    __tablename__ = "followers"
    __table_args__ = (
        UniqueConstraint("user_id", "followed_id", name="uq_followers_pair"),
    )
    id: uuid.UUID = Field(
        default_factory=new_id,
        sa_column=Column(Uuid, primary_key=True),
    )
    user_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    followed_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class Like(SQLModel, table=True):
    """
    点赞关系：user_id 点赞了 post_id，可反复切换
    """
    __tablename__ = "likes"
    __table_args__ = (
        UniqueConstraint("user_id", "post_id", name="uq_likes_pair"),
    )
    id: uuid.UUID = Field(
        default_factory=new_id,
        sa_column=Column(Uuid, primary_key=True),
    )
    user_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    post_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid, ForeignKey("posts.id", ondelete="CASCADE"), index=True, nullable=False
        )
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
