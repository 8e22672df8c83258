"""
基础模型模块

定义所有模型共用的基础类和工具函数。
"""
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel


def utc_now() -> datetime:
    """
    获取当前 UTC 时间

    Returns:
        当前 UTC 时区的日期时间对象
    """
    return datetime.now(timezone.utc)


def new_id() -> uuid.UUID:
    """生成主键（UUID4）"""
    return uuid.uuid4()


__all__ = ["SQLModel", "utc_now", "new_id"]
