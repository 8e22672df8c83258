"""
数据库连接模块

管理数据库引擎和会话的创建。
使用 SQLModel 的 create_engine 创建数据库连接池。

重要提示：
- 确保在使用前导入所有模型（orchard.models），否则表结构无法注册到 metadata
"""
from sqlmodel import Session, SQLModel, create_engine  # SQLModel 的数据库工具

from orchard import models  # noqa: F401  注册所有表
from orchard.core.config import settings

# 创建数据库引擎（连接池）
engine = create_engine(str(settings.SQLALCHEMY_DATABASE_URI))


def init_db(session: Session) -> None:
    """
    初始化数据库

    按模型定义创建所有缺失的表（已存在的表不会被修改）。

    Args:
        session: 数据库会话，使用其绑定的引擎建表
    """
    SQLModel.metadata.create_all(session.get_bind())
