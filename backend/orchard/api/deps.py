"""
FastAPI 依赖注入模块

提供可复用的依赖项，用于路由处理函数中。

关键概念：
- Depends: FastAPI 的依赖注入装饰器
- Generator: 用于创建需要清理的资源（如数据库会话）
- HTTPBearer: 从请求头 Authorization: Bearer <token> 中提取 token
"""
import uuid
from collections.abc import Generator  # 生成器类型，用于资源管理
from typing import Annotated  # 类型注解，用于依赖注入

import jwt  # JWT 解析库
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.exceptions import InvalidTokenError
from pydantic import ValidationError
from sqlmodel import Session

from orchard.api.schemas import TokenPayload
from orchard.core import security
from orchard.core.config import settings
from orchard.core.db import engine
from orchard.models import Profile

# 必须登录的接口：缺少 token 时由 HTTPBearer 直接拒绝
reusable_oauth2 = HTTPBearer()
# 可匿名访问的接口：缺少 token 时得到 None
optional_oauth2 = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """
    获取数据库会话（依赖注入）

    每个请求一个会话，yield 结束后自动关闭。

    Yields:
        Session: 数据库会话对象
    """
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]
TokenDep = Annotated[HTTPAuthorizationCredentials, Depends(reusable_oauth2)]
OptionalTokenDep = Annotated[HTTPAuthorizationCredentials | None, Depends(optional_oauth2)]


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
    )


def _resolve_user(session: Session, token_str: str) -> Profile:
    """
    解析 JWT 并查询用户

    Raises:
        HTTPException: token 无效、用户标识格式错误或用户不存在时返回 401
    """
    try:
        payload = jwt.decode(
            token_str, settings.SECRET_KEY, algorithms=[security.ALGORITHM]
        )
        token_data = TokenPayload(**payload)
    except (InvalidTokenError, ValidationError):
        raise _credentials_error()
    if not token_data.sub:
        raise _credentials_error()
    try:
        user_id = uuid.UUID(token_data.sub)
    except ValueError:
        raise _credentials_error()
    user = session.get(Profile, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def get_current_user(session: SessionDep, token: TokenDep) -> Profile:
    """
    获取当前登录用户（必须登录）

    使用示例：
        @router.get("/profile")
        def profile(current_user: CurrentUser): ...
    """
    return _resolve_user(session, token.credentials)


def get_optional_user(session: SessionDep, token: OptionalTokenDep) -> Profile | None:
    """
    获取当前用户（可匿名）

    没有携带 token 时返回 None，由路由自行决定提示信息，
    例如 "You must be logged in to subscribe"。
    携带了无效 token 仍然返回 401。
    """
    if token is None:
        return None
    return _resolve_user(session, token.credentials)


CurrentUser = Annotated[Profile, Depends(get_current_user)]
OptionalUser = Annotated[Profile | None, Depends(get_optional_user)]
