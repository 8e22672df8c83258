"""
认证路由模块

邮箱 + 密码注册与登录，成功后返回 JWT token。
账号类型在注册后由首次引导（/user/account-type）设置。
"""
from __future__ import annotations

from datetime import timedelta  # 时间间隔

from fastapi import APIRouter  # FastAPI 路由器

from orchard import crud  # 数据库操作
from orchard.api.deps import SessionDep  # 数据库会话依赖
from orchard.api.errors import AppError
from orchard.api.schemas import ApiEnvelope, AuthLoginData, LoginRequest, SignupRequest
from orchard.core import security  # 安全模块（JWT）
from orchard.core.config import settings
from orchard.models import Profile
from orchard.services.presenters import profile_public

# 创建认证路由，所有路径都会添加 /auth 前缀
router = APIRouter(prefix="/auth", tags=["auth"])


def _login_data(profile: Profile) -> AuthLoginData:
    access_token_expires = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)
    token = security.create_access_token(profile.id, expires_delta=access_token_expires)
    expires_in = int(access_token_expires.total_seconds())  # 转换为秒数
    return AuthLoginData(access_token=token, expires_in=expires_in, user=profile_public(profile))


@router.post("/signup", response_model=ApiEnvelope)
def signup(session: SessionDep, body: SignupRequest) -> ApiEnvelope:
    """
    注册接口

    创建账号并直接登录。返回的 user.needs_onboarding 为真，
    前端应引导用户选择粉丝或创作者。

    请求路径: POST /api/v1/auth/signup

    Raises:
        AppError: 邮箱或用户名已被占用时返回 409
    """
    profile = crud.create_profile(
        session=session,
        email=body.email,
        password=body.password,
        username=body.username,
    )
    return ApiEnvelope(data=_login_data(profile))


@router.post("/login", response_model=ApiEnvelope)
def login(session: SessionDep, body: LoginRequest) -> ApiEnvelope:
    """
    登录接口

    请求路径: POST /api/v1/auth/login

    响应示例：
        {
            "code": 0,
            "message": "success",
            "data": {
                "access_token": "eyJ0eXAiOiJKV1QiLCJhbGc...",
                "expires_in": 604800,
                "user": {"id": "...", "email": "fan@example.com", "needs_onboarding": false, ...}
            }
        }
    """
    profile = crud.authenticate(session=session, email=body.email, password=body.password)
    if not profile:
        raise AppError(code=401002, message="Incorrect email or password", status_code=401)
    return ApiEnvelope(data=_login_data(profile))
