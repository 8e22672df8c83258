"""
用户路由模块

处理当前用户相关的 API 端点，包括：
- 获取用户资料
- 首次引导设置账号类型
- 设置页更新资料
- 上传头像
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, File, UploadFile

from orchard import crud  # 数据库操作
from orchard.api.deps import CurrentUser, SessionDep  # 依赖注入
from orchard.api.schemas import AccountTypeRequest, ApiEnvelope, ProfileUpdateRequest
from orchard.integrations import oss
from orchard.services.presenters import profile_public

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/profile", response_model=ApiEnvelope)
def profile(current_user: CurrentUser) -> ApiEnvelope:
    """
    获取用户资料

    请求路径: GET /api/v1/user/profile
    """
    return ApiEnvelope(data=profile_public(current_user))


@router.post("/account-type", response_model=ApiEnvelope)
def choose_account_type(
    session: SessionDep,
    current_user: CurrentUser,
    body: AccountTypeRequest,
) -> ApiEnvelope:
    """
    首次引导：选择粉丝或创作者

    只能设置一次，之后通过设置页修改。

    请求路径: POST /api/v1/user/account-type
    """
    updated = crud.set_account_type(
        session=session, profile=current_user, account_type=body.account_type
    )
    return ApiEnvelope(data=profile_public(updated))


@router.put("/profile", response_model=ApiEnvelope)
def update_profile(
    session: SessionDep,
    current_user: CurrentUser,
    body: ProfileUpdateRequest,
) -> ApiEnvelope:
    """
    更新用户资料

    只更新请求中出现的字段；空字符串会被转换为 None。
    粉丝账号的 subscription_price 始终为空。

    请求路径: PUT /api/v1/user/profile
    """
    changes = body.model_dump(exclude_unset=True)
    updated = crud.update_profile(session=session, profile=current_user, changes=changes)
    return ApiEnvelope(data=profile_public(updated))


@router.post("/avatar", response_model=ApiEnvelope)
def upload_avatar(
    session: SessionDep,
    current_user: CurrentUser,
    file: UploadFile = File(...),
) -> ApiEnvelope:
    """
    上传头像

    文件保存到 avatars/{user_id}/avatar.{ext}，重复上传覆盖旧文件。

    请求路径: POST /api/v1/user/avatar
    """
    path = oss.avatar_path(current_user.id, file.filename)
    oss.upload_object(key=oss.avatar_key(path), data=file.file.read(), content_type=file.content_type)
    updated = crud.set_avatar(session=session, profile=current_user, path=path)
    logger.info(f"Avatar updated for user {current_user.id}")
    return ApiEnvelope(data=profile_public(updated))
