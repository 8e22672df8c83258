"""
关注路由模块

关注 / 取消关注、关注状态、粉丝列表、关注列表、数量统计。
"""
from __future__ import annotations

import uuid

from fastapi import APIRouter

from orchard import crud
from orchard.api.deps import CurrentUser, OptionalUser, SessionDep
from orchard.api.schemas import (
    ApiEnvelope,
    FollowCountsData,
    FollowEdgeData,
    FollowListData,
    FollowStatusData,
)
from orchard.services.presenters import user_summary

router = APIRouter(prefix="/users", tags=["social"])


@router.post("/{user_id}/follow", response_model=ApiEnvelope)
def follow(session: SessionDep, current_user: CurrentUser, user_id: uuid.UUID) -> ApiEnvelope:
    """
    关注用户

    请求路径: POST /api/v1/users/{user_id}/follow

    Raises:
        AppError: 关注自己返回 400，重复关注返回 409
    """
    crud.follow(session=session, user_id=current_user.id, followed_id=user_id)
    return ApiEnvelope(data=FollowStatusData(following=True))


@router.delete("/{user_id}/follow", response_model=ApiEnvelope)
def unfollow(session: SessionDep, current_user: CurrentUser, user_id: uuid.UUID) -> ApiEnvelope:
    """取消关注（未关注时同样返回成功）"""
    crud.unfollow(session=session, user_id=current_user.id, followed_id=user_id)
    return ApiEnvelope(data=FollowStatusData(following=False))


@router.get("/{user_id}/follow-status", response_model=ApiEnvelope)
def follow_status(session: SessionDep, viewer: OptionalUser, user_id: uuid.UUID) -> ApiEnvelope:
    following = crud.is_following(
        session=session, user_id=viewer.id if viewer else None, followed_id=user_id
    )
    return ApiEnvelope(data=FollowStatusData(following=following))


@router.get("/{user_id}/followers", response_model=ApiEnvelope)
def followers(session: SessionDep, user_id: uuid.UUID) -> ApiEnvelope:
    rows = crud.list_followers(session=session, user_id=user_id)
    data = [FollowEdgeData(user=user_summary(p), created_at=edge.created_at) for edge, p in rows]
    return ApiEnvelope(data=FollowListData(data=data, count=len(data)))


@router.get("/{user_id}/following", response_model=ApiEnvelope)
def following(session: SessionDep, user_id: uuid.UUID) -> ApiEnvelope:
    rows = crud.list_following(session=session, user_id=user_id)
    data = [FollowEdgeData(user=user_summary(p), created_at=edge.created_at) for edge, p in rows]
    return ApiEnvelope(data=FollowListData(data=data, count=len(data)))


@router.get("/{user_id}/follow-counts", response_model=ApiEnvelope)
def follow_counts(session: SessionDep, user_id: uuid.UUID) -> ApiEnvelope:
    return ApiEnvelope(
        data=FollowCountsData(
            followers=crud.follower_count(session=session, user_id=user_id),
            following=crud.following_count(session=session, user_id=user_id),
        )
    )
