"""
页面数据路由模块

首页预览流、短视频流、发现页、创作者主页、仪表盘。
除仪表盘外都可以匿名访问。
"""
from __future__ import annotations

from fastapi import APIRouter

from orchard.api.deps import CurrentUser, OptionalUser, SessionDep
from orchard.api.schemas import ApiEnvelope, PostsData
from orchard.services import feed

router = APIRouter(tags=["feed"])


@router.get("/feed/preview", response_model=ApiEnvelope)
def preview(session: SessionDep, viewer: OptionalUser) -> ApiEnvelope:
    """
    首页预览流

    请求路径: GET /api/v1/feed/preview
    """
    posts = feed.preview_feed(session=session, viewer_id=viewer.id if viewer else None)
    return ApiEnvelope(data=PostsData(data=posts, count=len(posts)))


@router.get("/feed/shorts", response_model=ApiEnvelope)
def shorts(session: SessionDep, viewer: OptionalUser) -> ApiEnvelope:
    """
    短视频流

    请求路径: GET /api/v1/feed/shorts
    """
    posts = feed.shorts_feed(session=session, viewer_id=viewer.id if viewer else None)
    return ApiEnvelope(data=PostsData(data=posts, count=len(posts)))


@router.get("/explore", response_model=ApiEnvelope)
def explore(session: SessionDep, viewer: OptionalUser) -> ApiEnvelope:
    """请求路径: GET /api/v1/explore"""
    return ApiEnvelope(data=feed.explore(session=session, viewer_id=viewer.id if viewer else None))


@router.get("/creator/{username}", response_model=ApiEnvelope)
def creator_page(session: SessionDep, viewer: OptionalUser, username: str) -> ApiEnvelope:
    """
    创作者主页

    请求路径: GET /api/v1/creator/{username}
    """
    data = feed.creator_page(
        session=session, username=username, viewer_id=viewer.id if viewer else None
    )
    return ApiEnvelope(data=data)


@router.get("/dashboard", response_model=ApiEnvelope)
def dashboard(session: SessionDep, current_user: CurrentUser) -> ApiEnvelope:
    """请求路径: GET /api/v1/dashboard"""
    return ApiEnvelope(data=feed.dashboard(session=session, user=current_user))
