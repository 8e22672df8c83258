"""
作品路由模块

- 创作者发布作品（上传媒体文件）
- 查看单个作品（按订阅关系决定是否返回媒体 URL）
- 点赞切换与点赞状态
"""
from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, File, Form, UploadFile
from sqlmodel import Session

from orchard import crud
from orchard.api.deps import CurrentUser, OptionalUser, SessionDep
from orchard.api.errors import AppError, creator_only, login_required
from orchard.api.schemas import ApiEnvelope, LikeData
from orchard.integrations import oss
from orchard.models import Post
from orchard.services.presenters import present_post

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


def _get_post(session: Session, post_id: uuid.UUID) -> Post:
    post = session.get(Post, post_id)
    if not post:
        raise AppError(code=404102, message="Post not found", status_code=404)
    return post


@router.post("", response_model=ApiEnvelope)
def create_post(
    session: SessionDep,
    current_user: CurrentUser,
    title: str = Form(..., min_length=1, max_length=255),
    content: str | None = Form(default=None),
    is_preview: bool = Form(default=False),
    file: UploadFile = File(...),
) -> ApiEnvelope:
    """
    发布作品（仅创作者）

    文件保存到 content/{user_id}/{毫秒时间戳}.{ext}，数据库只记录相对路径。

    请求路径: POST /api/v1/posts (multipart/form-data)
    """
    if not current_user.is_creator:
        raise creator_only()
    title = title.strip()
    if not title:
        raise AppError(code=400101, message="Title is required", status_code=400)

    path = oss.new_content_path(current_user.id, file.filename)
    oss.upload_object(key=oss.content_key(path), data=file.file.read(), content_type=file.content_type)

    post = Post(
        creator_id=current_user.id,
        title=title,
        content=(content or "").strip() or None,
        file_url=path,
        is_preview=is_preview,
    )
    session.add(post)
    session.commit()
    session.refresh(post)
    logger.info(f"Post {post.id} created by {current_user.id}")
    return ApiEnvelope(data=present_post(session=session, post=post, viewer_id=current_user.id))


@router.get("/{post_id}", response_model=ApiEnvelope)
def get_post(session: SessionDep, viewer: OptionalUser, post_id: uuid.UUID) -> ApiEnvelope:
    """
    查看作品

    无权查看时 locked 为真，media_url 为空。

    请求路径: GET /api/v1/posts/{post_id}
    """
    post = _get_post(session, post_id)
    viewer_id = viewer.id if viewer else None
    return ApiEnvelope(data=present_post(session=session, post=post, viewer_id=viewer_id))


@router.post("/{post_id}/like", response_model=ApiEnvelope)
def toggle_like(session: SessionDep, viewer: OptionalUser, post_id: uuid.UUID) -> ApiEnvelope:
    """
    点赞 / 取消点赞

    请求路径: POST /api/v1/posts/{post_id}/like
    """
    if viewer is None:
        raise login_required("like a post")
    _get_post(session, post_id)
    liked = crud.toggle_like(session=session, user_id=viewer.id, post_id=post_id)
    count = crud.like_count(session=session, post_id=post_id)
    return ApiEnvelope(data=LikeData(liked=liked, count=count))


@router.get("/{post_id}/likes", response_model=ApiEnvelope)
def like_status(session: SessionDep, viewer: OptionalUser, post_id: uuid.UUID) -> ApiEnvelope:
    """
    点赞数和当前用户是否已点赞（匿名用户 liked 为 false）

    请求路径: GET /api/v1/posts/{post_id}/likes
    """
    _get_post(session, post_id)
    viewer_id = viewer.id if viewer else None
    return ApiEnvelope(
        data=LikeData(
            liked=crud.has_liked(session=session, user_id=viewer_id, post_id=post_id),
            count=crud.like_count(session=session, post_id=post_id),
        )
    )
