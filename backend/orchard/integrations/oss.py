"""
阿里云 OSS 存储集成

作品文件与头像都存放在同一个 bucket 的不同前缀下：
- content/{user_id}/{毫秒时间戳}.{ext}   私有读，通过带签名的临时 URL 访问
- avatars/{user_id}/avatar.{ext}        公开读

数据库中只保存前缀之后的相对路径（如 "{user_id}/1718000000000.mp4"）。
"""
from __future__ import annotations

import logging
import re
import time
import uuid

import oss2

from orchard.api.errors import AppError
from orchard.core.config import settings
from orchard.enums import MediaType

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = ("mp4", "webm", "mov")

_VIDEO_RE = re.compile(rf"\.({'|'.join(VIDEO_EXTENSIONS)})$", re.IGNORECASE)
_IMAGE_RE = re.compile(r"\.(jpeg|jpg|gif|png)$", re.IGNORECASE)


def _configured() -> bool:
    return bool(
        settings.OSS_ENDPOINT
        and settings.OSS_BUCKET
        and settings.OSS_ACCESS_KEY_ID
        and settings.OSS_ACCESS_KEY_SECRET
    )


def _build_host(bucket: str, endpoint: str) -> str:
    endpoint = endpoint.strip()
    if endpoint.startswith("http://") or endpoint.startswith("https://"):
        base = endpoint
    else:
        base = f"https://{endpoint}"
    scheme, rest = base.split("://", 1)
    # Virtual-hosted-style: https://bucket.endpoint
    return f"{scheme}://{bucket}.{rest}"


def _endpoint_for_sdk(endpoint: str) -> str:
    endpoint = endpoint.strip()
    if endpoint.startswith("http://") or endpoint.startswith("https://"):
        return endpoint
    return f"https://{endpoint}"


def _get_bucket() -> oss2.Bucket:
    if not _configured():
        raise AppError(code=500001, message="OSS not configured", status_code=500)
    auth = oss2.Auth(settings.OSS_ACCESS_KEY_ID, settings.OSS_ACCESS_KEY_SECRET)
    return oss2.Bucket(auth, _endpoint_for_sdk(settings.OSS_ENDPOINT), settings.OSS_BUCKET)


def _extension(filename: str | None, default: str = "bin") -> str:
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[1].strip().lower()
        if ext:
            return ext
    return default


def content_key(path: str) -> str:
    return f"{settings.OSS_CONTENT_PREFIX.strip('/')}/{path}"


def avatar_key(path: str) -> str:
    return f"{settings.OSS_AVATAR_PREFIX.strip('/')}/{path}"


def new_content_path(user_id: uuid.UUID, filename: str | None) -> str:
    """作品文件路径：{user_id}/{毫秒时间戳}.{ext}"""
    return f"{user_id}/{int(time.time() * 1000)}.{_extension(filename)}"


def avatar_path(user_id: uuid.UUID, filename: str | None) -> str:
    """头像路径：{user_id}/avatar.{ext}，重复上传会覆盖"""
    return f"{user_id}/avatar.{_extension(filename, default='png')}"


def media_type_for(path: str | None) -> MediaType:
    """根据文件扩展名判断媒体类型"""
    if not path:
        return MediaType.unknown
    if _VIDEO_RE.search(path):
        return MediaType.video
    if _IMAGE_RE.search(path):
        return MediaType.image
    return MediaType.unknown


def upload_object(*, key: str, data: bytes, content_type: str | None = None) -> str:
    """
    上传对象

    Args:
        key: 完整对象名（含前缀）
        data: 文件内容
        content_type: MIME 类型

    Returns:
        对象名

    Raises:
        AppError: OSS 未配置（500）或上传失败（502）
    """
    bucket = _get_bucket()
    headers = {"Content-Type": content_type} if content_type else None
    try:
        result = bucket.put_object(key, data, headers=headers)
    except oss2.exceptions.OssError as e:
        logger.error(f"Failed to upload object {key}: {e}")
        raise AppError(code=502101, message="Failed to upload file", status_code=502)
    if result.status != 200:
        logger.error(f"Upload of {key} returned status {result.status}")
        raise AppError(code=502101, message="Failed to upload file", status_code=502)
    logger.info(f"Object uploaded: {key}")
    return key


def sign_url(*, key: str, expires: int | None = None) -> str | None:
    """
    生成带签名的临时 GET URL

    签名在本地完成，不访问网络。失败时只记录日志并返回 None，
    页面在没有媒体 URL 的情况下照常渲染。
    """
    if not _configured():
        logger.warning(f"OSS not configured, cannot sign {key}")
        return None
    try:
        bucket = _get_bucket()
        return bucket.sign_url(
            "GET",
            key,
            expires or settings.SIGNED_URL_EXPIRE_SECONDS,
            slash_safe=True,
        )
    except (oss2.exceptions.OssError, ValueError) as e:
        logger.error(f"Error getting signed URL for {key}: {e}")
        return None


def public_url(*, key: str) -> str | None:
    """公开读对象的访问 URL（优先使用 CDN / 公开域名）"""
    if settings.OSS_PUBLIC_BASE_URL:
        return f"{settings.OSS_PUBLIC_BASE_URL.rstrip('/')}/{key}"
    if not (settings.OSS_ENDPOINT and settings.OSS_BUCKET):
        return None
    host = _build_host(settings.OSS_BUCKET, settings.OSS_ENDPOINT)
    return f"{host}/{key}"


def signed_content_url(path: str | None) -> str | None:
    """作品文件的临时访问 URL"""
    if not path:
        return None
    return sign_url(key=content_key(path))


def avatar_public_url(path: str | None) -> str | None:
    """头像的公开访问 URL"""
    if not path:
        return None
    return public_url(key=avatar_key(path))
