"""
API 请求/响应数据模型（Schema）

定义所有 API 接口的请求和响应数据结构。
使用 Pydantic 进行数据验证和序列化。
这些模型不是数据库表，只用于 API 数据交换。
"""
from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal  # 精确数值类型，用于金额
from typing import Any

from pydantic import BaseModel, Field

from orchard.enums import (
    AccountType,
    MediaType,
    RedemptionStatus,
    SubscriptionStatus,
)

# ============================================================
# 通用响应模型
# ============================================================


class TokenPayload(BaseModel):
    """
    JWT Token 载荷模型

    sub (subject) 存储用户 ID（UUID 字符串）。
    """
    sub: str | None = None


class ApiEnvelope(BaseModel):
    """
    API 统一响应格式

    - code: 状态码（0 表示成功，非 0 表示错误）
    - message: 消息（成功时为 "success"，错误时为错误描述）
    - data: 数据（成功时返回业务数据，错误时为 None）

    示例响应：
        {"code": 0, "message": "success", "data": {...}}
        {"code": 401001, "message": "You must be logged in to subscribe", "data": None}
    """
    code: int = 0
    message: str = "success"
    data: Any | None = None


# ============================================================
# 认证与用户资料
# ============================================================


class SignupRequest(BaseModel):
    """注册请求：邮箱 + 密码，用户名可稍后在设置页填写"""
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=128)
    username: str | None = Field(default=None, min_length=1, max_length=64)


class LoginRequest(BaseModel):
    """登录请求"""
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class ProfilePublic(BaseModel):
    """
    用户资料模型（本人可见）

    needs_onboarding 为真时前端应引导用户选择账号类型。
    """
    id: uuid.UUID
    email: str
    username: str | None = None
    full_name: str | None = None
    bio: str | None = None
    avatar_url: str | None = None  # 头像公开访问 URL
    account_type: AccountType | None = None
    subscription_price: Decimal | None = None
    needs_onboarding: bool
    created_at: datetime


class UserSummary(BaseModel):
    """用户摘要（作品作者、礼物赠送者、粉丝列表等场景）"""
    id: uuid.UUID
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    account_type: AccountType | None = None


class AuthLoginData(BaseModel):
    """登录 / 注册成功后返回 token 和用户信息"""
    access_token: str
    expires_in: int  # token 过期时间（秒）
    user: ProfilePublic


class AccountTypeRequest(BaseModel):
    """首次引导时选择账号类型"""
    account_type: AccountType


class ProfileUpdateRequest(BaseModel):
    """
    设置页更新资料请求

    subscription_price 只对创作者生效，粉丝账号会被清空。
    """
    username: str | None = Field(default=None, max_length=64)
    full_name: str | None = Field(default=None, max_length=128)
    bio: str | None = Field(default=None, max_length=1024)
    account_type: AccountType | None = None
    subscription_price: Decimal | None = Field(default=None, ge=0, le=10000)


# ============================================================
# 作品与互动
# ============================================================


class PostData(BaseModel):
    """
    作品数据模型

    locked 为真表示观看者无权查看，此时 media_url 为空。
    """
    id: uuid.UUID
    creator_id: uuid.UUID
    title: str
    content: str | None = None
    is_preview: bool
    media_type: MediaType
    media_url: str | None = None  # 带签名的临时访问 URL
    locked: bool = False
    like_count: int = 0
    liked: bool = False
    creator: UserSummary | None = None
    created_at: datetime


class PostsData(BaseModel):
    """作品列表"""
    data: list[PostData]
    count: int


class LikeData(BaseModel):
    """点赞状态：切换点赞后或查询时返回"""
    liked: bool
    count: int


class FollowStatusData(BaseModel):
    following: bool


class FollowCountsData(BaseModel):
    followers: int
    following: int


class FollowEdgeData(BaseModel):
    """关注关系中另一端的用户"""
    user: UserSummary
    created_at: datetime


class FollowListData(BaseModel):
    data: list[FollowEdgeData]
    count: int


# ============================================================
# 结账与订阅
# ============================================================


class SubscriptionCheckoutRequest(BaseModel):
    """
    创建订阅结账请求

    price_id 为空时按创作者的月订阅价格临时创建 Stripe Price。
    """
    creator_id: uuid.UUID
    price_id: str | None = Field(default=None, max_length=128)


class AppleGiftCheckoutRequest(BaseModel):
    """
    创建苹果礼物结账请求

    post_id 为空表示在创作者主页直接赠送。
    """
    creator_id: uuid.UUID
    post_id: uuid.UUID | None = None
    apple_count: int = Field(ge=1, le=10000)


class CheckoutData(BaseModel):
    """结账会话跳转地址"""
    checkout_url: str


class SubscriptionData(BaseModel):
    """订阅记录（仪表盘展示）"""
    id: uuid.UUID
    subscriber_id: uuid.UUID
    creator_id: uuid.UUID
    status: SubscriptionStatus
    subscriber: UserSummary | None = None
    creator: UserSummary | None = None
    created_at: datetime
    updated_at: datetime


class SubscriptionStatusData(BaseModel):
    """当前用户对某创作者的订阅状态"""
    is_subscribed: bool


# ============================================================
# 苹果礼物
# ============================================================


class AppleGiftData(BaseModel):
    """苹果礼物记录"""
    id: uuid.UUID
    sender: UserSummary | None = None
    post_id: uuid.UUID | None = None
    amount: int  # 苹果数量
    total_amount: str  # 金额，固定两位小数
    created_at: datetime


class AppleSummaryData(BaseModel):
    """
    创作者苹果汇总

    所有数字都在读取时由明细行汇总得到，不维护计数器。
    """
    gifts: list[AppleGiftData]
    total_apples: int
    total_amount: str  # 累计收入，固定两位小数，如 "7.20"
    redeemed_apples: int
    redeemable_apples: int


class RedeemRequest(BaseModel):
    """苹果兑换请求"""
    apple_count: int = Field(ge=1)


class RedemptionData(BaseModel):
    """兑换申请记录"""
    id: uuid.UUID
    apple_count: int
    amount: str
    currency: str
    status: RedemptionStatus
    created_at: datetime


# ============================================================
# 页面聚合
# ============================================================


class QualificationData(BaseModel):
    """
    创作者功能解锁进度

    - 粉丝数达到 100 解锁苹果礼物
    - 粉丝数达到 1000 解锁订阅按钮
    """
    follower_count: int
    apple_gifts_enabled: bool
    subscribe_enabled: bool
    followers_to_apple_gifts: int
    followers_to_subscribe: int


class CreatorPageData(BaseModel):
    """创作者主页数据"""
    creator: UserSummary
    bio: str | None = None
    subscription_price: Decimal
    is_subscribed: bool
    is_following: bool
    posts: list[PostData]
    featured_post: PostData | None = None
    subscriber_count: int
    post_count: int
    recent_gifts: list[AppleGiftData]
    total_gifts: int
    follower_count: int
    following_count: int
    apple_gifts_enabled: bool
    subscribe_enabled: bool


class ExploreCreatorData(BaseModel):
    """发现页中的一个创作者及其最新预览作品"""
    creator: UserSummary
    bio: str | None = None
    preview_post: PostData | None = None


class DashboardData(BaseModel):
    """
    仪表盘数据

    创作者：自己的作品、订阅者、苹果汇总、解锁进度
    粉丝：自己的订阅、已订阅创作者的作品
    """
    account_type: AccountType | None = None
    posts: list[PostData] = []
    subscribers: list[SubscriptionData] = []
    subscriptions: list[SubscriptionData] = []
    apples: AppleSummaryData | None = None
    qualification: QualificationData | None = None
