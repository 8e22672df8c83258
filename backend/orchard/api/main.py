"""
API 路由聚合模块

将所有业务路由模块聚合到一个统一的 router 中，
由 orchard/main.py 注册到主应用上。

路由模块说明：
- auth: 注册、登录
- user: 当前用户资料、账号类型、头像
- posts: 发布作品、查看作品、点赞
- social: 关注关系
- feed: 首页、短视频、发现页、创作者主页、仪表盘
- checkout: 创建 Stripe 结账会话
- webhooks: Stripe webhook
- subscription: 订阅状态、取消订阅
- apples: 苹果收入汇总、兑换
- utils: 健康检查
"""
from fastapi import APIRouter

from orchard.api.routes import (
    apples,
    auth,
    checkout,
    feed,
    posts,
    social,
    subscription,
    user,
    utils,
    webhooks,
)

api_router = APIRouter()

# 每个模块的路径前缀在各自的 router 中定义
api_router.include_router(auth.router)  # /auth/*
api_router.include_router(user.router)  # /user/*
api_router.include_router(posts.router)  # /posts/*
api_router.include_router(social.router)  # /users/*
api_router.include_router(feed.router)  # /feed/*, /explore, /creator/*, /dashboard
api_router.include_router(checkout.router)  # /checkout/*
api_router.include_router(webhooks.router)  # /webhooks/*
api_router.include_router(subscription.router)  # /subscription/*
api_router.include_router(apples.router)  # /apples/*
api_router.include_router(utils.router)  # /utils/*
