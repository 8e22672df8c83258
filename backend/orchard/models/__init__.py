"""
数据库模型定义模块

本模块使用 SQLModel 定义所有数据库表结构。

模型按功能拆分：
- profile.py: 用户资料（粉丝/创作者）
- post.py: 作品
- subscription.py: 订阅与订阅付款流水
- apple.py: 苹果礼物与兑换申请
- social.py: 关注、点赞
- stripe_event.py: Stripe webhook 事件（去重）
"""
from sqlmodel import SQLModel

from .apple import AppleGift, AppleRedemption
from .base import new_id, utc_now
from .post import Post
from .profile import Profile
from .social import Follower, Like
from .stripe_event import StripeEvent
from .subscription import Subscription, Transaction

__all__ = [
    "SQLModel",
    "utc_now",
    "new_id",
    "Profile",
    "Post",
    "Subscription",
    "Transaction",
    "AppleGift",
    "AppleRedemption",
    "Follower",
    "Like",
    "StripeEvent",
]
