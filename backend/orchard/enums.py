"""
枚举类型定义模块

定义应用中使用的所有枚举类型。
所有枚举都继承自 str 和 Enum，这样既可以用作字符串，又具有枚举的特性。
"""
from enum import Enum  # 枚举类型，用于定义固定的选项集合


class AccountType(str, Enum):
    """
    账号类型枚举

    - fan: 粉丝（默认），订阅创作者、点赞、送苹果
    - creator: 创作者，可以发布内容并接收付款
    """
    fan = "fan"
    creator = "creator"


class SubscriptionStatus(str, Enum):
    """
    订阅状态枚举

    - active: 生效中
    - canceled: 已取消（用户主动取消或 Stripe 删除订阅）
    """
    active = "active"
    canceled = "canceled"


# 允许的订阅状态变迁：(当前状态, 目标状态)
SUBSCRIPTION_TRANSITIONS: frozenset[tuple[SubscriptionStatus, SubscriptionStatus]] = frozenset(
    {
        (SubscriptionStatus.active, SubscriptionStatus.canceled),
        (SubscriptionStatus.canceled, SubscriptionStatus.active),
    }
)


class PaymentStatus(str, Enum):
    """
    支付记录状态枚举（transactions / apple_gifts 共用）

    目前只有 webhook 在支付完成后写入，因此只有 completed。
    """
    completed = "completed"


class RedemptionStatus(str, Enum):
    """
    苹果兑换申请状态枚举

    - pending: 已提交，等待人工打款
    - paid: 已打款
    - rejected: 已拒绝
    """
    pending = "pending"
    paid = "paid"
    rejected = "rejected"


class MediaType(str, Enum):
    """
    作品媒体类型枚举，根据文件扩展名判断

    - image: jpeg / jpg / gif / png
    - video: mp4 / webm / mov
    - unknown: 其他
    """
    image = "image"
    video = "video"
    unknown = "unknown"
