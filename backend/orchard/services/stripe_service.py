"""
Stripe 支付服务

文档: https://docs.stripe.com/payments/checkout
Webhook: https://docs.stripe.com/webhooks#verify-events
"""

import logging
from typing import Any

import stripe

from orchard.api.errors import AppError
from orchard.core.config import settings

logger = logging.getLogger(__name__)


class StripeService:
    """Stripe 服务封装（客户、价格、结账会话）"""

    def __init__(self, api_key: str, currency: str = "usd"):
        """
        初始化 Stripe 服务

        Args:
            api_key: Stripe Secret Key
            currency: 结算货币
        """
        self.api_key = api_key
        self.currency = currency
        stripe.api_key = api_key
        logger.info("Stripe service initialized")

    def get_or_create_customer(self, *, email: str, name: str | None, user_id: str) -> str:
        """
        按邮箱查找 Stripe 客户，不存在则创建

        Args:
            email: 付款人邮箱
            name: 显示名称
            user_id: 本系统用户 ID（写入客户 metadata）

        Returns:
            Stripe 客户 ID（cus_...）
        """
        existing = stripe.Customer.list(email=email, limit=1)
        if existing.data:
            return existing.data[0].id

        customer = stripe.Customer.create(
            email=email,
            name=name or email,
            metadata={"user_id": user_id},
        )
        logger.info(f"Stripe customer created for user {user_id}: {customer.id}")
        return customer.id

    def create_monthly_price(
        self, *, creator_id: str, creator_username: str, unit_amount: int
    ) -> str:
        """
        为创作者创建订阅商品和月付价格

        Args:
            creator_id: 创作者 ID
            creator_username: 创作者用户名
            unit_amount: 每月价格（分）

        Returns:
            Stripe 价格 ID（price_...）
        """
        metadata = {"creator_id": creator_id, "creator_username": creator_username}
        product = stripe.Product.create(
            name=f"Subscription to {creator_username}",
            description=f"Monthly subscription to {creator_username}'s exclusive content",
            metadata=metadata,
        )
        price = stripe.Price.create(
            unit_amount=unit_amount,
            currency=self.currency,
            recurring={"interval": "month"},
            product=product.id,
            metadata=metadata,
        )
        return price.id

    def create_checkout_session(
        self,
        *,
        customer_id: str,
        line_items: list[dict[str, Any]],
        mode: str,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
        idempotency_key: str | None = None,
    ) -> str | None:
        """
        创建 Checkout 会话

        Args:
            customer_id: Stripe 客户 ID
            line_items: 商品行
            mode: "payment"（一次性）或 "subscription"（订阅）
            success_url / cancel_url: 支付完成 / 取消后的跳转地址
            metadata: 业务标识，webhook 中原样取回
            idempotency_key: 客户端传入的幂等键，重复点击不会生成两个会话

        Returns:
            跳转 URL，Stripe 未返回时为 None
        """
        params: dict[str, Any] = {
            "customer": customer_id,
            "payment_method_types": ["card"],
            "line_items": line_items,
            "mode": mode,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        }
        if idempotency_key:
            params["idempotency_key"] = idempotency_key
        session = stripe.checkout.Session.create(**params)
        return session.url


def parse_webhook_event(payload: bytes, signature: str, secret: str) -> dict[str, Any]:
    """
    校验 Stripe-Signature 并解析事件

    Args:
        payload: 请求体原始字节（必须是未经修改的原文）
        signature: Stripe-Signature 头部值
        secret: Webhook 签名密钥（whsec_...）

    Returns:
        事件字典，包含 id、type、data.object 等字段

    Raises:
        stripe.SignatureVerificationError: 签名无效或时间戳超出容忍范围
        ValueError: 请求体不是合法 JSON
    """
    event = stripe.Webhook.construct_event(payload=payload, sig_header=signature, secret=secret)
    # 普通 dict：按字段读取，并原样写入 stripe_events.payload
    return event.to_dict()


# 全局 Stripe 服务实例
_stripe_service: StripeService | None = None


def init_stripe_service(api_key: str, currency: str = "usd") -> StripeService:
    """初始化全局 Stripe 服务"""
    global _stripe_service
    _stripe_service = StripeService(api_key=api_key, currency=currency)
    return _stripe_service


def get_stripe_service() -> StripeService:
    """
    获取全局 Stripe 服务实例

    Raises:
        AppError: 未配置 STRIPE_SECRET_KEY 时返回 500
    """
    if _stripe_service is None:
        if settings.STRIPE_SECRET_KEY:
            return init_stripe_service(
                api_key=settings.STRIPE_SECRET_KEY,
                currency=settings.STRIPE_CURRENCY,
            )
        raise AppError(code=500201, message="Stripe not configured", status_code=500)
    return _stripe_service
