"""
结账路由模块

创建 Stripe Checkout 会话，返回跳转 URL。
本接口不写任何业务数据：订阅和礼物记录只在 webhook 收到支付完成事件后写入。

- 订阅：按月付费，mode=subscription
- 苹果礼物：一次性付款，mode=payment
"""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

import stripe
from fastapi import APIRouter, Header
from sqlmodel import Session

from orchard import crud
from orchard.api.deps import OptionalUser, SessionDep
from orchard.api.errors import AppError, login_required, provider_failure
from orchard.api.schemas import (
    AppleGiftCheckoutRequest,
    ApiEnvelope,
    CheckoutData,
    SubscriptionCheckoutRequest,
)
from orchard.core.config import settings
from orchard.models import Post, Profile
from orchard.services.stripe_service import StripeService, get_stripe_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])

CENTS = Decimal("100")


def _to_cents(amount: Decimal) -> int:
    return int((amount * CENTS).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _creator_url(creator: Profile, query: str) -> str:
    handle = creator.username or str(creator.id)
    return f"{settings.SITE_URL.rstrip('/')}/creator/{handle}?{query}"


def _customer_id(session: Session, service: StripeService, payer: Profile) -> str:
    """已保存的客户 ID 直接复用，否则按邮箱查找或创建并保存"""
    if payer.stripe_customer_id:
        return payer.stripe_customer_id
    customer_id = service.get_or_create_customer(
        email=payer.email,
        name=payer.full_name or payer.username,
        user_id=str(payer.id),
    )
    crud.set_stripe_customer(session=session, profile=payer, customer_id=customer_id)
    return customer_id


@router.post("/subscription", response_model=ApiEnvelope)
def subscription_checkout(
    session: SessionDep,
    viewer: OptionalUser,
    body: SubscriptionCheckoutRequest,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
) -> ApiEnvelope:
    """
    创建订阅结账会话

    没有传 price_id 时，按创作者设置的月费（未设置则 4.99）创建商品和月付价格。

    请求路径: POST /api/v1/checkout/subscription
    """
    if viewer is None:
        raise login_required("subscribe")
    creator = crud.get_creator(session=session, creator_id=body.creator_id)
    if creator is None:
        raise AppError(code=404101, message="Creator not found", status_code=404)

    service = get_stripe_service()
    handle = creator.username or str(creator.id)
    try:
        customer_id = _customer_id(session, service, viewer)
        price_id = body.price_id
        if not price_id:
            price = creator.subscription_price or settings.DEFAULT_SUBSCRIPTION_PRICE
            price_id = service.create_monthly_price(
                creator_id=str(creator.id),
                creator_username=handle,
                unit_amount=_to_cents(price),
            )
        checkout_url = service.create_checkout_session(
            customer_id=customer_id,
            line_items=[{"price": price_id, "quantity": 1}],
            mode="subscription",
            success_url=_creator_url(creator, "success=true"),
            cancel_url=_creator_url(creator, "canceled=true"),
            metadata={
                "creator_id": str(creator.id),
                "subscriber_id": str(viewer.id),
                "creator_username": handle,
            },
            idempotency_key=idempotency_key,
        )
    except stripe.StripeError as e:
        logger.error(f"Error creating subscription checkout for creator {creator.id}: {e}")
        raise provider_failure("Failed to create checkout session")

    if not checkout_url:
        raise provider_failure("Failed to create checkout session")
    return ApiEnvelope(data=CheckoutData(checkout_url=checkout_url))


@router.post("/apple-gift", response_model=ApiEnvelope)
def apple_gift_checkout(
    session: SessionDep,
    viewer: OptionalUser,
    body: AppleGiftCheckoutRequest,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
) -> ApiEnvelope:
    """
    创建苹果礼物结账会话

    单价固定为 APPLE_PRICE（1.44 美元），总价 = 数量 * 单价。
    单价和总价写入 metadata，webhook 按原样记录。

    请求路径: POST /api/v1/checkout/apple-gift
    """
    if viewer is None:
        raise login_required("send apple gifts")
    creator = crud.get_creator(session=session, creator_id=body.creator_id)
    post = session.get(Post, body.post_id) if body.post_id else None
    if creator is None or (body.post_id and (post is None or post.creator_id != creator.id)):
        raise AppError(code=404103, message="Creator or post not found", status_code=404)

    count = body.apple_count
    price_per_apple = settings.APPLE_PRICE
    total_amount = (price_per_apple * count).quantize(Decimal("0.01"))
    handle = creator.username or str(creator.id)

    service = get_stripe_service()
    try:
        customer_id = _customer_id(session, service, viewer)
        checkout_url = service.create_checkout_session(
            customer_id=customer_id,
            line_items=[
                {
                    "price_data": {
                        "currency": service.currency,
                        "product_data": {
                            "name": f"{count} Apple{'s' if count > 1 else ''} for {handle}",
                            "description": f"Send {count} apple{'s' if count > 1 else ''} to show your appreciation",
                        },
                        "unit_amount": _to_cents(total_amount),
                    },
                    "quantity": 1,
                }
            ],
            mode="payment",
            success_url=_creator_url(creator, "apple_gift=success"),
            cancel_url=_creator_url(creator, "apple_gift=canceled"),
            metadata={
                "type": "apple_gift",
                "post_id": str(post.id) if post else "",
                "creator_id": str(creator.id),
                "sender_id": str(viewer.id),
                "apple_count": str(count),
                "price_per_apple": str(price_per_apple),
                "total_amount": str(total_amount),
            },
            idempotency_key=idempotency_key,
        )
    except stripe.StripeError as e:
        logger.error(f"Error creating apple gift checkout for creator {creator.id}: {e}")
        raise provider_failure("Failed to create checkout session")

    if not checkout_url:
        raise provider_failure("Failed to create checkout session")
    return ApiEnvelope(data=CheckoutData(checkout_url=checkout_url))
