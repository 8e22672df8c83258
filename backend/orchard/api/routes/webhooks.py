from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Annotated, Any

import stripe
from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from orchard import crud
from orchard.api.deps import SessionDep
from orchard.api.errors import AppError
from orchard.api.schemas import ApiEnvelope
from orchard.core.config import settings
from orchard.models import StripeEvent
from orchard.services.stripe_service import parse_webhook_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


async def _raw_body(request: Request) -> bytes:
    """签名按原始字节计算，必须在解析 JSON 之前读取"""
    return await request.body()


RawBody = Annotated[bytes, Depends(_raw_body)]


def _uuid(value: Any) -> uuid.UUID | None:
    if not value:
        return None
    return uuid.UUID(str(value))


def _handle_checkout_completed(session: Session, checkout: dict[str, Any]) -> None:
    metadata = checkout.get("metadata") or {}

    if metadata.get("type") == "apple_gift":
        gift = crud.record_apple_gift(
            session=session,
            sender_id=_uuid(metadata.get("sender_id")),
            creator_id=_uuid(metadata.get("creator_id")),
            post_id=_uuid(metadata.get("post_id")),
            amount=int(metadata.get("apple_count")),
            price_per_apple=Decimal(str(metadata.get("price_per_apple"))),
            total_amount=Decimal(str(metadata.get("total_amount"))),
            currency=str(checkout.get("currency") or "usd"),
        )
        logger.info(f"Apple gift recorded: {gift.amount} apples to {gift.creator_id}")
        return

    creator_id = _uuid(metadata.get("creator_id"))
    subscriber_id = _uuid(metadata.get("subscriber_id"))
    if creator_id and subscriber_id:
        crud.activate_subscription(
            session=session,
            subscriber_id=subscriber_id,
            creator_id=creator_id,
            stripe_subscription_id=checkout.get("subscription"),
        )
        amount_total = checkout.get("amount_total") or 0
        crud.record_transaction(
            session=session,
            subscriber_id=subscriber_id,
            creator_id=creator_id,
            amount=(Decimal(amount_total) / 100).quantize(Decimal("0.01")),
            currency=str(checkout.get("currency") or "usd"),
        )
        logger.info(f"Subscription activated: {subscriber_id} -> {creator_id}")
        return

    logger.info(f"Checkout session {checkout.get('id')} has no known metadata, ignored")


@router.post("/stripe", response_model=ApiEnvelope)
def stripe_webhook(
    payload: RawBody,
    session: SessionDep,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
) -> ApiEnvelope:
    """
    Stripe webhook

    - checkout.session.completed：记录苹果礼物，或激活订阅并记录付款流水
    - customer.subscription.deleted：把对应订阅置为 canceled
    - 其他事件：记录日志后确认接收

    同一事件重投时 event.id 不变，stripe_events 的唯一约束保证只处理一次。
    处理失败返回 500，由 Stripe 重投。
    """
    if not stripe_signature:
        raise AppError(code=400501, message="No signature", status_code=400)
    if not settings.STRIPE_WEBHOOK_SECRET:
        raise AppError(code=500201, message="Stripe not configured", status_code=500)

    try:
        event = parse_webhook_event(payload, stripe_signature, settings.STRIPE_WEBHOOK_SECRET)
    except (stripe.SignatureVerificationError, ValueError) as e:
        logger.warning(f"Webhook signature verification failed: {e}")
        raise AppError(code=400502, message="Invalid signature", status_code=400)

    event_id = str(event.get("id") or "")
    event_type = str(event.get("type") or "")
    if not event_id or not event_type:
        raise AppError(code=400503, message="Missing event id/type", status_code=400)

    # Idempotency: Stripe redeliveries reuse the same event.id
    try:
        session.add(StripeEvent(event_id=event_id, event_type=event_type, payload=event))
        session.flush()
    except IntegrityError:
        session.rollback()
        return ApiEnvelope(data={"received": True, "duplicate": True})

    obj = (event.get("data") or {}).get("object") or {}
    try:
        if event_type == "checkout.session.completed":
            _handle_checkout_completed(session, obj)
        elif event_type == "customer.subscription.deleted":
            sub_id = obj.get("id")
            if sub_id:
                crud.mark_subscription_deleted(session=session, stripe_subscription_id=sub_id)
        else:
            logger.info(f"Unhandled event type: {event_type}")
        session.commit()
    except Exception:
        session.rollback()
        logger.exception(f"Error processing webhook {event_id} ({event_type})")
        raise AppError(code=500501, message="Webhook handler failed", status_code=500)

    return ApiEnvelope(data={"received": True})
