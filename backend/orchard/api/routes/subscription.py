from __future__ import annotations

import uuid

from fastapi import APIRouter

from orchard import crud
from orchard.api.deps import CurrentUser, OptionalUser, SessionDep
from orchard.api.schemas import ApiEnvelope, SubscriptionStatusData
from orchard.services.entitlement import has_active_subscription
from orchard.services.presenters import present_subscriptions

router = APIRouter(prefix="/subscription", tags=["subscription"])


@router.get("/status/{creator_id}", response_model=ApiEnvelope)
def status(session: SessionDep, viewer: OptionalUser, creator_id: uuid.UUID) -> ApiEnvelope:
    """当前用户是否订阅了该创作者（匿名用户始终为 false）"""
    subscribed = has_active_subscription(
        session=session,
        subscriber_id=viewer.id if viewer else None,
        creator_id=creator_id,
    )
    return ApiEnvelope(data=SubscriptionStatusData(is_subscribed=subscribed))


@router.post("/{subscription_id}/cancel", response_model=ApiEnvelope)
def cancel(session: SessionDep, current_user: CurrentUser, subscription_id: uuid.UUID) -> ApiEnvelope:
    """
    取消订阅

    只有订阅者本人可以取消。取消后立即失去非预览作品的访问权。
    """
    subscription = crud.cancel_subscription(
        session=session, subscription_id=subscription_id, subscriber_id=current_user.id
    )
    return ApiEnvelope(data=present_subscriptions(session=session, subscriptions=[subscription])[0])
