"""
苹果礼物路由模块

- 创作者查看收到的苹果及累计收入
- 创作者提交兑换申请（最低 100 个，不能超过可兑换余额）
"""
from __future__ import annotations

import logging

from fastapi import APIRouter

from orchard import crud
from orchard.api.deps import CurrentUser, SessionDep
from orchard.api.errors import creator_only
from orchard.api.schemas import ApiEnvelope, RedeemRequest, RedemptionData
from orchard.services import ledger
from orchard.services.presenters import money

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/apples", tags=["apples"])


@router.get("/summary", response_model=ApiEnvelope)
def summary(session: SessionDep, current_user: CurrentUser) -> ApiEnvelope:
    """
    苹果收入汇总（仅创作者）

    请求路径: GET /api/v1/apples/summary

    响应示例：
        {"code": 0, "message": "success",
         "data": {"gifts": [...], "total_apples": 5, "total_amount": "7.20",
                  "redeemed_apples": 0, "redeemable_apples": 5}}
    """
    if not current_user.is_creator:
        raise creator_only()
    return ApiEnvelope(data=ledger.apple_summary(session=session, creator_id=current_user.id))


@router.post("/redeem", response_model=ApiEnvelope)
def redeem(session: SessionDep, current_user: CurrentUser, body: RedeemRequest) -> ApiEnvelope:
    """
    提交兑换申请

    只生成 pending 记录，打款由人工处理。

    请求路径: POST /api/v1/apples/redeem
    """
    if not current_user.is_creator:
        raise creator_only()
    redeemable = ledger.redeemable_apples(session=session, creator_id=current_user.id)
    redemption = crud.create_redemption(
        session=session,
        creator_id=current_user.id,
        apple_count=body.apple_count,
        redeemable=redeemable,
    )
    logger.info(f"Redemption {redemption.id} of {redemption.apple_count} apples by {current_user.id}")
    return ApiEnvelope(
        data=RedemptionData(
            id=redemption.id,
            apple_count=redemption.apple_count,
            amount=money(redemption.amount),
            currency=redemption.currency,
            status=redemption.status,
            created_at=redemption.created_at,
        )
    )
