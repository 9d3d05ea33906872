# routes/subscriptions.py
from typing import List

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError

from core.errors import Internal, ValidationFailed
from core.tenancy import OrgContext, get_org_context
from models.models import Member, MembershipPlan, Subscription, SubscriptionStatus, utcnow
from schemas.subscription_schema import SubscriptionCreate, SubscriptionRead, SubscriptionUpdate
from services.subscription_service import period_end

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Subscriptions"])


def _commit(ctx: OrgContext, subscription: Subscription, action: str) -> Subscription:
    try:
        ctx.session.add(subscription)
        ctx.session.commit()
        ctx.session.refresh(subscription)
    except SQLAlchemyError:
        ctx.session.rollback()
        logger.exception("Failed to %s subscription in organization %s", action, ctx.organization_id)
        raise Internal(f"Failed to {action} subscription")
    return subscription


# ==================================================================
#  ✅ List Subscriptions
# ==================================================================
@router.get("", response_model=List[SubscriptionRead])
def list_subscriptions(ctx: OrgContext = Depends(get_org_context)):
    return ctx.session.exec(ctx.scoped(Subscription).order_by(desc(Subscription.created_at))).all()


# ==================================================================
#  ✅ Assign a Plan (create subscription)
# ==================================================================
@router.post("", response_model=SubscriptionRead, status_code=status.HTTP_201_CREATED)
def create_subscription(data: SubscriptionCreate, ctx: OrgContext = Depends(get_org_context)):
    plan = ctx.get(MembershipPlan, data.plan_id)
    if not plan:
        raise ValidationFailed("Plan not found in your organization", errors={"planId": ["Unknown plan"]})
    if not plan.active:
        raise ValidationFailed("Plan is not active", errors={"planId": ["Plan is not active"]})

    if data.member_id is not None and not ctx.get(Member, data.member_id):
        raise ValidationFailed("Member not found in your organization", errors={"memberId": ["Unknown member"]})

    now = utcnow()
    start = data.custom_start_date or now
    subscription = Subscription(
        organization_id=ctx.organization_id,
        managed_by_id=ctx.user.id,
        member_id=data.member_id,
        plan_id=plan.id,
        status=SubscriptionStatus.ACTIVE.value,
        start_date=start,
        current_period_start=start,
        current_period_end=period_end(start, plan.interval),
        created_at=now,
        updated_at=now,
    )
    subscription = _commit(ctx, subscription, "create")
    logger.info("Subscription %s created for plan %s", subscription.id, plan.id)
    return subscription


# ==================================================================
#  ✅ Get Single Subscription
# ==================================================================
@router.get("/{subscription_id}", response_model=SubscriptionRead)
def get_subscription(subscription_id: int, ctx: OrgContext = Depends(get_org_context)):
    return ctx.get_or_404(Subscription, subscription_id, "Subscription not found")


# ==================================================================
#  ✅ Update Subscription (status, plan, period)
# ==================================================================
@router.put("/{subscription_id}", response_model=SubscriptionRead)
def update_subscription(
    subscription_id: int,
    data: SubscriptionUpdate,
    ctx: OrgContext = Depends(get_org_context),
):
    subscription = ctx.get_or_404(Subscription, subscription_id, "Subscription not found")
    updates = data.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationFailed("At least one field must be provided for update")

    if "plan_id" in updates and updates["plan_id"] is not None:
        if not ctx.get(MembershipPlan, updates["plan_id"]):
            raise ValidationFailed("Plan not found in your organization", errors={"planId": ["Unknown plan"]})

    for field, value in updates.items():
        if field == "status":
            if value is None:
                continue
            value = value.value
            if value == SubscriptionStatus.CANCELED.value and not subscription.canceled_at:
                subscription.canceled_at = updates.get("canceled_at") or utcnow()
        elif field in ("plan_id", "current_period_start", "current_period_end", "cancel_at_period_end") and value is None:
            continue
        setattr(subscription, field, value)
    subscription.updated_at = utcnow()

    return _commit(ctx, subscription, "update")


# ==================================================================
#  ✅ Delete Subscription
# ==================================================================
@router.delete("/{subscription_id}")
def delete_subscription(subscription_id: int, ctx: OrgContext = Depends(get_org_context)):
    subscription = ctx.get_or_404(Subscription, subscription_id, "Subscription not found")
    try:
        ctx.session.delete(subscription)
        ctx.session.commit()
    except SQLAlchemyError:
        ctx.session.rollback()
        logger.exception("Failed to delete subscription %s", subscription_id)
        raise Internal("Failed to delete subscription")
    return {"message": "Subscription deleted successfully"}
