# routes/plans.py
from decimal import Decimal
from typing import List

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select

from core.errors import Conflict, Forbidden, Internal, ValidationFailed
from core.tenancy import OrgContext, get_org_context
from models.models import MembershipPlan, Subscription, utcnow
from schemas.plan_schema import PlanCreate, PlanRead, PlanUpdate

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Plans"])


def require_org_admin(ctx: OrgContext = Depends(get_org_context)) -> OrgContext:
    if not ctx.user.is_admin:
        raise Forbidden("Admin privileges required")
    return ctx


# ==================================================================
#  ✅ List Plans (organization scoped)
# ==================================================================
@router.get("", response_model=List[PlanRead])
def list_plans(ctx: OrgContext = Depends(get_org_context)):
    return ctx.session.exec(ctx.scoped(MembershipPlan).order_by(desc(MembershipPlan.created_at))).all()


# ==================================================================
#  ✅ Create Plan (ADMIN only)
# ==================================================================
@router.post("", response_model=PlanRead, status_code=status.HTTP_201_CREATED)
def create_plan(data: PlanCreate, ctx: OrgContext = Depends(require_org_admin)):
    now = utcnow()
    plan = MembershipPlan(
        organization_id=ctx.organization_id,
        created_by_id=ctx.user.id,
        name=data.name,
        description=data.description,
        price=Decimal(str(data.price)),
        currency=data.currency.upper(),
        interval=data.interval.value,
        features=list(data.features),
        active=data.active,
        stripe_price_id=data.stripe_price_id,
        created_at=now,
        updated_at=now,
    )
    try:
        ctx.session.add(plan)
        ctx.session.commit()
        ctx.session.refresh(plan)
    except SQLAlchemyError:
        ctx.session.rollback()
        logger.exception("Failed to create plan in organization %s", ctx.organization_id)
        raise Internal("Failed to create membership plan")

    logger.info("Plan %s created by user %s", plan.id, ctx.user.id)
    return plan


# ==================================================================
#  ✅ Get Single Plan
# ==================================================================
@router.get("/{plan_id}", response_model=PlanRead)
def get_plan(plan_id: int, ctx: OrgContext = Depends(get_org_context)):
    return ctx.get_or_404(MembershipPlan, plan_id, "Plan not found")


# ==================================================================
#  ✅ Update Plan
# ==================================================================
@router.put("/{plan_id}", response_model=PlanRead)
def update_plan(plan_id: int, data: PlanUpdate, ctx: OrgContext = Depends(require_org_admin)):
    plan = ctx.get_or_404(MembershipPlan, plan_id, "Plan not found")

    updates = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
    if not updates:
        raise ValidationFailed("At least one field must be provided for update")

    for field, value in updates.items():
        if field == "price":
            value = Decimal(str(value))
        elif field == "interval":
            value = value.value
        elif field == "currency":
            value = value.upper()
        setattr(plan, field, value)
    plan.updated_at = utcnow()

    try:
        ctx.session.add(plan)
        ctx.session.commit()
        ctx.session.refresh(plan)
    except SQLAlchemyError:
        ctx.session.rollback()
        logger.exception("Failed to update plan %s", plan_id)
        raise Internal("Failed to update membership plan")
    return plan


# ==================================================================
#  ✅ Delete Plan (blocked while subscriptions reference it)
# ==================================================================
@router.delete("/{plan_id}")
def delete_plan(plan_id: int, ctx: OrgContext = Depends(require_org_admin)):
    plan = ctx.get_or_404(MembershipPlan, plan_id, "Plan not found")

    in_use = ctx.session.exec(
        select(func.count()).select_from(Subscription).where(Subscription.plan_id == plan.id)
    ).one()
    if in_use:
        raise Conflict(f"Plan has {in_use} subscription(s) and cannot be deleted")

    try:
        ctx.session.delete(plan)
        ctx.session.commit()
    except SQLAlchemyError:
        ctx.session.rollback()
        logger.exception("Failed to delete plan %s", plan_id)
        raise Internal("Failed to delete membership plan")

    logger.info("Plan %s deleted", plan_id)
    return {"message": "Plan deleted successfully"}
