# routes/payments.py
from decimal import Decimal
from typing import List

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError

from core.errors import Internal, ValidationFailed
from core.tenancy import OrgContext, get_org_context
from models.models import Member, Payment, Subscription, utcnow
from schemas.payment_schema import PaymentCreate, PaymentRead

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Payments"])


# ==================================================================
#  ✅ List Payments (newest first)
# ==================================================================
@router.get("", response_model=List[PaymentRead])
def list_payments(ctx: OrgContext = Depends(get_org_context)):
    return ctx.session.exec(ctx.scoped(Payment).order_by(desc(Payment.created_at))).all()


# ==================================================================
#  ✅ Record a Payment
# ==================================================================
@router.post("", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
def record_payment(data: PaymentCreate, ctx: OrgContext = Depends(get_org_context)):
    if data.member_id is not None and not ctx.get(Member, data.member_id):
        raise ValidationFailed("Member not found in your organization", errors={"memberId": ["Unknown member"]})
    if data.subscription_id is not None and not ctx.get(Subscription, data.subscription_id):
        raise ValidationFailed(
            "Subscription not found in your organization",
            errors={"subscriptionId": ["Unknown subscription"]},
        )

    now = utcnow()
    payment = Payment(
        organization_id=ctx.organization_id,
        initiated_by_id=ctx.user.id,
        member_id=data.member_id,
        subscription_id=data.subscription_id,
        amount=Decimal(str(data.amount)),
        currency=data.currency.upper(),
        status=data.status.value,
        method=data.method.value,
        description=data.description,
        created_at=now,
        updated_at=now,
    )
    ctx.user.last_payment = now
    try:
        ctx.session.add(payment)
        ctx.session.add(ctx.user)
        ctx.session.commit()
        ctx.session.refresh(payment)
    except SQLAlchemyError:
        ctx.session.rollback()
        logger.exception("Failed to record payment in organization %s", ctx.organization_id)
        raise Internal("Failed to record payment")

    logger.info("Payment %s recorded (%s %s)", payment.id, payment.amount, payment.currency)
    return payment
