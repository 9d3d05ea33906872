# routes/users.py
from fastapi import APIRouter, Depends, status
from sqlalchemy import desc
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError

from models.models import Member, Payment, utcnow
from schemas.member_schema import MemberCreate, MemberRead, MemberUpdate
from core.errors import Internal, ValidationFailed
from core.tenancy import OrgContext, get_org_context

import logging
logger = logging.getLogger(__name__)


# Mounted at both /api/members and /api/users
router = APIRouter(tags=["Members"])


def ensure_email_free(ctx: OrgContext, email: Optional[str], exclude_id: Optional[int] = None) -> None:
    """Member emails are unique within one organization."""
    if not email:
        return
    criteria = [Member.email == email]
    if exclude_id is not None:
        criteria.append(Member.id != exclude_id)
    if ctx.session.exec(ctx.scoped(Member, *criteria)).first():
        raise ValidationFailed(
            "Email already in use by another member.",
            errors={"email": ["Already in use by another member"]},
        )


# ----------------------------------------------------------------------
# ✅ List Members (organization scoped)
# ----------------------------------------------------------------------
@router.get("", response_model=List[MemberRead])
def list_members(ctx: OrgContext = Depends(get_org_context)):
    return ctx.session.exec(ctx.scoped(Member).order_by(desc(Member.created_at))).all()


# ----------------------------------------------------------------------
# ✅ Create Member
# ----------------------------------------------------------------------
@router.post("", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
def create_member(data: MemberCreate, ctx: OrgContext = Depends(get_org_context)):
    ensure_email_free(ctx, data.email)

    now = utcnow()
    member = Member(
        organization_id=ctx.organization_id,
        name=data.name,
        email=data.email,
        phone_number=data.phone_number,
        status=data.status.value,
        join_date=data.join_date or now,
        notes=data.notes or "",
        created_at=now,
        updated_at=now,
    )
    try:
        ctx.session.add(member)
        ctx.session.commit()
        ctx.session.refresh(member)
    except SQLAlchemyError:
        ctx.session.rollback()
        logger.exception("Failed to create member in organization %s", ctx.organization_id)
        raise Internal("Failed to create member")

    logger.info("Member %s created in organization %s", member.id, ctx.organization_id)
    return member


# ----------------------------------------------------------------------
# ✅ Get Single Member
# ----------------------------------------------------------------------
@router.get("/{member_id}", response_model=MemberRead)
def get_member(member_id: int, ctx: OrgContext = Depends(get_org_context)):
    return ctx.get_or_404(Member, member_id, "Member not found")


# ----------------------------------------------------------------------
# ✅ Update Member
# ----------------------------------------------------------------------
@router.put("/{member_id}", response_model=MemberRead)
def update_member(member_id: int, data: MemberUpdate, ctx: OrgContext = Depends(get_org_context)):
    member = ctx.get_or_404(Member, member_id, "Member not found")

    updates = data.model_dump(exclude_unset=True)
    if updates.get("email") and updates["email"] != member.email:
        ensure_email_free(ctx, updates["email"], exclude_id=member.id)

    for field, value in updates.items():
        if field == "status" and value is not None:
            value = value.value
        if field in ("name", "status", "join_date") and value is None:
            continue
        setattr(member, field, value)
    member.updated_at = utcnow()

    try:
        ctx.session.add(member)
        ctx.session.commit()
        ctx.session.refresh(member)
    except SQLAlchemyError:
        ctx.session.rollback()
        logger.exception("Failed to update member %s", member_id)
        raise Internal("Failed to update member")
    return member


# ----------------------------------------------------------------------
# ✅ Delete Member (hard delete)
# ----------------------------------------------------------------------
@router.delete("/{member_id}")
def delete_member(member_id: int, ctx: OrgContext = Depends(get_org_context)):
    member = ctx.get_or_404(Member, member_id, "Member not found")
    try:
        # Payment history outlives the member
        for payment in ctx.session.exec(ctx.scoped(Payment, Payment.member_id == member.id)).all():
            payment.member_id = None
            ctx.session.add(payment)
        ctx.session.delete(member)
        ctx.session.commit()
    except SQLAlchemyError:
        ctx.session.rollback()
        logger.exception("Failed to delete member %s", member_id)
        raise Internal("Failed to delete member")

    logger.info("Member %s deleted from organization %s", member_id, ctx.organization_id)
    return {"message": "Member deleted successfully"}
