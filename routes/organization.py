# routes/organization.py
from fastapi import APIRouter, Depends
from sqlmodel import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

import logging

from core.database import get_session
from core.errors import Internal, ValidationFailed
from core.security import require_admin
from core.tenancy import find_organization
from models.models import Organization, User, utcnow
from schemas.organization_schema import OrganizationRead, OrganizationSettings, OrganizationSettingsResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Organization Settings"])


# ==================================================================
#  ✅ GET MY ORGANIZATION SETTINGS
# ==================================================================
@router.get("")
def get_organization_settings(
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    """Name of the caller's organization; empty when none exists yet."""
    organization = find_organization(session, current_user.id)
    return {"name": organization.name if organization else ""}


# ==================================================================
#  ✅ CREATE OR RENAME MY ORGANIZATION
# ==================================================================
@router.post("", response_model=OrganizationSettingsResponse)
def upsert_organization_settings(
    data: OrganizationSettings,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    name = data.name.strip()
    if not name:
        raise ValidationFailed("Organization name is required", errors={"name": ["Must not be blank"]})

    organization = find_organization(session, current_user.id)
    now = utcnow()
    if organization:
        organization.name = name
        organization.updated_at = now
        message = "Organization updated successfully"
    else:
        organization = Organization(name=name, admin_id=current_user.id, created_at=now, updated_at=now)
        message = "Organization created successfully"

    try:
        session.add(organization)
        session.commit()
        session.refresh(organization)
    except IntegrityError:
        session.rollback()
        raise ValidationFailed("You already administer an organization")
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to save organization for admin %s", current_user.id)
        raise Internal("Failed to save organization settings")

    logger.info("%s (id %s)", message, organization.id)
    return OrganizationSettingsResponse(message=message, organization=OrganizationRead.model_validate(organization))
