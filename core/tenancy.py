"""
Organization scoping.

Every tenant-owned route depends on ``get_org_context``: it runs the session
guard, resolves the single organization the principal administers, and hands
the handler an ``OrgContext`` whose helpers always filter by that
organization. Handlers never build the ``organization_id`` filter themselves.
"""

from dataclasses import dataclass
from typing import Optional, Type, TypeVar

import logging

from fastapi import Depends
from sqlmodel import Session, SQLModel, select

from core.database import get_session
from core.errors import NotFound
from core.security import get_current_user
from models.models import Organization, User

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)


@dataclass
class OrgContext:
    user: User
    organization: Organization
    session: Session

    @property
    def organization_id(self) -> int:
        return self.organization.id

    def scoped(self, model: Type[ModelT], *criteria):
        """``select(model)`` restricted to this organization, plus any extra criteria."""
        return select(model).where(model.organization_id == self.organization_id, *criteria)

    def get(self, model: Type[ModelT], row_id) -> Optional[ModelT]:
        """Row by primary key, or None when absent or owned by another organization."""
        row = self.session.get(model, row_id)
        if row is None or row.organization_id != self.organization_id:
            return None
        return row

    def get_or_404(self, model: Type[ModelT], row_id, detail: Optional[str] = None) -> ModelT:
        row = self.get(model, row_id)
        if row is None:
            raise NotFound(detail or f"{model.__name__} not found")
        return row


def find_organization(session: Session, admin_id: int) -> Optional[Organization]:
    return session.exec(select(Organization).where(Organization.admin_id == admin_id)).first()


def get_org_context(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
) -> OrgContext:
    organization = find_organization(session, current_user.id)
    if not organization:
        logger.warning("No organization found for admin id %s", current_user.id)
        raise NotFound("Organization not found")
    return OrgContext(user=current_user, organization=organization, session=session)
