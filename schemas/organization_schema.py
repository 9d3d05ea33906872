# organization_schema.py
from datetime import datetime

from pydantic import Field

from schemas.base import APIModel


class OrganizationSettings(APIModel):
    name: str = Field(..., min_length=1, max_length=100)


class OrganizationRead(APIModel):
    id: int
    name: str
    admin_id: int
    created_at: datetime
    updated_at: datetime


class OrganizationSettingsResponse(APIModel):
    message: str
    organization: OrganizationRead
