# member_schema.py
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from models.models import MemberStatus
from schemas.base import APIModel, UTCDatetime


class MemberCreate(APIModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    status: MemberStatus
    phone_number: Optional[str] = Field(default=None, max_length=50)
    join_date: Optional[UTCDatetime] = None
    notes: Optional[str] = None


class MemberUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    status: Optional[MemberStatus] = None
    phone_number: Optional[str] = Field(default=None, max_length=50)
    join_date: Optional[UTCDatetime] = None
    notes: Optional[str] = None


class MemberRead(APIModel):
    id: int
    organization_id: int
    name: str
    email: Optional[str] = None
    phone_number: Optional[str] = None
    status: str
    join_date: datetime
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
