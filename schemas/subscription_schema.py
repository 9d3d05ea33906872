# subscription_schema.py
from datetime import datetime
from typing import Optional

from models.models import SubscriptionStatus
from schemas.base import APIModel, UTCDatetime
from schemas.plan_schema import PlanSummary


class SubscriptionCreate(APIModel):
    member_id: Optional[int] = None
    plan_id: int
    custom_start_date: Optional[UTCDatetime] = None


class SubscriptionUpdate(APIModel):
    plan_id: Optional[int] = None
    status: Optional[SubscriptionStatus] = None
    current_period_start: Optional[UTCDatetime] = None
    current_period_end: Optional[UTCDatetime] = None
    cancel_at_period_end: Optional[bool] = None
    canceled_at: Optional[UTCDatetime] = None
    trial_start_date: Optional[UTCDatetime] = None
    trial_end_date: Optional[UTCDatetime] = None


class MemberSummary(APIModel):
    id: int
    name: str
    email: Optional[str] = None


class SubscriptionRead(APIModel):
    id: int
    organization_id: int
    managed_by_id: int
    member_id: Optional[int] = None
    plan_id: int
    status: str
    start_date: datetime
    current_period_start: datetime
    current_period_end: datetime
    cancel_at_period_end: bool
    canceled_at: Optional[datetime] = None
    trial_start_date: Optional[datetime] = None
    trial_end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    plan: Optional[PlanSummary] = None
    member: Optional[MemberSummary] = None
