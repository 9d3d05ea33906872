# payment_schema.py
from datetime import datetime
from typing import Optional

from pydantic import Field

from models.models import PaymentMethod, PaymentStatus
from schemas.base import MAX_AMOUNT, APIModel
from schemas.subscription_schema import MemberSummary


class PaymentCreate(APIModel):
    amount: float = Field(..., gt=0, lt=MAX_AMOUNT, allow_inf_nan=False)
    currency: str = Field(default="USD", max_length=3)
    member_id: Optional[int] = None
    subscription_id: Optional[int] = None
    status: PaymentStatus = PaymentStatus.COMPLETED
    method: PaymentMethod = PaymentMethod.OTHER
    description: Optional[str] = Field(default=None, max_length=500)


class PaymentRead(APIModel):
    id: int
    organization_id: int
    initiated_by_id: int
    member_id: Optional[int] = None
    subscription_id: Optional[int] = None
    amount: float
    currency: str
    status: str
    method: str
    description: Optional[str] = None
    created_at: datetime
    member: Optional[MemberSummary] = None
