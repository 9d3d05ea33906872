# plan_schema.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from models.models import BillingInterval
from schemas.base import MAX_AMOUNT, APIModel


class PlanCreate(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: float = Field(..., gt=0, lt=MAX_AMOUNT, allow_inf_nan=False)
    currency: str = Field(default="USD", max_length=3)
    interval: BillingInterval
    features: List[str] = Field(default_factory=list)
    active: bool = True
    stripe_price_id: Optional[str] = Field(default=None, max_length=255)


class PlanUpdate(APIModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: Optional[float] = Field(default=None, gt=0, lt=MAX_AMOUNT, allow_inf_nan=False)
    currency: Optional[str] = Field(default=None, max_length=3)
    interval: Optional[BillingInterval] = None
    features: Optional[List[str]] = None
    active: Optional[bool] = None
    stripe_price_id: Optional[str] = Field(default=None, max_length=255)


class PlanRead(APIModel):
    id: int
    organization_id: int
    created_by_id: int
    name: str
    description: Optional[str] = None
    price: float
    currency: str
    interval: str
    features: List[str] = []
    active: bool
    stripe_price_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PlanSummary(APIModel):
    id: int
    name: str
    price: float
    interval: str
    currency: str
