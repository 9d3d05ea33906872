# models/models.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import JSON, Column, LargeBinary, UniqueConstraint
from sqlmodel import Field, Relationship, SQLModel


def utcnow() -> datetime:
    """Naive UTC timestamp; SQLite drops tzinfo so every stored datetime is naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================
# ENUMS
# ============================================================
class UserRole(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"


class BillingInterval(str, Enum):
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CANCELED = "CANCELED"
    PAST_DUE = "PAST_DUE"
    INCOMPLETE = "INCOMPLETE"
    TRIALING = "TRIALING"


class EventStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CANCELED = "CANCELED"


class RegistrationStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    WAITLISTED = "WAITLISTED"
    CANCELED_BY_USER = "CANCELED_BY_USER"
    CANCELED_BY_ADMIN = "CANCELED_BY_ADMIN"
    ATTENDED = "ATTENDED"


class PaymentStatus(str, Enum):
    COMPLETED = "COMPLETED"
    PENDING = "PENDING"
    FAILED = "FAILED"


class PaymentMethod(str, Enum):
    CREDIT = "CREDIT"
    BANK = "BANK"
    CASH = "CASH"
    OTHER = "OTHER"


# Registrations that occupy seats
SEATED_STATUSES = (RegistrationStatus.CONFIRMED.value, RegistrationStatus.ATTENDED.value)


# ============================================================
# IMAGE (binary blob, immutable once created)
# ============================================================
class Image(SQLModel, table=True):
    __tablename__ = "image"

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True, max_length=32)
    data: bytes = Field(sa_column=Column(LargeBinary, nullable=False))
    mime_type: str = Field(max_length=100)
    filename: str = Field(default="image", max_length=255)
    size: int = Field(ge=0)
    width: Optional[int] = None
    height: Optional[int] = None
    alt: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utcnow)


# ============================================================
# USER (authenticated principal)
# ============================================================
class User(SQLModel, table=True):
    __tablename__ = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: Optional[str] = Field(default=None, max_length=100)
    email: str = Field(index=True, unique=True, max_length=255)
    password_hash: str = Field(nullable=False)
    role: str = Field(default=UserRole.ADMIN.value, max_length=20, index=True)
    status: str = Field(default=MemberStatus.ACTIVE.value, max_length=20)

    phone_number: Optional[str] = Field(default=None, max_length=50)
    join_date: datetime = Field(default_factory=utcnow)
    last_payment: Optional[datetime] = None
    notes: Optional[str] = None

    profile_image_id: Optional[str] = Field(default=None, foreign_key="image.id")

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    organized_events: List["Event"] = Relationship(back_populates="organizer")
    registrations: List["EventRegistration"] = Relationship(back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


# ============================================================
# ORGANIZATION (tenant, 1:1 with its administering user)
# ============================================================
class Organization(SQLModel, table=True):
    __tablename__ = "organization"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    admin_id: int = Field(foreign_key="user.id", unique=True, index=True)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    admin: Optional["User"] = Relationship()
    members: List["Member"] = Relationship(back_populates="organization")


# ============================================================
# MEMBER (person tracked by an organization)
# ============================================================
class Member(SQLModel, table=True):
    __tablename__ = "member"

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(foreign_key="organization.id", nullable=False, index=True)
    name: str = Field(max_length=100)
    email: Optional[str] = Field(default=None, max_length=255, index=True)
    phone_number: Optional[str] = Field(default=None, max_length=50)
    status: str = Field(default=MemberStatus.ACTIVE.value, max_length=20, index=True)
    join_date: datetime = Field(default_factory=utcnow)
    notes: Optional[str] = Field(default="")
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)

    organization: Optional["Organization"] = Relationship(back_populates="members")
    subscriptions: List["Subscription"] = Relationship(back_populates="member")


# ============================================================
# MEMBERSHIP PLAN
# ============================================================
class MembershipPlan(SQLModel, table=True):
    __tablename__ = "membership_plan"

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(foreign_key="organization.id", nullable=False, index=True)
    created_by_id: int = Field(foreign_key="user.id", nullable=False)

    name: str = Field(max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    price: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    currency: str = Field(default="USD", max_length=3)
    interval: str = Field(default=BillingInterval.MONTHLY.value, max_length=20)
    features: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    active: bool = Field(default=True)
    stripe_price_id: Optional[str] = Field(default=None, max_length=255)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    subscriptions: List["Subscription"] = Relationship(back_populates="plan")


# ============================================================
# SUBSCRIPTION
# ============================================================
class Subscription(SQLModel, table=True):
    __tablename__ = "subscription"

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(foreign_key="organization.id", nullable=False, index=True)
    managed_by_id: int = Field(foreign_key="user.id", nullable=False)
    member_id: Optional[int] = Field(default=None, foreign_key="member.id", index=True)
    plan_id: int = Field(foreign_key="membership_plan.id", nullable=False, index=True)

    status: str = Field(default=SubscriptionStatus.ACTIVE.value, max_length=20, index=True)
    stripe_subscription_id: Optional[str] = Field(default=None, max_length=255)
    start_date: datetime = Field(default_factory=utcnow)
    current_period_start: datetime = Field(default_factory=utcnow)
    current_period_end: datetime = Field(default_factory=utcnow)
    cancel_at_period_end: bool = Field(default=False)
    canceled_at: Optional[datetime] = None
    trial_start_date: Optional[datetime] = None
    trial_end_date: Optional[datetime] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    plan: Optional["MembershipPlan"] = Relationship(back_populates="subscriptions")
    member: Optional["Member"] = Relationship(back_populates="subscriptions")


# ============================================================
# EVENT
# ============================================================
class Event(SQLModel, table=True):
    __tablename__ = "event"

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(foreign_key="organization.id", nullable=False, index=True)
    organizer_id: int = Field(foreign_key="user.id", nullable=False, index=True)

    name: str = Field(max_length=200)
    description: Optional[str] = None
    date: datetime = Field(index=True)
    end_date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=255)
    location_details: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    is_private: bool = Field(default=False, index=True)
    registration_deadline: Optional[datetime] = None
    status: str = Field(default=EventStatus.SCHEDULED.value, max_length=20, index=True)
    event_image_id: Optional[str] = Field(default=None, foreign_key="image.id")

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    organizer: Optional["User"] = Relationship(back_populates="organized_events")
    registrations: List["EventRegistration"] = Relationship(back_populates="event")


# ============================================================
# EVENT REGISTRATION
# ============================================================
class EventRegistration(SQLModel, table=True):
    __tablename__ = "event_registration"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_user"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(foreign_key="event.id", nullable=False, index=True)
    organization_id: int = Field(foreign_key="organization.id", nullable=False, index=True)
    # Null for public (anonymous) registrants
    user_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)

    registrant_name: Optional[str] = Field(default=None, max_length=100)
    registrant_email: Optional[str] = Field(default=None, max_length=255, index=True)
    registrant_phone: Optional[str] = Field(default=None, max_length=50)

    status: str = Field(default=RegistrationStatus.CONFIRMED.value, max_length=20, index=True)
    guests_count: int = Field(default=0, ge=0)
    notes: Optional[str] = None
    registration_date: datetime = Field(default_factory=utcnow)

    event: Optional["Event"] = Relationship(back_populates="registrations")
    user: Optional["User"] = Relationship(back_populates="registrations")


# ============================================================
# PAYMENT
# ============================================================
class Payment(SQLModel, table=True):
    __tablename__ = "payment"

    id: Optional[int] = Field(default=None, primary_key=True)
    organization_id: int = Field(foreign_key="organization.id", nullable=False, index=True)
    initiated_by_id: int = Field(foreign_key="user.id", nullable=False)
    member_id: Optional[int] = Field(default=None, foreign_key="member.id", index=True)
    subscription_id: Optional[int] = Field(default=None, foreign_key="subscription.id", index=True)

    amount: Decimal = Field(max_digits=12, decimal_places=2)
    currency: str = Field(default="USD", max_length=3)
    status: str = Field(default=PaymentStatus.COMPLETED.value, max_length=20, index=True)
    method: str = Field(default=PaymentMethod.OTHER.value, max_length=20)
    description: Optional[str] = Field(default=None, max_length=500)

    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)

    member: Optional["Member"] = Relationship()
    subscription: Optional["Subscription"] = Relationship()


# ============================================================
# EXPORTS
# ============================================================
__all__ = [
    "utcnow",
    "Image",
    "User",
    "Organization",
    "Member",
    "MembershipPlan",
    "Subscription",
    "Event",
    "EventRegistration",
    "Payment",
    "UserRole",
    "MemberStatus",
    "BillingInterval",
    "SubscriptionStatus",
    "EventStatus",
    "RegistrationStatus",
    "PaymentStatus",
    "PaymentMethod",
    "SEATED_STATUSES",
]
