# event_schema.py
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import EmailStr, Field

from schemas.base import APIModel, UTCDatetime

MAX_GUESTS = 100


# ---------------------------
# Admin: create / update
# ---------------------------
class EventCreate(APIModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    date: UTCDatetime
    end_date: Optional[UTCDatetime] = None
    location: Optional[str] = Field(default=None, max_length=255)
    location_details: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    is_private: bool = False
    registration_deadline: Optional[UTCDatetime] = None
    event_image_id: Optional[str] = None


class EventUpdate(APIModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = None
    date: Optional[UTCDatetime] = None
    end_date: Optional[UTCDatetime] = None
    location: Optional[str] = Field(default=None, max_length=255)
    location_details: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=0)
    is_private: Optional[bool] = None
    registration_deadline: Optional[UTCDatetime] = None
    event_image_id: Optional[str] = None


# ---------------------------
# Admin: read
# ---------------------------
class StatusCategory(str, Enum):
    UPCOMING = "upcoming"
    PAST = "past"
    CANCELED = "canceled"


class OrganizerSummary(APIModel):
    id: int
    name: Optional[str] = None
    email: str


class EventRead(APIModel):
    id: int
    title: str
    description: str = ""
    date: datetime
    end_date: Optional[datetime] = None
    time: str
    location: str
    location_details: str = ""
    capacity: int = 0
    registered: int = 0
    # Display category; the stored lifecycle status is eventStatus
    status: StatusCategory
    event_status: str
    is_private: bool
    registration_deadline: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    image: str = ""
    organizer: Optional[OrganizerSummary] = None


class RegistrationRead(APIModel):
    """Registration flattened with the registrant's contact details."""

    id: int
    status: str
    registration_date: datetime
    guests_count: int
    notes: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    user_id: Optional[int] = None


# ---------------------------
# Public
# ---------------------------
class PublicEventRead(APIModel):
    id: int
    title: str
    description: Optional[str] = None
    date: datetime
    formatted_date: str
    location: Optional[str] = None
    organizer: str
    capacity: Optional[int] = None
    registered: int
    image: str
    is_full: bool


class PublicEventDetail(PublicEventRead):
    start_time: str
    end_time: Optional[str] = None
    location_details: Optional[str] = None
    registration_deadline: Optional[datetime] = None
    has_deadline_passed: bool


# ---------------------------
# Registration requests
# ---------------------------
class RegisterRequest(APIModel):
    guests_count: int = Field(default=0, ge=0, le=MAX_GUESTS)
    notes: Optional[str] = None


class PublicRegisterRequest(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    guests_count: int = Field(default=0, ge=0, le=MAX_GUESTS)
    notes: Optional[str] = None
    phone: Optional[str] = Field(default=None, max_length=50)


class RegistrationSummary(APIModel):
    id: int
    status: str


class RegistrationResult(APIModel):
    message: str
    registration: Optional[RegistrationSummary] = None
