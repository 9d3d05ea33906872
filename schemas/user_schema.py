# user_schema.py
from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field

from schemas.base import APIModel


# ---------------------------
# Create & Auth
# ---------------------------
class SignupRequest(APIModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    organization_name: Optional[str] = Field(default=None, max_length=100)
    # role is set server-side (every signup administers its own organization)


class LoginRequest(APIModel):
    email: EmailStr
    password: str


# ---------------------------
# Read
# ---------------------------
class UserRead(APIModel):
    id: int
    name: Optional[str] = None
    email: str
    role: str
    status: str
    phone_number: Optional[str] = None
    join_date: Optional[datetime] = None
    last_payment: Optional[datetime] = None
    profile_image_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TokenResponse(APIModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
    organization_id: Optional[int] = None
