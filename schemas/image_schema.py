# image_schema.py
from enum import Enum
from typing import Optional

from pydantic import Field

from schemas.base import APIModel


class ImageUpload(APIModel):
    # base64 payload, with or without a "data:<mime>;base64," prefix
    data: str = Field(..., min_length=1)
    mime_type: str = Field(..., min_length=1, max_length=100)
    filename: Optional[str] = Field(default=None, max_length=255)
    width: Optional[int] = Field(default=None, ge=0)
    height: Optional[int] = Field(default=None, ge=0)
    alt: Optional[str] = Field(default=None, max_length=500)


class ImageRead(APIModel):
    id: str
    url: str
    mime_type: str
    size: int
    width: Optional[int] = None
    height: Optional[int] = None


class AttachTarget(str, Enum):
    USER = "user"
    EVENT = "event"


class ImageAttach(APIModel):
    image_id: str = Field(..., min_length=1)
    target_type: AttachTarget
    user_id: Optional[int] = None
    event_id: Optional[int] = None


class ImageAttachResponse(APIModel):
    message: str
    image_url: str
