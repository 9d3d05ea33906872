# ================================================================
# services/image_service.py — base64 decoding and image URLs
# ================================================================
import base64
import binascii
from typing import Tuple

from core.errors import ValidationFailed

# One year; image rows never change once written
CACHE_CONTROL = "public, max-age=31536000, immutable"


def image_url(image_id: str) -> str:
    return f"/api/images/{image_id}"


def split_data_url(payload: str, fallback_mime: str) -> Tuple[str, str]:
    """Strip a ``data:<mime>;base64,`` prefix; returns (mime_type, base64_body)."""
    if payload.startswith("data:") and "," in payload:
        header, body = payload.split(",", 1)
        mime = header[len("data:"):].split(";", 1)[0]
        return mime or fallback_mime, body
    return fallback_mime, payload


def decode_image_payload(payload: str) -> bytes:
    """Decode strict base64 into bytes; 400 on malformed or empty input."""
    try:
        data = base64.b64decode(payload.strip(), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationFailed("Invalid image data", errors={"data": ["Not valid base64"]})
    if not data:
        raise ValidationFailed("Invalid image data", errors={"data": ["Image is empty"]})
    return data
