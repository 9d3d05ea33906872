# routes/images.py
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from core.database import get_session
from core.errors import Forbidden, Internal, NotFound, ValidationFailed
from core.security import get_current_user
from models.models import Event, Image, User, utcnow
from schemas.image_schema import AttachTarget, ImageAttach, ImageAttachResponse, ImageRead, ImageUpload
from services.image_service import CACHE_CONTROL, decode_image_payload, image_url, split_data_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Images"])


# ==================================================================
#  ✅ Upload (base64 JSON body)
# ==================================================================
@router.post("", response_model=ImageRead, status_code=status.HTTP_201_CREATED)
def upload_image(
    data: ImageUpload,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    mime_type, body = split_data_url(data.data, data.mime_type)
    if not mime_type.startswith("image/"):
        raise ValidationFailed("Only image uploads are supported", errors={"mimeType": ["Must be an image type"]})
    payload = decode_image_payload(body)

    image = Image(
        data=payload,
        mime_type=mime_type,
        filename=data.filename or "image",
        size=len(payload),
        width=data.width,
        height=data.height,
        alt=data.alt,
        created_at=utcnow(),
    )
    try:
        session.add(image)
        session.commit()
        session.refresh(image)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to store image for user %s", current_user.id)
        raise Internal("Failed to upload image")

    logger.info("Image %s stored (%s, %d bytes)", image.id, image.mime_type, image.size)
    return ImageRead(
        id=image.id,
        url=image_url(image.id),
        mime_type=image.mime_type,
        size=image.size,
        width=image.width,
        height=image.height,
    )


# ==================================================================
#  ✅ Attach to a profile or an event
# ==================================================================
@router.patch("/attach", response_model=ImageAttachResponse)
def attach_image(
    data: ImageAttach,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    if not session.get(Image, data.image_id):
        raise NotFound("Image not found")

    if data.target_type == AttachTarget.USER:
        # No userId means the caller's own profile
        if data.user_id is not None and data.user_id != current_user.id:
            raise Forbidden("Not authorized to modify this user")
        target = current_user
        target.profile_image_id = data.image_id
        message = "Profile image updated successfully"
    else:
        if data.event_id is None:
            raise ValidationFailed("Missing event ID", errors={"eventId": ["Required for event targets"]})
        target = session.get(Event, data.event_id)
        if not target:
            raise NotFound("Event not found")
        if target.organizer_id != current_user.id:
            raise Forbidden("Not authorized to modify this event")
        target.event_image_id = data.image_id
        message = "Event image updated successfully"

    target.updated_at = utcnow()
    try:
        session.add(target)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to attach image %s", data.image_id)
        raise Internal("Failed to attach image")

    return ImageAttachResponse(message=message, image_url=image_url(data.image_id))


# ==================================================================
#  ✅ Serve raw bytes (public, immutable)
# ==================================================================
@router.get("/{image_id}")
def get_image(image_id: str, session: Session = Depends(get_session)):
    image = session.get(Image, image_id)
    if not image:
        raise NotFound("Image not found")
    return Response(
        content=image.data,
        media_type=image.mime_type,
        headers={
            "Content-Length": str(len(image.data)),
            "Cache-Control": CACHE_CONTROL,
        },
    )
