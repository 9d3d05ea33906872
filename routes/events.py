# routes/events.py
from typing import List, Optional

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from core.database import Database, get_session
from core.errors import Internal, NotFound, ValidationFailed
from core.security import get_current_user
from core.tenancy import OrgContext, get_org_context
from models.models import (
    Event,
    EventRegistration,
    EventStatus,
    Image,
    RegistrationStatus,
    User,
    utcnow,
)
from schemas.event_schema import (
    EventCreate,
    EventRead,
    EventUpdate,
    RegisterRequest,
    RegistrationRead,
    RegistrationResult,
    RegistrationSummary,
)
from services import event_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Events"])

WAITLIST_MESSAGE = "Event is full. You have been added to the waitlist."
CANCELED_STATUSES = (
    RegistrationStatus.CANCELED_BY_USER.value,
    RegistrationStatus.CANCELED_BY_ADMIN.value,
)


# ==================================================================
#  ✅ Helpers
# ==================================================================
def organized_event(ctx: OrgContext, event_id: int) -> Event:
    """The event if the caller organizes it; NotFound otherwise, so existence is not disclosed."""
    event = ctx.get(Event, event_id)
    if not event or event.organizer_id != ctx.user.id:
        raise NotFound("Event not found or you don't have permission to manage it")
    return event


def ensure_image_exists(session: Session, image_id: Optional[str]) -> None:
    if image_id and not session.get(Image, image_id):
        raise ValidationFailed("Event image not found", errors={"eventImageId": ["Unknown image"]})


def registration_result(registration: EventRegistration, confirmed_message: str) -> RegistrationResult:
    if registration.status == RegistrationStatus.WAITLISTED.value:
        message = WAITLIST_MESSAGE
    else:
        message = confirmed_message
    return RegistrationResult(
        message=message,
        registration=RegistrationSummary(id=registration.id, status=registration.status),
    )


# ==================================================================
#  ✅ List Events (organization scoped, soonest first)
# ==================================================================
@router.get("", response_model=List[EventRead])
def list_events(ctx: OrgContext = Depends(get_org_context)):
    events = ctx.session.exec(ctx.scoped(Event).order_by(Event.date)).all()
    return [event_service.to_event_read(event) for event in events]


# ==================================================================
#  ✅ Create Event
# ==================================================================
@router.post("", response_model=EventRead, status_code=status.HTTP_201_CREATED)
def create_event(data: EventCreate, ctx: OrgContext = Depends(get_org_context)):
    ensure_image_exists(ctx.session, data.event_image_id)

    now = utcnow()
    event = Event(
        organization_id=ctx.organization_id,
        organizer_id=ctx.user.id,
        name=data.title,
        description=data.description or None,
        date=data.date,
        end_date=data.end_date,
        location=data.location or None,
        location_details=data.location_details or None,
        capacity=data.capacity or None,
        is_private=data.is_private,
        registration_deadline=data.registration_deadline,
        status=EventStatus.SCHEDULED.value,
        event_image_id=data.event_image_id,
        created_at=now,
        updated_at=now,
    )
    try:
        ctx.session.add(event)
        ctx.session.commit()
        ctx.session.refresh(event)
    except SQLAlchemyError:
        ctx.session.rollback()
        logger.exception("Failed to create event for organizer %s", ctx.user.id)
        raise Internal("Failed to create event")

    logger.info("Event %s created by organizer %s", event.id, ctx.user.id)
    return event_service.to_event_read(event)


# ==================================================================
#  ✅ Get / Update / Delete Single Event (organizer only)
# ==================================================================
@router.get("/{event_id}", response_model=EventRead)
def get_event(event_id: int, ctx: OrgContext = Depends(get_org_context)):
    return event_service.to_event_read(organized_event(ctx, event_id))


@router.patch("/{event_id}", response_model=EventRead)
def update_event(event_id: int, data: EventUpdate, ctx: OrgContext = Depends(get_org_context)):
    event = organized_event(ctx, event_id)
    updates = data.model_dump(exclude_unset=True)
    if not updates:
        raise ValidationFailed("At least one field must be provided for update")
    if updates.get("event_image_id"):
        ensure_image_exists(ctx.session, updates["event_image_id"])

    for field, value in updates.items():
        if field == "title":
            field = "name"
        if field in ("name", "date", "is_private") and value is None:
            continue
        setattr(event, field, value)
    event.updated_at = utcnow()

    try:
        ctx.session.add(event)
        ctx.session.commit()
        ctx.session.refresh(event)
    except SQLAlchemyError:
        ctx.session.rollback()
        logger.exception("Failed to update event %s", event_id)
        raise Internal("Failed to update event")
    return event_service.to_event_read(event)


@router.delete("/{event_id}")
def delete_event(event_id: int, ctx: OrgContext = Depends(get_org_context)):
    event = organized_event(ctx, event_id)
    try:
        event_service.delete_event(ctx.session, event)
    except SQLAlchemyError:
        logger.exception("Failed to delete event %s", event_id)
        raise Internal("Failed to delete event")
    return {"message": "Event deleted successfully"}


# ==================================================================
#  ✅ Cancel Event (cascades registrations atomically)
# ==================================================================
@router.patch("/{event_id}/cancel", response_model=EventRead)
def cancel_event(event_id: int, ctx: OrgContext = Depends(get_org_context)):
    event = organized_event(ctx, event_id)
    if event.status == EventStatus.CANCELED.value:
        raise ValidationFailed("Event is already cancelled")
    try:
        event_service.cancel_event(ctx.session, event)
    except SQLAlchemyError:
        logger.exception("Failed to cancel event %s", event_id)
        raise Internal("Failed to cancel event")
    ctx.session.refresh(event)
    return event_service.to_event_read(event)


# ==================================================================
#  ✅ Registrations for an Event (organizer only)
# ==================================================================
@router.get("/{event_id}/registrations", response_model=List[RegistrationRead])
def list_registrations(event_id: int, ctx: OrgContext = Depends(get_org_context)):
    event = organized_event(ctx, event_id)
    registrations = ctx.session.exec(
        select(EventRegistration)
        .where(EventRegistration.event_id == event.id)
        .order_by(desc(EventRegistration.registration_date))
    ).all()
    return [event_service.to_registration_read(reg) for reg in registrations]


# ==================================================================
#  ✅ Register / Unregister the Current Principal
# ==================================================================
@router.post("/{event_id}/register", response_model=RegistrationResult, status_code=status.HTTP_201_CREATED)
def register_for_event(
    event_id: int,
    data: RegisterRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    event = session.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")
    if event.status != EventStatus.SCHEDULED.value:
        raise ValidationFailed("Event is not open for registration")
    if event_service.deadline_passed(event):
        raise ValidationFailed("Registration deadline has passed")

    registration = session.exec(
        select(EventRegistration).where(
            EventRegistration.event_id == event.id,
            EventRegistration.user_id == current_user.id,
        )
    ).first()
    if registration and registration.status not in CANCELED_STATUSES:
        raise ValidationFailed("You are already registered for this event")

    seat = event_service.seat_status(event, data.guests_count)
    if registration:
        # Cancelled registrations are re-activated in place
        registration.status = seat.value
        registration.guests_count = data.guests_count
        registration.notes = data.notes
        registration.registration_date = utcnow()
    else:
        registration = EventRegistration(
            event_id=event.id,
            organization_id=event.organization_id,
            user_id=current_user.id,
            registrant_name=current_user.name,
            registrant_email=current_user.email,
            registrant_phone=current_user.phone_number,
            status=seat.value,
            guests_count=data.guests_count,
            notes=data.notes,
            registration_date=utcnow(),
        )

    try:
        session.add(registration)
        session.commit()
        session.refresh(registration)
    except IntegrityError:
        session.rollback()
        raise ValidationFailed("You are already registered for this event")
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed to register user %s for event %s", current_user.id, event_id)
        raise Internal("Failed to register for event")

    logger.info("User %s registered for event %s as %s", current_user.id, event.id, registration.status)
    return registration_result(registration, "Successfully registered for event")


@router.delete("/{event_id}/register", response_model=RegistrationResult)
def cancel_registration(
    event_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    event = session.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")

    registration = session.exec(
        select(EventRegistration).where(
            EventRegistration.event_id == event.id,
            EventRegistration.user_id == current_user.id,
            EventRegistration.status.notin_(CANCELED_STATUSES),
        )
    ).first()
    if not registration:
        raise NotFound("You are not registered for this event")

    # Only a confirmed seat frees capacity for the waitlist
    freed_seat = registration.status == RegistrationStatus.CONFIRMED.value

    try:
        with Database.transaction(session):
            registration.status = RegistrationStatus.CANCELED_BY_USER.value
            session.add(registration)
            if freed_seat:
                event_service.promote_next_waitlisted(session, event)
    except SQLAlchemyError:
        logger.exception("Failed to cancel registration %s", registration.id)
        raise Internal("Failed to cancel registration")

    session.refresh(registration)
    return RegistrationResult(
        message="Registration cancelled",
        registration=RegistrationSummary(id=registration.id, status=registration.status),
    )
