# routes/public_events.py
"""Unauthenticated views of public, scheduled events."""

from typing import List

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from core.database import get_session
from core.errors import Internal, NotFound, ValidationFailed
from models.models import Event, EventRegistration, EventStatus, utcnow
from schemas.event_schema import (
    PublicEventDetail,
    PublicEventRead,
    PublicRegisterRequest,
    RegistrationResult,
)
from routes.events import registration_result
from services import event_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Public Events"])


def public_events_query(*criteria):
    return select(Event).where(
        Event.is_private == False,  # noqa: E712
        Event.status == EventStatus.SCHEDULED.value,
        *criteria,
    )


def get_public_event(session: Session, event_id: int, detail: str) -> Event:
    event = session.exec(public_events_query(Event.id == event_id)).first()
    if not event:
        raise NotFound(detail)
    return event


# ==================================================================
#  ✅ Upcoming public events
# ==================================================================
@router.get("", response_model=List[PublicEventRead])
def list_public_events(session: Session = Depends(get_session)):
    events = session.exec(public_events_query(Event.date >= utcnow()).order_by(Event.date)).all()
    return [event_service.to_public_event(event) for event in events]


# ==================================================================
#  ✅ Public event detail
# ==================================================================
@router.get("/{event_id}", response_model=PublicEventDetail)
def get_public_event_detail(event_id: int, session: Session = Depends(get_session)):
    event = get_public_event(session, event_id, "Event not found or not available for public viewing")
    return event_service.to_public_event_detail(event)


# ==================================================================
#  ✅ Anonymous registration
# ==================================================================
@router.post("/{event_id}/register", response_model=RegistrationResult, status_code=status.HTTP_201_CREATED)
def register_public(event_id: int, data: PublicRegisterRequest, session: Session = Depends(get_session)):
    event = get_public_event(session, event_id, "Event not found or not available for registration")
    if event_service.deadline_passed(event):
        raise ValidationFailed("Registration deadline has passed")

    duplicate = session.exec(
        select(EventRegistration).where(
            EventRegistration.event_id == event.id,
            EventRegistration.registrant_email == data.email,
        )
    ).first()
    if duplicate:
        raise ValidationFailed("You are already registered for this event")

    registration = EventRegistration(
        event_id=event.id,
        organization_id=event.organization_id,
        registrant_name=data.name,
        registrant_email=data.email,
        registrant_phone=data.phone,
        status=event_service.seat_status(event, data.guests_count).value,
        guests_count=data.guests_count,
        notes=data.notes,
        registration_date=utcnow(),
    )
    try:
        session.add(registration)
        session.commit()
        session.refresh(registration)
    except SQLAlchemyError:
        session.rollback()
        logger.exception("Failed public registration for event %s", event_id)
        raise Internal("Failed to register for event")

    logger.info("Public registration %s for event %s (%s)", registration.id, event.id, registration.status)
    return registration_result(registration, "Registration successful!")
