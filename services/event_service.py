# ================================================================
# services/event_service.py — attendee math, formatting, registrations
# ================================================================
from datetime import datetime
from typing import Iterable, List, Optional

import logging

from sqlmodel import Session, select

from core.database import Database
from models.models import (
    SEATED_STATUSES,
    Event,
    EventRegistration,
    EventStatus,
    RegistrationStatus,
    utcnow,
)
from schemas.event_schema import (
    EventRead,
    OrganizerSummary,
    PublicEventDetail,
    PublicEventRead,
    RegistrationRead,
    StatusCategory,
)
from services.image_service import image_url

logger = logging.getLogger(__name__)

DEFAULT_EVENT_IMAGE = "/images/default-event.jpg"
DEFAULT_ORGANIZER = "Event Organizer"


# ------------------------
# Attendee counting
# ------------------------
def attendee_count(registrations: Iterable[EventRegistration]) -> int:
    """Seats taken: every confirmed or attended registrant plus their guests."""
    return sum(reg.guests_count + 1 for reg in registrations if reg.status in SEATED_STATUSES)


def is_full(capacity: Optional[int], attendees: int) -> bool:
    if not capacity:
        return False
    return attendees >= capacity


def has_room(capacity: Optional[int], attendees: int, guests_count: int) -> bool:
    if not capacity:
        return True
    return attendees + guests_count + 1 <= capacity


def deadline_passed(event: Event, now: Optional[datetime] = None) -> bool:
    if not event.registration_deadline:
        return False
    return (now or utcnow()) > event.registration_deadline


# ------------------------
# Display formatting
# ------------------------
def format_clock(value: datetime) -> str:
    """``7:05 PM`` style clock time."""
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_long_date(value: datetime) -> str:
    """``Saturday, March 7, 2026`` style date."""
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


def format_event_time(start: datetime, end: Optional[datetime]) -> str:
    if not end:
        return format_clock(start)
    return f"{format_clock(start)} - {format_clock(end)}"


def status_category(event: Event, now: Optional[datetime] = None) -> StatusCategory:
    if event.status == EventStatus.CANCELED.value:
        return StatusCategory.CANCELED
    if event.date < (now or utcnow()):
        return StatusCategory.PAST
    return StatusCategory.UPCOMING


def to_event_read(event: Event) -> EventRead:
    organizer = event.organizer
    return EventRead(
        id=event.id,
        title=event.name,
        description=event.description or "",
        date=event.date,
        end_date=event.end_date,
        time=format_event_time(event.date, event.end_date),
        location=event.location or "TBD",
        location_details=event.location_details or "",
        capacity=event.capacity or 0,
        registered=attendee_count(event.registrations),
        status=status_category(event),
        event_status=event.status,
        is_private=event.is_private,
        registration_deadline=event.registration_deadline,
        created_at=event.created_at,
        updated_at=event.updated_at,
        image=image_url(event.event_image_id) if event.event_image_id else "",
        organizer=(
            OrganizerSummary(id=organizer.id, name=organizer.name, email=organizer.email)
            if organizer
            else None
        ),
    )


def _public_fields(event: Event) -> dict:
    registered = attendee_count(event.registrations)
    return {
        "id": event.id,
        "title": event.name,
        "description": event.description,
        "date": event.date,
        "formatted_date": format_long_date(event.date),
        "location": event.location,
        "organizer": (event.organizer.name if event.organizer else None) or DEFAULT_ORGANIZER,
        "capacity": event.capacity,
        "registered": registered,
        "image": image_url(event.event_image_id) if event.event_image_id else DEFAULT_EVENT_IMAGE,
        "is_full": is_full(event.capacity, registered),
    }


def to_public_event(event: Event) -> PublicEventRead:
    return PublicEventRead(**_public_fields(event))


def to_public_event_detail(event: Event) -> PublicEventDetail:
    return PublicEventDetail(
        **_public_fields(event),
        start_time=format_clock(event.date),
        end_time=format_clock(event.end_date) if event.end_date else None,
        location_details=event.location_details,
        registration_deadline=event.registration_deadline,
        has_deadline_passed=deadline_passed(event),
    )


def to_registration_read(reg: EventRegistration) -> RegistrationRead:
    user = reg.user
    return RegistrationRead(
        id=reg.id,
        status=reg.status,
        registration_date=reg.registration_date,
        guests_count=reg.guests_count,
        notes=reg.notes,
        name=user.name if user else reg.registrant_name,
        email=user.email if user else reg.registrant_email,
        phone=user.phone_number if user else reg.registrant_phone,
        user_id=user.id if user else None,
    )


# ------------------------
# Registration lifecycle
# ------------------------
def seat_status(event: Event, guests_count: int) -> RegistrationStatus:
    """CONFIRMED when the party fits, WAITLISTED otherwise."""
    if has_room(event.capacity, attendee_count(event.registrations), guests_count):
        return RegistrationStatus.CONFIRMED
    return RegistrationStatus.WAITLISTED


def promote_next_waitlisted(session: Session, event: Event) -> Optional[EventRegistration]:
    """Confirm the oldest waitlisted registration that fits the freed seats."""
    waitlisted: List[EventRegistration] = session.exec(
        select(EventRegistration)
        .where(
            EventRegistration.event_id == event.id,
            EventRegistration.status == RegistrationStatus.WAITLISTED.value,
        )
        .order_by(EventRegistration.registration_date, EventRegistration.id)
    ).all()
    if not waitlisted:
        return None

    attendees = attendee_count(event.registrations)
    candidate = waitlisted[0]
    if not has_room(event.capacity, attendees, candidate.guests_count):
        return None

    candidate.status = RegistrationStatus.CONFIRMED.value
    session.add(candidate)
    logger.info("Promoted waitlisted registration %s for event %s", candidate.id, event.id)
    return candidate


def cancel_event(session: Session, event: Event) -> int:
    """
    Mark the event CANCELED and move its CONFIRMED/WAITLISTED registrations to
    CANCELED_BY_ADMIN. Both writes commit together or not at all.
    Returns the number of registrations cancelled.
    """
    affected = session.exec(
        select(EventRegistration).where(
            EventRegistration.event_id == event.id,
            EventRegistration.status.in_(
                [RegistrationStatus.CONFIRMED.value, RegistrationStatus.WAITLISTED.value]
            ),
        )
    ).all()

    with Database.transaction(session):
        event.status = EventStatus.CANCELED.value
        event.updated_at = utcnow()
        session.add(event)
        for reg in affected:
            reg.status = RegistrationStatus.CANCELED_BY_ADMIN.value
            session.add(reg)

    # No attendee notification is sent
    logger.info("Event %s cancelled; %d registrations cancelled by admin", event.id, len(affected))
    return len(affected)


def delete_event(session: Session, event: Event) -> None:
    """Remove the event and all of its registrations in one transaction."""
    registrations = session.exec(
        select(EventRegistration).where(EventRegistration.event_id == event.id)
    ).all()
    with Database.transaction(session):
        for reg in registrations:
            session.delete(reg)
        session.delete(event)
    logger.info("Event %s deleted with %d registrations", event.id, len(registrations))
