"""
Event lifecycle, registrations, waitlist and public views.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import select

from models.models import EventRegistration, RegistrationStatus
from services.event_service import attendee_count, format_clock, format_event_time, format_long_date, is_full


def future_iso(days: int = 7) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).replace(microsecond=0).isoformat()


def create_event(client, principal, **overrides):
    payload = {"title": "Spring Gala", "date": future_iso(), "location": "Hall A"}
    payload.update(overrides)
    response = client.post("/api/events", json=payload, headers=principal.headers)
    assert response.status_code == 201, response.text
    return response.json()


def statuses_by_email(db, event_id):
    with db.session() as session:
        rows = session.exec(select(EventRegistration).where(EventRegistration.event_id == event_id)).all()
        return {reg.registrant_email: reg.status for reg in rows}


class TestAttendeeMath:
    """Seat counting and fullness."""

    def test_counts_guests_of_seated_registrations(self):
        regs = [
            EventRegistration(event_id=1, organization_id=1, status="CONFIRMED", guests_count=2),
            EventRegistration(event_id=1, organization_id=1, status="ATTENDED", guests_count=0),
            EventRegistration(event_id=1, organization_id=1, status="WAITLISTED", guests_count=5),
            EventRegistration(event_id=1, organization_id=1, status="CANCELED_BY_USER", guests_count=1),
        ]
        assert attendee_count(regs) == 4

    @pytest.mark.parametrize(
        "capacity, attendees, expected",
        [(None, 100, False), (0, 100, False), (10, 9, False), (10, 10, True), (10, 12, True)],
    )
    def test_is_full(self, capacity, attendees, expected):
        assert is_full(capacity, attendees) is expected

    def test_display_formatting(self):
        start = datetime(2026, 3, 7, 19, 5)
        assert format_clock(start) == "7:05 PM"
        assert format_clock(datetime(2026, 3, 7, 0, 30)) == "12:30 AM"
        assert format_long_date(start) == "Saturday, March 7, 2026"
        assert format_event_time(start, start + timedelta(hours=2)) == "7:05 PM - 9:05 PM"


class TestAdminEvents:
    """Organizer-only management of events."""

    def test_create_and_list(self, client, admin):
        event = create_event(client, admin, capacity=20)
        assert event["status"] == "upcoming"
        assert event["eventStatus"] == "SCHEDULED"
        assert event["registered"] == 0
        assert event["organizer"]["id"] == admin.user_id

        listed = client.get("/api/events", headers=admin.headers).json()
        assert [e["id"] for e in listed] == [event["id"]]

    def test_missing_title_rejected(self, client, admin):
        response = client.post("/api/events", json={"date": future_iso()}, headers=admin.headers)
        assert response.status_code == 400
        assert "title" in response.json()["errors"]

    def test_patch_event(self, client, admin):
        event = create_event(client, admin)
        response = client.patch(
            f"/api/events/{event['id']}", json={"title": "Renamed", "capacity": 5}, headers=admin.headers
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Renamed"
        assert response.json()["capacity"] == 5

    def test_non_organizer_gets_404(self, client, admin, other_admin):
        event = create_event(client, admin)
        assert client.get(f"/api/events/{event['id']}", headers=other_admin.headers).status_code == 404
        assert client.patch(
            f"/api/events/{event['id']}", json={"title": "x"}, headers=other_admin.headers
        ).status_code == 404
        assert client.get(f"/api/events/{event['id']}/registrations", headers=other_admin.headers).status_code == 404

    def test_delete_removes_registrations(self, client, admin, db, add_registrations):
        event = create_event(client, admin)
        add_registrations(event["id"], admin.organization_id, [RegistrationStatus.CONFIRMED])

        assert client.delete(f"/api/events/{event['id']}", headers=admin.headers).status_code == 200
        assert client.get(f"/api/events/{event['id']}", headers=admin.headers).status_code == 404
        assert statuses_by_email(db, event["id"]) == {}


class TestEventCancellation:
    """Cancelling cascades to active registrations only."""

    STATUSES = [
        RegistrationStatus.CONFIRMED,
        RegistrationStatus.WAITLISTED,
        RegistrationStatus.CANCELED_BY_ADMIN,
        RegistrationStatus.ATTENDED,
        RegistrationStatus.CANCELED_BY_USER,
    ]

    def test_organizer_cancel_cascades(self, client, admin, db, add_registrations):
        event = create_event(client, admin)
        add_registrations(event["id"], admin.organization_id, self.STATUSES)

        response = client.patch(f"/api/events/{event['id']}/cancel", headers=admin.headers)
        assert response.status_code == 200
        assert response.json()["eventStatus"] == "CANCELED"
        assert response.json()["status"] == "canceled"

        assert statuses_by_email(db, event["id"]) == {
            "guest0@example.com": "CANCELED_BY_ADMIN",
            "guest1@example.com": "CANCELED_BY_ADMIN",
            "guest2@example.com": "CANCELED_BY_ADMIN",
            "guest3@example.com": "ATTENDED",
            "guest4@example.com": "CANCELED_BY_USER",
        }

    def test_non_organizer_cannot_cancel(self, client, admin, other_admin, db, add_registrations):
        event = create_event(client, admin)
        add_registrations(event["id"], admin.organization_id, self.STATUSES[:2])

        response = client.patch(f"/api/events/{event['id']}/cancel", headers=other_admin.headers)
        assert response.status_code == 404

        assert client.get(f"/api/events/{event['id']}", headers=admin.headers).json()["eventStatus"] == "SCHEDULED"
        assert statuses_by_email(db, event["id"]) == {
            "guest0@example.com": "CONFIRMED",
            "guest1@example.com": "WAITLISTED",
        }

    def test_unauthenticated_cancel(self, client, admin):
        event = create_event(client, admin)
        assert client.patch(f"/api/events/{event['id']}/cancel").status_code == 401

    def test_cancelled_event_closed_for_registration(self, client, admin, other_admin):
        event = create_event(client, admin)
        client.patch(f"/api/events/{event['id']}/cancel", headers=admin.headers)
        response = client.post(f"/api/events/{event['id']}/register", json={}, headers=other_admin.headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Event is not open for registration"


class TestAuthenticatedRegistration:
    """Principal registration, waitlisting and promotion."""

    def test_waitlist_and_promotion(self, client, admin, other_admin):
        event = create_event(client, admin, capacity=1)

        first = client.post(f"/api/events/{event['id']}/register", json={}, headers=admin.headers)
        assert first.status_code == 201
        assert first.json()["registration"]["status"] == "CONFIRMED"

        second = client.post(f"/api/events/{event['id']}/register", json={}, headers=other_admin.headers)
        assert second.json()["registration"]["status"] == "WAITLISTED"
        assert second.json()["message"] == "Event is full. You have been added to the waitlist."

        cancelled = client.delete(f"/api/events/{event['id']}/register", headers=admin.headers)
        assert cancelled.status_code == 200
        assert cancelled.json()["registration"]["status"] == "CANCELED_BY_USER"

        registrations = client.get(f"/api/events/{event['id']}/registrations", headers=admin.headers).json()
        by_user = {reg["userId"]: reg["status"] for reg in registrations}
        assert by_user == {admin.user_id: "CANCELED_BY_USER", other_admin.user_id: "CONFIRMED"}

    def test_cancelling_waitlisted_does_not_promote(self, client, admin, other_admin, db, add_registrations):
        event = create_event(client, admin, capacity=1)
        add_registrations(event["id"], admin.organization_id, [RegistrationStatus.CONFIRMED])
        client.post(f"/api/events/{event['id']}/register", json={}, headers=other_admin.headers)
        client.post(f"/api/events/{event['id']}/register", json={}, headers=admin.headers)

        client.delete(f"/api/events/{event['id']}/register", headers=other_admin.headers)

        registrations = client.get(f"/api/events/{event['id']}/registrations", headers=admin.headers).json()
        by_user = {reg["userId"]: reg["status"] for reg in registrations if reg["userId"]}
        assert by_user[admin.user_id] == "WAITLISTED"

    def test_duplicate_registration_rejected(self, client, admin):
        event = create_event(client, admin)
        client.post(f"/api/events/{event['id']}/register", json={}, headers=admin.headers)
        response = client.post(f"/api/events/{event['id']}/register", json={}, headers=admin.headers)
        assert response.status_code == 400

    def test_cancelled_registration_reactivates(self, client, admin):
        event = create_event(client, admin)
        client.post(f"/api/events/{event['id']}/register", json={}, headers=admin.headers)
        client.delete(f"/api/events/{event['id']}/register", headers=admin.headers)
        response = client.post(f"/api/events/{event['id']}/register", json={"guestsCount": 1}, headers=admin.headers)
        assert response.status_code == 201
        assert response.json()["registration"]["status"] == "CONFIRMED"

    def test_deadline_passed(self, client, admin):
        past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        event = create_event(client, admin, registrationDeadline=past)
        response = client.post(f"/api/events/{event['id']}/register", json={}, headers=admin.headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Registration deadline has passed"

    def test_unregister_when_not_registered(self, client, admin):
        event = create_event(client, admin)
        assert client.delete(f"/api/events/{event['id']}/register", headers=admin.headers).status_code == 404


class TestPublicEvents:
    """Unauthenticated listing, detail and registration."""

    def test_listing_hides_private_cancelled_and_past(self, client, admin):
        public = create_event(client, admin, title="Open Day")
        create_event(client, admin, title="Board Meeting", isPrivate=True)
        cancelled = create_event(client, admin, title="Rained Out")
        client.patch(f"/api/events/{cancelled['id']}/cancel", headers=admin.headers)
        create_event(client, admin, title="Last Week", date=future_iso(-7))

        listed = client.get("/api/public/events").json()
        assert [e["title"] for e in listed] == ["Open Day"]
        assert listed[0]["id"] == public["id"]
        assert listed[0]["organizer"] == "Alice Admin"

    def test_private_event_detail_is_404(self, client, admin):
        event = create_event(client, admin, isPrivate=True)
        assert client.get(f"/api/public/events/{event['id']}").status_code == 404

    def test_is_full_follows_capacity(self, client, admin, db):
        event = create_event(client, admin, capacity=3)
        url = f"/api/public/events/{event['id']}"

        detail = client.get(url).json()
        assert detail["registered"] == 0
        assert detail["isFull"] is False
        assert detail["hasDeadlinePassed"] is False

        client.post(f"{url}/register", json={"name": "Pat", "email": "pat@example.com", "guestsCount": 1})
        assert client.get(url).json()["isFull"] is False

        client.post(f"{url}/register", json={"name": "Sam", "email": "sam@example.com"})
        detail = client.get(url).json()
        assert detail["registered"] == 3
        assert detail["isFull"] is True

        waitlisted = client.post(f"{url}/register", json={"name": "Lee", "email": "lee@example.com"})
        assert waitlisted.json()["registration"]["status"] == "WAITLISTED"
        assert client.get(url).json()["registered"] == 3

    def test_no_capacity_is_never_full(self, client, admin, db, add_registrations):
        event = create_event(client, admin)
        add_registrations(event["id"], admin.organization_id, [RegistrationStatus.CONFIRMED] * 3)
        detail = client.get(f"/api/public/events/{event['id']}").json()
        assert detail["registered"] == 3
        assert detail["isFull"] is False

    def test_attended_counts_toward_capacity(self, client, admin, db, add_registrations):
        event = create_event(client, admin, capacity=2)
        add_registrations(
            event["id"], admin.organization_id, [RegistrationStatus.ATTENDED, RegistrationStatus.CONFIRMED]
        )
        assert client.get(f"/api/public/events/{event['id']}").json()["isFull"] is True

    def test_duplicate_public_email(self, client, admin):
        event = create_event(client, admin)
        url = f"/api/public/events/{event['id']}/register"
        assert client.post(url, json={"name": "Pat", "email": "pat@example.com"}).status_code == 201
        response = client.post(url, json={"name": "Pat", "email": "pat@example.com"})
        assert response.status_code == 400
        assert response.json()["message"] == "You are already registered for this event"

    def test_negative_guests_rejected(self, client, admin):
        event = create_event(client, admin)
        response = client.post(
            f"/api/public/events/{event['id']}/register",
            json={"name": "Pat", "email": "pat@example.com", "guestsCount": -1},
        )
        assert response.status_code == 400
        assert "guestsCount" in response.json()["errors"]

    def test_oversized_guest_count_rejected(self, client, admin, db):
        event = create_event(client, admin)
        response = client.post(
            f"/api/public/events/{event['id']}/register",
            json={"name": "Pat", "email": "pat@example.com", "guestsCount": 2**70},
        )
        assert response.status_code == 400
        assert "guestsCount" in response.json()["errors"]
        with db.session() as session:
            assert session.exec(select(EventRegistration)).all() == []
