"""
MissionBoard Backend — Test Configuration (conftest.py)
=======================================================

Every test gets a fresh in-memory SQLite ``Database`` injected into
``create_app``; nothing touches the configured DATABASE_URL.

Fixtures:
    db            In-memory Database (tables created by the app lifespan)
    client        TestClient bound to an app built around ``db``
    admin         Signed-up admin principal with its organization
    other_admin   A second, unrelated admin principal (another tenant)
"""

import os

# Settings are read at import time; set them before any app import
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-real")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_LEVEL"] = "WARNING"

from dataclasses import dataclass
from typing import Dict

import pytest
from fastapi.testclient import TestClient

from core.database import Database
from models.models import EventRegistration
from main import create_app


@dataclass
class Principal:
    token: str
    user_id: int
    organization_id: int
    email: str

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def signup(client: TestClient, name: str, email: str, password: str = "password123") -> Principal:
    response = client.post(
        "/api/auth/signup",
        json={"name": name, "email": email, "password": password, "organizationName": f"{name} Club"},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    # Tests authenticate explicitly; drop the cookie the signup response set
    client.cookies.clear()
    return Principal(
        token=body["accessToken"],
        user_id=body["user"]["id"],
        organization_id=body["organizationId"],
        email=email,
    )


@pytest.fixture
def db():
    database = Database("sqlite://")
    yield database
    database.dispose()


@pytest.fixture
def client(db):
    app = create_app(database=db)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(client) -> Principal:
    return signup(client, "Alice Admin", "alice@example.com")


@pytest.fixture
def other_admin(client) -> Principal:
    return signup(client, "Bob Admin", "bob@example.com")


@pytest.fixture
def add_registrations(db):
    """Insert anonymous registrations with the given statuses straight into the store."""

    def _add(event_id, organization_id, statuses):
        with db.session() as session:
            for index, status in enumerate(statuses):
                session.add(
                    EventRegistration(
                        event_id=event_id,
                        organization_id=organization_id,
                        registrant_name=f"Guest {index}",
                        registrant_email=f"guest{index}@example.com",
                        status=status.value,
                    )
                )
            session.commit()

    return _add
