"""
Pytest configuration file.
"""
import os

os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["EMAIL_MODE"] = "mock"

import pytest
from unittest.mock import Mock, patch
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.core.database import Base, get_db
from app.models.event import Event, EventStatus
from app.models.registration import Registration, RegistrationStatus
from main import app
from datetime import datetime, timedelta, timezone
import uuid

SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def registration_policy(**overrides) -> dict:
    """Registration policy JSON as stored on an event."""
    policy = {
        "isRequired": True,
        "isOpen": True,
        "registrationDeadline": None,
        "maxAttendees": None,
        "waitlistEnabled": False,
        "confirmationMessage": None,
        "fields": [
            {"name": "Email", "type": "email", "required": True, "order": 1},
        ],
        "waiver": None,
    }
    policy.update(overrides)
    return policy


@pytest.fixture(scope="function")
def db():
    """Create test database."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    yield db
    db.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Create test client."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_event(db):
    """Factory for published, public events with a registration policy."""
    def _make_event(slug=None, registration="default", **overrides):
        values = dict(
            id=str(uuid.uuid4()),
            slug=slug or f"event-{uuid.uuid4().hex[:8]}",
            title="Community Iftar",
            description="An evening of food and fellowship for the whole community.",
            short_description="Community dinner",
            category="cultural",
            event_date=utcnow() + timedelta(days=7),
            location="Community Center, Main Hall",
            status=EventStatus.PUBLISHED,
            is_public=True,
            is_archived=False,
            is_featured=False,
            registration=registration_policy() if registration == "default" else registration,
            current_attendees=0,
            views=0,
            shares=0,
        )
        values.update(overrides)
        event = Event(**values)
        db.add(event)
        db.commit()
        db.refresh(event)
        return event

    return _make_event


@pytest.fixture
def gala_event(make_event):
    """Capacity 2 with the waitlist enabled."""
    return make_event(
        slug="gala",
        title="Annual Gala",
        registration=registration_policy(maxAttendees=2, waitlistEnabled=True)
    )


@pytest.fixture
def add_registration(db):
    """Insert a registration row directly, bypassing the workflow."""
    def _add_registration(event, email, status=RegistrationStatus.CONFIRMED):
        registration = Registration(
            id=str(uuid.uuid4()),
            event_id=event.id,
            email=email.lower(),
            registration_data={"Email": email},
            status=status,
            confirmation_number=f"REG-TEST-{uuid.uuid4().hex[:8].upper()}",
        )
        db.add(registration)
        db.commit()
        db.refresh(registration)
        return registration

    return _add_registration


@pytest.fixture(autouse=True)
def mock_email_service():
    """Mock email service to avoid actual email sending."""
    with patch('app.services.registration_service.EmailService') as mock_registration_email, \
            patch('app.services.contact_service.EmailService') as mock_contact_email:
        mock_instance = Mock()
        mock_instance.send_registration_confirmation.return_value = True
        mock_instance.send_contact_notification.return_value = True
        mock_instance.send_contact_auto_reply.return_value = True
        mock_registration_email.return_value = mock_instance
        mock_contact_email.return_value = mock_instance
        yield mock_instance
