from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text, JSON, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from pydantic import ValidationError
from typing import Optional
import enum
import logging
from app.core.database import Base
from app.schemas.registration_policy import RegistrationPolicy

logger = logging.getLogger(__name__)


class EventStatus(str, enum.Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class Event(Base):
    __tablename__ = "events"

    id = Column(String(36), primary_key=True, index=True)
    slug = Column(String(200), nullable=False, unique=True, index=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    short_description = Column(String(500), nullable=True)
    category = Column(
        String(100),
        nullable=True,
        index=True,
        comment="e.g. 'cultural', 'educational', 'community-service'"
    )

    event_date = Column(DateTime(timezone=True), nullable=True, index=True)
    location = Column(String(500), nullable=True)
    image_url = Column(String(500), nullable=True)

    status = Column(SQLEnum(EventStatus), nullable=False, default=EventStatus.DRAFT, index=True)
    is_public = Column(Boolean, nullable=False, default=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False)

    registration = Column(
        JSON,
        nullable=True,
        comment="Registration policy: fields, capacity, deadline, waiver"
    )
    current_attendees = Column(
        Integer,
        nullable=False,
        default=0,
        comment="Cached count of confirmed registrations"
    )

    views = Column(Integer, nullable=False, default=0)
    shares = Column(Integer, nullable=False, default=0)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    registrations = relationship("Registration", back_populates="event", lazy="dynamic")

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, slug={self.slug}, status={self.status})>"

    @property
    def registration_policy(self) -> Optional[RegistrationPolicy]:
        if not self.registration:
            return None
        return RegistrationPolicy.model_validate(self.registration)

    def to_dict(self) -> dict:
        try:
            policy = self.registration_policy
        except ValidationError as e:
            # One misconfigured event must not break listings it appears in
            logger.warning(f"Event {self.slug} has an invalid registration policy: {e}")
            policy = None

        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "shortDescription": self.short_description,
            "category": self.category,
            "eventDate": self.event_date.isoformat() if self.event_date else None,
            "location": self.location,
            "imageUrl": self.image_url,
            "status": self.status.value,
            "isFeatured": self.is_featured,
            "registration": policy.model_dump(mode="json") if policy else None,
            "currentAttendees": self.current_attendees,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
