from sqlalchemy import Column, String, DateTime, JSON, ForeignKey, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from app.core.database import Base


class RegistrationStatus(str, enum.Enum):
    CONFIRMED = "confirmed"
    WAITLISTED = "waitlisted"


class Registration(Base):
    """
    One attendee's submission against an event's registration policy.
    Rows are written once and never updated.
    """
    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("event_id", "email", name="uq_registration_event_email"),
    )

    id = Column(String(36), primary_key=True, index=True)

    event_id = Column(String(36), ForeignKey("events.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True, comment="Lowercased")

    registration_data = Column(
        JSON,
        nullable=False,
        comment="Submitted form values keyed by field name"
    )
    status = Column(SQLEnum(RegistrationStatus), nullable=False, index=True)
    waiver = Column(JSON, nullable=True)
    confirmation_number = Column(String(50), nullable=False, unique=True, index=True)

    user_agent = Column(String(500), nullable=True)
    ip_address = Column(String(64), nullable=True)
    referrer = Column(String(500), nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    event = relationship("Event", back_populates="registrations")

    def __repr__(self) -> str:
        return f"<Registration(id={self.id}, event_id={self.event_id}, status={self.status})>"

    @property
    def is_waitlisted(self) -> bool:
        return self.status == RegistrationStatus.WAITLISTED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "eventId": self.event_id,
            "email": self.email,
            "registrationData": self.registration_data or {},
            "status": self.status.value,
            "isWaitlisted": self.is_waitlisted,
            "waiver": self.waiver,
            "confirmationNumber": self.confirmation_number,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
