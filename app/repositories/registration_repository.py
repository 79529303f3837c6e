from typing import Optional
from dataclasses import dataclass
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from app.core.exceptions import DuplicateRegistrationError, ConfirmationNumberConflictError
from app.models.registration import Registration, RegistrationStatus
import uuid


@dataclass(frozen=True)
class AdmissionResult:
    admitted: bool
    new_count: int


class RegistrationRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, registration_id: str) -> Optional[Registration]:
        return self.db.query(Registration).filter(Registration.id == registration_id).first()

    def get_by_confirmation_number(self, confirmation_number: str) -> Optional[Registration]:
        return self.db.query(Registration).filter(
            Registration.confirmation_number == confirmation_number
        ).first()

    def get_by_event_and_email(self, event_id: str, email: str) -> Optional[Registration]:
        return self.db.query(Registration).filter(
            Registration.event_id == event_id,
            Registration.email == email.strip().lower()
        ).first()

    def exists_for_email(self, event_id: str, email: str) -> bool:
        return self.get_by_event_and_email(event_id, email) is not None

    def count_confirmed(self, event_id: str) -> int:
        return self.db.query(Registration).filter(
            Registration.event_id == event_id,
            Registration.status == RegistrationStatus.CONFIRMED
        ).count()

    def count_waitlisted(self, event_id: str) -> int:
        return self.db.query(Registration).filter(
            Registration.event_id == event_id,
            Registration.status == RegistrationStatus.WAITLISTED
        ).count()

    def try_admit(self, event_id: str, limit: Optional[int]) -> AdmissionResult:
        """
        Decide whether one more confirmed registration fits under limit.

        This implementation reads the confirmed count and does not reserve the
        seat; two concurrent callers may both be admitted. Swap in a
        conditional update or a row lock here to make the limit hard.

        Args:
            event_id: Event to admit into
            limit: Maximum confirmed registrations, None for unlimited

        Returns:
            AdmissionResult: admitted flag and the confirmed count after admission
        """
        current = self.count_confirmed(event_id)
        if limit is not None and current >= limit:
            return AdmissionResult(admitted=False, new_count=current)
        return AdmissionResult(admitted=True, new_count=current + 1)

    def create(
        self,
        event_id: str,
        email: str,
        registration_data: dict,
        status: RegistrationStatus,
        confirmation_number: str,
        waiver: Optional[dict] = None,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        referrer: Optional[str] = None
    ) -> Registration:
        registration_id = str(uuid.uuid4())

        registration = Registration(
            id=registration_id,
            event_id=event_id,
            email=email.strip().lower(),
            registration_data=registration_data,
            status=status,
            waiver=waiver,
            confirmation_number=confirmation_number,
            user_agent=user_agent,
            ip_address=ip_address,
            referrer=referrer
        )

        try:
            self.db.add(registration)
            self.db.commit()
            self.db.refresh(registration)
            return registration
        except IntegrityError:
            self.db.rollback()
            # A concurrent insert won one of the unique constraints
            if self.get_by_event_and_email(event_id, email) is not None:
                raise DuplicateRegistrationError()
            if self.get_by_confirmation_number(confirmation_number) is not None:
                raise ConfirmationNumberConflictError()
            raise
